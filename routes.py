"""
HTTP handlers, one APIRouter per entity.

Handlers translate a None result into 404 and a failed delete into 404;
every other error is mapped by the exception handlers registered in main.py.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from database import get_db
from repositories import (
    CityRepository,
    CountryRepository,
    CropRepository,
    ItemRepository,
    SupplierRepository,
    UserRepository,
    VariantRepository,
)
from schemas import (
    CityCreate,
    CityOut,
    CityUpdate,
    CountryCreate,
    CountryOut,
    CountryStateCreate,
    CountryStateUpdate,
    CountryUpdate,
    CropCreate,
    CropOut,
    CropUpdate,
    ItemCreate,
    ItemOut,
    ItemUpdate,
    LoginInput,
    SupplierCreate,
    SupplierOut,
    SupplierUpdate,
    TokenResponse,
    UserCreate,
    UserOut,
    UserUpdate,
    VariantCreate,
    VariantOut,
    VariantUpdate,
)
from services import (
    AuthService,
    CityService,
    CountryService,
    CropService,
    ItemService,
    SupplierService,
    UserService,
    VariantService,
)

# ------------------------- Dependencies -------------------------

def get_supplier_service(db=Depends(get_db)) -> SupplierService:
    return SupplierService(SupplierRepository(db), CropRepository(db))


def get_user_service(db=Depends(get_db)) -> UserService:
    return UserService(UserRepository(db))


def get_auth_service(db=Depends(get_db)) -> AuthService:
    return AuthService(UserRepository(db))


def get_crop_service(db=Depends(get_db)) -> CropService:
    return CropService(CropRepository(db))


def get_country_service(db=Depends(get_db)) -> CountryService:
    return CountryService(CountryRepository(db))


def get_city_service(db=Depends(get_db)) -> CityService:
    return CityService(CityRepository(db))


def get_item_service(db=Depends(get_db)) -> ItemService:
    return ItemService(ItemRepository(db))


def get_variant_service(db=Depends(get_db)) -> VariantService:
    return VariantService(VariantRepository(db))


def found(result, entity: str):
    if result is None:
        raise HTTPException(status_code=404, detail=f"{entity} Not Found")
    return result


def deleted(ok: bool, entity: str) -> Response:
    if not ok:
        raise HTTPException(status_code=404, detail=f"{entity} Not Found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ------------------------- Suppliers -------------------------

suppliers = APIRouter(prefix="/suppliers", tags=["suppliers"])


@suppliers.get("", response_model=List[SupplierOut])
def list_suppliers(service: SupplierService = Depends(get_supplier_service)):
    return service.find_all_suppliers()


@suppliers.post("", response_model=SupplierOut)
def create_supplier(body: SupplierCreate, service: SupplierService = Depends(get_supplier_service)):
    return found(service.create_supplier(body), "Supplier")


@suppliers.get("/{supplier_id}", response_model=SupplierOut)
def get_supplier(supplier_id: str, service: SupplierService = Depends(get_supplier_service)):
    return found(service.find_supplier_by_id(supplier_id), "Supplier")


@suppliers.put("/{supplier_id}", response_model=SupplierOut)
def update_supplier(supplier_id: str, body: SupplierUpdate, service: SupplierService = Depends(get_supplier_service)):
    return found(service.update_supplier_by_id(supplier_id, body), "Supplier")


@suppliers.delete("/{supplier_id}", status_code=204)
def delete_supplier(supplier_id: str, service: SupplierService = Depends(get_supplier_service)):
    return deleted(service.delete_supplier(supplier_id), "Supplier")


@suppliers.post("/{supplier_id}/crops", response_model=SupplierOut)
def add_supplier_crop(supplier_id: str, body: CropCreate, service: SupplierService = Depends(get_supplier_service)):
    return found(service.add_crop(supplier_id, body), "Supplier")


# ------------------------- Users & Auth -------------------------

users = APIRouter(prefix="/users", tags=["users"])


@users.get("", response_model=List[UserOut])
def list_users(service: UserService = Depends(get_user_service)):
    return service.find_all_users()


@users.post("", response_model=UserOut)
def signup(body: UserCreate, service: UserService = Depends(get_user_service)):
    return found(service.signup(body), "User")


@users.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    return found(service.find_user_by_id(user_id), "User")


@users.put("/{user_id}", response_model=UserOut)
def update_user(user_id: str, body: UserUpdate, service: UserService = Depends(get_user_service)):
    return found(service.update_user_by_id(user_id, body), "User")


@users.delete("/{user_id}", status_code=204)
def delete_user(user_id: str, service: UserService = Depends(get_user_service)):
    return deleted(service.delete_user(user_id), "User")


auth = APIRouter(prefix="/auth", tags=["auth"])


@auth.post("/login", response_model=TokenResponse)
def login(body: LoginInput, service: AuthService = Depends(get_auth_service)):
    return service.login(body)


# ------------------------- Crops -------------------------

crops = APIRouter(prefix="/crops", tags=["crops"])


@crops.get("", response_model=List[CropOut])
def list_crops(service: CropService = Depends(get_crop_service)):
    return service.find_all_crops()


@crops.post("", response_model=CropOut)
def create_crop(body: CropCreate, service: CropService = Depends(get_crop_service)):
    return found(service.create_crop(body), "Crop")


@crops.get("/{crop_id}", response_model=CropOut)
def get_crop(crop_id: str, service: CropService = Depends(get_crop_service)):
    return found(service.find_crop_by_id(crop_id), "Crop")


@crops.put("/{crop_id}", response_model=CropOut)
def update_crop(crop_id: str, body: CropUpdate, service: CropService = Depends(get_crop_service)):
    return found(service.update_crop_by_id(crop_id, body), "Crop")


@crops.delete("/{crop_id}", status_code=204)
def delete_crop(crop_id: str, service: CropService = Depends(get_crop_service)):
    return deleted(service.delete_crop_by_id(crop_id), "Crop")


# ------------------------- Countries -------------------------

countries = APIRouter(prefix="/countries", tags=["countries"])


@countries.get("", response_model=List[CountryOut])
def list_countries(service: CountryService = Depends(get_country_service)):
    return service.find_all_countries()


@countries.post("", response_model=CountryOut)
def create_country(body: CountryCreate, service: CountryService = Depends(get_country_service)):
    return found(service.create_country(body), "Country")


@countries.get("/{country_id}", response_model=CountryOut)
def get_country(country_id: str, service: CountryService = Depends(get_country_service)):
    return found(service.find_country_by_id(country_id), "Country")


@countries.put("/{country_id}", response_model=CountryOut)
def update_country(country_id: str, body: CountryUpdate, service: CountryService = Depends(get_country_service)):
    return found(service.update_country_by_id(country_id, body), "Country")


@countries.delete("/{country_id}", status_code=204)
def delete_country(country_id: str, service: CountryService = Depends(get_country_service)):
    return deleted(service.delete_country(country_id), "Country")


@countries.post("/{country_id}/country-states", response_model=CountryOut)
def add_country_state(country_id: str, body: CountryStateCreate, service: CountryService = Depends(get_country_service)):
    return found(service.add_state(country_id, body), "Country")


@countries.put("/{country_id}/country-states/{state_id}", response_model=CountryOut)
def update_country_state(
    country_id: str,
    state_id: str,
    body: CountryStateUpdate,
    service: CountryService = Depends(get_country_service),
):
    return found(service.update_state(country_id, state_id, body), "Country State")


@countries.delete("/{country_id}/country-states/{state_id}", response_model=CountryOut)
def delete_country_state(country_id: str, state_id: str, service: CountryService = Depends(get_country_service)):
    return found(service.delete_state(country_id, state_id), "Country State")


# ------------------------- Cities -------------------------

cities = APIRouter(tags=["cities"])


@cities.get("/cities", response_model=List[CityOut])
def list_cities(service: CityService = Depends(get_city_service)):
    return service.find_all_cities()


@cities.get("/country-states/{state_id}/cities", response_model=List[CityOut])
def list_state_cities(state_id: str, service: CityService = Depends(get_city_service)):
    return service.find_cities_by_country_state(state_id)


@cities.post("/country-states/{state_id}/cities", response_model=CityOut)
def create_city(state_id: str, body: CityCreate, service: CityService = Depends(get_city_service)):
    return found(service.create_city(state_id, body), "City")


@cities.get("/country-states/{state_id}/cities/{city_id}", response_model=CityOut)
def get_city(state_id: str, city_id: str, service: CityService = Depends(get_city_service)):
    return found(service.find_city(state_id, city_id), "City")


@cities.put("/country-states/{state_id}/cities/{city_id}", response_model=CityOut)
def update_city(state_id: str, city_id: str, body: CityUpdate, service: CityService = Depends(get_city_service)):
    return found(service.update_city(state_id, city_id, body), "City")


@cities.delete("/country-states/{state_id}/cities/{city_id}", status_code=204)
def delete_city(state_id: str, city_id: str, service: CityService = Depends(get_city_service)):
    return deleted(service.delete_city(state_id, city_id), "City")


# ------------------------- Items & Variants -------------------------

items = APIRouter(prefix="/items", tags=["items"])


@items.get("", response_model=List[ItemOut])
def list_items(service: ItemService = Depends(get_item_service)):
    return service.find_all_items()


@items.post("", response_model=ItemOut)
def create_item(body: ItemCreate, service: ItemService = Depends(get_item_service)):
    return found(service.create_item(body), "Item")


@items.get("/{item_id}", response_model=ItemOut)
def get_item(item_id: str, service: ItemService = Depends(get_item_service)):
    return found(service.find_item_by_id(item_id), "Item")


@items.put("/{item_id}", response_model=ItemOut)
def update_item(item_id: str, body: ItemUpdate, service: ItemService = Depends(get_item_service)):
    return found(service.update_item_by_id(item_id, body), "Item")


@items.delete("/{item_id}", status_code=204)
def delete_item(item_id: str, service: ItemService = Depends(get_item_service)):
    return deleted(service.delete_item(item_id), "Item")


@items.get("/{item_id}/variants", response_model=List[VariantOut])
def list_variants(item_id: str, service: VariantService = Depends(get_variant_service)):
    return service.find_variants_by_item_id(item_id)


@items.post("/{item_id}/variants", response_model=VariantOut)
def create_variant(item_id: str, body: VariantCreate, service: VariantService = Depends(get_variant_service)):
    return found(service.create_variant(item_id, body), "Variant")


@items.get("/{item_id}/variants/{variant_id}", response_model=VariantOut)
def get_variant(item_id: str, variant_id: str, service: VariantService = Depends(get_variant_service)):
    return found(service.find_variant(item_id, variant_id), "Variant")


@items.put("/{item_id}/variants/{variant_id}", response_model=VariantOut)
def update_variant(
    item_id: str,
    variant_id: str,
    body: VariantUpdate,
    service: VariantService = Depends(get_variant_service),
):
    return found(service.update_variant(item_id, variant_id, body), "Variant")


@items.delete("/{item_id}/variants/{variant_id}", status_code=204)
def delete_variant(item_id: str, variant_id: str, service: VariantService = Depends(get_variant_service)):
    return deleted(service.delete_variant(item_id, variant_id), "Variant")


routers = [suppliers, users, auth, crops, countries, cities, items]
