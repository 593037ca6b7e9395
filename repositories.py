"""
MongoDB repositories, one per collection.

Repositories take a pymongo Database handle, convert hex ids to ObjectId
before touching the store, and return pydantic views. A missing document is
returned as None; driver failures are wrapped in StoreError.
"""
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type

import pymongo
from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, ValidationError
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import PyMongoError

import config
from database import CITIES, COUNTRIES, CROPS, ITEMS, SUPPLIERS, USERS, VARIANTS
from errors import InvalidIdError, StoreError
from pipelines import build_crop_pipeline, build_owner_with_crops_pipeline, match_id
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
    RecordStatus,
    SupplierCreate,
    SupplierOut,
    UserCreate,
    UserCredentials,
    UserOut,
    UserUpdate,
    VariantCreate,
    VariantOut,
    VariantUpdate,
)
from security import hash_password

logger = logging.getLogger(__name__)


# ------------------------- Helpers -------------------------

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError) as exc:
        raise InvalidIdError(f"Invalid id format: {value!r}") from exc


def optional_object_id(value: Any) -> Optional[ObjectId]:
    if value is None:
        return None
    return to_object_id(value)


def serialize_doc(value: Any) -> Any:
    """Recursively expose `_id` as `id` and ObjectIds as hex strings."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, list):
        return [serialize_doc(v) for v in value]
    if isinstance(value, dict):
        return {("id" if k == "_id" else k): serialize_doc(v) for k, v in value.items()}
    return value


def change_set(dto: BaseModel, references: Sequence[str] = (), nullable: Sequence[str] = ()) -> Dict[str, Any]:
    """
    Build a $set document from the fields the client actually sent.

    Fields left out of the payload are never touched. An explicit null is
    ignored unless the field is listed in `nullable`; reference fields are
    converted to ObjectId.
    """
    changes: Dict[str, Any] = {}
    for key, value in dto.model_dump(exclude_unset=True).items():
        if value is None:
            if key in nullable:
                changes[key] = None
            continue
        if key in references:
            value = to_object_id(value)
        elif isinstance(value, RecordStatus):
            value = value.value
        changes[key] = value
    return changes


@contextmanager
def store_operation(description: str, timeout: bool = True):
    """Wrap driver errors in StoreError; bound the block by the operation timeout."""
    try:
        if timeout:
            with pymongo.timeout(config.OPERATION_TIMEOUT):
                yield
        else:
            yield
    except PyMongoError as exc:
        raise StoreError(description) from exc


# ------------------------- Base -------------------------

class MongoRepository:
    collection_name: str = ""
    model: Type[BaseModel] = BaseModel
    label: str = "document"

    def __init__(self, db):
        self.db = db
        self.collection = db[self.collection_name]

    def _decode(self, doc: Dict[str, Any]):
        return self.model.model_validate(serialize_doc(doc))

    def _decode_one(self, doc: Optional[Dict[str, Any]]):
        if doc is None:
            return None
        try:
            return self._decode(doc)
        except ValidationError as exc:
            raise StoreError(f"Error decoding a {self.label}") from exc

    def _decode_many(self, docs: Iterable[Dict[str, Any]]) -> List[Any]:
        # one corrupt document must not fail the whole listing
        results = []
        for doc in docs:
            try:
                results.append(self._decode(doc))
            except ValidationError as exc:
                logger.warning("Error decoding a %s (%s), skipped: %s", self.label, doc.get("_id"), exc)
        return results

    def _find_one(self, filter_: Dict[str, Any]):
        with store_operation(f"Error finding a {self.label}", timeout=False):
            doc = self.collection.find_one(filter_)
        return self._decode_one(doc)

    def _find_many(self, filter_: Dict[str, Any], sort: Optional[list] = None) -> List[Any]:
        with store_operation(f"Error finding {self.label} documents"):
            cursor = self.collection.find(filter_)
            if sort:
                cursor = cursor.sort(sort)
            return self._decode_many(cursor)

    def _aggregate_one(self, pipeline: List[Dict[str, Any]]):
        with store_operation(f"Error aggregating a {self.label}"):
            docs = list(self.collection.aggregate(pipeline))
        if not docs:
            return None
        return self._decode_one(docs[0])

    def _aggregate_many(self, pipeline: List[Dict[str, Any]]) -> List[Any]:
        with store_operation(f"Error aggregating {self.label} documents"):
            return self._decode_many(self.collection.aggregate(pipeline))

    def _insert(self, data: Dict[str, Any], with_status: bool = True) -> str:
        now = utcnow()
        data = {**data, "createdAt": now, "updatedAt": now}
        if with_status:
            data.setdefault("recordStatus", RecordStatus.ACTIVE.value)
        with store_operation(f"Error inserting a new {self.label}"):
            result = self.collection.insert_one(data)
        return str(result.inserted_id)

    def _update(self, filter_: Dict[str, Any], update: Dict[str, Any]):
        with store_operation(f"Error updating a {self.label}"):
            doc = self.collection.find_one_and_update(filter_, update, return_document=ReturnDocument.AFTER)
        return self._decode_one(doc)

    def _set(self, filter_: Dict[str, Any], changes: Dict[str, Any]):
        return self._update(filter_, {"$set": {**changes, "updatedAt": utcnow()}})

    def _delete(self, filter_: Dict[str, Any]) -> bool:
        with store_operation(f"Error deleting a {self.label}"):
            result = self.collection.delete_one(filter_)
        return result.deleted_count > 0

    def exists(self, id_: str) -> bool:
        object_id = to_object_id(id_)
        with store_operation(f"Error finding a {self.label}", timeout=False):
            return self.collection.count_documents({"_id": object_id}, limit=1) > 0


# ------------------------- Items & Variants -------------------------

class ItemRepository(MongoRepository):
    collection_name = ITEMS
    model = ItemOut
    label = "item"

    def find_by_id(self, item_id: str) -> Optional[ItemOut]:
        return self._find_one({"_id": to_object_id(item_id)})

    def find_all(self) -> List[ItemOut]:
        return self._find_many({})

    def insert(self, dto: ItemCreate) -> str:
        return self._insert({"name": dto.name, "lname": dto.name.lower()})

    def update(self, item_id: str, dto: ItemUpdate) -> Optional[ItemOut]:
        object_id = to_object_id(item_id)
        changes = change_set(dto)
        if "name" in changes:
            changes["lname"] = changes["name"].lower()
        return self._set({"_id": object_id}, changes)

    def delete(self, item_id: str) -> bool:
        return self._delete({"_id": to_object_id(item_id)})


class VariantRepository(MongoRepository):
    collection_name = VARIANTS
    model = VariantOut
    label = "variant"

    @staticmethod
    def _filter(item_id: str, variant_id: str) -> Dict[str, Any]:
        return {"_id": to_object_id(variant_id), "itemId": to_object_id(item_id)}

    def find_one_by_item_id(self, item_id: str, variant_id: str) -> Optional[VariantOut]:
        return self._find_one(self._filter(item_id, variant_id))

    def find_by_item_id(self, item_id: str) -> List[VariantOut]:
        return self._find_many({"itemId": to_object_id(item_id)})

    def insert(self, item_id: str, dto: VariantCreate) -> str:
        return self._insert({
            "name": dto.name,
            "lname": dto.name.lower(),
            "itemId": to_object_id(item_id),
        })

    def update(self, item_id: str, variant_id: str, dto: VariantUpdate) -> Optional[VariantOut]:
        filter_ = self._filter(item_id, variant_id)
        changes = change_set(dto)
        if "name" in changes:
            changes["lname"] = changes["name"].lower()
        return self._set(filter_, changes)

    def delete(self, item_id: str, variant_id: str) -> bool:
        return self._delete(self._filter(item_id, variant_id))


# ------------------------- Countries & Cities -------------------------

class CountryRepository(MongoRepository):
    collection_name = COUNTRIES
    model = CountryOut
    label = "country"

    def find_by_id(self, country_id: str) -> Optional[CountryOut]:
        return self._find_one({"_id": to_object_id(country_id)})

    def find_all(self) -> List[CountryOut]:
        return self._find_many({}, sort=[("countryName", ASCENDING)])

    def insert(self, dto: CountryCreate) -> str:
        return self._insert({
            "countryName": dto.countryName,
            "countryCode": dto.countryCode,
            "states": [],
            "recordStatus": RecordStatus(dto.recordStatus).value,
        })

    def update(self, country_id: str, dto: CountryUpdate) -> Optional[CountryOut]:
        object_id = to_object_id(country_id)
        return self._set({"_id": object_id}, change_set(dto))

    def delete(self, country_id: str) -> bool:
        return self._delete({"_id": to_object_id(country_id)})

    def insert_state(self, country_id: str, dto: CountryStateCreate) -> Optional[CountryOut]:
        object_id = to_object_id(country_id)
        state = {
            "_id": ObjectId(),
            "stateName": dto.stateName,
            "recordStatus": RecordStatus.ACTIVE.value,
        }
        return self._update(
            {"_id": object_id},
            {"$push": {"states": state}, "$set": {"updatedAt": utcnow()}},
        )

    def update_state(self, country_id: str, state_id: str, dto: CountryStateUpdate) -> Optional[CountryOut]:
        object_id = to_object_id(country_id)
        filter_ = {"_id": object_id, "states._id": to_object_id(state_id)}
        changes = {"states.$." + key: value for key, value in change_set(dto).items()}
        changes["updatedAt"] = utcnow()
        # positional update first, then re-read the whole country
        with store_operation("Error updating a country state"):
            result = self.collection.update_one(filter_, {"$set": changes})
        if result.matched_count == 0:
            return None
        return self._find_one({"_id": object_id})

    def delete_state(self, country_id: str, state_id: str) -> Optional[CountryOut]:
        state_object_id = to_object_id(state_id)
        # matching the state in the filter makes a missing state a not-found
        filter_ = {"_id": to_object_id(country_id), "states._id": state_object_id}
        return self._update(
            filter_,
            {"$pull": {"states": {"_id": state_object_id}}, "$set": {"updatedAt": utcnow()}},
        )


class CityRepository(MongoRepository):
    collection_name = CITIES
    model = CityOut
    label = "city"

    @staticmethod
    def _filter(state_id: str, city_id: str) -> Dict[str, Any]:
        return {"_id": to_object_id(city_id), "countryStateId": to_object_id(state_id)}

    def find_all(self) -> List[CityOut]:
        return self._find_many({})

    def find_by_country_state(self, state_id: str) -> List[CityOut]:
        return self._find_many({"countryStateId": to_object_id(state_id)})

    def find_one_by_state(self, state_id: str, city_id: str) -> Optional[CityOut]:
        return self._find_one(self._filter(state_id, city_id))

    def insert(self, state_id: str, dto: CityCreate) -> str:
        return self._insert({"cityName": dto.cityName, "countryStateId": to_object_id(state_id)})

    def update(self, state_id: str, city_id: str, dto: CityUpdate) -> Optional[CityOut]:
        return self._set(self._filter(state_id, city_id), change_set(dto))

    def delete(self, state_id: str, city_id: str) -> bool:
        return self._delete(self._filter(state_id, city_id))


# ------------------------- Crops -------------------------

class CropRepository(MongoRepository):
    collection_name = CROPS
    model = CropOut
    label = "crop"
    references = ("cityId", "variantId", "supplierId")

    def find_by_id(self, crop_id: str) -> Optional[CropOut]:
        return self._aggregate_one(match_id(to_object_id(crop_id)) + build_crop_pipeline())

    def find_all(self) -> List[CropOut]:
        return self._aggregate_many(build_crop_pipeline())

    def insert(self, dto: CropCreate) -> str:
        return self._insert({
            "cityId": optional_object_id(dto.cityId),
            "variantId": optional_object_id(dto.variantId),
            "supplierId": optional_object_id(dto.supplierId),
            "plantingDate": dto.plantingDate,
            "harvestDate": dto.harvestDate,
        }, with_status=False)

    def update(self, crop_id: str, dto: CropUpdate) -> Optional[CropOut]:
        object_id = to_object_id(crop_id)
        changes = change_set(dto, references=self.references, nullable=self.references)
        return self._set({"_id": object_id}, changes)

    def delete(self, crop_id: str) -> bool:
        return self._delete({"_id": to_object_id(crop_id)})


# ------------------------- Suppliers & Users -------------------------

class OwnerRepository(MongoRepository):
    """Shared persistence for documents that own crops (suppliers and users)."""
    include_user_fields = False

    def _pipeline(self) -> List[Dict[str, Any]]:
        return build_owner_with_crops_pipeline(include_user_fields=self.include_user_fields)

    @staticmethod
    def _owner_data(dto) -> Dict[str, Any]:
        return {
            "name": dto.name,
            "surname": dto.surname,
            "documentType": dto.documentType,
            "documentNumber": dto.documentNumber,
            "cityId": optional_object_id(dto.cityId),
            "email": dto.email,
            "addressLine1": dto.addressLine1,
            "phoneNumber": dto.phoneNumber,
        }

    def populate_by_id(self, owner_id: str):
        return self._aggregate_one(match_id(to_object_id(owner_id)) + self._pipeline())

    def find_all(self) -> list:
        return self._aggregate_many(self._pipeline())

    def update(self, owner_id: str, dto):
        object_id = to_object_id(owner_id)
        return self._set({"_id": object_id}, self._changes(dto))

    def _changes(self, dto) -> Dict[str, Any]:
        return change_set(dto, references=("cityId",), nullable=("cityId",))

    def delete(self, owner_id: str) -> bool:
        return self._delete({"_id": to_object_id(owner_id)})


class SupplierRepository(OwnerRepository):
    collection_name = SUPPLIERS
    model = SupplierOut
    label = "supplier"

    def insert(self, dto: SupplierCreate) -> str:
        return self._insert(self._owner_data(dto))


class UserRepository(OwnerRepository):
    collection_name = USERS
    model = UserOut
    label = "user"
    include_user_fields = True

    def find_by_email(self, email: str) -> Optional[UserCredentials]:
        """Raw user lookup that keeps the password hash, for authentication only."""
        with store_operation("Error finding a user by email", timeout=False):
            doc = self.collection.find_one({"email": email.lower()})
        if doc is None:
            return None
        try:
            return UserCredentials.model_validate(serialize_doc(doc))
        except ValidationError as exc:
            raise StoreError("Error decoding a user") from exc

    def insert(self, dto: UserCreate) -> str:
        data = self._owner_data(dto)
        data.update({
            "email": dto.email.lower(),
            "hashedPassword": hash_password(dto.password),
            "role": "user",
            "isEmailVerified": False,
        })
        return self._insert(data)

    def _changes(self, dto: UserUpdate) -> Dict[str, Any]:
        changes = super()._changes(dto)
        if "email" in changes:
            changes["email"] = changes["email"].lower()
        if "password" in changes:
            changes["hashedPassword"] = hash_password(changes.pop("password"))
        return changes
