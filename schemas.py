"""
Database Schemas for the agricultural supply catalog (MongoDB collections)

Each entity lives in its own collection:
- Supplier -> "suppliers"
- User -> "users"
- Crop -> "crops" (references a city, a variant and its owner through supplierId)
- Country -> "countries" (embeds its list of CountryState sub-documents)
- City -> "cities"
- Item -> "items"
- Variant -> "variants" (references an item)

Request payloads (...Create / ...Update) and the populated views returned by
the API (...Out) are declared side by side. Ids travel as hex strings.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field


class RecordStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def _empty_as_none(value: Any) -> Any:
    # left-outer-join leftovers come back as {}
    if value == {}:
        return None
    return value


def _none_as_list(value: Any) -> Any:
    if value is None:
        return []
    return value


class Payload(BaseModel):
    model_config = ConfigDict(use_enum_values=True)


# ------------------------- Items & Variants -------------------------

class ItemCreate(Payload):
    name: str = Field(..., min_length=1)


class ItemUpdate(Payload):
    name: Optional[str] = Field(None, min_length=1)
    recordStatus: Optional[RecordStatus] = None


class ItemOut(BaseModel):
    id: str
    name: str
    lname: str
    recordStatus: RecordStatus
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class VariantCreate(Payload):
    name: str = Field(..., min_length=1)


class VariantUpdate(Payload):
    name: Optional[str] = Field(None, min_length=1)
    recordStatus: Optional[RecordStatus] = None


class VariantOut(BaseModel):
    id: str
    name: str
    lname: str
    itemId: Optional[str] = None
    item: Annotated[Optional[ItemOut], BeforeValidator(_empty_as_none)] = None
    recordStatus: RecordStatus
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


# ------------------------- Countries, States & Cities -------------------------

class CountryStateCreate(Payload):
    stateName: str = Field(..., min_length=1)


class CountryStateUpdate(Payload):
    stateName: Optional[str] = Field(None, min_length=1)
    recordStatus: Optional[RecordStatus] = None


class CountryStateOut(BaseModel):
    id: str
    stateName: str
    recordStatus: RecordStatus


class CountryCreate(Payload):
    countryName: str = Field(..., min_length=1)
    countryCode: str
    recordStatus: RecordStatus = RecordStatus.ACTIVE


class CountryUpdate(Payload):
    countryName: Optional[str] = Field(None, min_length=1)
    countryCode: Optional[str] = None
    recordStatus: Optional[RecordStatus] = None


class CountryOut(BaseModel):
    id: str
    countryName: str
    countryCode: str
    states: Annotated[List[CountryStateOut], BeforeValidator(_none_as_list)] = Field(default_factory=list)
    recordStatus: RecordStatus
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class CityCreate(Payload):
    cityName: str = Field(..., min_length=1)


class CityUpdate(Payload):
    cityName: Optional[str] = Field(None, min_length=1)
    recordStatus: Optional[RecordStatus] = None


class CityOut(BaseModel):
    id: str
    cityName: str
    countryStateId: Optional[str] = None
    recordStatus: RecordStatus
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


# ------------------------- Crops -------------------------

class CropCreate(Payload):
    cityId: Optional[str] = None
    variantId: Optional[str] = None
    supplierId: Optional[str] = None
    plantingDate: datetime
    harvestDate: datetime


class CropUpdate(Payload):
    cityId: Optional[str] = None
    variantId: Optional[str] = None
    supplierId: Optional[str] = None
    plantingDate: Optional[datetime] = None
    harvestDate: Optional[datetime] = None


class SupplierSummary(BaseModel):
    """A supplier as embedded in a crop view (no crops of its own)."""
    id: str
    name: str
    surname: Optional[str] = None
    documentType: Optional[str] = None
    documentNumber: Optional[str] = None
    cityId: Optional[str] = None
    email: Optional[str] = None
    addressLine1: Optional[str] = None
    phoneNumber: Optional[str] = None
    recordStatus: RecordStatus


class CropOut(BaseModel):
    id: str
    cityId: Optional[str] = None
    city: Annotated[Optional[CityOut], BeforeValidator(_empty_as_none)] = None
    variantId: Optional[str] = None
    variant: Annotated[Optional[VariantOut], BeforeValidator(_empty_as_none)] = None
    supplierId: Optional[str] = None
    supplier: Annotated[Optional[SupplierSummary], BeforeValidator(_empty_as_none)] = None
    plantingDate: datetime
    harvestDate: datetime
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


# ------------------------- Suppliers & Users -------------------------

class SupplierCreate(Payload):
    name: str = Field(..., min_length=1)
    surname: str
    documentType: str
    documentNumber: str
    cityId: Optional[str] = None
    email: Optional[str] = None
    addressLine1: Optional[str] = None
    phoneNumber: Optional[str] = None


class SupplierUpdate(Payload):
    name: Optional[str] = Field(None, min_length=1)
    surname: Optional[str] = None
    documentType: Optional[str] = None
    documentNumber: Optional[str] = None
    cityId: Optional[str] = None
    email: Optional[str] = None
    addressLine1: Optional[str] = None
    phoneNumber: Optional[str] = None
    recordStatus: Optional[RecordStatus] = None


class SupplierOut(BaseModel):
    id: str
    name: str
    surname: Optional[str] = None
    documentType: Optional[str] = None
    documentNumber: Optional[str] = None
    cityId: Optional[str] = None
    city: Annotated[Optional[CityOut], BeforeValidator(_empty_as_none)] = None
    email: Optional[str] = None
    addressLine1: Optional[str] = None
    phoneNumber: Optional[str] = None
    crops: Annotated[List[CropOut], BeforeValidator(_none_as_list)] = Field(default_factory=list)
    recordStatus: RecordStatus
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class UserCreate(Payload):
    name: str = Field(..., min_length=1)
    surname: str
    documentType: str
    documentNumber: str
    cityId: Optional[str] = None
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=64)
    addressLine1: Optional[str] = None
    phoneNumber: Optional[str] = None


class UserUpdate(Payload):
    name: Optional[str] = Field(None, min_length=1)
    surname: Optional[str] = None
    documentType: Optional[str] = None
    documentNumber: Optional[str] = None
    cityId: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=64)
    addressLine1: Optional[str] = None
    phoneNumber: Optional[str] = None
    recordStatus: Optional[RecordStatus] = None


class UserOut(SupplierOut):
    role: str = "user"
    isEmailVerified: bool = False


class UserCredentials(UserOut):
    hashedPassword: str


# ------------------------- Auth -------------------------

class LoginInput(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut
