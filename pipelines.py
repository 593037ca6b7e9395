"""
Aggregation pipelines that turn foreign keys into embedded sub-documents.

Every join is a $lookup followed by an $unwind that preserves documents
without a match, so a dangling reference leaves the nested object absent
instead of dropping the whole row.
"""
from typing import Any, Dict, List

from database import CITIES, CROPS, ITEMS, SUPPLIERS, VARIANTS

Stage = Dict[str, Any]

OWNER_FIELDS = (
    "name",
    "surname",
    "documentType",
    "documentNumber",
    "cityId",
    "city",
    "email",
    "addressLine1",
    "phoneNumber",
    "recordStatus",
    "createdAt",
    "updatedAt",
)

# carried through the group stage for users only; never the password hash
USER_FIELDS = ("role", "isEmailVerified")


def join(source: str, local_field: str, target: str, foreign_field: str = "_id") -> List[Stage]:
    """Left outer join `source` into the field `target` (one document, or absent)."""
    return [
        {"$lookup": {
            "from": source,
            "localField": local_field,
            "foreignField": foreign_field,
            "as": target,
        }},
        {"$unwind": {
            "path": "$" + target,
            "preserveNullAndEmptyArrays": True,
        }},
    ]


def match_id(object_id) -> List[Stage]:
    return [{"$match": {"_id": object_id}}]


def build_owner_with_crops_pipeline(include_user_fields: bool = False) -> List[Stage]:
    """
    Populate a supplier (or a user acting as a grower) with its city and its crops.

    Crops are looked up by supplierId, then every crop gets its variant and the
    variant its item. The per-crop rows are grouped back into one document per
    owner. hasCrops is counted before the unwind: an owner with no crops still
    yields one row holding an empty crop shell, and the final projection turns
    that into an empty list.
    """
    fields = OWNER_FIELDS + (USER_FIELDS if include_user_fields else ())

    group: Stage = {
        "_id": "$_id",
        "hasCrops": {"$first": "$hasCrops"},
        "crops": {"$push": "$crops"},
    }
    for field in fields:
        group[field] = {"$first": "$" + field}

    project: Stage = {field: 1 for field in fields}
    project["crops"] = {"$cond": [{"$eq": ["$hasCrops", 0]}, [], "$crops"]}

    return [
        {"$lookup": {
            "from": CROPS,
            "localField": "_id",
            "foreignField": "supplierId",
            "as": "crops",
        }},
        {"$addFields": {"hasCrops": {"$size": {"$ifNull": ["$crops", []]}}}},
        {"$unwind": {"path": "$crops", "preserveNullAndEmptyArrays": True}},
        *join(VARIANTS, "crops.variantId", "crops.variant"),
        *join(ITEMS, "crops.variant.itemId", "crops.variant.item"),
        *join(CITIES, "cityId", "city"),
        {"$group": group},
        {"$project": project},
    ]


def build_crop_pipeline() -> List[Stage]:
    """Resolve a standalone crop's city, variant -> item and supplier, dropping the raw ids."""
    return [
        *join(CITIES, "cityId", "city"),
        *join(VARIANTS, "variantId", "variant"),
        *join(ITEMS, "variant.itemId", "variant.item"),
        *join(SUPPLIERS, "supplierId", "supplier"),
        {"$project": {"cityId": 0, "variantId": 0, "supplierId": 0}},
    ]
