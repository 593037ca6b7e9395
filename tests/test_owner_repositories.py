from datetime import datetime
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import PyMongoError

from errors import InvalidIdError, StoreError
from pipelines import build_owner_with_crops_pipeline
from repositories import CropRepository, SupplierRepository, UserRepository


def fake_db(name, rows):
    collection = MagicMock()
    collection.aggregate.return_value = rows
    return {name: collection}, collection


def supplier_row(**overrides):
    row = {
        "_id": ObjectId(),
        "name": "Ana",
        "surname": "Rojas",
        "documentType": "DNI",
        "documentNumber": "12345678",
        "recordStatus": "active",
        "createdAt": datetime(2024, 1, 1),
        "updatedAt": datetime(2024, 1, 1),
        "crops": [],
    }
    row.update(overrides)
    return row


def crop_row(**overrides):
    row = {
        "_id": ObjectId(),
        "plantingDate": datetime(2024, 3, 1),
        "harvestDate": datetime(2024, 9, 1),
    }
    row.update(overrides)
    return row


def project_grouped_row(row, include_user_fields=False):
    """Evaluate the owner pipeline's final $project on one $group output row."""
    project = build_owner_with_crops_pipeline(include_user_fields)[-1]["$project"]
    condition, when_equal, otherwise = project["crops"]["$cond"]
    field, value = condition["$eq"]
    projected = {"_id": row["_id"]}
    for key, rule in project.items():
        if rule == 1 and key in row:
            projected[key] = row[key]
    projected["crops"] = when_equal if row[field[1:]] == value else row[otherwise[1:]]
    return projected


def grouped_row(has_crops, crops):
    # what $group emits; a supplier with no crops still pushes one empty shell
    return supplier_row(hasCrops=has_crops, crops=crops, city={})


def test_left_join_shell_is_dropped_by_projection():
    row = grouped_row(0, [{"variant": {}}])
    db, _ = fake_db("suppliers", [project_grouped_row(row)])

    supplier = SupplierRepository(db).populate_by_id(str(row["_id"]))

    assert supplier.crops == []
    assert supplier.city is None


def test_left_join_shell_without_projection_does_not_decode():
    row = grouped_row(0, [{"variant": {}}])
    db, _ = fake_db("suppliers", [row])

    with pytest.raises(StoreError):
        SupplierRepository(db).populate_by_id(str(row["_id"]))


def test_projection_keeps_real_crops():
    row = grouped_row(2, [crop_row(variant={}), crop_row(variant={})])
    projected = project_grouped_row(row)
    db, _ = fake_db("suppliers", [projected])

    supplier = SupplierRepository(db).populate_by_id(str(row["_id"]))

    assert "hasCrops" not in projected
    assert len(supplier.crops) == 2


def test_supplier_without_crops_has_empty_list():
    row = supplier_row()
    db, collection = fake_db("suppliers", [row])

    supplier = SupplierRepository(db).populate_by_id(str(row["_id"]))

    assert supplier.id == str(row["_id"])
    assert supplier.crops == []
    pipeline = collection.aggregate.call_args[0][0]
    assert pipeline[0] == {"$match": {"_id": row["_id"]}}


def test_supplier_null_crops_and_missing_city():
    row = supplier_row(crops=None, city={}, cityId=ObjectId())
    db, _ = fake_db("suppliers", [row])

    supplier = SupplierRepository(db).populate_by_id(str(row["_id"]))

    assert supplier.crops == []
    assert supplier.city is None
    assert supplier.cityId == str(row["cityId"])


def test_supplier_crops_are_populated():
    item_id = ObjectId()
    variant = {
        "_id": ObjectId(),
        "name": "Hass",
        "lname": "hass",
        "itemId": item_id,
        "item": {"_id": item_id, "name": "Avocado", "lname": "avocado", "recordStatus": "active"},
        "recordStatus": "active",
    }
    row = supplier_row(crops=[crop_row(variant=variant), crop_row(variant={})])
    db, _ = fake_db("suppliers", [row])

    supplier = SupplierRepository(db).populate_by_id(str(row["_id"]))

    assert len(supplier.crops) == 2
    assert supplier.crops[0].variant.name == "Hass"
    assert supplier.crops[0].variant.item.id == str(item_id)
    # dangling variant reference
    assert supplier.crops[1].variant is None


def test_supplier_not_found():
    db, _ = fake_db("suppliers", [])
    assert SupplierRepository(db).populate_by_id(str(ObjectId())) is None


def test_invalid_id_is_rejected_before_store_access():
    db, collection = fake_db("suppliers", [])
    with pytest.raises(InvalidIdError):
        SupplierRepository(db).populate_by_id("not-an-id")
    collection.aggregate.assert_not_called()


def test_driver_errors_are_wrapped():
    db, collection = fake_db("suppliers", [])
    collection.aggregate.side_effect = PyMongoError("connection reset")

    with pytest.raises(StoreError) as info:
        SupplierRepository(db).find_all()
    assert isinstance(info.value.__cause__, PyMongoError)


def test_undecodable_single_supplier_is_a_store_error():
    row = supplier_row()
    del row["name"]
    db, _ = fake_db("suppliers", [row])

    with pytest.raises(StoreError):
        SupplierRepository(db).populate_by_id(str(row["_id"]))


def test_listing_skips_undecodable_rows():
    broken = supplier_row()
    del broken["recordStatus"]
    good = supplier_row(name="Luis")
    db, _ = fake_db("suppliers", [broken, good])

    suppliers = SupplierRepository(db).find_all()

    assert [s.name for s in suppliers] == ["Luis"]


def test_user_view_keeps_role_and_hides_hash():
    row = supplier_row(email="ana@example.com", role="user", isEmailVerified=False, hashedPassword="secret")
    db, collection = fake_db("users", [row])

    user = UserRepository(db).populate_by_id(str(row["_id"]))

    assert user.role == "user"
    assert "hashedPassword" not in user.model_dump()
    group = collection.aggregate.call_args[0][0][-2]["$group"]
    assert "role" in group


def test_crop_view_resolves_supplier():
    supplier = supplier_row()
    del supplier["crops"]
    row = crop_row(supplier=supplier, city={}, variant={})
    db, _ = fake_db("crops", [row])

    crop = CropRepository(db).find_by_id(str(row["_id"]))

    assert crop.supplier.name == "Ana"
    assert crop.city is None
    assert crop.variant is None
