"""Collection store tests."""

import json

import pytest

from src.exceptions import StorageUnavailableError, ValidationError
from src.models.enums import CollectionName, Status, Unit
from src.schemas.ingredient import IngredientCreate
from src.services.collection_store import Store
from src.services.key_value import InMemoryKeyValueStorage, KeyValueStorage


class BrokenStorage(KeyValueStorage):
    """Storage whose medium is unavailable."""

    def get(self, key):
        raise StorageUnavailableError(key, "quota exceeded")

    def set(self, key, value):
        raise StorageUnavailableError(key, "quota exceeded")


def test_create_ingredient_sets_id_and_timestamps(store):
    """Creating Flour assigns an id and equal created/updated timestamps."""
    ingredient = store.ingredients.create({"name": "Flour", "unit": "g", "status": "active"})

    assert ingredient.id
    assert ingredient.created_at == ingredient.updated_at

    ingredients = store.ingredients.get_all()
    assert [i.id for i in ingredients] == [ingredient.id]
    assert ingredients[0].name == "Flour"
    assert ingredients[0].unit == Unit.G
    assert ingredients[0].status == Status.ACTIVE


def test_create_then_get_by_id_round_trips(store):
    fields = {
        "name": "Cocoa Powder",
        "code": "CP001",
        "unit": "g",
        "supplier": "Choco Inc",
        "status": "inactive",
    }
    created = store.ingredients.create(fields)

    loaded = store.ingredients.get_by_id(created.id)
    assert loaded == created
    assert loaded.model_dump(mode="json", include=set(fields)) == fields


def test_create_accepts_schema_and_camel_case(store, cookie, flour):
    ingredient = store.ingredients.create(IngredientCreate(name="Salt", unit=Unit.G))
    assert ingredient.status == Status.ACTIVE

    mapping = store.product_mappings.create(
        {"productId": cookie.id, "ingredientId": flour.id, "quantity": 10}
    )
    assert mapping.product_id == cookie.id
    assert mapping.ingredient_id == flour.id


def test_ids_are_unique(store):
    ids = {store.products.create({"name": f"Product {n}"}).id for n in range(20)}
    assert len(ids) == 20


def test_create_invalid_fields_writes_nothing(store, storage):
    with pytest.raises(ValidationError) as exc_info:
        store.ingredients.create({"name": "Flour", "unit": "cups"})

    assert any(error.startswith("unit") for error in exc_info.value.errors)
    assert storage.get("mms_ingredients") is None


def test_create_rejects_unknown_and_managed_fields(store):
    with pytest.raises(ValidationError) as exc_info:
        store.ingredients.create({"name": "Flour", "unit": "g", "colour": "white", "id": "x"})

    assert "colour: unknown field" in exc_info.value.errors
    assert "id: field is managed by the store" in exc_info.value.errors
    assert store.ingredients.get_all() == []


def test_blank_ingredient_name_rejected(store):
    with pytest.raises(ValidationError):
        store.ingredients.create({"name": "   ", "unit": "g"})


def test_negative_product_weight_rejected(store):
    with pytest.raises(ValidationError):
        store.products.create({"name": "Cookie", "weight": -1})


def test_update_empty_patch_changes_only_updated_at(store, cookie):
    updated = store.products.update(cookie.id, {})

    assert updated.updated_at > cookie.updated_at
    assert updated.created_at == cookie.created_at
    assert updated.model_dump(exclude={"updated_at"}) == cookie.model_dump(exclude={"updated_at"})


def test_update_merges_fields(store, cookie):
    updated = store.products.update(cookie.id, {"weight": 750, "description": "Bigger"})

    assert updated.weight == 750
    assert updated.description == "Bigger"
    assert updated.name == "Cookie"
    assert store.products.get_by_id(cookie.id) == updated


def test_update_unknown_id_returns_none(store):
    assert store.products.update("missing", {"name": "Nothing"}) is None


def test_update_rejects_unknown_fields(store, cookie):
    with pytest.raises(ValidationError) as exc_info:
        store.products.update(cookie.id, {"colour": "brown"})

    assert exc_info.value.errors == ["colour: unknown field"]
    assert store.products.get_by_id(cookie.id) == cookie


def test_update_rejects_managed_fields(store, cookie):
    with pytest.raises(ValidationError):
        store.products.update(cookie.id, {"createdAt": "2000-01-01T00:00:00Z"})


def test_update_revalidates_merged_entity(store, cookie):
    with pytest.raises(ValidationError):
        store.products.update(cookie.id, {"weight": -5})

    assert store.products.get_by_id(cookie.id).weight == 500


def test_delete_is_idempotent(store, cookie):
    assert store.products.delete(cookie.id) is True
    assert store.products.get_by_id(cookie.id) is None

    assert store.products.delete(cookie.id) is True
    assert store.products.get_by_id(cookie.id) is None


def test_delete_unknown_id_succeeds(store):
    assert store.products.delete("never-existed") is True


def test_bulk_create_keeps_input_order(store):
    rows = [
        {"name": "Flour", "unit": "g", "status": "active"},
        {"name": "Milk", "unit": "ml", "status": "active"},
        {"name": "Eggs", "unit": "pcs", "status": "inactive"},
    ]
    created = store.ingredients.bulk_create(rows)

    assert [i.name for i in created] == ["Flour", "Milk", "Eggs"]
    assert [i.name for i in store.ingredients.get_all()] == ["Flour", "Milk", "Eggs"]
    assert all(i.created_at == i.updated_at for i in created)


def test_bulk_create_skips_invalid_rows(store):
    rows = [
        {"name": "Flour", "unit": "g"},
        {"name": "Broken", "unit": "bucket"},
        {"name": "Milk", "unit": "ml"},
    ]
    created = store.ingredients.bulk_create(rows)

    assert [i.name for i in created] == ["Flour", "Milk"]
    assert len(store.ingredients.get_all()) == 2


def test_snapshot_layout_is_camel_case_json_array(store, storage, cookie, flour):
    store.product_mappings.create(
        {"product_id": cookie.id, "ingredient_id": flour.id, "quantity": 300}
    )

    rows = json.loads(storage.get("mms_product_mappings"))
    assert isinstance(rows, list)
    assert set(rows[0]) == {"id", "productId", "ingredientId", "quantity", "createdAt", "updatedAt"}
    assert rows[0]["createdAt"].startswith("2024-01-01T")


def test_reads_reflect_latest_write_from_another_store(storage, clock):
    first = Store(storage, clock=clock)
    second = Store(storage, clock=clock)

    product = first.products.create({"name": "Cookie", "weight": 500})
    assert second.products.get_by_id(product.id) == product

    second.products.delete(product.id)
    assert first.products.get_all() == []


def test_stored_rows_with_extra_keys_load(storage):
    storage.set(
        "mms_ingredients",
        json.dumps(
            [
                {
                    "id": "legacy-1",
                    "name": "Flour",
                    "unit": "g",
                    "status": "active",
                    "notes": "from an older client",
                    "createdAt": "2024-01-01T00:00:00.000Z",
                    "updatedAt": "2024-01-01T00:00:00.000Z",
                }
            ]
        ),
    )
    store = Store(storage)

    ingredient = store.ingredients.get_by_id("legacy-1")
    assert ingredient.name == "Flour"


def test_collection_lookup_by_name(store):
    assert store.collection("products") is store.products
    assert store.collection(CollectionName.PRODUCT_MAPPINGS) is store.product_mappings
    with pytest.raises(KeyError):
        store.collection("suppliers")


def test_key_prefix(clock):
    storage = InMemoryKeyValueStorage()
    store = Store(storage, key_prefix="test_", clock=clock)
    store.recipes.create({"name": "Dough"})

    assert set(storage.data) == {"test_recipes"}


def test_mappings_by_product(store, cookie, flour, sugar):
    other = store.products.create({"name": "Brownie", "weight": 200})
    rows = [(cookie, flour, 1), (other, flour, 2), (cookie, sugar, 3)]
    for product, ingredient, quantity in rows:
        store.product_mappings.create(
            {"product_id": product.id, "ingredient_id": ingredient.id, "quantity": quantity}
        )

    assert [m.quantity for m in store.product_mappings.get_by_product_id(cookie.id)] == [1, 3]
    assert store.product_mappings.delete_by_product_id(cookie.id) == 2
    assert [m.product_id for m in store.product_mappings.get_all()] == [other.id]


# --- Storage failures ---


def test_strict_store_raises_on_unavailable_storage():
    store = Store(BrokenStorage())

    with pytest.raises(StorageUnavailableError):
        store.ingredients.get_all()
    with pytest.raises(StorageUnavailableError):
        store.ingredients.create({"name": "Flour", "unit": "g"})


def test_lenient_store_degrades_silently():
    store = Store(BrokenStorage(), strict=False)

    assert store.ingredients.get_all() == []
    assert store.ingredients.get_by_id("anything") is None

    # The write is dropped but the caller still gets an entity back
    ingredient = store.ingredients.create({"name": "Flour", "unit": "g"})
    assert ingredient.name == "Flour"
    assert store.ingredients.delete(ingredient.id) is True


def test_corrupt_snapshot(storage):
    storage.set("mms_products", "{not json")

    with pytest.raises(StorageUnavailableError):
        Store(storage).products.get_all()
    assert Store(storage, strict=False).products.get_all() == []


def test_snapshot_that_is_not_an_array(storage):
    storage.set("mms_products", json.dumps({"id": "p1"}))

    with pytest.raises(StorageUnavailableError):
        Store(storage).products.get_all()
    assert Store(storage, strict=False).products.get_all() == []
