"""Formulation editor workflow tests."""

import pytest

from src.exceptions import NotFoundError, ValidationError
from src.models.enums import BalanceStatus, Status
from src.services.formulation_service import FormulationEditor


@pytest.fixture
def editor(store, cookie, flour, sugar):
    return FormulationEditor(store)


def test_select_unknown_product(editor):
    with pytest.raises(NotFoundError):
        editor.select_product("missing")
    assert editor.selected_product is None


def test_add_mapping_requires_selection(editor, store, flour):
    with pytest.raises(ValidationError) as exc_info:
        editor.add_mapping(flour.id, 100)

    assert exc_info.value.message == "Please select a product first"
    assert store.product_mappings.get_all() == []


def test_view_requires_selection(editor):
    with pytest.raises(ValidationError):
        editor.view()


def test_empty_formulation(editor, cookie):
    editor.select_product(cookie.id)
    view = editor.view()

    assert view.rows == []
    assert view.mapped_weight == 0
    assert view.reconciliation.status == BalanceStatus.EMPTY


def test_add_mappings_until_balanced(editor, cookie, flour, sugar):
    editor.select_product(cookie.id)

    editor.add_mapping(flour.id, 300)
    assert editor.view().reconciliation.status == BalanceStatus.UNDERFILLED

    editor.add_mapping(sugar.id, 200)
    view = editor.view()
    assert view.mapped_weight == 500
    assert view.reconciliation.status == BalanceStatus.BALANCED
    assert [row.ingredient_name for row in view.rows] == ["Flour", "Sugar"]
    assert [row.percentage for row in view.rows] == pytest.approx([60, 40])


def test_edit_mapping_to_overfill(editor, cookie, flour, sugar):
    editor.select_product(cookie.id)
    editor.add_mapping(flour.id, 300)
    sugar_row = editor.add_mapping(sugar.id, 200)

    editor.edit_mapping(sugar_row.id, {"quantity": 250})

    reconciliation = editor.view().reconciliation
    assert reconciliation.status == BalanceStatus.OVERFILLED
    assert reconciliation.magnitude == 50


def test_edit_mapping_of_another_product(editor, store, cookie, flour):
    brownie = store.products.create({"name": "Brownie", "weight": 100})
    editor.reload()
    editor.select_product(brownie.id)
    mapping = editor.add_mapping(flour.id, 100)

    editor.select_product(cookie.id)
    with pytest.raises(NotFoundError):
        editor.edit_mapping(mapping.id, {"quantity": 1})


def test_rejected_edit_keeps_state(editor, cookie, flour):
    editor.select_product(cookie.id)
    mapping = editor.add_mapping(flour.id, 300)

    with pytest.raises(ValidationError):
        editor.edit_mapping(mapping.id, {"ingredientId": "gone"})

    assert editor.view().rows[0].mapping == mapping


def test_delete_mapping(editor, cookie, flour, sugar):
    editor.select_product(cookie.id)
    editor.add_mapping(flour.id, 300)
    sugar_row = editor.add_mapping(sugar.id, 200)

    assert editor.delete_mapping(sugar_row.id) is True
    assert editor.delete_mapping(sugar_row.id) is True

    view = editor.view()
    assert view.mapped_weight == 300
    assert view.reconciliation.status == BalanceStatus.UNDERFILLED


def test_view_reflects_writes_made_elsewhere(editor, store, cookie, flour):
    """Mutating actions reload, so writes by other callers show up after them."""
    editor.select_product(cookie.id)
    store.product_mappings.create(
        {"product_id": cookie.id, "ingredient_id": flour.id, "quantity": 100}
    )
    assert editor.view().mapped_weight == 0

    editor.add_mapping(flour.id, 400)
    assert editor.view().mapped_weight == 500


def test_delete_product_clears_selection(editor, store, cookie, flour):
    editor.select_product(cookie.id)
    editor.add_mapping(flour.id, 300)

    editor.delete_product(cookie.id)

    assert editor.selected_product is None
    assert store.product_mappings.get_all() == []
    assert editor.mappings == []


def test_unknown_ingredient_is_displayed(editor, store, cookie, flour):
    editor.select_product(cookie.id)
    editor.add_mapping(flour.id, 300)
    # Bypass the integrity layer the way a legacy snapshot could
    store.ingredients.delete(flour.id)
    editor.reload()

    row = editor.view().rows[0]
    assert row.ingredient_name == "Unknown"
    assert row.ingredient_unit is None


def test_available_ingredients_are_active_only(editor, store):
    store.ingredients.create({"name": "Vanilla Extract", "unit": "ml", "status": "inactive"})
    editor.reload()

    assert [i.name for i in editor.available_ingredients()] == ["Flour", "Sugar"]


def test_clone_product_copies_shape_not_mappings(editor, store, cookie, flour):
    editor.select_product(cookie.id)
    editor.add_mapping(flour.id, 300)
    store.products.update(cookie.id, {"status": "inactive"})
    editor.reload()

    draft = editor.clone_product(cookie.id)
    assert draft.name == "Cookie (Copy)"
    assert draft.weight == 500
    assert draft.unit == cookie.unit
    assert draft.status == Status.ACTIVE

    copy = editor.create_product(draft.model_dump(exclude={"source_product_id"}))
    assert store.product_mappings.get_by_product_id(copy.id) == []
    assert len(editor.products) == 2


def test_clone_unknown_product(editor):
    with pytest.raises(NotFoundError):
        editor.clone_product("missing")


def test_product_summaries(editor, store, cookie, flour):
    store.recipes.create({"name": "Bake", "product_id": cookie.id})
    editor.select_product(cookie.id)
    editor.add_mapping(flour.id, 500)

    summary = editor.product_summaries()[0]
    assert summary.mapping_count == 1
    assert summary.recipe_count == 1
    assert summary.mapped_weight == 500
    assert summary.balance_status == BalanceStatus.BALANCED


def test_relative_tolerance(store, flour):
    product = store.products.create({"name": "Sack", "weight": 10000, "unit": "g"})
    store.product_mappings.create(
        {"product_id": product.id, "ingredient_id": flour.id, "quantity": 10005}
    )

    strict = FormulationEditor(store)
    strict.select_product(product.id)
    assert strict.reconciliation().status == BalanceStatus.OVERFILLED

    relaxed = FormulationEditor(store, relative_tolerance=0.001)
    relaxed.select_product(product.id)
    assert relaxed.reconciliation().status == BalanceStatus.BALANCED


def test_delete_mapping_of_another_product(editor, store, cookie, flour):
    brownie = store.products.create({"name": "Brownie", "weight": 100})
    editor.reload()
    editor.select_product(brownie.id)
    mapping = editor.add_mapping(flour.id, 100)

    editor.select_product(cookie.id)
    with pytest.raises(NotFoundError):
        editor.delete_mapping(mapping.id)

    assert store.product_mappings.get_by_product_id(brownie.id) == [mapping]


def test_delete_mapping_requires_selection(editor, store, cookie, flour):
    mapping = store.product_mappings.create(
        {"product_id": cookie.id, "ingredient_id": flour.id, "quantity": 100}
    )
    editor.reload()

    with pytest.raises(ValidationError):
        editor.delete_mapping(mapping.id)

    assert store.product_mappings.get_all() == [mapping]
