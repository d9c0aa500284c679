"""Formulation editor: product selection, mapping CRUD and live mass balance."""

import logging

from src.exceptions import NotFoundError, ValidationError
from src.models.enums import Status
from src.schemas.formulation import (
    FormulationView,
    MappingRow,
    ProductCloneDraft,
    Reconciliation,
)
from src.schemas.ingredient import Ingredient
from src.schemas.mapping import ProductMapping, ProductMappingUpdate
from src.schemas.product import Product, ProductCreate, ProductSummary
from src.schemas.recipe import Recipe
from src.services.collection_store import Fields, Store
from src.services.integrity import IntegrityService
from src.services.reconciliation import (
    DEFAULT_TOLERANCE,
    effective_tolerance,
    formulation_state,
    mapped_weight,
    percentage,
    reconcile,
)

logger = logging.getLogger(__name__)

UNKNOWN_INGREDIENT = "Unknown"


class FormulationEditor:
    """Workflow over one selected product's formulation.

    Holds a snapshot of all four collections. Every mutating action writes
    through the integrity layer and then reloads the snapshot, so views are
    always derived from the latest durable write.
    """

    def __init__(
        self,
        store: Store,
        tolerance: float = DEFAULT_TOLERANCE,
        relative_tolerance: float | None = None,
    ):
        self.store = store
        self.integrity = IntegrityService(store)
        self.tolerance = tolerance
        self.relative_tolerance = relative_tolerance
        self.selected_product_id: str | None = None

        self.ingredients: list[Ingredient] = []
        self.products: list[Product] = []
        self.recipes: list[Recipe] = []
        self.mappings: list[ProductMapping] = []
        self.reload()

    def reload(self) -> None:
        """Reload all four collections from storage."""
        self.ingredients = self.store.ingredients.get_all()
        self.products = self.store.products.get_all()
        self.recipes = self.store.recipes.get_all()
        self.mappings = self.store.product_mappings.get_all()

    # --- Selection ---

    @property
    def selected_product(self) -> Product | None:
        if self.selected_product_id is None:
            return None
        return next((p for p in self.products if p.id == self.selected_product_id), None)

    def select_product(self, product_id: str) -> Product:
        """Make a product the active formulation context."""
        product = next((p for p in self.products if p.id == product_id), None)
        if product is None:
            raise NotFoundError("Product", product_id)
        self.selected_product_id = product.id
        return product

    def _require_selection(self) -> Product:
        product = self.selected_product
        if product is None:
            raise ValidationError("Please select a product first")
        return product

    # --- Reads ---

    def current_mappings(self) -> list[ProductMapping]:
        """Mappings of the selected product, empty when nothing is selected."""
        if self.selected_product_id is None:
            return []
        return [m for m in self.mappings if m.product_id == self.selected_product_id]

    def mapped_weight(self) -> float:
        if self.selected_product_id is None:
            return 0.0
        return mapped_weight(self.mappings, self.selected_product_id)

    def reconciliation(self) -> Reconciliation | None:
        """Mass balance of the selected product, None when nothing is selected."""
        product = self.selected_product
        if product is None:
            return None
        return reconcile(
            product.weight,
            self.mapped_weight(),
            product.unit,
            self.tolerance,
            self.relative_tolerance,
        )

    def available_ingredients(self) -> list[Ingredient]:
        """Ingredients offered when adding a mapping."""
        return [i for i in self.ingredients if i.status == Status.ACTIVE]

    def view(self) -> FormulationView:
        """The selected product with its rows, totals and balance."""
        product = self._require_selection()
        total = self.mapped_weight()
        ingredients_by_id = {i.id: i for i in self.ingredients}

        rows = []
        for mapping in self.current_mappings():
            ingredient = ingredients_by_id.get(mapping.ingredient_id)
            rows.append(
                MappingRow(
                    mapping=mapping,
                    ingredient_name=ingredient.name if ingredient else UNKNOWN_INGREDIENT,
                    ingredient_unit=ingredient.unit.value if ingredient else None,
                    percentage=percentage(mapping.quantity, total),
                )
            )

        return FormulationView(
            product=product,
            rows=rows,
            mapped_weight=total,
            reconciliation=self.reconciliation(),
            available_ingredients=self.available_ingredients(),
        )

    def product_summaries(self) -> list[ProductSummary]:
        """Every product with its mapping count and formulation state."""
        summaries = []
        for product in self.products:
            total = mapped_weight(self.mappings, product.id)
            tolerance = effective_tolerance(
                product.weight, self.tolerance, self.relative_tolerance
            )
            summaries.append(
                ProductSummary(
                    **product.model_dump(),
                    mapping_count=sum(1 for m in self.mappings if m.product_id == product.id),
                    recipe_count=sum(1 for r in self.recipes if r.product_id == product.id),
                    mapped_weight=total,
                    balance_status=formulation_state(product.weight, total, tolerance),
                )
            )
        return summaries

    # --- Products ---

    def create_product(self, fields: Fields) -> Product:
        """Create a product through the normal create path."""
        product = self.store.products.create(fields)
        self.reload()
        return product

    def clone_product(self, product_id: str) -> ProductCloneDraft:
        """Prefill a new product from an existing one; mappings are not copied."""
        product = next((p for p in self.products if p.id == product_id), None)
        if product is None:
            raise NotFoundError("Product", product_id)
        return ProductCloneDraft(
            source_product_id=product.id,
            name=f"{product.name} (Copy)",
            weight=product.weight,
            unit=product.unit,
            status=Status.ACTIVE,
        )

    def delete_product(self, product_id: str) -> bool:
        """Delete a product and its mappings."""
        self.integrity.delete_product(product_id)
        if self.selected_product_id == product_id:
            self.selected_product_id = None
        self.reload()
        return True

    # --- Mappings ---

    def add_mapping(self, ingredient_id: str, quantity: float) -> ProductMapping:
        """Add an ingredient quantity to the selected product."""
        product = self._require_selection()
        try:
            mapping = self.integrity.create_mapping(product.id, ingredient_id, quantity)
        finally:
            self.reload()
        return mapping

    def edit_mapping(self, mapping_id: str, patch: ProductMappingUpdate | dict) -> ProductMapping:
        """Update a row of the selected product's formulation."""
        product = self._require_selection()
        if not any(m.id == mapping_id for m in self.current_mappings()):
            raise NotFoundError("Mapping", mapping_id)

        if isinstance(patch, ProductMappingUpdate):
            patch = patch.model_dump(exclude_unset=True)
        try:
            mapping = self.integrity.update_mapping(
                mapping_id, {**patch, "product_id": product.id}
            )
        finally:
            self.reload()
        if mapping is None:
            raise NotFoundError("Mapping", mapping_id)
        return mapping

    def delete_mapping(self, mapping_id: str) -> bool:
        """Remove a row from the selected product's formulation.

        Ids that do not exist at all are not an error; a row belonging to
        another product is NotFoundError.
        """
        self._require_selection()
        if any(m.id == mapping_id for m in self.mappings) and not any(
            m.id == mapping_id for m in self.current_mappings()
        ):
            raise NotFoundError("Mapping", mapping_id)

        self.store.product_mappings.delete(mapping_id)
        self.reload()
        return True

    def sweep_orphaned_mappings(self) -> list[ProductMapping]:
        """Run the manual consistency sweep."""
        removed = self.integrity.sweep_orphaned_mappings()
        self.reload()
        return removed
