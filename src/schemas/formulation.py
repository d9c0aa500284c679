"""Formulation (product mapping + mass balance) schemas."""

from typing import Literal

from src.models.enums import BalanceStatus
from src.schemas.base import CamelModel
from src.schemas.ingredient import Ingredient
from src.schemas.mapping import ProductMapping
from src.schemas.product import Product, ProductCreate


class Reconciliation(CamelModel):
    """Mapped weight classified against the product's target weight."""

    status: BalanceStatus
    target_weight: float
    mapped_weight: float
    delta: float  # mapped - target
    magnitude: float  # Absolute difference, 0 when balanced
    tolerance: float
    level: Literal["success", "warning", "error"]
    message: str


class MappingRow(CamelModel):
    """One formulation row as displayed in the editor."""

    mapping: ProductMapping
    ingredient_name: str  # "Unknown" when the ingredient no longer resolves
    ingredient_unit: str | None
    percentage: float


class FormulationView(CamelModel):
    """Selected product with its live formulation state."""

    product: Product
    rows: list[MappingRow]
    mapped_weight: float
    reconciliation: Reconciliation
    available_ingredients: list[Ingredient]


class ProductCloneDraft(ProductCreate):
    """Prefilled new-product form copied from an existing product."""

    source_product_id: str


class SweepResult(CamelModel):
    """Mappings removed by an orphan sweep."""

    removed: int
    mappings: list[ProductMapping]
