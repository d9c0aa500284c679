"""Dashboard schemas."""

from src.schemas.base import CamelModel
from src.schemas.ingredient import Ingredient
from src.schemas.product import Product


class StatusCounts(CamelModel):
    """Entity counts by status."""

    total: int
    active: int = 0
    inactive: int = 0


class DashboardStats(CamelModel):
    """Collection totals."""

    ingredients: StatusCounts
    products: StatusCounts
    recipes: StatusCounts
    product_mappings: StatusCounts


class DashboardResponse(CamelModel):
    """Dashboard overview."""

    stats: DashboardStats
    recent_ingredients: list[Ingredient]
    recent_products: list[Product]
