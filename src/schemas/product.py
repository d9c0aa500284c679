"""Product schemas."""

from pydantic import Field

from src.models.enums import BalanceStatus, Status, Unit
from src.schemas.base import CamelModel, Entity


class Product(Entity):
    """Stored product with its declared package weight."""

    name: str = Field(..., min_length=1, max_length=255)
    weight: float = Field(0.0, ge=0)
    unit: Unit = Unit.G
    status: Status = Status.ACTIVE
    description: str | None = Field(None, max_length=2000)


class ProductCreate(CamelModel):
    """Create a product."""

    name: str = Field(..., min_length=1, max_length=255)
    weight: float = Field(0.0, ge=0)
    unit: Unit = Unit.G
    status: Status = Status.ACTIVE
    description: str | None = Field(None, max_length=2000)


class ProductUpdate(CamelModel):
    """Update a product."""

    name: str | None = Field(None, min_length=1, max_length=255)
    weight: float | None = Field(None, ge=0)
    unit: Unit | None = None
    status: Status | None = None
    description: str | None = Field(None, max_length=2000)


class ProductSummary(Product):
    """Product list row with its live formulation totals."""

    mapping_count: int
    recipe_count: int
    mapped_weight: float
    balance_status: BalanceStatus
