"""Product mapping schemas."""

from pydantic import Field

from src.schemas.base import CamelModel, Entity


class ProductMapping(Entity):
    """Stored ingredient quantity within a product's formulation."""

    product_id: str
    ingredient_id: str
    quantity: float = Field(..., ge=0)


class ProductMappingCreate(CamelModel):
    """Add an ingredient to the selected product's formulation."""

    ingredient_id: str
    quantity: float = Field(..., ge=0)


class ProductMappingUpdate(CamelModel):
    """Update a formulation row."""

    ingredient_id: str | None = None
    quantity: float | None = Field(None, ge=0)
