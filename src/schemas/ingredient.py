"""Ingredient schemas."""

from pydantic import Field, field_validator

from src.models.enums import Status, Unit
from src.schemas.base import CamelModel, Entity


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class Ingredient(Entity):
    """Stored ingredient."""

    name: str = Field(..., min_length=1, max_length=255)
    code: str | None = Field(None, max_length=50)
    unit: Unit
    supplier: str | None = Field(None, max_length=255)
    status: Status = Status.ACTIVE

    strip_name = field_validator("name")(_strip_required)


class IngredientCreate(CamelModel):
    """Create an ingredient."""

    name: str = Field(..., min_length=1, max_length=255)
    code: str | None = Field(None, max_length=50)
    unit: Unit
    supplier: str | None = Field(None, max_length=255)
    status: Status = Status.ACTIVE

    strip_name = field_validator("name")(_strip_required)


class IngredientUpdate(CamelModel):
    """Update an ingredient."""

    name: str | None = Field(None, min_length=1, max_length=255)
    code: str | None = Field(None, max_length=50)
    unit: Unit | None = None
    supplier: str | None = Field(None, max_length=255)
    status: Status | None = None


class IngredientBulkCreateRequest(CamelModel):
    """Bulk create ingredients already validated by the caller."""

    items: list[IngredientCreate]
