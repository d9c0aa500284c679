"""Ingredient CSV import schemas."""

from pydantic import Field, computed_field

from src.schemas.base import CamelModel
from src.schemas.ingredient import Ingredient


class ColumnMapping(CamelModel):
    """CSV header chosen for each ingredient field."""

    name: str | None = None
    code: str | None = None
    unit: str | None = None
    supplier: str | None = None
    status: str | None = None


class RowValidation(CamelModel):
    """Validation outcome of one CSV row."""

    row_index: int  # 0-based position in the file body
    data: dict[str, str]
    errors: list[str] = []
    warnings: list[str] = []

    @computed_field
    @property
    def is_valid(self) -> bool:
        return not self.errors


class ImportPreview(CamelModel):
    """Parsed file with per-row validation."""

    headers: list[str]
    rows: list[RowValidation]
    valid_count: int
    invalid_count: int


class ImportResult(CamelModel):
    """Outcome of an import."""

    total: int
    successful: int
    failed: int
    ingredients: list[Ingredient] = Field(default_factory=list)
