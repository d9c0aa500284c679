"""Ingredient CSV import: parse, map columns, validate rows, bulk create."""

import csv
import io
import logging

from src.exceptions import ValidationError
from src.models.enums import Status, Unit
from src.schemas.ingredient_import import (
    ColumnMapping,
    ImportPreview,
    ImportResult,
    RowValidation,
)
from src.services.collection_store import Store

logger = logging.getLogger(__name__)

# (field, label, required)
IMPORT_FIELDS = [
    ("name", "Ingredient Name", True),
    ("code", "Code", False),
    ("unit", "Unit", True),
    ("supplier", "Supplier", False),
    ("status", "Status", True),
]

UNIT_OPTIONS = [unit.value for unit in Unit]
STATUS_OPTIONS = [status.value for status in Status]


def parse_csv(text: str, delimiter: str = ",") -> tuple[list[str], list[dict[str, str]]]:
    """Parse CSV text with a header row; blank lines are skipped."""
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")), delimiter=delimiter)
    headers = [header.strip() for header in (reader.fieldnames or [])]
    reader.fieldnames = headers

    rows = []
    for row in reader:
        values = {header: (row.get(header) or "").strip() for header in headers}
        if any(values.values()):
            rows.append(values)

    if not rows:
        raise ValidationError("No data found in CSV file")
    return headers, rows


def guess_column_mapping(headers: list[str]) -> ColumnMapping:
    """Map headers whose name matches a field name or label, ignoring case."""
    by_lower = {header.lower(): header for header in headers}
    guessed = {}
    for field, label, _ in IMPORT_FIELDS:
        guessed[field] = by_lower.get(field) or by_lower.get(label.lower())
    return ColumnMapping(**guessed)


def check_column_mapping(mapping: ColumnMapping, headers: list[str]) -> None:
    """Required fields must be mapped, and only to existing headers."""
    errors = []
    for field, label, required in IMPORT_FIELDS:
        column = getattr(mapping, field)
        if column is None:
            if required:
                errors.append(f"{label} must be mapped to a column")
        elif column not in headers:
            errors.append(f"{label}: column '{column}' not found in file")
    if errors:
        raise ValidationError("Please map required fields", errors)


def validate_rows(rows: list[dict[str, str]], mapping: ColumnMapping) -> list[RowValidation]:
    """Validate every row; duplicates within the file are warnings, not errors."""
    results = []
    for index, row in enumerate(rows):
        errors = []
        warnings = []

        for field, label, required in IMPORT_FIELDS:
            column = getattr(mapping, field)
            if required and column and not row.get(column):
                errors.append(f"{label} is required")

        if mapping.unit:
            unit = row.get(mapping.unit)
            if unit and unit.lower() not in UNIT_OPTIONS:
                errors.append(f"Invalid unit: {unit}. Must be one of: {', '.join(UNIT_OPTIONS)}")

        if mapping.status:
            status = row.get(mapping.status)
            if status and status.lower() not in STATUS_OPTIONS:
                errors.append(f"Invalid status: {status}. Must be 'active' or 'inactive'")

        if mapping.name:
            name = row.get(mapping.name)
            duplicate = next(
                (
                    other_index
                    for other_index, other in enumerate(rows)
                    if other_index != index and other.get(mapping.name) == name
                ),
                None,
            )
            if duplicate is not None:
                warnings.append(f"Duplicate name found at row {duplicate + 1}")

        results.append(RowValidation(row_index=index, data=row, errors=errors, warnings=warnings))
    return results


class IngredientImportService:
    """Two-step import: preview the validation, then import the valid rows."""

    def __init__(self, store: Store):
        self.store = store

    def preview(self, text: str, mapping: ColumnMapping | None = None) -> ImportPreview:
        headers, rows = parse_csv(text)
        mapping = mapping or guess_column_mapping(headers)
        check_column_mapping(mapping, headers)
        results = validate_rows(rows, mapping)
        valid_count = sum(1 for result in results if result.is_valid)
        return ImportPreview(
            headers=headers,
            rows=results,
            valid_count=valid_count,
            invalid_count=len(results) - valid_count,
        )

    def import_csv(self, text: str, mapping: ColumnMapping | None = None) -> ImportResult:
        """Create an ingredient from every valid row."""
        headers, rows = parse_csv(text)
        mapping = mapping or guess_column_mapping(headers)
        check_column_mapping(mapping, headers)
        results = validate_rows(rows, mapping)

        valid = [result for result in results if result.is_valid]
        if not valid:
            raise ValidationError("No valid rows to import")

        import_data = []
        for result in valid:
            ingredient = {}
            for field, _, _ in IMPORT_FIELDS:
                column = getattr(mapping, field)
                if not column:
                    continue
                value = result.data.get(column) or None
                if value and field in ("unit", "status"):
                    value = value.lower()
                if value is not None:
                    ingredient[field] = value
            import_data.append(ingredient)

        created = self.store.ingredients.bulk_create(import_data)
        logger.info(f"Imported {len(created)} of {len(rows)} ingredient rows")
        return ImportResult(
            total=len(rows),
            successful=len(created),
            failed=len(rows) - len(created),
            ingredients=created,
        )
