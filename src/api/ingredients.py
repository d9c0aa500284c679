"""Ingredient API endpoints."""

import json
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from src.api.dependencies import get_import_service, get_integrity_service, get_store
from src.exceptions import NotFoundError, ValidationError
from src.models.enums import Status
from src.schemas.ingredient import (
    Ingredient,
    IngredientBulkCreateRequest,
    IngredientCreate,
    IngredientUpdate,
)
from src.schemas.ingredient_import import ColumnMapping, ImportPreview, ImportResult
from src.services.collection_store import Store
from src.services.ingredient_import import IngredientImportService
from src.services.integrity import IntegrityService

router = APIRouter(prefix="/api/v1/ingredients", tags=["ingredients"])


def get_ingredient_or_404(store: Store, ingredient_id: str) -> Ingredient:
    ingredient = store.ingredients.get_by_id(ingredient_id)
    if ingredient is None:
        raise NotFoundError("Ingredient", ingredient_id)
    return ingredient


async def read_upload(
    file: UploadFile, column_mapping: str | None
) -> tuple[str, ColumnMapping | None]:
    """Decode an uploaded CSV and its optional JSON column mapping."""
    try:
        text = (await file.read()).decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="CSV file must be UTF-8 encoded"
        ) from e

    mapping = None
    if column_mapping:
        try:
            mapping = ColumnMapping.model_validate(json.loads(column_mapping))
        except ValueError as e:
            raise ValidationError("Invalid column mapping", [str(e)]) from e
    return text, mapping


# --- Static routes first (before /{ingredient_id}) ---


@router.get("", response_model=list[Ingredient])
def list_ingredients(
    store: Annotated[Store, Depends(get_store)],
    search: str | None = Query(default=None, description="Match name or code"),
    status_filter: Status | None = Query(default=None, alias="status"),
):
    """List ingredients, optionally filtered by search text and status."""
    ingredients = store.ingredients.get_all()
    if search:
        needle = search.lower()
        ingredients = [
            i
            for i in ingredients
            if needle in i.name.lower() or (i.code and needle in i.code.lower())
        ]
    if status_filter is not None:
        ingredients = [i for i in ingredients if i.status == status_filter]
    return ingredients


@router.post("", response_model=Ingredient, status_code=status.HTTP_201_CREATED)
def create_ingredient(
    ingredient_data: IngredientCreate,
    store: Annotated[Store, Depends(get_store)],
):
    """Create an ingredient."""
    return store.ingredients.create(ingredient_data)


@router.post("/bulk", response_model=list[Ingredient], status_code=status.HTTP_201_CREATED)
def bulk_create_ingredients(
    request: IngredientBulkCreateRequest,
    store: Annotated[Store, Depends(get_store)],
):
    """Create many ingredients in input order."""
    return store.ingredients.bulk_create(request.items)


@router.post("/import/validate", response_model=ImportPreview)
async def validate_import(
    service: Annotated[IngredientImportService, Depends(get_import_service)],
    file: UploadFile = File(...),
    column_mapping: str | None = Form(default=None),
):
    """Parse a CSV upload and report per-row validation without importing."""
    text, mapping = await read_upload(file, column_mapping)
    return service.preview(text, mapping)


@router.post("/import", response_model=ImportResult, status_code=status.HTTP_201_CREATED)
async def import_ingredients(
    service: Annotated[IngredientImportService, Depends(get_import_service)],
    file: UploadFile = File(...),
    column_mapping: str | None = Form(default=None),
):
    """Import every valid row of a CSV upload."""
    text, mapping = await read_upload(file, column_mapping)
    return service.import_csv(text, mapping)


# --- Single ingredient ---


@router.get("/{ingredient_id}", response_model=Ingredient)
def get_ingredient(ingredient_id: str, store: Annotated[Store, Depends(get_store)]):
    """Get an ingredient."""
    return get_ingredient_or_404(store, ingredient_id)


@router.put("/{ingredient_id}", response_model=Ingredient)
def update_ingredient(
    ingredient_id: str,
    ingredient_data: IngredientUpdate,
    store: Annotated[Store, Depends(get_store)],
):
    """Update an ingredient."""
    ingredient = store.ingredients.update(ingredient_id, ingredient_data)
    if ingredient is None:
        raise NotFoundError("Ingredient", ingredient_id)
    return ingredient


@router.delete("/{ingredient_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ingredient(
    ingredient_id: str,
    integrity: Annotated[IntegrityService, Depends(get_integrity_service)],
):
    """Delete an ingredient. Refused while a product formulation uses it."""
    integrity.delete_ingredient(ingredient_id)
