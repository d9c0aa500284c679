"""Formulation (product mapping) API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_formulation_editor
from src.exceptions import NotFoundError
from src.schemas.formulation import FormulationView, SweepResult
from src.schemas.mapping import ProductMapping, ProductMappingCreate, ProductMappingUpdate
from src.services.formulation_service import FormulationEditor

router = APIRouter(prefix="/api/v1/formulations", tags=["formulations"])


# --- Static routes first (before /{product_id}) ---


@router.post("/sweep-orphans", response_model=SweepResult)
def sweep_orphaned_mappings(
    editor: Annotated[FormulationEditor, Depends(get_formulation_editor)],
):
    """Delete mappings whose product or ingredient no longer exists."""
    removed = editor.sweep_orphaned_mappings()
    return SweepResult(removed=len(removed), mappings=removed)


@router.get("/{product_id}", response_model=FormulationView)
def get_formulation(
    product_id: str,
    editor: Annotated[FormulationEditor, Depends(get_formulation_editor)],
):
    """Get a product's mappings, percentages and mass balance."""
    editor.select_product(product_id)
    return editor.view()


@router.post(
    "/{product_id}/mappings",
    response_model=FormulationView,
    status_code=status.HTTP_201_CREATED,
)
def add_mapping(
    product_id: str,
    mapping_data: ProductMappingCreate,
    editor: Annotated[FormulationEditor, Depends(get_formulation_editor)],
):
    """Add an ingredient quantity to the product; returns the refreshed formulation."""
    editor.select_product(product_id)
    editor.add_mapping(mapping_data.ingredient_id, mapping_data.quantity)
    return editor.view()


@router.put("/{product_id}/mappings/{mapping_id}", response_model=FormulationView)
def update_mapping(
    product_id: str,
    mapping_id: str,
    mapping_data: ProductMappingUpdate,
    editor: Annotated[FormulationEditor, Depends(get_formulation_editor)],
):
    """Update a formulation row; returns the refreshed formulation."""
    editor.select_product(product_id)
    editor.edit_mapping(mapping_id, mapping_data)
    return editor.view()


@router.get("/{product_id}/mappings/{mapping_id}", response_model=ProductMapping)
def get_mapping(
    product_id: str,
    mapping_id: str,
    editor: Annotated[FormulationEditor, Depends(get_formulation_editor)],
):
    """Get one formulation row."""
    editor.select_product(product_id)
    mapping = next((m for m in editor.current_mappings() if m.id == mapping_id), None)
    if mapping is None:
        raise NotFoundError("Mapping", mapping_id)
    return mapping


@router.delete("/{product_id}/mappings/{mapping_id}", response_model=FormulationView)
def delete_mapping(
    product_id: str,
    mapping_id: str,
    editor: Annotated[FormulationEditor, Depends(get_formulation_editor)],
):
    """Remove a formulation row; returns the refreshed formulation."""
    editor.select_product(product_id)
    editor.delete_mapping(mapping_id)
    return editor.view()
