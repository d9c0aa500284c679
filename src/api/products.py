"""Product API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_formulation_editor, get_store
from src.exceptions import NotFoundError
from src.models.enums import Status
from src.schemas.formulation import ProductCloneDraft
from src.schemas.product import Product, ProductCreate, ProductSummary, ProductUpdate
from src.services.collection_store import Store
from src.services.formulation_service import FormulationEditor

router = APIRouter(prefix="/api/v1/products", tags=["products"])


@router.get("", response_model=list[ProductSummary])
def list_products(
    editor: Annotated[FormulationEditor, Depends(get_formulation_editor)],
    search: str | None = Query(default=None, description="Match name or description"),
    status_filter: Status | None = Query(default=None, alias="status"),
):
    """List products with their mapped weight and formulation state."""
    products = editor.product_summaries()
    if search:
        needle = search.lower()
        products = [
            p
            for p in products
            if needle in p.name.lower() or (p.description and needle in p.description.lower())
        ]
    if status_filter is not None:
        products = [p for p in products if p.status == status_filter]
    return products


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
def create_product(
    product_data: ProductCreate,
    editor: Annotated[FormulationEditor, Depends(get_formulation_editor)],
):
    """Create a product."""
    return editor.create_product(product_data)


@router.get("/{product_id}", response_model=ProductSummary)
def get_product(
    product_id: str,
    editor: Annotated[FormulationEditor, Depends(get_formulation_editor)],
):
    """Get a product with its formulation totals."""
    summary = next((p for p in editor.product_summaries() if p.id == product_id), None)
    if summary is None:
        raise NotFoundError("Product", product_id)
    return summary


@router.get("/{product_id}/clone", response_model=ProductCloneDraft)
def clone_product(
    product_id: str,
    editor: Annotated[FormulationEditor, Depends(get_formulation_editor)],
):
    """Prefilled new-product form copied from this product (without its mappings)."""
    return editor.clone_product(product_id)


@router.put("/{product_id}", response_model=Product)
def update_product(
    product_id: str,
    product_data: ProductUpdate,
    store: Annotated[Store, Depends(get_store)],
):
    """Update a product."""
    product = store.products.update(product_id, product_data)
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: str,
    editor: Annotated[FormulationEditor, Depends(get_formulation_editor)],
):
    """Delete a product and every ingredient mapping of it."""
    editor.delete_product(product_id)
