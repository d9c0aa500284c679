"""Dashboard API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from src.api.dependencies import get_store
from src.schemas.dashboard import DashboardResponse
from src.services.collection_store import Store
from src.services.dashboard_service import build_dashboard

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
def get_dashboard(store: Annotated[Store, Depends(get_store)]):
    """Counts by status and the most recent ingredients and products."""
    return build_dashboard(store)
