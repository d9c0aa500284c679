"""Read-only aggregation over the four collections."""

from src.models.enums import Status
from src.schemas.dashboard import DashboardResponse, DashboardStats, StatusCounts
from src.services.collection_store import Store

RECENT_LIMIT = 5


def _status_counts(entities) -> StatusCounts:
    return StatusCounts(
        total=len(entities),
        active=sum(1 for e in entities if e.status == Status.ACTIVE),
        inactive=sum(1 for e in entities if e.status == Status.INACTIVE),
    )


def build_dashboard(store: Store) -> DashboardResponse:
    """Counts by status plus the most recently created ingredients and products."""
    ingredients = store.ingredients.get_all()
    products = store.products.get_all()
    recipes = store.recipes.get_all()
    mappings = store.product_mappings.get_all()

    stats = DashboardStats(
        ingredients=_status_counts(ingredients),
        products=_status_counts(products),
        recipes=StatusCounts(total=len(recipes)),
        product_mappings=StatusCounts(total=len(mappings)),
    )
    return DashboardResponse(
        stats=stats,
        recent_ingredients=sorted(ingredients, key=lambda i: i.created_at, reverse=True)[
            :RECENT_LIMIT
        ],
        recent_products=sorted(products, key=lambda p: p.created_at, reverse=True)[
            :RECENT_LIMIT
        ],
    )
