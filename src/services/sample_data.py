"""Sample data for a fresh installation."""

import logging

from src.schemas.ingredient import Ingredient
from src.services.collection_store import Store

logger = logging.getLogger(__name__)

SAMPLE_INGREDIENTS = [
    {"name": "Flour", "code": "FL001", "unit": "g", "supplier": "Grain Corp", "status": "active"},
    {"name": "Sugar", "code": "SG001", "unit": "g", "supplier": "Sweet Supply", "status": "active"},
    {
        "name": "Cocoa Powder",
        "code": "CP001",
        "unit": "g",
        "supplier": "Choco Inc",
        "status": "active",
    },
    {
        "name": "Vanilla Extract",
        "code": "VE001",
        "unit": "ml",
        "supplier": "Flavor Co",
        "status": "inactive",
    },
]


def initialize_sample_data(store: Store) -> list[Ingredient]:
    """Seed the sample ingredients if the ingredient collection is empty."""
    if store.ingredients.get_all():
        return []
    created = [store.ingredients.create(ingredient) for ingredient in SAMPLE_INGREDIENTS]
    logger.info(f"Seeded {len(created)} sample ingredients")
    return created
