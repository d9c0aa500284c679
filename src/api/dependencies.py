"""FastAPI dependencies for storage and services."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from src.config import Settings, get_settings
from src.database import get_db
from src.services.collection_store import Store
from src.services.formulation_service import FormulationEditor
from src.services.ingredient_import import IngredientImportService
from src.services.integrity import IntegrityService
from src.services.key_value import (
    KeyValueStorage,
    RedisKeyValueStorage,
    SqlKeyValueStorage,
    get_redis_client,
)
from src.services.recipe_service import RecipeService


def get_storage(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> KeyValueStorage:
    """Get the configured key-value storage backend."""
    if settings.storage_backend == "redis":
        return RedisKeyValueStorage(get_redis_client(settings.redis_url))
    return SqlKeyValueStorage(db)


def get_store(
    storage: Annotated[KeyValueStorage, Depends(get_storage)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Store:
    """Get the collection store opened over the storage backend."""
    return Store(
        storage,
        key_prefix=settings.storage_key_prefix,
        strict=settings.strict_storage,
    )


def get_integrity_service(store: Annotated[Store, Depends(get_store)]) -> IntegrityService:
    """Get integrity service with dependencies."""
    return IntegrityService(store)


def get_formulation_editor(
    store: Annotated[Store, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> FormulationEditor:
    """Get a formulation editor loaded with the latest collections."""
    return FormulationEditor(
        store,
        tolerance=settings.balance_tolerance,
        relative_tolerance=settings.balance_relative_tolerance,
    )


def get_recipe_service(store: Annotated[Store, Depends(get_store)]) -> RecipeService:
    """Get recipe service with dependencies."""
    return RecipeService(store)


def get_import_service(store: Annotated[Store, Depends(get_store)]) -> IngredientImportService:
    """Get ingredient import service with dependencies."""
    return IngredientImportService(store)
