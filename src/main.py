"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api import dashboard, formulations, ingredients, products, recipes
from src.api.dependencies import get_storage
from src.config import Settings, get_settings
from src.database import SessionLocal, init_db
from src.exceptions import (
    NotFoundError,
    ReferenceConflictError,
    StorageUnavailableError,
    ValidationError,
)
from src.schemas.ingredient import Ingredient
from src.services.collection_store import Store
from src.services.sample_data import initialize_sample_data

logger = logging.getLogger(__name__)
settings = get_settings()


def seed_sample_data(app_settings: Settings) -> list[Ingredient]:
    """Seed sample ingredients into the configured storage backend."""
    db = SessionLocal()
    try:
        store = Store(
            get_storage(db, app_settings),
            key_prefix=app_settings.storage_key_prefix,
            strict=app_settings.strict_storage,
        )
        return initialize_sample_data(store)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    init_db()
    if settings.seed_sample_data:
        seed_sample_data(settings)
    yield


app = FastAPI(
    title="Formulation API",
    description="Ingredients, products, formulations and recipes with mass-balance checks",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Domain errors become JSON responses; the session keeps running


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.message, "errors": exc.errors},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.message})


@app.exception_handler(ReferenceConflictError)
async def reference_conflict_handler(request: Request, exc: ReferenceConflictError):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": exc.message})


@app.exception_handler(StorageUnavailableError)
async def storage_unavailable_handler(request: Request, exc: StorageUnavailableError):
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage unavailable, changes were not saved"},
    )


# Register routers
app.include_router(ingredients.router)
app.include_router(products.router)
app.include_router(formulations.router)
app.include_router(recipes.router)
app.include_router(dashboard.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
