"""Recipe API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_recipe_service
from src.schemas.recipe import (
    RecipeCreate,
    RecipeResponse,
    RecipeUpdate,
    StepCreate,
    StepMoveRequest,
    StepOrderRequest,
    StepUpdate,
)
from src.services.recipe_service import RecipeService

router = APIRouter(prefix="/api/v1/recipes", tags=["recipes"])


@router.get("", response_model=list[RecipeResponse])
def list_recipes(service: Annotated[RecipeService, Depends(get_recipe_service)]):
    """List all recipes."""
    return service.list_recipes()


@router.post("", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
def create_recipe(
    recipe_data: RecipeCreate,
    service: Annotated[RecipeService, Depends(get_recipe_service)],
):
    """Create a recipe, optionally with initial steps."""
    return service.describe(service.create_recipe(recipe_data))


@router.get("/{recipe_id}", response_model=RecipeResponse)
def get_recipe(recipe_id: str, service: Annotated[RecipeService, Depends(get_recipe_service)]):
    """Get a recipe with its steps."""
    return service.describe(service.get_recipe(recipe_id))


@router.put("/{recipe_id}", response_model=RecipeResponse)
def update_recipe(
    recipe_id: str,
    recipe_data: RecipeUpdate,
    service: Annotated[RecipeService, Depends(get_recipe_service)],
):
    """Update recipe metadata."""
    return service.describe(service.update_recipe(recipe_id, recipe_data))


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_recipe(recipe_id: str, service: Annotated[RecipeService, Depends(get_recipe_service)]):
    """Delete a recipe and its steps."""
    service.delete_recipe(recipe_id)


# --- Steps ---


@router.post(
    "/{recipe_id}/steps", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED
)
def add_step(
    recipe_id: str,
    step_data: StepCreate,
    service: Annotated[RecipeService, Depends(get_recipe_service)],
):
    """Append a step to a recipe."""
    return service.describe(service.add_step(recipe_id, step_data))


# Static route before /steps/{step_id}
@router.put("/{recipe_id}/steps/order", response_model=RecipeResponse)
def reorder_steps(
    recipe_id: str,
    request: StepOrderRequest,
    service: Annotated[RecipeService, Depends(get_recipe_service)],
):
    """Reorder steps by the full list of step ids."""
    return service.describe(service.reorder_steps(recipe_id, request.step_ids))


@router.put("/{recipe_id}/steps/{step_id}", response_model=RecipeResponse)
def update_step(
    recipe_id: str,
    step_id: str,
    step_data: StepUpdate,
    service: Annotated[RecipeService, Depends(get_recipe_service)],
):
    """Update a step in place."""
    return service.describe(service.update_step(recipe_id, step_id, step_data))


@router.delete("/{recipe_id}/steps/{step_id}", response_model=RecipeResponse)
def delete_step(
    recipe_id: str,
    step_id: str,
    service: Annotated[RecipeService, Depends(get_recipe_service)],
):
    """Remove a step from a recipe."""
    return service.describe(service.delete_step(recipe_id, step_id))


@router.put("/{recipe_id}/steps/{step_id}/move", response_model=RecipeResponse)
def move_step(
    recipe_id: str,
    step_id: str,
    request: StepMoveRequest,
    service: Annotated[RecipeService, Depends(get_recipe_service)],
):
    """Move a step to a new position (drag and drop)."""
    return service.describe(service.move_step(recipe_id, step_id, request.position))
