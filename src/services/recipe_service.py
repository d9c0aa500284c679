"""Recipe service: recipe CRUD and the embedded step editor."""

import logging
from uuid import uuid4

from src.exceptions import NotFoundError, ValidationError
from src.schemas.recipe import (
    Recipe,
    RecipeCreate,
    RecipeResponse,
    RecipeUpdate,
    Step,
    StepCreate,
    StepResponse,
    StepUpdate,
)
from src.services.collection_store import Store

logger = logging.getLogger(__name__)


class RecipeService:
    """Service for recipe-related operations.

    Steps are stored in order inside their recipe; every step edit is a
    whole-recipe update.
    """

    def __init__(self, store: Store):
        self.store = store

    def get_recipe(self, recipe_id: str) -> Recipe:
        recipe = self.store.recipes.get_by_id(recipe_id)
        if recipe is None:
            raise NotFoundError("Recipe", recipe_id)
        return recipe

    def list_recipes(self) -> list[RecipeResponse]:
        product_names = {p.id: p.name for p in self.store.products.get_all()}
        return [self._to_response(r, product_names) for r in self.store.recipes.get_all()]

    def describe(self, recipe: Recipe) -> RecipeResponse:
        """Recipe with product name, step positions and total wait time."""
        product_names = {p.id: p.name for p in self.store.products.get_all()}
        return self._to_response(recipe, product_names)

    def create_recipe(self, data: RecipeCreate) -> Recipe:
        """Create a recipe; any initial steps get fresh ids."""
        fields = data.model_dump(exclude_unset=True, exclude={"steps"})
        fields["steps"] = [self._new_step(step) for step in data.steps]
        return self.store.recipes.create(fields)

    def update_recipe(self, recipe_id: str, data: RecipeUpdate) -> Recipe:
        recipe = self.store.recipes.update(recipe_id, data)
        if recipe is None:
            raise NotFoundError("Recipe", recipe_id)
        return recipe

    def delete_recipe(self, recipe_id: str) -> bool:
        return self.store.recipes.delete(recipe_id)

    # --- Steps ---

    def add_step(self, recipe_id: str, data: StepCreate) -> Recipe:
        """Append a step."""
        recipe = self.get_recipe(recipe_id)
        steps = [*recipe.steps, self._new_step(data)]
        return self._save_steps(recipe.id, steps)

    def update_step(self, recipe_id: str, step_id: str, data: StepUpdate) -> Recipe:
        """Edit a step in place; its position is unchanged."""
        recipe = self.get_recipe(recipe_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("description") is None:
            changes.pop("description", None)

        steps = []
        found = False
        for step in recipe.steps:
            if step.id == step_id:
                step = step.model_copy(update=changes)
                found = True
            steps.append(step)
        if not found:
            raise NotFoundError("Step", step_id)
        return self._save_steps(recipe.id, steps)

    def delete_step(self, recipe_id: str, step_id: str) -> Recipe:
        """Remove a step. Unknown step ids are not an error."""
        recipe = self.get_recipe(recipe_id)
        steps = [step for step in recipe.steps if step.id != step_id]
        return self._save_steps(recipe.id, steps)

    def reorder_steps(self, recipe_id: str, step_ids: list[str]) -> Recipe:
        """Reorder steps; step_ids must name every step exactly once."""
        recipe = self.get_recipe(recipe_id)
        steps_by_id = {step.id: step for step in recipe.steps}
        if len(step_ids) != len(set(step_ids)) or set(step_ids) != set(steps_by_id):
            raise ValidationError(
                "Step order must list every step of the recipe exactly once",
                [f"stepIds: expected {sorted(steps_by_id)}"],
            )
        return self._save_steps(recipe.id, [steps_by_id[step_id] for step_id in step_ids])

    def move_step(self, recipe_id: str, step_id: str, position: int) -> Recipe:
        """Move one step to a 1-based position, shifting the steps in between."""
        recipe = self.get_recipe(recipe_id)
        steps = list(recipe.steps)
        old_index = next((i for i, step in enumerate(steps) if step.id == step_id), None)
        if old_index is None:
            raise NotFoundError("Step", step_id)
        if not 1 <= position <= len(steps):
            raise ValidationError(f"Step position out of range (1-{len(steps)})")
        steps.insert(position - 1, steps.pop(old_index))
        return self._save_steps(recipe.id, steps)

    # --- Internals ---

    def _new_step(self, data: StepCreate) -> Step:
        return Step(id=str(uuid4()), description=data.description, wait_time=data.wait_time)

    def _save_steps(self, recipe_id: str, steps: list[Step]) -> Recipe:
        recipe = self.store.recipes.update(recipe_id, {"steps": steps})
        if recipe is None:
            # Deleted between the read and the write
            raise NotFoundError("Recipe", recipe_id)
        logger.info(f"Recipe {recipe_id} now has {len(steps)} steps")
        return recipe

    def _to_response(self, recipe: Recipe, product_names: dict[str, str]) -> RecipeResponse:
        steps = [
            StepResponse(**step.model_dump(), position=index)
            for index, step in enumerate(recipe.steps, start=1)
        ]
        return RecipeResponse(
            **recipe.model_dump(exclude={"steps"}),
            steps=steps,
            product_name=product_names.get(recipe.product_id) if recipe.product_id else None,
            step_count=len(steps),
            total_wait_time=sum(step.wait_time or 0 for step in recipe.steps),
        )
