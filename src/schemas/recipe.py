"""Recipe schemas."""

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.schemas.base import CamelModel, Entity

# --- Step ---


class Step(CamelModel):
    """Preparation step embedded in a recipe. Its order is its list position."""

    # Snapshots written by older clients carry a redundant "order" key
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str
    description: str = Field(..., min_length=1, max_length=2000)
    wait_time: int | None = Field(None, ge=0)  # Minutes


class StepCreate(CamelModel):
    """Append a step to a recipe."""

    description: str = Field(..., min_length=1, max_length=2000)
    wait_time: int | None = Field(None, ge=0)


class StepUpdate(CamelModel):
    """Update a step."""

    description: str | None = Field(None, min_length=1, max_length=2000)
    wait_time: int | None = Field(None, ge=0)


class StepOrderRequest(CamelModel):
    """New step order, as the full list of step ids."""

    step_ids: list[str]


class StepMoveRequest(CamelModel):
    """Move one step to a new 1-based position."""

    position: int = Field(..., ge=1)


class StepResponse(Step):
    """Step with its 1-based position."""

    position: int


# --- Recipe ---


class Recipe(Entity):
    """Stored recipe."""

    name: str = Field(..., min_length=1, max_length=255)
    product_id: str | None = None
    description: str | None = Field(None, max_length=2000)
    steps: list[Step] = []


class RecipeCreate(CamelModel):
    """Create a recipe."""

    name: str = Field(..., min_length=1, max_length=255)
    product_id: str | None = None
    description: str | None = Field(None, max_length=2000)
    steps: list[StepCreate] = []


class RecipeUpdate(CamelModel):
    """Update recipe metadata."""

    name: str | None = Field(None, min_length=1, max_length=255)
    product_id: str | None = None
    description: str | None = Field(None, max_length=2000)


class RecipeResponse(Recipe):
    """Recipe with resolved product name and positioned steps."""

    product_name: str | None  # None when unlinked or the product was deleted
    steps: list[StepResponse]
    step_count: int
    total_wait_time: int
