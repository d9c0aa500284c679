"""Shared schema bases."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Fields managed by the store, never accepted from callers
MANAGED_FIELDS = frozenset({"id", "created_at", "updated_at"})


class CamelModel(BaseModel):
    """Schema serialized with camelCase keys, accepting either case on input.

    Floats must be finite; JSON has no encoding for inf or NaN.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False
    )


class Entity(CamelModel):
    """Persisted entity: identity plus creation/update timestamps.

    Unknown keys found in stored snapshots are ignored on load; create and
    update reject unknown field names before they get here.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str
    created_at: datetime
    updated_at: datetime
