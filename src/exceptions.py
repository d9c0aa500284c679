"""Domain errors raised by the store, integrity layer and workflows."""


class FormulationError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FormulationError):
    """Input rejected: missing field, bad value, unknown reference or negative quantity."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or [message]


class NotFoundError(FormulationError):
    """A looked-up entity does not exist."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class ReferenceConflictError(FormulationError):
    """A delete was refused because other rows still reference the entity."""


class StorageUnavailableError(FormulationError):
    """The key-value storage backend could not be read or written."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Storage unavailable for '{key}': {reason}")
        self.key = key
        self.reason = reason
