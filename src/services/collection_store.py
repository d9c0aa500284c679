"""Persistent collections stored as JSON array snapshots in key-value storage."""

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar
from uuid import uuid4

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from src.exceptions import StorageUnavailableError, ValidationError
from src.models.enums import CollectionName
from src.schemas.base import MANAGED_FIELDS, Entity
from src.schemas.ingredient import Ingredient
from src.schemas.mapping import ProductMapping
from src.schemas.product import Product
from src.schemas.recipe import Recipe
from src.services.key_value import KeyValueStorage

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Entity)

Fields = Mapping[str, Any] | BaseModel


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(UTC)


def format_validation_errors(exc: PydanticValidationError) -> list[str]:
    """Flatten pydantic errors into "field: message" strings."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "value"
        messages.append(f"{location}: {error['msg']}")
    return messages


class Collection(Generic[T]):
    """One named collection of entities.

    Every read loads the latest snapshot from storage; every write replaces
    the whole snapshot before returning.
    """

    def __init__(
        self,
        name: CollectionName,
        entity_cls: type[T],
        storage: KeyValueStorage,
        key: str,
        clock: Callable[[], datetime] = utc_now,
        strict: bool = True,
    ):
        self.name = name
        self.entity_cls = entity_cls
        self.storage = storage
        self.key = key
        self.clock = clock
        self.strict = strict

        # Accept both snake_case names and camelCase aliases in field maps
        self._field_names: dict[str, str] = {}
        for field_name, info in entity_cls.model_fields.items():
            self._field_names[field_name] = field_name
            if info.alias:
                self._field_names[info.alias] = field_name

    # --- Reads ---

    def get_all(self) -> list[T]:
        """Return every entity in stored order."""
        return self._load()

    def get_by_id(self, entity_id: str) -> T | None:
        """Return the entity with this id, or None."""
        for entity in self._load():
            if entity.id == entity_id:
                return entity
        return None

    # --- Writes ---

    def create(self, fields: Fields) -> T:
        """Create an entity with a fresh id and equal created/updated timestamps."""
        entity = self._build(fields, self.clock())
        entities = self._load()
        entities.append(entity)
        self._save(entities)
        logger.info(f"Created {self.name.value} {entity.id}")
        return entity

    def bulk_create(self, rows: Iterable[Fields]) -> list[T]:
        """Create each row in input order and write the snapshot once.

        Rows failing validation are skipped; the result holds only the rows
        that were created.
        """
        now = self.clock()
        created = []
        for index, fields in enumerate(rows):
            try:
                created.append(self._build(fields, now))
            except ValidationError as e:
                logger.warning(f"Skipped {self.name.value} row {index}: {'; '.join(e.errors)}")

        if created:
            entities = self._load()
            entities.extend(created)
            self._save(entities)
        logger.info(f"Bulk created {len(created)} {self.name.value}")
        return created

    def update(self, entity_id: str, patch: Fields) -> T | None:
        """Apply a field patch and refresh updated_at.

        Returns None if the id is unknown. Unknown or store-managed field
        names raise ValidationError.
        """
        changes = self._normalize(patch)
        entities = self._load()
        for index, entity in enumerate(entities):
            if entity.id != entity_id:
                continue
            merged = {**entity.model_dump(), **changes, "updated_at": self.clock()}
            updated = self._validate(merged)
            entities[index] = updated
            self._save(entities)
            logger.info(f"Updated {self.name.value} {entity_id}: {sorted(changes)}")
            return updated
        return None

    def delete(self, entity_id: str) -> bool:
        """Delete by id. Unknown ids are not an error."""
        entities = self._load()
        remaining = [entity for entity in entities if entity.id != entity_id]
        self._save(remaining)
        if len(remaining) != len(entities):
            logger.info(f"Deleted {self.name.value} {entity_id}")
        return True

    def delete_where(self, predicate: Callable[[T], bool]) -> list[T]:
        """Delete every entity matching the predicate and return them."""
        entities = self._load()
        removed = [entity for entity in entities if predicate(entity)]
        self._save([entity for entity in entities if not predicate(entity)])
        return removed

    # --- Internals ---

    def _normalize(self, fields: Fields) -> dict[str, Any]:
        if isinstance(fields, BaseModel):
            fields = fields.model_dump(exclude_unset=True)

        normalized: dict[str, Any] = {}
        errors = []
        for name, value in fields.items():
            field_name = self._field_names.get(name)
            if field_name is None:
                errors.append(f"{name}: unknown field")
            elif field_name in MANAGED_FIELDS:
                errors.append(f"{name}: field is managed by the store")
            else:
                normalized[field_name] = value
        if errors:
            raise ValidationError(f"Invalid {self.name.value} fields", errors)
        return normalized

    def _build(self, fields: Fields, now: datetime) -> T:
        data = self._normalize(fields)
        return self._validate({**data, "id": str(uuid4()), "created_at": now, "updated_at": now})

    def _validate(self, data: dict[str, Any]) -> T:
        try:
            return self.entity_cls.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid {self.name.value} data", format_validation_errors(e)
            ) from e

    def _load(self) -> list[T]:
        try:
            raw = self.storage.get(self.key)
            if raw is None:
                return []
            rows = json.loads(raw)
            if not isinstance(rows, list):
                raise StorageUnavailableError(self.key, "snapshot is not a JSON array")
            return [self.entity_cls.model_validate(row) for row in rows]
        except ValueError as e:
            # Covers undecodable JSON and rows that no longer validate
            error = StorageUnavailableError(self.key, f"unreadable snapshot: {e}")
            if self.strict:
                raise error from e
            logger.error(f"Error reading {self.key}, returning empty collection: {error}")
            return []
        except StorageUnavailableError as e:
            if self.strict:
                raise
            logger.error(f"Error reading {self.key}, returning empty collection: {e}")
            return []

    def _save(self, entities: list[T]) -> None:
        payload = json.dumps([entity.model_dump(mode="json", by_alias=True) for entity in entities])
        try:
            self.storage.set(self.key, payload)
        except StorageUnavailableError as e:
            if self.strict:
                raise
            logger.error(f"Error saving {self.key}, write dropped: {e}")


class MappingCollection(Collection[ProductMapping]):
    """Product mappings with product-scoped lookups."""

    def get_by_product_id(self, product_id: str) -> list[ProductMapping]:
        """Return the mappings of one product in stored order."""
        return [mapping for mapping in self._load() if mapping.product_id == product_id]

    def delete_by_product_id(self, product_id: str) -> int:
        """Delete every mapping of one product and return how many were removed."""
        removed = self.delete_where(lambda mapping: mapping.product_id == product_id)
        if removed:
            logger.info(f"Deleted {len(removed)} mappings of product {product_id}")
        return len(removed)


class Store:
    """The four persisted collections, opened over one key-value storage."""

    def __init__(
        self,
        storage: KeyValueStorage,
        key_prefix: str = "mms_",
        clock: Callable[[], datetime] = utc_now,
        strict: bool = True,
    ):
        self.storage = storage

        def key(name: CollectionName) -> str:
            return f"{key_prefix}{name.value}"

        self.ingredients: Collection[Ingredient] = Collection(
            CollectionName.INGREDIENTS,
            Ingredient,
            storage,
            key(CollectionName.INGREDIENTS),
            clock,
            strict,
        )
        self.products: Collection[Product] = Collection(
            CollectionName.PRODUCTS, Product, storage, key(CollectionName.PRODUCTS), clock, strict
        )
        self.recipes: Collection[Recipe] = Collection(
            CollectionName.RECIPES, Recipe, storage, key(CollectionName.RECIPES), clock, strict
        )
        self.product_mappings = MappingCollection(
            CollectionName.PRODUCT_MAPPINGS,
            ProductMapping,
            storage,
            key(CollectionName.PRODUCT_MAPPINGS),
            clock,
            strict,
        )

        self._collections: dict[CollectionName, Collection] = {
            CollectionName.INGREDIENTS: self.ingredients,
            CollectionName.PRODUCTS: self.products,
            CollectionName.RECIPES: self.recipes,
            CollectionName.PRODUCT_MAPPINGS: self.product_mappings,
        }

    def collection(self, name: CollectionName | str) -> Collection:
        """Look up a collection by name."""
        try:
            return self._collections[CollectionName(name)]
        except ValueError as e:
            raise KeyError(f"Unknown collection: {name}") from e
