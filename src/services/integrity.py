"""Referential integrity between products, ingredients and their mappings."""

import logging
import math
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from src.exceptions import ReferenceConflictError, ValidationError
from src.schemas.mapping import ProductMapping
from src.services.collection_store import Fields, Store

logger = logging.getLogger(__name__)


class IntegrityService:
    """Every mapping write and every product/ingredient delete goes through here."""

    def __init__(self, store: Store):
        self.store = store

    def check_mapping_references(
        self, product_id: str | None, ingredient_id: str | None, quantity: float | None
    ) -> None:
        """Raise ValidationError unless both references resolve and quantity is non-negative."""
        errors = []
        if not product_id or self.store.products.get_by_id(product_id) is None:
            errors.append(f"productId: product '{product_id}' does not exist")
        if not ingredient_id or self.store.ingredients.get_by_id(ingredient_id) is None:
            errors.append(f"ingredientId: ingredient '{ingredient_id}' does not exist")
        if quantity is None:
            errors.append("quantity: field required")
        elif isinstance(quantity, int | float):
            if not math.isfinite(quantity):
                errors.append("quantity: must be a finite number")
            elif quantity < 0:
                errors.append("quantity: must not be negative")

        if errors:
            logger.warning(f"Rejected mapping write: {'; '.join(errors)}")
            raise ValidationError("Invalid ingredient mapping", errors)

    def create_mapping(
        self, product_id: str, ingredient_id: str, quantity: float
    ) -> ProductMapping:
        """Create a mapping after checking both references."""
        self.check_mapping_references(product_id, ingredient_id, quantity)
        return self.store.product_mappings.create(
            {"product_id": product_id, "ingredient_id": ingredient_id, "quantity": quantity}
        )

    def update_mapping(self, mapping_id: str, patch: Fields) -> ProductMapping | None:
        """Patch a mapping; the merged row must still pass the reference check.

        Returns None if the mapping does not exist.
        """
        if isinstance(patch, BaseModel):
            patch = patch.model_dump(exclude_unset=True)

        mapping = self.store.product_mappings.get_by_id(mapping_id)
        if mapping is None:
            return None

        merged = {**mapping.model_dump(), **_snake_keys(patch)}
        self.check_mapping_references(
            merged.get("product_id"), merged.get("ingredient_id"), merged.get("quantity")
        )
        return self.store.product_mappings.update(mapping_id, patch)

    def delete_product(self, product_id: str) -> bool:
        """Delete a product and cascade to its mappings.

        Mappings go first: an interruption between the two writes leaves a
        product without mappings rather than mappings without a product.
        """
        removed = self.store.product_mappings.delete_by_product_id(product_id)
        self.store.products.delete(product_id)
        logger.info(f"Deleted product {product_id} with {removed} mappings")
        return True

    def delete_ingredient(self, ingredient_id: str) -> bool:
        """Delete an ingredient unless a mapping still references it."""
        referencing = [
            mapping
            for mapping in self.store.product_mappings.get_all()
            if mapping.ingredient_id == ingredient_id
        ]
        if referencing:
            product_ids = sorted({mapping.product_id for mapping in referencing})
            logger.warning(
                f"Refused to delete ingredient {ingredient_id}: "
                f"used by {len(referencing)} mappings in {len(product_ids)} products"
            )
            raise ReferenceConflictError(
                f"Ingredient is used by {len(referencing)} product mapping(s); "
                "remove it from those formulations first"
            )
        return self.store.ingredients.delete(ingredient_id)

    def sweep_orphaned_mappings(self) -> list[ProductMapping]:
        """Delete mappings whose product or ingredient no longer exists."""
        product_ids = {product.id for product in self.store.products.get_all()}
        ingredient_ids = {ingredient.id for ingredient in self.store.ingredients.get_all()}

        removed = self.store.product_mappings.delete_where(
            lambda mapping: mapping.product_id not in product_ids
            or mapping.ingredient_id not in ingredient_ids
        )
        if removed:
            logger.info(f"Swept {len(removed)} orphaned mappings")
        return removed


_MAPPING_ALIASES = {"productId": "product_id", "ingredientId": "ingredient_id"}


def _snake_keys(patch: Mapping[str, Any]) -> dict[str, Any]:
    return {_MAPPING_ALIASES.get(key, key): value for key, value in patch.items()}
