"""Enums for entity fields."""

from enum import Enum


class Unit(str, Enum):
    """Units of measure for ingredients and product package weights."""

    G = "g"
    KG = "kg"
    ML = "ml"
    L = "l"
    OZ = "oz"
    LB = "lb"
    PCS = "pcs"


class Status(str, Enum):
    """Lifecycle status shared by ingredients and products."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class BalanceStatus(str, Enum):
    """Mass-balance state of a product's formulation."""

    EMPTY = "empty"
    BALANCED = "balanced"
    UNDERFILLED = "underfilled"
    OVERFILLED = "overfilled"


class CollectionName(str, Enum):
    """Names of the persisted collections."""

    INGREDIENTS = "ingredients"
    PRODUCTS = "products"
    RECIPES = "recipes"
    PRODUCT_MAPPINGS = "product_mappings"
