"""Pydantic schemas for entities, API requests and responses."""

from src.schemas.ingredient import Ingredient, IngredientCreate, IngredientUpdate
from src.schemas.mapping import ProductMapping, ProductMappingCreate, ProductMappingUpdate
from src.schemas.product import Product, ProductCreate, ProductSummary, ProductUpdate
from src.schemas.recipe import Recipe, RecipeCreate, RecipeUpdate, Step

__all__ = [
    "Ingredient",
    "IngredientCreate",
    "IngredientUpdate",
    "Product",
    "ProductCreate",
    "ProductUpdate",
    "ProductSummary",
    "ProductMapping",
    "ProductMappingCreate",
    "ProductMappingUpdate",
    "Recipe",
    "RecipeCreate",
    "RecipeUpdate",
    "Step",
]
