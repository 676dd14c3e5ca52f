from __future__ import annotations

from typing import Iterable, List, Optional

from .models import ALL_CATEGORIES, CATEGORIES, Recipe


def normalize_category(category: Optional[str]) -> Optional[str]:
    """Map a category selector to the value used for the catalog query.

    ``None``, blank values, the ``All`` sentinel and unknown categories all
    mean "no category filter".
    """

    if not category:
        return None
    category = category.strip()
    if category == ALL_CATEGORIES or category not in CATEGORIES:
        return None
    return category


def matches(recipe: Recipe, query: str) -> bool:
    """Case-insensitive substring match against the searchable fields."""

    needle = query.lower()
    if needle in recipe.title.lower():
        return True
    if recipe.description and needle in recipe.description.lower():
        return True
    if any(needle in ingredient.lower() for ingredient in recipe.ingredients):
        return True
    return needle in recipe.category.lower()


def filter_recipes(recipes: Iterable[Recipe], query: Optional[str]) -> List[Recipe]:
    """Return the recipes matching ``query`` in their original order.

    A blank query keeps every recipe.
    """

    recipes = list(recipes)
    if not query or not query.strip():
        return recipes
    return [recipe for recipe in recipes if matches(recipe, query)]


__all__ = ["filter_recipes", "matches", "normalize_category"]
