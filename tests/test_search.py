from __future__ import annotations

from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from recipeshare.models import Recipe
from recipeshare.search import filter_recipes, normalize_category


def make_recipe(title, *, description="", ingredients=(), category="Dinner") -> Recipe:
    return Recipe(
        id=title.lower().replace(" ", "-"),
        owner_id="user-1",
        title=title,
        description=description,
        ingredients=list(ingredients),
        instructions=["Cook."],
        category=category,
    )


RECIPES = [
    make_recipe("Pancakes", ingredients=["2 eggs", "flour"], category="Breakfast"),
    make_recipe("Tomato Soup", description="Creamy and warming", ingredients=["tomatoes"]),
    make_recipe("Iced Tea", ingredients=["black tea", "ice"], category="Drink"),
]


def titles(recipes):
    return [recipe.title for recipe in recipes]


@pytest.mark.parametrize("query", [None, "", "   "])
def test_blank_query_keeps_everything(query):
    assert filter_recipes(RECIPES, query) == RECIPES


def test_matches_ingredient_substring():
    assert titles(filter_recipes(RECIPES, "egg")) == ["Pancakes"]


def test_matches_description():
    assert titles(filter_recipes(RECIPES, "creamy")) == ["Tomato Soup"]


def test_matches_category():
    assert titles(filter_recipes(RECIPES, "drink")) == ["Iced Tea"]


def test_matches_title_substring_anywhere():
    assert titles(filter_recipes(RECIPES, "cake")) == ["Pancakes"]


@pytest.mark.parametrize("query", ["tea", "TEA", "Tea", "tEa"])
def test_matching_ignores_case(query):
    assert titles(filter_recipes(RECIPES, query)) == ["Iced Tea"]


def test_result_preserves_input_order():
    # "t" occurs in every recipe
    assert titles(filter_recipes(RECIPES, "t")) == ["Pancakes", "Tomato Soup", "Iced Tea"]


def test_missing_description_is_skipped():
    recipe = make_recipe("Toast", ingredients=["bread"])
    recipe.description = None
    assert filter_recipes([recipe], "jam") == []


@pytest.mark.parametrize(
    "selector,expected",
    [
        (None, None),
        ("", None),
        ("All", None),
        ("Dessert", "Dessert"),
        (" Lunch ", "Lunch"),
        ("Brunch", None),
    ],
)
def test_normalize_category(selector, expected):
    assert normalize_category(selector) == expected
