from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from werkzeug.datastructures import FileStorage, MultiDict

from .editor import INGREDIENT, INSTRUCTION, OrderedListEditor
from .models import CATEGORIES, DIFFICULTIES, Recipe

ALLOWED_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}

SAVE_ACTION = "save"


@dataclass
class RecipeForm:
    """State of the create/edit recipe form between round trips."""

    title: str = ""
    description: str = ""
    category: str = CATEGORIES[0]
    cooking_time: str = ""
    difficulty: str = ""
    image_url: Optional[str] = None
    editor: OrderedListEditor = field(default_factory=OrderedListEditor)

    @classmethod
    def from_recipe(cls, recipe: Recipe) -> "RecipeForm":
        return cls(
            title=recipe.title,
            description=recipe.description or "",
            category=recipe.category or CATEGORIES[0],
            cooking_time="" if recipe.cooking_time is None else str(recipe.cooking_time),
            difficulty=recipe.difficulty or "",
            image_url=recipe.image_url,
            editor=OrderedListEditor(recipe.ingredients, recipe.instructions),
        )

    @classmethod
    def from_form(cls, data: MultiDict, image_url: Optional[str] = None) -> "RecipeForm":
        return cls(
            title=data.get("title", ""),
            description=data.get("description", ""),
            category=data.get("category", ""),
            cooking_time=data.get("cooking_time", "").strip(),
            difficulty=data.get("difficulty", "").strip().lower(),
            image_url=image_url,
            editor=OrderedListEditor(
                data.getlist("ingredients"),
                data.getlist("instructions"),
            ),
        )

    def validate(self, image: FileStorage | None = None) -> Optional[str]:
        """Return the message of the first failing rule, or ``None``."""

        if not self.title.strip():
            return "Title is required."
        if not self.description.strip():
            return "Description is required."
        ingredients = self.editor.ingredients
        if not ingredients or any(not item.strip() for item in ingredients):
            return "All ingredients are required."
        instructions = self.editor.instructions
        if not instructions or any(not item.strip() for item in instructions):
            return "All instructions are required."
        if self.category not in CATEGORIES:
            return "Category is required."
        if self.cooking_time and _parse_cooking_time(self.cooking_time) is None:
            return "Cooking time must be a positive number of minutes."
        if self.difficulty and self.difficulty not in DIFFICULTIES:
            return "Difficulty must be easy, medium or hard."
        if image and image.filename and not allowed_image(image.filename):
            return "Unsupported image format. Allowed formats: PNG, JPG, JPEG, GIF, WEBP."
        return None

    def to_fields(self) -> Dict[str, Any]:
        """Keyword arguments for the repository's add/update calls."""

        return {
            "title": self.title.strip(),
            "description": self.description.strip(),
            "ingredients": [item.strip() for item in self.editor.items(INGREDIENT)],
            "instructions": [item.strip() for item in self.editor.items(INSTRUCTION)],
            "category": self.category,
            "cooking_time": _parse_cooking_time(self.cooking_time),
            "difficulty": self.difficulty or None,
        }


def allowed_image(filename: str) -> bool:
    if not filename or "." not in filename:
        return False
    ext = filename.rsplit(".", 1)[1].lower()
    return ext in ALLOWED_IMAGE_EXTENSIONS


def _parse_cooking_time(value: str) -> Optional[int]:
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        return None
    return minutes if minutes > 0 else None


__all__ = ["ALLOWED_IMAGE_EXTENSIONS", "RecipeForm", "SAVE_ACTION", "allowed_image"]
