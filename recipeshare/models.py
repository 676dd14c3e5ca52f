from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

CATEGORIES = ("Breakfast", "Lunch", "Dinner", "Dessert", "Snack", "Drink")
ALL_CATEGORIES = "All"
DIFFICULTIES = ("easy", "medium", "hard")


@dataclass
class Recipe:
    """Domain object representing a stored recipe."""

    id: str
    owner_id: str
    title: str
    description: str
    ingredients: List[str]
    instructions: List[str]
    category: str
    cooking_time: Optional[int] = None
    difficulty: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Profile:
    """Public profile of an authenticated principal."""

    id: str
    username: str
    full_name: Optional[str] = None
    bio: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.username


@dataclass
class Comment:
    id: str
    recipe_id: str
    user_id: str
    content: str
    created_at: Optional[datetime] = None


@dataclass
class RecipeDetail:
    """A recipe together with the data shown alongside it."""

    recipe: Recipe
    uploader: Optional[Profile] = None
    like_count: int = 0
    comments: List[Comment] = field(default_factory=list)


__all__ = [
    "ALL_CATEGORIES",
    "CATEGORIES",
    "Comment",
    "DIFFICULTIES",
    "Profile",
    "Recipe",
    "RecipeDetail",
]
