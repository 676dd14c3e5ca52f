from __future__ import annotations

from typing import Iterable, List, Optional, Protocol

from werkzeug.datastructures import FileStorage

from .models import Comment, Profile, Recipe


class RecipeRepository(Protocol):
    """Protocol describing the behaviour required by the web layer.

    Backend failures are raised as :class:`~recipeshare.errors.CatalogError`.
    Lookups of unknown identifiers raise a ``KeyError`` subclass.
    """

    def list_recipes(self, category: Optional[str] = None) -> Iterable[Recipe]:
        """Return stored recipes ordered newest first.

        When ``category`` is given only recipes with exactly that category are
        returned.
        """

    def list_recipes_by_owner(self, owner_id: str) -> Iterable[Recipe]:
        """Return the recipes created by ``owner_id`` ordered newest first."""

    def get_recipe(self, recipe_id: str) -> Recipe:
        """Return a single recipe or raise :class:`KeyError` if missing."""

    def add_recipe(
        self,
        *,
        owner_id: str,
        title: str,
        description: str,
        ingredients: List[str],
        instructions: List[str],
        category: str,
        cooking_time: Optional[int],
        difficulty: Optional[str],
        image: FileStorage | None,
    ) -> Recipe:
        """Persist a new recipe and return the stored instance."""

    def update_recipe(
        self,
        recipe_id: str,
        *,
        title: str,
        description: str,
        ingredients: List[str],
        instructions: List[str],
        category: str,
        cooking_time: Optional[int],
        difficulty: Optional[str],
        image: FileStorage | None,
    ) -> Recipe:
        """Replace the editable fields of an existing recipe."""

    def get_profile(self, profile_id: str) -> Profile:
        """Return a profile or raise :class:`KeyError` if missing."""

    def create_profile(
        self,
        profile_id: str,
        *,
        username: str,
        full_name: Optional[str],
        bio: Optional[str],
    ) -> Profile:
        """Create the profile of ``profile_id``; usernames must be unique."""

    def count_profiles(self) -> int:
        """Return the number of registered profiles."""

    def toggle_like(self, recipe_id: str, user_id: str) -> bool:
        """Like or unlike a recipe. Returns ``True`` when the recipe is now liked."""

    def count_likes(self, recipe_id: str) -> int:
        """Return how many users like the recipe."""

    def add_comment(self, recipe_id: str, *, user_id: str, content: str) -> Comment:
        """Attach a comment to a recipe."""

    def list_comments(self, recipe_id: str) -> Iterable[Comment]:
        """Return the comments on a recipe, oldest first."""


__all__ = ["RecipeRepository"]
