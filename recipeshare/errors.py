class CatalogError(Exception):
    """Raised when the Catalog Store or object store fails a request."""


class ImageUploadError(CatalogError):
    def __init__(self, filename: str, reason: str = "upload failed"):
        super().__init__(f"Could not upload image '{filename}': {reason}")
        self.filename = filename
        self.reason = reason


class RecipeNotFoundError(CatalogError, KeyError):
    def __init__(self, recipe_id: str):
        super().__init__(f"Recipe '{recipe_id}' does not exist.")
        self.recipe_id = recipe_id

    def __str__(self) -> str:
        return self.args[0]


class ProfileNotFoundError(CatalogError, KeyError):
    def __init__(self, profile_id: str):
        super().__init__(f"Profile '{profile_id}' does not exist.")
        self.profile_id = profile_id

    def __str__(self) -> str:
        return self.args[0]


class UsernameTakenError(CatalogError):
    def __init__(self, username: str):
        super().__init__(f"Username '{username}' is already taken.")
        self.username = username


__all__ = [
    "CatalogError",
    "ImageUploadError",
    "ProfileNotFoundError",
    "RecipeNotFoundError",
    "UsernameTakenError",
]
