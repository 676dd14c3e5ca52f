from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from google.api_core import exceptions as gcloud_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import firestore, storage
from google.cloud.firestore_v1.base_query import FieldFilter
from werkzeug.datastructures import FileStorage

from .errors import (
    CatalogError,
    ImageUploadError,
    ProfileNotFoundError,
    RecipeNotFoundError,
    UsernameTakenError,
)
from .models import Comment, Profile, Recipe
from .storage import RecipeRepository

logger = logging.getLogger(__name__)

BACKEND_ERRORS = (gcloud_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError)


def _parse_lines(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def _as_list(value) -> List[str]:
    if isinstance(value, str):
        return _parse_lines(value)
    if isinstance(value, list):
        return [str(item) for item in value]
    return []


def _as_datetime(value) -> Optional[datetime]:
    return value if isinstance(value, datetime) else None


@contextmanager
def _backend_call(operation: str) -> Iterator[None]:
    try:
        yield
    except BACKEND_ERRORS as exc:
        logger.exception("Catalog store request failed during %s", operation)
        raise CatalogError(f"{operation} failed: {exc}") from exc


class FirestoreRecipeStorage(RecipeRepository):
    """GCP backed recipe storage using Firestore and Cloud Storage."""

    def __init__(
        self,
        *,
        project: Optional[str] = None,
        collection_name: str = "recipes",
        profiles_collection_name: str = "profiles",
        bucket_name: Optional[str] = None,
    ) -> None:
        self._project = project
        self._collection_name = collection_name
        self._bucket_name = bucket_name

        self._firestore_client = firestore.Client(project=project)
        self._collection = self._firestore_client.collection(collection_name)
        self._profiles = self._firestore_client.collection(profiles_collection_name)

        if bucket_name:
            self._storage_client = storage.Client(project=project)
            self._bucket = self._storage_client.bucket(bucket_name)
        else:
            self._storage_client = None
            self._bucket = None

    @classmethod
    def from_env(cls) -> "FirestoreRecipeStorage":
        """Build a storage instance from environment variables."""

        project = os.environ.get("GCP_PROJECT")
        collection_name = os.environ.get("RECIPES_COLLECTION", "recipes")
        profiles_collection_name = os.environ.get("PROFILES_COLLECTION", "profiles")
        bucket_name = os.environ.get("GCS_BUCKET")
        return cls(
            project=project,
            collection_name=collection_name,
            profiles_collection_name=profiles_collection_name,
            bucket_name=bucket_name,
        )

    # Recipes

    def list_recipes(self, category: Optional[str] = None) -> List[Recipe]:
        query = self._collection
        if category:
            query = query.where(filter=FieldFilter("category", "==", category))
        return self._run_recipe_query(query, "list recipes")

    def list_recipes_by_owner(self, owner_id: str) -> List[Recipe]:
        query = self._collection.where(filter=FieldFilter("owner_id", "==", owner_id))
        return self._run_recipe_query(query, "list recipes by owner")

    def get_recipe(self, recipe_id: str) -> Recipe:
        with _backend_call("get recipe"):
            snapshot = self._collection.document(recipe_id).get()

        if not snapshot.exists:
            raise RecipeNotFoundError(recipe_id)

        return self._doc_to_recipe(snapshot.id, snapshot.to_dict() or {})

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
        image_url: Optional[str] = None
        blob_name: Optional[str] = None

        if image and image.filename:
            blob_name, image_url = self._upload_image(image)

        doc = {
            "owner_id": owner_id,
            "title": title,
            "description": description,
            "ingredients": list(ingredients),
            "instructions": list(instructions),
            "category": category,
            "cooking_time": cooking_time,
            "difficulty": difficulty,
            "image_url": image_url,
            "image_blob_name": blob_name,
            "created_at": firestore.SERVER_TIMESTAMP,
            "updated_at": None,
        }

        try:
            with _backend_call("add recipe"):
                doc_ref = self._collection.document()
                doc_ref.set(doc)
                snapshot = doc_ref.get()
        except CatalogError:
            if blob_name:
                logger.warning("Image %s was uploaded but its recipe was not saved", blob_name)
            raise

        logger.info("Recipe %s created by %s", snapshot.id, owner_id)
        return self._doc_to_recipe(snapshot.id, snapshot.to_dict() or {})

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
        doc_ref = self._collection.document(recipe_id)
        with _backend_call("load recipe for update"):
            snapshot = doc_ref.get()

        if not snapshot.exists:
            raise RecipeNotFoundError(recipe_id)

        current_data = snapshot.to_dict() or {}
        new_blob_name = current_data.get("image_blob_name")
        new_image_url = current_data.get("image_url")

        if image and image.filename:
            new_blob_name, new_image_url = self._upload_image(image)

        update_doc = {
            "title": title,
            "description": description,
            "ingredients": list(ingredients),
            "instructions": list(instructions),
            "category": category,
            "cooking_time": cooking_time,
            "difficulty": difficulty,
            "image_blob_name": new_blob_name,
            "image_url": new_image_url,
            "updated_at": firestore.SERVER_TIMESTAMP,
        }

        try:
            with _backend_call("update recipe"):
                doc_ref.update(update_doc)
                snapshot = doc_ref.get()
        except CatalogError:
            if image and image.filename:
                logger.warning(
                    "Image %s was uploaded but recipe %s was not updated", new_blob_name, recipe_id
                )
            raise

        logger.info("Recipe %s updated", recipe_id)
        return self._doc_to_recipe(snapshot.id, snapshot.to_dict() or {})

    # Profiles

    def get_profile(self, profile_id: str) -> Profile:
        with _backend_call("get profile"):
            snapshot = self._profiles.document(profile_id).get()

        if not snapshot.exists:
            raise ProfileNotFoundError(profile_id)

        return self._doc_to_profile(snapshot.id, snapshot.to_dict() or {})

    def create_profile(
        self,
        profile_id: str,
        *,
        username: str,
        full_name: Optional[str],
        bio: Optional[str],
    ) -> Profile:
        with _backend_call("check username"):
            taken = list(
                self._profiles.where(filter=FieldFilter("username", "==", username))
                .limit(1)
                .stream()
            )
        if taken:
            raise UsernameTakenError(username)

        doc = {
            "username": username,
            "full_name": full_name,
            "bio": bio,
            "created_at": firestore.SERVER_TIMESTAMP,
        }
        doc_ref = self._profiles.document(profile_id)
        try:
            doc_ref.create(doc)
        except gcloud_exceptions.Conflict as exc:
            raise CatalogError(f"Profile '{profile_id}' already exists.") from exc
        except BACKEND_ERRORS as exc:
            logger.exception("Catalog store request failed during create profile")
            raise CatalogError(f"create profile failed: {exc}") from exc

        with _backend_call("load created profile"):
            snapshot = doc_ref.get()
        logger.info("Profile %s created", profile_id)
        return self._doc_to_profile(snapshot.id, snapshot.to_dict() or {})

    def count_profiles(self) -> int:
        with _backend_call("count profiles"):
            results = self._profiles.count().get()
        return int(results[0][0].value) if results else 0

    # Likes and comments

    def toggle_like(self, recipe_id: str, user_id: str) -> bool:
        like_ref = self._collection.document(recipe_id).collection("likes").document(user_id)
        with _backend_call("toggle like"):
            if like_ref.get().exists:
                like_ref.delete()
                return False
            like_ref.set({"user_id": user_id, "created_at": firestore.SERVER_TIMESTAMP})
            return True

    def count_likes(self, recipe_id: str) -> int:
        likes = self._collection.document(recipe_id).collection("likes")
        with _backend_call("count likes"):
            results = likes.count().get()
        return int(results[0][0].value) if results else 0

    def add_comment(self, recipe_id: str, *, user_id: str, content: str) -> Comment:
        comments = self._collection.document(recipe_id).collection("comments")
        doc = {
            "user_id": user_id,
            "content": content,
            "created_at": firestore.SERVER_TIMESTAMP,
        }
        with _backend_call("add comment"):
            _, doc_ref = comments.add(doc)
            snapshot = doc_ref.get()
        return self._doc_to_comment(recipe_id, snapshot.id, snapshot.to_dict() or {})

    def list_comments(self, recipe_id: str) -> List[Comment]:
        comments = self._collection.document(recipe_id).collection("comments")
        query = comments.order_by("created_at", direction=firestore.Query.ASCENDING)
        with _backend_call("list comments"):
            return [
                self._doc_to_comment(recipe_id, doc.id, doc.to_dict() or {})
                for doc in query.stream()
            ]

    # Helpers

    def _run_recipe_query(self, query, operation: str) -> List[Recipe]:
        query = query.order_by("created_at", direction=firestore.Query.DESCENDING)
        with _backend_call(operation):
            return [self._doc_to_recipe(doc.id, doc.to_dict() or {}) for doc in query.stream()]

    def _upload_image(self, image: FileStorage) -> tuple[str, str]:
        if not self._bucket:
            raise ImageUploadError(image.filename, "no Cloud Storage bucket is configured")

        blob_name = self._build_blob_name(image.filename)
        blob = self._bucket.blob(blob_name)

        try:
            image.stream.seek(0)
            blob.upload_from_file(image.stream, content_type=image.mimetype)
        except BACKEND_ERRORS as exc:
            logger.exception("Uploading %s failed", blob_name)
            raise ImageUploadError(image.filename, str(exc)) from exc

        return blob_name, blob.public_url

    def _build_blob_name(self, filename: str) -> str:
        ext = filename.rsplit(".", 1)[1].strip().lower() if "." in filename else ""
        if not ext.isascii() or not ext.isalnum():
            ext = "bin"
        return f"recipes/{int(time.time() * 1000)}.{ext}"

    def _doc_to_recipe(self, doc_id: str, data: dict) -> Recipe:
        cooking_time = data.get("cooking_time")

        return Recipe(
            id=doc_id,
            owner_id=data.get("owner_id", ""),
            title=data.get("title", ""),
            description=data.get("description") or "",
            ingredients=_as_list(data.get("ingredients")),
            instructions=_as_list(data.get("instructions")),
            category=data.get("category", ""),
            cooking_time=cooking_time if isinstance(cooking_time, int) else None,
            difficulty=data.get("difficulty"),
            image_url=data.get("image_url"),
            created_at=_as_datetime(data.get("created_at")),
            updated_at=_as_datetime(data.get("updated_at")),
        )

    def _doc_to_profile(self, doc_id: str, data: dict) -> Profile:
        return Profile(
            id=doc_id,
            username=data.get("username", ""),
            full_name=data.get("full_name"),
            bio=data.get("bio"),
            created_at=_as_datetime(data.get("created_at")),
        )

    def _doc_to_comment(self, recipe_id: str, doc_id: str, data: dict) -> Comment:
        return Comment(
            id=doc_id,
            recipe_id=recipe_id,
            user_id=data.get("user_id", ""),
            content=data.get("content", ""),
            created_at=_as_datetime(data.get("created_at")),
        )


__all__ = ["FirestoreRecipeStorage"]
