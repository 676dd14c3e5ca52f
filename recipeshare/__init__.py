import logging
import os
from typing import Optional

from flask import Flask, abort, flash, jsonify, redirect, render_template, request, url_for

from .errors import CatalogError, ImageUploadError, UsernameTakenError
from .forms import SAVE_ACTION, RecipeForm
from .identity import DEFAULT_IDENTITY_HEADER, current_user_id, login_required
from .models import ALL_CATEGORIES, CATEGORIES, DIFFICULTIES, Recipe, RecipeDetail
from .search import filter_recipes, normalize_category
from .storage import RecipeRepository

try:
    from .gcp_storage import FirestoreRecipeStorage
except ImportError:  # pragma: no cover - allows running tests without optional deps
    FirestoreRecipeStorage = None  # type: ignore[assignment]

__version__ = "0.3.0"

logger = logging.getLogger(__name__)


def create_app(storage: Optional[RecipeRepository] = None) -> Flask:
    """Create and configure the Flask application.

    Parameters
    ----------
    storage:
        Optional recipe repository. When ``None`` the application will use
        :class:`FirestoreRecipeStorage` configured through environment variables.
    """

    app = Flask(__name__)
    app.config.setdefault("MAX_CONTENT_LENGTH", 16 * 1024 * 1024)
    app.config["IDENTITY_HEADER"] = os.environ.get("IDENTITY_HEADER", DEFAULT_IDENTITY_HEADER)
    app.secret_key = os.environ.get("FLASK_SECRET_KEY", "development-secret-change-me")

    if storage is None:
        if FirestoreRecipeStorage is None:
            raise RuntimeError(
                "google-cloud-firestore is not installed. Install optional dependencies "
                "or pass an explicit storage backend to create_app."
            )
        storage = FirestoreRecipeStorage.from_env()
    app.config["RECIPE_STORAGE"] = storage

    def repository() -> RecipeRepository:
        return app.config["RECIPE_STORAGE"]

    @app.context_processor
    def inject_globals() -> dict:
        return {"current_user_id": current_user_id(), "version": __version__}

    @app.errorhandler(404)
    def not_found(error) -> tuple:
        return render_template("error.html", title="Not found", message="Not found."), 404

    @app.errorhandler(403)
    def forbidden(error) -> tuple:
        message = "You can only edit your own recipes."
        return render_template("error.html", title="Forbidden", message=message), 403

    @app.errorhandler(CatalogError)
    def catalog_unavailable(error: CatalogError) -> tuple:
        message = "Something went wrong talking to the recipe store."
        return render_template("error.html", title="Error", message=message), 503

    @app.get("/")
    @app.get("/recipes")
    def index():
        search = request.args.get("search", "")
        selected_category = request.args.get("category") or ALL_CATEGORIES
        status = 200

        try:
            recipes = list(repository().list_recipes(normalize_category(selected_category)))
        except CatalogError:
            flash("Failed to load recipes", "error")
            recipes = []
            status = 503

        results = filter_recipes(recipes, search)

        return (
            render_template(
                "index.html",
                recipes=results,
                search=search,
                selected_category=selected_category,
                categories=(ALL_CATEGORIES,) + CATEGORIES,
                title="Browse Recipes",
            ),
            status,
        )

    @app.get("/recipes/<recipe_id>")
    def recipe_detail(recipe_id: str) -> str:
        storage_backend = repository()
        recipe = _get_recipe_or_404(storage_backend, recipe_id)

        try:
            uploader = storage_backend.get_profile(recipe.owner_id)
        except KeyError:
            uploader = None

        detail = RecipeDetail(
            recipe=recipe,
            uploader=uploader,
            like_count=storage_backend.count_likes(recipe.id),
            comments=list(storage_backend.list_comments(recipe.id)),
        )
        return render_template(
            "recipe_detail.html",
            detail=detail,
            can_edit=recipe.owner_id == current_user_id(),
            title=recipe.title,
        )

    @app.route("/recipes/new", methods=["GET", "POST"])
    @login_required("You must be logged in to add a recipe.")
    def new_recipe():
        if request.method == "GET":
            return _render_form(RecipeForm(), title="Add recipe")

        form = RecipeForm.from_form(request.form)
        action = request.form.get("action", SAVE_ACTION)
        if action != SAVE_ACTION:
            form.editor.apply_action(action)
            return _render_form(form, title="Add recipe")

        image = request.files.get("image")
        validation_error = form.validate(image)
        if validation_error:
            flash(validation_error, "error")
            return _render_form(form, title="Add recipe")

        try:
            recipe = repository().add_recipe(
                owner_id=current_user_id(), image=image, **form.to_fields()
            )
        except ImageUploadError:
            flash("Image upload failed.", "error")
            return _render_form(form, title="Add recipe")
        except CatalogError:
            flash("Failed to add recipe.", "error")
            return _render_form(form, title="Add recipe")

        flash(f"Recipe '{recipe.title}' saved.", "success")
        return redirect(url_for("recipe_detail", recipe_id=recipe.id))

    @app.route("/recipes/<recipe_id>/edit", methods=["GET", "POST"])
    @login_required("You must be logged in to edit a recipe.")
    def edit_recipe(recipe_id: str):
        storage_backend = repository()
        recipe = _get_recipe_or_404(storage_backend, recipe_id)

        if recipe.owner_id != current_user_id():
            logger.info("Rejected edit of recipe %s by non-owner", recipe_id)
            abort(403)

        page_title = f"Edit {recipe.title}" if recipe.title else "Edit recipe"

        if request.method == "GET":
            return _render_form(RecipeForm.from_recipe(recipe), title=page_title, recipe=recipe)

        form = RecipeForm.from_form(request.form, image_url=recipe.image_url)
        action = request.form.get("action", SAVE_ACTION)
        if action != SAVE_ACTION:
            form.editor.apply_action(action)
            return _render_form(form, title=page_title, recipe=recipe)

        image = request.files.get("image")
        validation_error = form.validate(image)
        if validation_error:
            flash(validation_error, "error")
            return _render_form(form, title=page_title, recipe=recipe)

        try:
            updated_recipe = storage_backend.update_recipe(
                recipe_id, image=image, **form.to_fields()
            )
        except KeyError:
            abort(404)
        except ImageUploadError:
            flash("Image upload failed.", "error")
            return _render_form(form, title=page_title, recipe=recipe)
        except CatalogError:
            flash("Failed to update recipe.", "error")
            return _render_form(form, title=page_title, recipe=recipe)

        flash(f"Recipe '{updated_recipe.title}' updated.", "success")
        return redirect(url_for("recipe_detail", recipe_id=updated_recipe.id))

    @app.post("/recipes/<recipe_id>/like")
    @login_required("You must be logged in to like recipes.")
    def like_recipe(recipe_id: str):
        storage_backend = repository()
        recipe = _get_recipe_or_404(storage_backend, recipe_id)

        try:
            storage_backend.toggle_like(recipe.id, current_user_id())
        except CatalogError:
            flash("Failed to update like.", "error")

        return redirect(url_for("recipe_detail", recipe_id=recipe.id))

    @app.post("/recipes/<recipe_id>/comments")
    @login_required("You must be logged in to comment.")
    def add_comment(recipe_id: str):
        storage_backend = repository()
        recipe = _get_recipe_or_404(storage_backend, recipe_id)

        content = request.form.get("content", "").strip()
        if not content:
            flash("Comment cannot be empty.", "error")
            return redirect(url_for("recipe_detail", recipe_id=recipe.id))

        try:
            storage_backend.add_comment(recipe.id, user_id=current_user_id(), content=content)
        except CatalogError:
            flash("Failed to add comment.", "error")
        else:
            flash("Comment added.", "success")

        return redirect(url_for("recipe_detail", recipe_id=recipe.id))

    @app.get("/profiles/<profile_id>")
    def profile_detail(profile_id: str) -> str:
        storage_backend = repository()

        try:
            profile = storage_backend.get_profile(profile_id)
        except KeyError:
            abort(404)

        recipes = list(storage_backend.list_recipes_by_owner(profile.id))
        return render_template(
            "profile.html",
            profile=profile,
            recipes=recipes,
            title=profile.display_name,
        )

    @app.route("/profiles/new", methods=["GET", "POST"])
    @login_required("You must be logged in to create a profile.")
    def new_profile():
        storage_backend = repository()
        user_id = current_user_id()

        try:
            storage_backend.get_profile(user_id)
        except KeyError:
            pass
        else:
            return redirect(url_for("profile_detail", profile_id=user_id))

        if request.method == "GET":
            return render_template("profile_form.html", form={}, title="Create profile")

        username = request.form.get("username", "").strip()
        full_name = request.form.get("full_name", "").strip() or None
        bio = request.form.get("bio", "").strip() or None

        if not username:
            flash("Username is required.", "error")
            return render_template("profile_form.html", form=request.form, title="Create profile")

        try:
            profile = storage_backend.create_profile(
                user_id, username=username, full_name=full_name, bio=bio
            )
        except UsernameTakenError:
            flash("Username is already taken.", "error")
            return render_template("profile_form.html", form=request.form, title="Create profile")
        except CatalogError:
            flash("Failed to create profile.", "error")
            return render_template("profile_form.html", form=request.form, title="Create profile")

        flash(f"Welcome, {profile.display_name}!", "success")
        return redirect(url_for("profile_detail", profile_id=profile.id))

    @app.get("/health")
    def health():
        try:
            profiles = repository().count_profiles()
        except CatalogError:
            return jsonify({"ok": False, "version": __version__}), 503
        return jsonify({"ok": True, "version": __version__, "profiles": profiles})

    return app


def _get_recipe_or_404(storage_backend: RecipeRepository, recipe_id: str) -> Recipe:
    try:
        return storage_backend.get_recipe(recipe_id)
    except KeyError:
        abort(404)


def _render_form(form: RecipeForm, *, title: str, recipe: Optional[Recipe] = None) -> str:
    return render_template(
        "recipe_form.html",
        form=form,
        recipe=recipe,
        categories=CATEGORIES,
        difficulties=DIFFICULTIES,
        title=title,
    )


__all__ = ["create_app", "Recipe"]
