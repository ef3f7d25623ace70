import json
from typing import Optional

from flask import Flask, jsonify, request

from .engine import RecipeCache, SetResult
from .errors import InvalidInput, RecipeCacheError, RecipeNotFound, StorageFailure
from .models import Recipe
from .ranking import DEFAULT_RANKING_LIMIT, DEFAULT_SIMILAR_LIMIT
from .search import SearchFilters

try:
    from .gcp_storage import FirestoreRecipeStore
except ImportError:  # pragma: no cover - allows running tests without optional deps
    FirestoreRecipeStore = None  # type: ignore[assignment,misc]


def create_app(cache: Optional[RecipeCache] = None) -> Flask:
    """Create and configure the Flask application.

    Parameters
    ----------
    cache:
        Optional recipe cache. When ``None`` the application builds one with
        :meth:`RecipeCache.from_env`, backed by :class:`FirestoreRecipeStore`.
    """

    app = Flask(__name__)

    if cache is None:
        if FirestoreRecipeStore is None:
            raise RuntimeError(
                "google-cloud-firestore is not installed. Install it or pass an "
                "explicit recipe cache to create_app."
            )
        cache = RecipeCache.from_env()
    app.config["RECIPE_CACHE"] = cache

    def recipe_cache() -> RecipeCache:
        return app.config["RECIPE_CACHE"]

    @app.errorhandler(RecipeNotFound)
    def not_found(exc: RecipeNotFound):
        return jsonify(error="Not Found", message=str(exc)), 404

    @app.errorhandler(InvalidInput)
    def invalid_input(exc: InvalidInput):
        return jsonify(error="Bad Request", message=str(exc)), 400

    @app.errorhandler(StorageFailure)
    def storage_failure(exc: StorageFailure):
        app.logger.exception("Recipe storage failed")
        return jsonify(error="Internal Server Error", message=str(exc)), 500

    @app.get("/")
    def index():
        return jsonify(status="ok", cache=recipe_cache().name)

    @app.get("/recipes/<recipe_id>")
    def get_recipe(recipe_id: str):
        return jsonify(recipe_cache().get(recipe_id).to_dict())

    @app.post("/recipes")
    def set_recipe():
        payload = request.get_json(silent=True)
        if payload is None:
            raise InvalidInput("Expected a JSON recipe body.")
        result: SetResult = recipe_cache().set(payload)
        return jsonify(result.to_dict())

    @app.get("/recipes/search")
    def search_recipes():
        query = request.args.get("q")
        if query is None:
            raise InvalidInput("Query parameter 'q' is required.")

        filters = _parse_filters(request.args.get("filters"))
        for key in ("cuisine", "diet", "season"):
            if request.args.get(key):
                filters[key] = request.args[key]

        result = recipe_cache().search(query, SearchFilters.from_dict(filters))
        return jsonify(result.to_dict())

    @app.get("/recipes/seasonal")
    def seasonal_recipes():
        season = request.args.get("season") or None
        limit = _parse_limit(DEFAULT_RANKING_LIMIT)
        recipes = recipe_cache().by_season(season, limit)
        return jsonify([recipe.to_dict() for recipe in recipes])

    @app.get("/recipes/<recipe_id>/similar")
    def similar_recipes(recipe_id: str):
        limit = _parse_limit(DEFAULT_SIMILAR_LIMIT)
        recipes = recipe_cache().similar(recipe_id, limit)
        return jsonify([recipe.to_dict() for recipe in recipes])

    @app.get("/recipes/popular")
    def popular_recipes():
        category = request.args.get("category") or None
        limit = _parse_limit(DEFAULT_RANKING_LIMIT)
        ranked = recipe_cache().popular(category, limit)
        return jsonify([item.to_dict() for item in ranked])

    return app


def _parse_limit(default: int) -> int:
    """Read ``?limit=``; absent, zero or non-numeric values mean the default."""

    try:
        limit = int(request.args.get("limit", ""))
    except ValueError:
        return default
    return limit or default


def _parse_filters(raw: Optional[str]) -> dict:
    if not raw:
        return {}
    try:
        filters = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidInput("filters must be a JSON object.") from exc
    if not isinstance(filters, dict):
        raise InvalidInput("filters must be a JSON object.")
    return filters


__all__ = [
    "create_app",
    "InvalidInput",
    "Recipe",
    "RecipeCache",
    "RecipeCacheError",
    "RecipeNotFound",
    "StorageFailure",
]
