"""Recipe recommendation endpoints backed by the vision model and YouTube."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from snapcook_backend.api.deps import (
    get_db_session,
    get_recommender,
    get_sessionmaker,
)
from snapcook_backend.config import MAX_VIDEOS_PER_RECIPE
from snapcook_backend.models import Recipe
from snapcook_backend.services.llm import (
    InvalidInputError,
    UpstreamUnavailableError,
)
from snapcook_backend.services.parsing import UpstreamFormatError, parse_recipe
from snapcook_backend.services.recipe_store import (
    RecipeStoreError,
    list_recipes,
    save_recipe,
)
from snapcook_backend.services.schemas import (
    EnrichedRecipe,
    RecipeSuggestion,
    VideoSummary,
)

bp = Blueprint("recipes", __name__, url_prefix="/api/recipes")

HEALTH_MESSAGE = "Snap Cook AI is running!"


def _serialize_suggestion(recipe: RecipeSuggestion) -> dict[str, object]:
    return {
        "recipeName": recipe.name,
        "description": recipe.description,
        "ingredients": list(recipe.ingredients),
        "instructions": list(recipe.instructions),
        "estimatedTime": recipe.estimated_time_minutes,
        "difficulty": recipe.difficulty,
        "tips": recipe.tips,
    }


def _serialize_video(video: VideoSummary) -> dict[str, object]:
    return {
        "videoId": video.video_id,
        "title": video.title,
        "description": video.description,
        "thumbnailUrl": video.thumbnail_url,
        "channelTitle": video.channel_title,
        "viewCount": video.view_count,
        "videoUrl": video.video_url,
    }


def _serialize_enriched(entry: EnrichedRecipe) -> dict[str, object]:
    return {
        "recipe": _serialize_suggestion(entry.recipe),
        "youtubeVideos": [_serialize_video(video) for video in entry.videos],
    }


def _serialize_saved(recipe: Recipe) -> dict[str, object]:
    return {
        "id": recipe.id,
        "recipeName": recipe.recipe_name,
        "description": recipe.description or "",
        "ingredients": list(recipe.ingredients or []),
        "instructions": list(recipe.instructions or []),
        "estimatedTime": recipe.estimated_time,
        "difficulty": recipe.difficulty or "",
        "tips": recipe.tips or "",
        "createdAt": recipe.created_at.isoformat() if recipe.created_at else None,
    }


def _read_upload() -> tuple[bytes, str | None]:
    """Return the uploaded image bytes and MIME type, or raise ``ValueError``."""

    if "image" not in request.files:
        raise ValueError("missing file part 'image'")

    image_file = request.files["image"]
    image_bytes = image_file.read()
    if not image_bytes:
        raise ValueError("uploaded file was empty")
    return image_bytes, image_file.mimetype


@bp.post("/recommend")
def recommend_recipes():
    """Recommend recipes for an uploaded ingredient photo."""

    try:
        image_bytes, mime_type = _read_upload()
    except ValueError as exc:
        return jsonify(error=str(exc)), 400

    modifier = request.form.get("additionalRequest")
    current_app.logger.info(
        "recipe recommendation requested",
        extra={"upload_name": request.files["image"].filename, "modifier": modifier},
    )

    try:
        recommender = get_recommender()
    except RuntimeError as exc:
        return jsonify(error=str(exc)), 503

    try:
        result = recommender.recommend(
            image_bytes=image_bytes, mime_type=mime_type, modifier=modifier
        )
    except InvalidInputError as exc:
        return jsonify(error=str(exc)), 400
    except UpstreamUnavailableError:
        current_app.logger.exception("vision LLM invocation failed")
        return jsonify(error="failed to query vision model"), 502

    return jsonify(
        recipes=[_serialize_suggestion(recipe) for recipe in result.recipes],
        message=result.message,
    )


@bp.post("/recommend-with-youtube")
def recommend_recipes_with_youtube():
    """Recommend recipes and attach the most viewed YouTube videos to each."""

    try:
        image_bytes, mime_type = _read_upload()
    except ValueError as exc:
        return jsonify(error=str(exc)), 400

    modifier = request.form.get("additionalRequest")
    video_count = request.form.get(
        "videoCount", default=MAX_VIDEOS_PER_RECIPE, type=int
    )
    current_app.logger.info(
        "recipe + youtube recommendation requested",
        extra={"upload_name": request.files["image"].filename, "modifier": modifier},
    )

    try:
        recommender = get_recommender()
    except RuntimeError as exc:
        return jsonify(error=str(exc)), 503

    try:
        result = recommender.recommend_with_videos(
            image_bytes=image_bytes,
            mime_type=mime_type,
            modifier=modifier,
            video_count=video_count,
        )
    except InvalidInputError as exc:
        return jsonify(error=str(exc)), 400
    except UpstreamUnavailableError:
        current_app.logger.exception("vision LLM invocation failed")
        return jsonify(error="failed to query vision model"), 502

    return jsonify(
        recipes=[_serialize_enriched(entry) for entry in result.recipes],
        message=result.message,
    )


@bp.get("/youtube-test")
def search_youtube_videos():
    """Run only the video lookup for a recipe name."""

    recipe_name = (request.args.get("recipeName") or "").strip()
    if not recipe_name:
        return jsonify(error="recipeName is required"), 400

    try:
        recommender = get_recommender()
    except RuntimeError as exc:
        return jsonify(error=str(exc)), 503

    lookup = recommender.find_videos(recipe_name, MAX_VIDEOS_PER_RECIPE)
    if lookup.degraded:
        current_app.logger.warning(
            "video lookup degraded",
            extra={"recipe": recipe_name, "reason": lookup.diagnostic},
        )
    return jsonify([_serialize_video(video) for video in lookup.value])


@bp.get("/health")
def health_check():
    return HEALTH_MESSAGE


@bp.get("")
def get_saved_recipes():
    """Return every saved recipe."""

    try:
        session_factory = get_sessionmaker()
    except RuntimeError as exc:
        return jsonify(error=str(exc)), 503

    try:
        recipes = list_recipes(session_factory)
    except RecipeStoreError:
        current_app.logger.exception("failed to load saved recipes")
        return jsonify(error="failed to load recipes"), 500

    return jsonify([_serialize_saved(recipe) for recipe in recipes])


@bp.post("")
def create_saved_recipe():
    """Save a recommended recipe."""

    payload = request.get_json(silent=True)
    try:
        suggestion = parse_recipe(payload)
    except UpstreamFormatError as exc:
        return jsonify(error=str(exc)), 400

    try:
        session = get_db_session()
    except RuntimeError as exc:
        return jsonify(error=str(exc)), 503

    try:
        recipe = save_recipe(session, suggestion)
        body = _serialize_saved(recipe)
    except (RecipeStoreError, SQLAlchemyError):
        current_app.logger.exception("failed to save recipe")
        return jsonify(error="failed to save recipe"), 500
    finally:
        session.close()

    return jsonify(body), 201
