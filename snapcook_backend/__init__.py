import logging
import os
from typing import Callable

from flask import Flask, jsonify
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from snapcook_backend.api import init_app as init_api
from snapcook_backend.config import (
    DEFAULT_LLM_MODEL,
    DEFAULT_LLM_SYSTEM_PROMPT,
    DEFAULT_LLM_TIMEOUT_SECONDS,
    DEFAULT_YOUTUBE_TIMEOUT_SECONDS,
)
from snapcook_backend.models import get_database_url
from snapcook_backend.services.llm import (
    VisionLLMSettings,
    init_vision_llm_client,
)
from snapcook_backend.services.recommendations import (
    DEFAULT_MAX_WORKERS,
    RecipeRecommender,
    RecommenderSettings,
)
from snapcook_backend.services.youtube import (
    YouTubeSettings,
    init_youtube_client,
)


def create_app() -> Flask:
    """Application factory for the Snap Cook backend."""
    app = Flask(__name__)
    app.json.ensure_ascii = False

    _configure_logging(app)
    _init_database(app)

    @app.get("/healthz")
    def healthcheck():
        return jsonify(status="ok")

    _init_recommender(app)
    init_api(app)

    return app


def _configure_logging(app: Flask) -> None:
    """Ensure application and root loggers emit INFO-level logs."""

    logging.basicConfig(level=logging.INFO)
    logging.getLogger().setLevel(logging.INFO)
    app.logger.setLevel(logging.INFO)


def _env_number(
    app: Flask,
    name: str,
    default: float,
    cast: Callable[[str], float] = float,
) -> float:
    """Read a positive number from the environment, falling back to ``default``."""

    raw_value = os.environ.get(name)
    if raw_value is None:
        return default
    try:
        value = cast(raw_value)
    except ValueError:
        app.logger.warning("invalid %s=%s; using %s", name, raw_value, default)
        return default

    if value <= 0:
        app.logger.warning(
            "%s must be positive (got %s); using %s", name, raw_value, default
        )
        return default
    return value


def _init_database(app: Flask) -> None:
    """Configure the SQLAlchemy session factory for request handlers."""

    try:
        database_url = get_database_url()
    except RuntimeError:
        app.logger.warning(
            "DATABASE_URL not set; saved recipe endpoints disabled"
        )
        return

    engine = create_engine(database_url, pool_pre_ping=True)
    SessionLocal = sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )
    app.extensions["db_engine"] = engine
    app.extensions["db_sessionmaker"] = SessionLocal


def _init_recommender(app: Flask) -> None:
    """Wire the vision and YouTube clients into the recommendation pipeline."""

    llm_api_key = os.environ.get("SNAPCOOK_LLM_API_KEY") or os.environ.get(
        "OPENAI_API_KEY"
    )
    if not llm_api_key:
        app.logger.warning(
            "SNAPCOOK_LLM_API_KEY/OPENAI_API_KEY not set; recommendation endpoints disabled"
        )
        return

    system_prompt = os.environ.get(
        "SNAPCOOK_LLM_SYSTEM_PROMPT", DEFAULT_LLM_SYSTEM_PROMPT
    )
    vision_client = init_vision_llm_client(
        VisionLLMSettings(
            api_key=llm_api_key,
            model=os.environ.get("SNAPCOOK_LLM_MODEL", DEFAULT_LLM_MODEL),
            system_prompt=system_prompt or None,
            timeout_seconds=_env_number(
                app, "SNAPCOOK_LLM_TIMEOUT_SECONDS", DEFAULT_LLM_TIMEOUT_SECONDS
            ),
        )
    )

    youtube_api_key = os.environ.get("YOUTUBE_API_KEY")
    if not youtube_api_key:
        app.logger.warning(
            "YOUTUBE_API_KEY not set; recipes will be returned without videos"
        )
    video_client = init_youtube_client(
        YouTubeSettings(
            api_key=youtube_api_key,
            timeout_seconds=_env_number(
                app,
                "SNAPCOOK_YOUTUBE_TIMEOUT_SECONDS",
                DEFAULT_YOUTUBE_TIMEOUT_SECONDS,
            ),
        )
    )

    app.extensions["vision_llm_client"] = vision_client
    app.extensions["youtube_client"] = video_client
    app.extensions["recipe_recommender"] = RecipeRecommender(
        vision_client,
        video_client,
        settings=RecommenderSettings(
            system_prompt=system_prompt or DEFAULT_LLM_SYSTEM_PROMPT,
            max_workers=_env_number(
                app, "SNAPCOOK_ENRICHMENT_WORKERS", DEFAULT_MAX_WORKERS, cast=int
            ),
        ),
    )


app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8000)
