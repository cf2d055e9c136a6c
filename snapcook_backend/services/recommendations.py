"""Recommendation pipeline: vision call, parsing, then per-recipe video enrichment."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Protocol, Sequence

from snapcook_backend.config import (
    DEFAULT_LLM_SYSTEM_PROMPT,
    MAX_VIDEOS_PER_RECIPE,
    RECIPE_SEARCH_SUFFIX,
)
from snapcook_backend.services.parsing import parse_recommendations
from snapcook_backend.services.prompts import build_user_prompt
from snapcook_backend.services.ranking import rank_videos
from snapcook_backend.services.results import FailSoft
from snapcook_backend.services.schemas import (
    EnrichedRecipe,
    EnrichedRecommendationResult,
    RawVideo,
    RecipeSuggestion,
    RecommendationResult,
    VideoSummary,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4
DEFAULT_CANCEL_POLL_SECONDS = 0.1


class VisionModel(Protocol):
    def generate(
        self,
        *,
        prompt: str,
        image_bytes: bytes,
        mime_type: str | None,
        system_prompt: str | None = None,
    ) -> str: ...


class VideoSearch(Protocol):
    def search_ids(self, query: str, limit: int = ...) -> FailSoft[list[str]]: ...

    def fetch_details(
        self, video_ids: Sequence[str]
    ) -> FailSoft[list[RawVideo]]: ...


class EnrichmentCancelledError(RuntimeError):
    """Raised when the caller cancels a request while videos are being fetched."""


@dataclass(slots=True)
class RecommenderSettings:
    """Configuration knobs for the recommendation pipeline."""

    system_prompt: str = DEFAULT_LLM_SYSTEM_PROMPT
    search_suffix: str = RECIPE_SEARCH_SUFFIX
    max_workers: int = DEFAULT_MAX_WORKERS
    cancel_poll_seconds: float = DEFAULT_CANCEL_POLL_SECONDS


def build_search_query(recipe_name: str, suffix: str = RECIPE_SEARCH_SUFFIX) -> str:
    return f"{recipe_name} {suffix}".strip()


class RecipeRecommender:
    """Turn an ingredient photo into recipes, optionally with ranked videos."""

    def __init__(
        self,
        vision_client: VisionModel,
        video_client: VideoSearch | None = None,
        *,
        settings: RecommenderSettings | None = None,
    ) -> None:
        self._vision_client = vision_client
        self._video_client = video_client
        self._settings = settings or RecommenderSettings()

    def recommend(
        self,
        *,
        image_bytes: bytes,
        mime_type: str | None,
        modifier: str | None = None,
    ) -> RecommendationResult:
        """Ask the vision model for recipes.

        Input validation and model availability errors propagate; anything
        wrong with the model's output degrades into an empty recipe list.
        """

        raw_text = self._vision_client.generate(
            prompt=build_user_prompt(modifier),
            image_bytes=image_bytes,
            mime_type=mime_type,
            system_prompt=self._settings.system_prompt,
        )
        parsed = parse_recommendations(raw_text)
        if parsed.degraded:
            logger.warning(
                "returning degraded recommendation result",
                extra={"reason": parsed.diagnostic},
            )
        return parsed.value

    def recommend_with_videos(
        self,
        *,
        image_bytes: bytes,
        mime_type: str | None,
        modifier: str | None = None,
        video_count: int = MAX_VIDEOS_PER_RECIPE,
        cancel_event: threading.Event | None = None,
    ) -> EnrichedRecommendationResult:
        """Recommend recipes and attach up to three ranked videos to each."""

        result = self.recommend(
            image_bytes=image_bytes, mime_type=mime_type, modifier=modifier
        )
        enriched = self._enrich_all(result.recipes, video_count, cancel_event)
        return EnrichedRecommendationResult(recipes=enriched, message=result.message)

    def find_videos(
        self,
        recipe_name: str,
        count: int = MAX_VIDEOS_PER_RECIPE,
        *,
        cancel_event: threading.Event | None = None,
    ) -> FailSoft[list[VideoSummary]]:
        """Search, fetch details and rank the videos for a single recipe."""

        if self._video_client is None:
            return FailSoft([], diagnostic="video search is not configured")

        query = build_search_query(recipe_name, self._settings.search_suffix)
        search = self._video_client.search_ids(query)
        if search.degraded:
            return FailSoft([], diagnostic=search.diagnostic)
        if not search.value:
            logger.info("no videos found", extra={"query": query})
            return FailSoft([])
        if cancel_event is not None and cancel_event.is_set():
            return FailSoft([], diagnostic="cancelled")

        details = self._video_client.fetch_details(search.value)
        if details.degraded:
            return FailSoft([], diagnostic=details.diagnostic)

        return FailSoft(rank_videos(details.value, count))

    def _enrich_one(
        self,
        recipe: RecipeSuggestion,
        video_count: int,
        cancel_event: threading.Event | None,
    ) -> EnrichedRecipe:
        try:
            lookup = self.find_videos(
                recipe.name, video_count, cancel_event=cancel_event
            )
        except Exception as exc:  # noqa: BLE001 - one recipe must not sink the rest
            logger.exception(
                "video enrichment failed", extra={"recipe": recipe.name}
            )
            return EnrichedRecipe(recipe=recipe, videos=(), video_error=str(exc))

        logger.info(
            "attached videos to recipe",
            extra={"recipe": recipe.name, "video_count": len(lookup.value)},
        )
        return EnrichedRecipe(
            recipe=recipe,
            videos=tuple(lookup.value),
            video_error=lookup.diagnostic,
        )

    def _enrich_all(
        self,
        recipes: Sequence[RecipeSuggestion],
        video_count: int,
        cancel_event: threading.Event | None,
    ) -> tuple[EnrichedRecipe, ...]:
        if not recipes:
            return ()

        workers = max(1, min(len(recipes), self._settings.max_workers))
        executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="recipe-enrichment"
        )
        futures: dict[Future[EnrichedRecipe], int] = {
            executor.submit(self._enrich_one, recipe, video_count, cancel_event): idx
            for idx, recipe in enumerate(recipes)
        }
        results: dict[int, EnrichedRecipe] = {}
        pending = set(futures)
        try:
            while pending:
                if cancel_event is not None and cancel_event.is_set():
                    for future in pending:
                        future.cancel()
                    raise EnrichmentCancelledError("recommendation request cancelled")
                done, pending = wait(
                    pending,
                    timeout=self._settings.cancel_poll_seconds,
                    return_when=FIRST_COMPLETED,
                )
                for future in done:
                    results[futures[future]] = future.result()
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return tuple(results[idx] for idx in range(len(recipes)))
