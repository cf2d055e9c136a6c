"""Decode raw model output into recipe suggestions without ever raising."""

from __future__ import annotations

import json
import logging
from typing import Any

from snapcook_backend.services.results import FailSoft
from snapcook_backend.services.schemas import (
    RecipeSuggestion,
    RecommendationResult,
)

logger = logging.getLogger(__name__)

DEGRADED_MESSAGE_PREFIX = "죄송합니다. 응답 처리 중 오류가 발생했습니다. 원본 응답: "
EMPTY_RESULT_MESSAGE = "이미지에서 추천할 수 있는 레시피를 찾지 못했습니다."
_CODE_FENCE_MARKERS = ("```json", "```")


class UpstreamFormatError(ValueError):
    """Raised internally when model output does not match the recipe schema."""


def strip_code_fences(raw_text: str) -> str:
    """Drop Markdown code-fence markers and surrounding whitespace."""

    text = raw_text
    for marker in _CODE_FENCE_MARKERS:
        text = text.replace(marker, "")
    return text.strip()


def _require_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise UpstreamFormatError(f"recipe field {key!r} must be a string")
    return value


def _optional_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise UpstreamFormatError(f"recipe field {key!r} must be a string")
    return value


def _require_str_list(payload: dict[str, Any], key: str) -> tuple[str, ...]:
    value = payload.get(key)
    if not isinstance(value, list) or not all(
        isinstance(entry, str) for entry in value
    ):
        raise UpstreamFormatError(f"recipe field {key!r} must be a list of strings")
    return tuple(value)


def _parse_minutes(value: object) -> int:
    if value is None:
        return 0
    minutes: int | None = None
    if isinstance(value, bool):
        minutes = None
    elif isinstance(value, int):
        minutes = value
    elif isinstance(value, float) and value.is_integer():
        minutes = int(value)
    elif isinstance(value, str) and value.strip().isdecimal():
        try:
            minutes = int(value.strip())
        except ValueError:
            minutes = None
    if minutes is None or minutes < 0:
        raise UpstreamFormatError(
            f"estimatedTime must be a non-negative integer, got {value!r}"
        )
    return minutes


def parse_recipe(payload: object) -> RecipeSuggestion:
    """Build a suggestion from one JSON recipe object in the wire format."""

    if not isinstance(payload, dict):
        raise UpstreamFormatError("each recipe must be a JSON object")
    return RecipeSuggestion(
        name=_require_str(payload, "recipeName"),
        description=_require_str(payload, "description"),
        ingredients=_require_str_list(payload, "ingredients"),
        instructions=_require_str_list(payload, "instructions"),
        estimated_time_minutes=_parse_minutes(payload.get("estimatedTime")),
        difficulty=_optional_str(payload, "difficulty"),
        tips=_optional_str(payload, "tips"),
    )


def decode_recommendations(raw_text: str) -> RecommendationResult:
    """Strictly decode model output; raises ``UpstreamFormatError`` on drift."""

    candidate = strip_code_fences(raw_text or "")
    try:
        payload = json.loads(candidate)
    except (ValueError, RecursionError) as exc:
        # ValueError also covers integer literals past the digit limit.
        raise UpstreamFormatError(f"model output is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise UpstreamFormatError("model output must be a JSON object")

    raw_recipes = payload.get("recipes")
    if not isinstance(raw_recipes, list):
        raise UpstreamFormatError("'recipes' must be a list")

    message = payload.get("message")
    if message is None:
        message = ""
    if not isinstance(message, str):
        raise UpstreamFormatError("'message' must be a string")

    recipes = tuple(parse_recipe(entry) for entry in raw_recipes)
    if not recipes and not message:
        message = EMPTY_RESULT_MESSAGE
    return RecommendationResult(recipes=recipes, message=message)


def parse_recommendations(raw_text: str | None) -> FailSoft[RecommendationResult]:
    """Decode model output, degrading to an empty result on any failure.

    The degraded result carries no recipes and a message that embeds the
    original text; the decode failure reason is kept as the diagnostic.
    """

    text = raw_text or ""
    try:
        return FailSoft(decode_recommendations(text))
    except UpstreamFormatError as exc:
        logger.warning(
            "failed to parse vision model output: %s",
            exc,
            extra={"raw_chars": len(text)},
        )
        return FailSoft(
            RecommendationResult(
                recipes=(), message=f"{DEGRADED_MESSAGE_PREFIX}{text}"
            ),
            diagnostic=str(exc),
        )
