"""Request-scoped value objects passed between pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Difficulty(str, Enum):
    """Difficulty buckets the chef persona is asked to choose from."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def from_label(cls, label: str | None) -> Optional["Difficulty"]:
        """Map a Korean or English label onto a bucket, or ``None``."""

        normalized = (label or "").strip().lower()
        return _DIFFICULTY_LABELS.get(normalized)


_DIFFICULTY_LABELS = {
    "쉬움": Difficulty.EASY,
    "easy": Difficulty.EASY,
    "보통": Difficulty.MEDIUM,
    "medium": Difficulty.MEDIUM,
    "어려움": Difficulty.HARD,
    "hard": Difficulty.HARD,
}


@dataclass(frozen=True, slots=True)
class RecipeSuggestion:
    """One candidate recipe produced by the vision model."""

    name: str
    description: str
    ingredients: tuple[str, ...] = ()
    instructions: tuple[str, ...] = ()
    estimated_time_minutes: int = 0
    difficulty: str = ""
    tips: str = ""

    @property
    def difficulty_level(self) -> Difficulty | None:
        # The model is free to answer with any label; only known ones map.
        return Difficulty.from_label(self.difficulty)


@dataclass(frozen=True, slots=True)
class RecommendationResult:
    """Suggestions returned by the model plus its free-text message."""

    recipes: tuple[RecipeSuggestion, ...]
    message: str = ""


@dataclass(frozen=True, slots=True)
class RawVideo:
    """Video metadata as returned by the details endpoint."""

    video_id: str
    title: str = ""
    description: str = ""
    channel_title: str = ""
    thumbnails: dict[str, str] = field(default_factory=dict)
    view_count: int = 0


@dataclass(frozen=True, slots=True)
class VideoSummary:
    """A ranked video ready to be shown next to a recipe."""

    video_id: str
    title: str
    description: str
    thumbnail_url: str
    channel_title: str
    view_count: int
    video_url: str


@dataclass(frozen=True, slots=True)
class EnrichedRecipe:
    """A suggestion with its top videos attached."""

    recipe: RecipeSuggestion
    videos: tuple[VideoSummary, ...] = ()
    video_error: str | None = None


@dataclass(frozen=True, slots=True)
class EnrichedRecommendationResult:
    recipes: tuple[EnrichedRecipe, ...]
    message: str = ""
