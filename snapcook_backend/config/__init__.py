"""Static configuration shipped with the codebase."""

# LLM defaults are in a dedicated module for clarity and reuse.
from .llm import (
    DEFAULT_LLM_MODEL,
    DEFAULT_LLM_SYSTEM_PROMPT,
    DEFAULT_LLM_TIMEOUT_SECONDS,
)
from .youtube import (
    DEFAULT_YOUTUBE_TIMEOUT_SECONDS,
    MAX_VIDEOS_PER_RECIPE,
    RECIPE_SEARCH_SUFFIX,
)

__all__ = [
    "DEFAULT_LLM_MODEL",
    "DEFAULT_LLM_SYSTEM_PROMPT",
    "DEFAULT_LLM_TIMEOUT_SECONDS",
    "DEFAULT_YOUTUBE_TIMEOUT_SECONDS",
    "MAX_VIDEOS_PER_RECIPE",
    "RECIPE_SEARCH_SUFFIX",
]
