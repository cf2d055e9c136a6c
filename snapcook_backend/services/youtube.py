"""YouTube Data API client used to find cooking videos for a recipe."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import requests

from snapcook_backend.config import DEFAULT_YOUTUBE_TIMEOUT_SECONDS
from snapcook_backend.config.youtube import (
    DEFAULT_SEARCH_LIMIT,
    YOUTUBE_REGION_CODE,
    YOUTUBE_RELEVANCE_LANGUAGE,
    YOUTUBE_SEARCH_URL,
    YOUTUBE_VIDEOS_URL,
)
from snapcook_backend.services.results import FailSoft
from snapcook_backend.services.schemas import RawVideo

logger = logging.getLogger(__name__)

_THUMBNAIL_RESOLUTIONS = ("default", "medium", "high")


class VideoServiceError(RuntimeError):
    """Raised internally when a YouTube call fails or returns junk."""


@dataclass(slots=True)
class YouTubeSettings:
    """Configuration block for the YouTube Data API."""

    api_key: str | None
    timeout_seconds: float = DEFAULT_YOUTUBE_TIMEOUT_SECONDS
    search_url: str = YOUTUBE_SEARCH_URL
    videos_url: str = YOUTUBE_VIDEOS_URL


def parse_view_count(value: object) -> int:
    """Return a non-negative view count; absent or garbled values become 0."""

    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, str) and value.strip().isdecimal():
        try:
            return int(value.strip())
        except ValueError:
            return 0
    return 0


def _parse_thumbnails(snippet: Mapping[str, Any]) -> dict[str, str]:
    thumbnails = snippet.get("thumbnails")
    if not isinstance(thumbnails, dict):
        return {}

    urls: dict[str, str] = {}
    for resolution in _THUMBNAIL_RESOLUTIONS:
        entry = thumbnails.get(resolution)
        if isinstance(entry, dict) and isinstance(entry.get("url"), str):
            urls[resolution] = entry["url"]
    return urls


def _text(mapping: Mapping[str, Any], key: str) -> str:
    value = mapping.get(key)
    return value if isinstance(value, str) else ""


def _parse_video(item: Mapping[str, Any]) -> RawVideo | None:
    video_id = item.get("id")
    if not isinstance(video_id, str) or not video_id:
        return None

    snippet = item.get("snippet")
    if not isinstance(snippet, dict):
        snippet = {}
    statistics = item.get("statistics")
    if not isinstance(statistics, dict):
        statistics = {}

    return RawVideo(
        video_id=video_id,
        title=_text(snippet, "title"),
        description=_text(snippet, "description"),
        channel_title=_text(snippet, "channelTitle"),
        thumbnails=_parse_thumbnails(snippet),
        view_count=parse_view_count(statistics.get("viewCount")),
    )


class YouTubeClient:
    """Two-step search: find candidate ids, then fetch their statistics."""

    def __init__(self, settings: YouTubeSettings) -> None:
        self._settings = settings

    @property
    def configured(self) -> bool:
        return bool(self._settings.api_key)

    def _get_items(self, url: str, params: dict[str, Any]) -> list[Any]:
        try:
            response = requests.get(
                url,
                params={**params, "key": self._settings.api_key},
                timeout=self._settings.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise VideoServiceError(f"failed to reach YouTube API: {exc}") from exc

        if not response.ok:
            raise VideoServiceError(
                f"YouTube API returned {response.status_code}: "
                f"{response.text[:512]}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise VideoServiceError("invalid YouTube API response") from exc

        items = payload.get("items") if isinstance(payload, dict) else None
        if items is None:
            return []
        if not isinstance(items, list):
            raise VideoServiceError("YouTube API response 'items' is not a list")
        return items

    def search_ids(
        self, query: str, limit: int = DEFAULT_SEARCH_LIMIT
    ) -> FailSoft[list[str]]:
        """Return ids of videos matching ``query`` in search-result order."""

        if not self.configured:
            logger.warning("YOUTUBE_API_KEY not set; skipping video search")
            return FailSoft([], diagnostic="YouTube API key is not configured")

        try:
            items = self._get_items(
                self._settings.search_url,
                {
                    "part": "snippet",
                    "q": query,
                    "type": "video",
                    "maxResults": limit,
                    "regionCode": YOUTUBE_REGION_CODE,
                    "relevanceLanguage": YOUTUBE_RELEVANCE_LANGUAGE,
                },
            )
        except VideoServiceError as exc:
            logger.warning("YouTube search failed: %s", exc, extra={"query": query})
            return FailSoft([], diagnostic=str(exc))

        video_ids: list[str] = []
        for item in items:
            if not isinstance(item, dict) or not isinstance(item.get("id"), dict):
                continue
            video_id = item["id"].get("videoId")
            if isinstance(video_id, str) and video_id:
                video_ids.append(video_id)

        logger.info(
            "YouTube search complete",
            extra={"query": query, "video_count": len(video_ids)},
        )
        return FailSoft(video_ids)

    def fetch_details(self, video_ids: Sequence[str]) -> FailSoft[list[RawVideo]]:
        """Return snippet and statistics for ``video_ids`` in the same order."""

        if not video_ids:
            return FailSoft([])
        if not self.configured:
            logger.warning("YOUTUBE_API_KEY not set; skipping video details")
            return FailSoft([], diagnostic="YouTube API key is not configured")

        try:
            items = self._get_items(
                self._settings.videos_url,
                {"part": "snippet,statistics", "id": ",".join(video_ids)},
            )
        except VideoServiceError as exc:
            logger.warning(
                "YouTube video details failed: %s",
                exc,
                extra={"video_count": len(video_ids)},
            )
            return FailSoft([], diagnostic=str(exc))

        videos = [
            video
            for video in (
                _parse_video(item) for item in items if isinstance(item, dict)
            )
            if video is not None
        ]

        # Keep the search ranking for tie-breaking; unknown ids go last.
        position = {video_id: idx for idx, video_id in enumerate(video_ids)}
        videos.sort(key=lambda video: position.get(video.video_id, len(position)))
        return FailSoft(videos)


def init_youtube_client(settings: YouTubeSettings) -> YouTubeClient:
    """Factory to mirror the init_* pattern used across services."""

    return YouTubeClient(settings)
