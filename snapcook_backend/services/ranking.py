"""Rank and trim video metadata for display next to a recipe."""

from __future__ import annotations

from typing import Iterable, Mapping

from snapcook_backend.config.youtube import (
    MAX_VIDEOS_PER_RECIPE,
    YOUTUBE_WATCH_URL_PREFIX,
)
from snapcook_backend.services.schemas import RawVideo, VideoSummary

DESCRIPTION_LIMIT = 200
ELLIPSIS = "..."
THUMBNAIL_PRIORITY = ("high", "medium", "default")


def clamp_video_count(requested: int | None) -> int:
    """Clamp the requested number of videos into ``[1, 3]``."""

    if requested is None:
        return MAX_VIDEOS_PER_RECIPE
    return max(1, min(requested, MAX_VIDEOS_PER_RECIPE))


def select_thumbnail(thumbnails: Mapping[str, str] | None) -> str:
    """Return the highest-resolution thumbnail URL that is present."""

    for resolution in THUMBNAIL_PRIORITY:
        url = (thumbnails or {}).get(resolution)
        if url:
            return url
    return ""


def truncate_description(text: str | None, limit: int = DESCRIPTION_LIMIT) -> str:
    description = text or ""
    if len(description) <= limit:
        return description
    return description[:limit] + ELLIPSIS


def build_video_url(video_id: str) -> str:
    return f"{YOUTUBE_WATCH_URL_PREFIX}{video_id}"


def summarize_video(video: RawVideo) -> VideoSummary:
    return VideoSummary(
        video_id=video.video_id,
        title=video.title,
        description=truncate_description(video.description),
        thumbnail_url=select_thumbnail(video.thumbnails),
        channel_title=video.channel_title,
        view_count=video.view_count,
        video_url=build_video_url(video.video_id),
    )


def rank_videos(
    videos: Iterable[RawVideo] | None,
    requested: int | None = MAX_VIDEOS_PER_RECIPE,
) -> list[VideoSummary]:
    """Return the most-viewed videos first, keeping search order on ties."""

    if not videos:
        return []

    # sorted() is stable, also with reverse=True.
    ranked = sorted(videos, key=lambda video: video.view_count, reverse=True)
    return [summarize_video(video) for video in ranked[: clamp_video_count(requested)]]
