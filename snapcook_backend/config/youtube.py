"""Defaults for the YouTube Data API integration."""

YOUTUBE_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
YOUTUBE_VIDEOS_URL = "https://www.googleapis.com/youtube/v3/videos"
YOUTUBE_WATCH_URL_PREFIX = "https://www.youtube.com/watch?v="

# Search results are localized for Korean viewers.
YOUTUBE_REGION_CODE = "KR"
YOUTUBE_RELEVANCE_LANGUAGE = "ko"

# Candidates fetched per search; ranking keeps only the top few.
DEFAULT_SEARCH_LIMIT = 10
MAX_VIDEOS_PER_RECIPE = 3
DEFAULT_YOUTUBE_TIMEOUT_SECONDS = 10.0

# Appended to each recipe name to bias results toward cooking videos.
RECIPE_SEARCH_SUFFIX = "레시피"
