import httpx
import logging
import re
from typing import Dict, Any, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential_jitter

from collection.clients.source import VideoMetadataSource, VideoStats

logger = logging.getLogger(__name__)

VIDEO_URL_PATTERN = re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/)([^&\n?#]+)")

def extract_video_id(url: str) -> Optional[str]:
    """Pull the video ID out of a watch or youtu.be URL"""
    if not url:
        return None
    match = VIDEO_URL_PATTERN.search(url)
    return match.group(1) if match else None

def default_thumbnail(video_id: str) -> str:
    return f"https://img.youtube.com/vi/{video_id}/mqdefault.jpg"

class YouTubeSettings(BaseSettings):
    youtube_api_key: str
    youtube_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

def _is_retryable(exc: BaseException) -> bool:
    """Retry on 429 (rate limit), 5xx and transport errors"""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return isinstance(exc, httpx.RequestError)

class YouTubeClient(VideoMetadataSource):
    """YouTube Data API v3 metadata source"""

    def __init__(self, settings: Optional[YouTubeSettings] = None, client: Optional[httpx.Client] = None):
        self.settings = settings or YouTubeSettings()
        self.base_url = "https://www.googleapis.com/youtube/v3"
        self.client = client or httpx.Client(
            timeout=self.settings.youtube_timeout_seconds,
            limits=httpx.Limits(max_connections=5, max_keepalive_connections=2)
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.client.close()

    def close(self) -> None:
        self.client.close()

    def fetch(self, video_id: str) -> Optional[VideoStats]:
        """Fetch title, thumbnail and counters; None if the video does not exist"""
        data = self._make_request("videos", {
            "part": "snippet,statistics",
            "id": video_id
        })

        items = data.get("items", [])
        if not items:
            logger.info("Video not found on YouTube", extra={"video_id": video_id})
            return None

        return self._parse_video(items[0], video_id)

    @retry(
        retry=retry_if_exception(_is_retryable),
        stop=stop_after_attempt(5),
        wait=wait_exponential_jitter(initial=1, max=30, jitter=0.2),
        before_sleep=lambda retry_state: logger.warning(
            f"Retry {retry_state.attempt_number}: {retry_state.outcome.exception()}"
        ),
        reraise=True
    )
    def _make_request(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """Make HTTP request with retry logic for 429/5xx errors"""
        params = {
            **params,
            "key": self.settings.youtube_api_key
        }

        try:
            response = self.client.get(f"{self.base_url}/{endpoint}", params=params)

            if response.status_code == 429 or response.status_code >= 500:
                logger.warning(f"HTTP {response.status_code}: retrying request")

            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error {e.response.status_code}: {e}")
            raise
        except httpx.RequestError as e:
            logger.error(f"Request error: {e}")
            raise

    def _parse_video(self, item: Dict[str, Any], video_id: str) -> VideoStats:
        """Parse a videos.list item into VideoStats"""
        snippet = item.get("snippet", {})
        statistics = item.get("statistics", {})
        thumbnails = snippet.get("thumbnails", {})
        thumbnail = (thumbnails.get("medium") or thumbnails.get("default") or {}).get("url")

        return VideoStats(
            video_id=item.get("id", video_id),
            title=snippet.get("title", ""),
            thumbnail_url=thumbnail or default_thumbnail(video_id),
            view_count=_to_count(statistics.get("viewCount")),
            like_count=_to_count(statistics.get("likeCount")),
            comment_count=_to_count(statistics.get("commentCount"))
        )

def _to_count(value: Any) -> int:
    """Statistics arrive as strings and may be hidden; missing or bad means 0"""
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0
