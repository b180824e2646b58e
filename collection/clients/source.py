"""Abstract video metadata source for registration and refresh"""
from abc import ABC, abstractmethod
from typing import Dict, Optional
from pydantic import BaseModel, Field

class VideoStats(BaseModel):
    """Current metadata and counters of one external video"""
    video_id: str
    title: str
    thumbnail_url: str
    view_count: int = Field(default=0, ge=0)
    like_count: int = Field(default=0, ge=0)
    comment_count: int = Field(default=0, ge=0)

class VideoMetadataSource(ABC):
    """Abstract base class for external video metadata sources"""

    @abstractmethod
    def fetch(self, video_id: str) -> Optional[VideoStats]:
        """Return current stats, or None if the video does not exist.

        Transport and API failures are raised, not swallowed.
        """
        pass

class StubVideoSource(VideoMetadataSource):
    """In-memory source for tests and local runs without an API key"""

    def __init__(self, videos: Optional[Dict[str, VideoStats]] = None, failing: Optional[set] = None):
        self.videos: Dict[str, VideoStats] = dict(videos or {})
        self.failing = set(failing or ())
        self.calls = []

    def put(self, stats: VideoStats) -> None:
        self.videos[stats.video_id] = stats

    def fetch(self, video_id: str) -> Optional[VideoStats]:
        self.calls.append(video_id)
        if video_id in self.failing:
            raise ConnectionError(f"Stub fetch failure for {video_id}")
        return self.videos.get(video_id)
