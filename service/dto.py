"""Data Transfer Objects for service layer"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field

from analysis.aggregation import VideoSummary


class _DTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class AddVideoRequestDTO(_DTO):
    """Request body for registering a video"""
    video_url: str = Field(alias="videoUrl", min_length=1, max_length=2048)


class SnapshotDTO(_DTO):
    """One stored measurement"""
    position: int
    date: datetime = Field(validation_alias="captured_at")
    views: int = Field(validation_alias="view_count")
    likes: int = Field(validation_alias="like_count")
    comments: int = Field(validation_alias="comment_count")


class OwnerDTO(_DTO):
    id: str
    name: str
    email: str


class VideoDTO(_DTO):
    """Tracked video with its snapshot history"""
    id: str
    owner_id: str = Field(alias="userId")
    video_id: str = Field(alias="videoId")
    title: str
    thumbnail: str
    url: str
    added_at: datetime = Field(alias="addedAt")
    analytics: List[SnapshotDTO] = Field(default_factory=list)

    @classmethod
    def from_video(cls, video) -> "VideoDTO":
        return cls(
            id=video.id,
            owner_id=video.owner_id,
            video_id=video.video_id,
            title=video.title,
            thumbnail=video.thumbnail_url,
            url=video.url,
            added_at=video.added_at,
            analytics=[SnapshotDTO.model_validate(s) for s in video.metrics_snapshots],
        )


class VideoWithOwnerDTO(VideoDTO):
    owner: Optional[OwnerDTO] = None

    @classmethod
    def from_video(cls, video) -> "VideoWithOwnerDTO":
        dto = super().from_video(video)
        owner = OwnerDTO.model_validate(video.owner) if video.owner is not None else None
        return dto.model_copy(update={"owner": owner})


class DeleteVideoResponseDTO(BaseModel):
    message: str


class VideoAnalyticsDTO(_DTO):
    """Per-video summary plus the full sequence in insertion order"""
    video: VideoDTO
    summary: VideoSummary
    snapshots: List[SnapshotDTO]


class HealthResponseDTO(BaseModel):
    """Service layer DTO for health check responses"""
    ok: bool = True
    timestamp: Optional[str] = None
    version: Optional[str] = None
    database: Optional[str] = None
