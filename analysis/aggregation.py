"""Summary statistics over per-video snapshot sequences.

Everything here is a pure function of its input: sequences are read in
insertion order and never re-sorted or mutated, so the functions are safe to
call concurrently from any number of requests.
"""
import math
from dataclasses import dataclass
from datetime import datetime
from fractions import Fraction
from typing import Any, Iterable, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class Measurement:
    """One (views, likes, comments) tuple"""
    views: int = 0
    likes: int = 0
    comments: int = 0

    @classmethod
    def of(cls, snapshot: Any) -> "Measurement":
        """Build from an ORM snapshot row or pass a Measurement through"""
        if isinstance(snapshot, Measurement):
            return snapshot
        return cls(
            views=int(snapshot.view_count or 0),
            likes=int(snapshot.like_count or 0),
            comments=int(snapshot.comment_count or 0),
        )


Measurement.ZERO = Measurement()

SnapshotLike = Union[Measurement, Any]


def latest(sequence: Sequence[SnapshotLike]) -> Measurement:
    """Last element by insertion order, zeros when empty"""
    if not sequence:
        return Measurement.ZERO
    return Measurement.of(sequence[-1])


def first(sequence: Sequence[SnapshotLike]) -> Measurement:
    """First recorded element, zeros when empty"""
    if not sequence:
        return Measurement.ZERO
    return Measurement.of(sequence[0])


def round_half_up(value: Fraction) -> int:
    """Nearest integer, ties toward positive infinity (2.5 -> 3, -2.5 -> -2)"""
    return math.floor(value + Fraction(1, 2))


def growth(baseline: Measurement, current: Measurement) -> int:
    """Percentage change in views from baseline to current"""
    if baseline.views == 0:
        return 100 if current.views > 0 else 0
    return round_half_up(Fraction(current.views - baseline.views, baseline.views) * 100)


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class DashboardVideo(_CamelModel):
    id: str
    title: str
    thumbnail: str
    current_views: int = Field(alias="currentViews")
    first_day_views: int = Field(alias="firstDayViews")
    added_at: Optional[datetime] = Field(default=None, alias="addedAt")


class DashboardSummary(_CamelModel):
    total_videos: int = Field(alias="totalVideos")
    total_views: int = Field(alias="totalViews")
    total_likes: int = Field(alias="totalLikes")
    total_comments: int = Field(alias="totalComments")
    videos: List[DashboardVideo] = Field(default_factory=list)


class VideoSummary(_CamelModel):
    first: Measurement
    latest: Measurement
    growth: int
    snapshot_count: int = Field(alias="snapshotCount")


def video_summary(video: Any) -> VideoSummary:
    """First/latest/growth for one video"""
    sequence = list(video.metrics_snapshots)
    baseline, current = first(sequence), latest(sequence)
    return VideoSummary(
        first=baseline,
        latest=current,
        growth=growth(baseline, current),
        snapshot_count=len(sequence),
    )


def dashboard_summary(videos: Iterable[Any]) -> DashboardSummary:
    """Totals of the latest measurements plus per-video current/baseline views"""
    total_videos = total_views = total_likes = total_comments = 0
    rows = []

    for video in videos:
        sequence = list(video.metrics_snapshots)
        current = latest(sequence)
        total_videos += 1
        total_views += current.views
        total_likes += current.likes
        total_comments += current.comments
        rows.append(DashboardVideo(
            id=video.id,
            title=video.title,
            thumbnail=video.thumbnail_url,
            current_views=current.views,
            first_day_views=first(sequence).views,
            added_at=video.added_at,
        ))

    return DashboardSummary(
        total_videos=total_videos,
        total_views=total_views,
        total_likes=total_likes,
        total_comments=total_comments,
        videos=rows,
    )
