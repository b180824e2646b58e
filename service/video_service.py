"""Video registration, listing and deletion"""
import logging
import time
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from collection.clients.source import VideoMetadataSource
from collection.clients.youtube import extract_video_id
from core.db import utcnow
from core.models import Video
from core.snapshot_store import SnapshotStore
from service.errors import (
    DependencyError, InvalidVideoUrlError, VideoAlreadyExistsError, VideoNotFoundError
)

logger = logging.getLogger(__name__)


def register_video(
    video_url: str,
    *,
    owner_id: str,
    trace_id: str,
    session: Session,
    source: VideoMetadataSource
) -> Video:
    """
    Start tracking a video for a user.

    The first snapshot is written with the fetched counters in the same
    transaction that creates the video, so the first-day baseline exists
    before the first scheduled refresh.

    Raises:
        InvalidVideoUrlError: URL has no recognizable video ID
        VideoAlreadyExistsError: user already tracks this video
        VideoNotFoundError: YouTube has no such video
        DependencyError: metadata source failed
    """
    start_time = time.time()
    video_id = extract_video_id(video_url)
    if not video_id:
        raise InvalidVideoUrlError("Invalid YouTube URL")

    existing = session.execute(
        select(Video.id).where(Video.owner_id == owner_id, Video.video_id == video_id)
    ).first()
    if existing:
        raise VideoAlreadyExistsError("Video already added")

    try:
        stats = source.fetch(video_id)
    except Exception as e:
        logger.error("Metadata fetch failed during registration", extra={
            "trace_id": trace_id,
            "video_id": video_id,
            "error_type": type(e).__name__
        })
        raise DependencyError(f"Video metadata source unavailable: {e}") from e

    if stats is None:
        raise VideoNotFoundError("Video not found")

    now = utcnow()
    video = Video(
        owner_id=owner_id,
        video_id=video_id,
        title=stats.title,
        thumbnail_url=stats.thumbnail_url,
        url=video_url,
        added_at=now,
    )
    session.add(video)

    try:
        SnapshotStore(session).append(
            video,
            view_count=stats.view_count,
            like_count=stats.like_count,
            comment_count=stats.comment_count,
            captured_at=now,
        )
        session.commit()
    except Exception as e:
        session.rollback()
        if isinstance(e, IntegrityError) or isinstance(e.__cause__, IntegrityError):
            # Lost a race with a concurrent registration of the same video
            raise VideoAlreadyExistsError("Video already added") from e
        raise

    session.refresh(video)

    logger.info("Video registered", extra={
        "trace_id": trace_id,
        "user_id": owner_id,
        "video_id": video_id,
        "latency_ms": int((time.time() - start_time) * 1000)
    })

    return video


def list_user_videos(owner_id: str, *, session: Session) -> List[Video]:
    """Videos owned by the user, newest first"""
    return list(session.scalars(
        select(Video)
        .where(Video.owner_id == owner_id)
        .options(selectinload(Video.metrics_snapshots))
        .order_by(Video.added_at.desc())
    ))


def list_all_videos(*, session: Session) -> List[Video]:
    """Every tracked video in the system with its owner, newest first"""
    return list(session.scalars(
        select(Video)
        .options(selectinload(Video.metrics_snapshots), selectinload(Video.owner))
        .order_by(Video.added_at.desc())
    ))


def get_video(video_pk: str, *, session: Session) -> Video:
    video = session.get(Video, video_pk)
    if video is None:
        raise VideoNotFoundError("Video not found")
    return video


def delete_video(video_pk: str, *, owner_id: str, trace_id: str, session: Session) -> None:
    """Delete a video and all its snapshots; only the owner may do this"""
    video = session.scalars(
        select(Video).where(Video.id == video_pk, Video.owner_id == owner_id)
    ).first()
    if video is None:
        raise VideoNotFoundError("Video not found")

    external_id = video.video_id
    session.delete(video)
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info("Video deleted", extra={
        "trace_id": trace_id,
        "user_id": owner_id,
        "video_id": external_id
    })
