"""Append-only per-video snapshot sequence"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.db import as_utc, utcnow
from core.models import Video, VideoMetricsSnapshot

logger = logging.getLogger(__name__)


class SnapshotStoreError(Exception):
    """Snapshot could not be written; prior entries are untouched"""


class SnapshotOrderError(SnapshotStoreError):
    """Snapshot is older than the last stored snapshot of the video"""


class SnapshotStore:
    """
    Stores one measurement tuple per refresh event for each video.

    Physical order is the ``position`` column, assigned at append time as the
    current sequence length. Rows are never updated or removed one by one;
    they only go away together with their video.

    The store flushes but never commits: the caller owns the unit of work and
    must roll back the session after a ``SnapshotStoreError``.
    """

    def __init__(self, session: Session):
        self.session = session

    def append(
        self,
        video: Video,
        *,
        view_count: int,
        like_count: int,
        comment_count: int,
        captured_at: Optional[datetime] = None,
    ) -> VideoMetricsSnapshot:
        """Add a snapshot at the end of the video's sequence"""
        counts = {"view_count": view_count, "like_count": like_count, "comment_count": comment_count}
        for name, value in counts.items():
            if value is None or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")

        video_pk, external_id = video.id, video.video_id
        captured_at = as_utc(captured_at or utcnow())
        sequence = video.metrics_snapshots

        if sequence:
            last_captured = as_utc(sequence[-1].captured_at)
            if captured_at < last_captured:
                raise SnapshotOrderError(
                    f"Snapshot at {captured_at.isoformat()} precedes last snapshot "
                    f"at {last_captured.isoformat()} for video {video_pk}"
                )

        snapshot = VideoMetricsSnapshot(
            position=len(sequence),
            captured_at=captured_at,
            **counts,
        )

        try:
            sequence.append(snapshot)
            self.session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Failed to append snapshot: {e}", extra={"video_id": external_id})
            raise SnapshotStoreError(f"Failed to append snapshot for video {video_pk}: {e}") from e

        return snapshot

    def sequence(self, video: Video) -> List[VideoMetricsSnapshot]:
        """Full sequence in insertion order; a fresh list on every call"""
        return list(video.metrics_snapshots)

    def length(self, video: Video) -> int:
        return len(video.metrics_snapshots)
