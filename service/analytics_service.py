"""Analytics queries: dashboard summaries and per-video history"""
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from analysis.aggregation import DashboardSummary, dashboard_summary, video_summary
from core.models import Video
from core.snapshot_store import SnapshotStore
from service.dto import SnapshotDTO, VideoAnalyticsDTO, VideoDTO
from service.video_service import get_video

logger = logging.getLogger(__name__)


def get_dashboard(owner_id: str, *, trace_id: str, session: Session) -> DashboardSummary:
    """Summary over the user's videos"""
    videos = session.scalars(
        select(Video)
        .where(Video.owner_id == owner_id)
        .options(selectinload(Video.metrics_snapshots))
        .order_by(Video.added_at.desc())
    ).all()

    summary = dashboard_summary(videos)

    logger.info("Dashboard computed", extra={
        "trace_id": trace_id,
        "user_id": owner_id
    })
    return summary


def get_overview(*, trace_id: str, session: Session) -> DashboardSummary:
    """Summary over every tracked video in the system"""
    videos = session.scalars(
        select(Video)
        .options(selectinload(Video.metrics_snapshots))
        .order_by(Video.added_at.desc())
    ).all()

    summary = dashboard_summary(videos)

    logger.info("Overview computed", extra={"trace_id": trace_id})
    return summary


def get_video_analytics(video_pk: str, *, session: Session) -> VideoAnalyticsDTO:
    """Summary and snapshot history of one video"""
    video = get_video(video_pk, session=session)
    sequence = SnapshotStore(session).sequence(video)

    return VideoAnalyticsDTO(
        video=VideoDTO.from_video(video),
        summary=video_summary(video),
        snapshots=[SnapshotDTO.model_validate(s) for s in sequence],
    )
