import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from analysis.aggregation import DashboardSummary
from app.api.errors import from_service_error, internal_error
from app.deps.auth import get_current_user_id
from app.deps.common import get_db_session, get_trace_id
from service.dto import VideoAnalyticsDTO
from service.errors import ServiceError
from service import analytics_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/dashboard", response_model=DashboardSummary)
def dashboard(
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_db_session),
    trace_id: str = Depends(get_trace_id)
) -> DashboardSummary:
    """Totals of the latest snapshots across the caller's videos"""
    try:
        return analytics_service.get_dashboard(user_id, trace_id=trace_id, session=session)
    except Exception as e:
        raise internal_error(e, trace_id)


@router.get("/overview", response_model=DashboardSummary)
def overview(
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_db_session),
    trace_id: str = Depends(get_trace_id)
) -> DashboardSummary:
    """Same summary over every tracked video in the system"""
    try:
        return analytics_service.get_overview(trace_id=trace_id, session=session)
    except Exception as e:
        raise internal_error(e, trace_id)


@router.get("/videos/{video_pk}", response_model=VideoAnalyticsDTO)
def video_analytics(
    video_pk: str,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_db_session),
    trace_id: str = Depends(get_trace_id)
) -> VideoAnalyticsDTO:
    """First/latest/growth plus the snapshot history in insertion order"""
    try:
        return analytics_service.get_video_analytics(video_pk, session=session)
    except ServiceError as e:
        raise from_service_error(e, trace_id)
    except Exception as e:
        raise internal_error(e, trace_id)
