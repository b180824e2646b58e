import logging
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.errors import from_service_error, internal_error
from app.deps.auth import get_current_user_id
from app.deps.common import get_db_session, get_trace_id, get_video_source
from collection.clients.source import VideoMetadataSource
from service.dto import AddVideoRequestDTO, DeleteVideoResponseDTO, VideoDTO, VideoWithOwnerDTO
from service.errors import ServiceError
from service import video_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/videos", tags=["videos"])


@router.post("", response_model=VideoDTO, status_code=201)
def add_video(
    request: AddVideoRequestDTO,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_db_session),
    trace_id: str = Depends(get_trace_id),
    source: VideoMetadataSource = Depends(get_video_source)
) -> VideoDTO:
    """Start tracking a YouTube video; its first snapshot is recorded immediately"""
    logger.info("Add video request received", extra={"trace_id": trace_id, "user_id": user_id})
    try:
        video = video_service.register_video(
            request.video_url,
            owner_id=user_id,
            trace_id=trace_id,
            session=session,
            source=source
        )
        return VideoDTO.from_video(video)
    except ServiceError as e:
        raise from_service_error(e, trace_id)
    except Exception as e:
        raise internal_error(e, trace_id)


@router.get("/mine", response_model=List[VideoDTO])
def my_videos(
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_db_session),
    trace_id: str = Depends(get_trace_id)
) -> List[VideoDTO]:
    try:
        return [VideoDTO.from_video(v) for v in video_service.list_user_videos(user_id, session=session)]
    except Exception as e:
        raise internal_error(e, trace_id)


@router.get("/all", response_model=List[VideoWithOwnerDTO])
def all_videos(
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_db_session),
    trace_id: str = Depends(get_trace_id)
) -> List[VideoWithOwnerDTO]:
    """Every user's tracked videos, newest first"""
    try:
        return [VideoWithOwnerDTO.from_video(v) for v in video_service.list_all_videos(session=session)]
    except Exception as e:
        raise internal_error(e, trace_id)


@router.delete("/{video_pk}", response_model=DeleteVideoResponseDTO)
def delete_video(
    video_pk: str,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_db_session),
    trace_id: str = Depends(get_trace_id)
) -> DeleteVideoResponseDTO:
    try:
        video_service.delete_video(video_pk, owner_id=user_id, trace_id=trace_id, session=session)
        return DeleteVideoResponseDTO(message="Video deleted successfully")
    except ServiceError as e:
        raise from_service_error(e, trace_id)
    except Exception as e:
        raise internal_error(e, trace_id)
