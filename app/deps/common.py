"""Common dependencies for FastAPI dependency injection"""
import uuid
from datetime import datetime, timezone
from typing import Generator

from sqlalchemy.orm import Session

from core.db import SessionLocal
from collection.clients.source import VideoMetadataSource
from collection.clients.youtube import YouTubeClient


def get_db_session() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields:
        Session: SQLAlchemy database session
    """
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def get_trace_id() -> str:
    """
    Generate unique trace ID for request tracking.

    Returns:
        str: Unique trace ID
    """
    return f"api_{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:8]}"


def get_video_source() -> Generator[VideoMetadataSource, None, None]:
    """
    Video metadata source dependency.

    Yields:
        VideoMetadataSource: YouTube client, closed after the request
    """
    with YouTubeClient() as client:
        yield client
