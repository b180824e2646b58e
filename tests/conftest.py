"""Common test fixtures for all test modules"""
import pytest
from datetime import datetime, timezone
import pandas as pd
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.db import Base, configure_sqlite
from core.models import User, Video
from collection.clients.source import StubVideoSource, VideoStats


@pytest.fixture
def engine():
    """In-memory SQLite shared across threads"""
    engine = configure_sqlite(create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    ))
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_user(db_session):
    """Create and commit a user"""
    counter = {"n": 0}

    def _make_user(name: str = None) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(email=f"User{n}@Example.com", name=name or f"user{n}", password_hash="x")
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_video(db_session):
    """Create and commit a video owned by the given user, without snapshots"""
    def _make_video(owner: User, video_id: str, title: str = None) -> Video:
        video = Video(
            owner_id=owner.id,
            video_id=video_id,
            title=title or f"Video {video_id}",
            thumbnail_url=f"https://img.youtube.com/vi/{video_id}/mqdefault.jpg",
            url=f"https://www.youtube.com/watch?v={video_id}",
        )
        db_session.add(video)
        db_session.commit()
        return video

    return _make_video


def _stats(video_id: str, views: int, likes: int = 0, comments: int = 0) -> VideoStats:
    return VideoStats(
        video_id=video_id,
        title=f"Title {video_id}",
        thumbnail_url=f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg",
        view_count=views,
        like_count=likes,
        comment_count=comments,
    )


@pytest.fixture
def video_stats():
    """Factory for VideoStats payloads"""
    return _stats


@pytest.fixture
def stub_source():
    return StubVideoSource({
        "dQw4w9WgXcQ": _stats("dQw4w9WgXcQ", 1000, 50, 7),
        "9bZkp7q19f0": _stats("9bZkp7q19f0", 250, 10, 2),
    })


@pytest.fixture
def client(session_factory, stub_source):
    """API client with DB session and metadata source overridden"""
    from app.main import app
    from app.deps.common import get_db_session, get_video_source

    def _override_get_db_session():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db_session] = _override_get_db_session
    app.dependency_overrides[get_video_source] = lambda: stub_source
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {user.id}"}
    return _auth_headers


@pytest.fixture
def sample_velocity_data():
    """Sample velocity calculation data with edge cases"""
    def row(pk, position, hour, minute, views):
        return {
            "video_pk": pk,
            "video_id": f"yt_{pk}",
            "title": f"Video {pk}",
            "position": position,
            "captured_at": datetime(2025, 1, 1, hour, minute, tzinfo=timezone.utc),
            "view_count": views,
        }

    return pd.DataFrame([
        # Normal case: +100 views in the first hour, +150 in the second
        row("v1", 0, 10, 0, 1000),
        row("v1", 1, 11, 0, 1100),
        row("v1", 2, 12, 0, 1250),

        # Zero time delta (same timestamp)
        row("v2", 0, 10, 0, 2000),
        row("v2", 1, 10, 0, 2100),

        # Negative delta (view count decrease)
        row("v3", 0, 10, 0, 3000),
        row("v3", 1, 11, 0, 2900),

        # Outlier case
        row("v4", 0, 10, 0, 100),
        row("v4", 1, 11, 0, 100000),
    ])
