import uuid
from datetime import datetime, timezone

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from pydantic_settings import BaseSettings, SettingsConfigDict

class DatabaseSettings(BaseSettings):
    """Database configuration from environment"""
    database_url: str = "sqlite:///./video_tracker.db"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

def new_id() -> str:
    """Opaque primary key for users and videos"""
    return uuid.uuid4().hex

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

def configure_sqlite(engine: Engine) -> Engine:
    """Turn on foreign keys so ON DELETE CASCADE applies"""
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine

def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        # FastAPI runs sync endpoints in a threadpool
        return configure_sqlite(create_engine(url, connect_args={"check_same_thread": False}))
    return create_engine(url, pool_pre_ping=True, pool_recycle=300)

# Initialize settings
db_settings = DatabaseSettings()

# Create SQLAlchemy engine
engine = build_engine(db_settings.database_url)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()

def init_db_schema() -> None:
    """Create missing tables for local runs without Alembic"""
    import core.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
