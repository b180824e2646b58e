#!/usr/bin/env python3
import logging
import argparse
import time
from datetime import datetime
from typing import Callable, NamedTuple, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from core.db import SessionLocal, utcnow
from core.models import Video
from core.logging import setup_json_logging
from core.snapshot_store import SnapshotStore
from collection.clients.source import VideoMetadataSource
from collection.clients.youtube import YouTubeClient

logger = logging.getLogger(__name__)

class RefreshSettings(BaseSettings):
    # Pause between per-video fetches to stay under the API rate limit
    refresh_delay_seconds: float = 0.1

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

class RefreshResult(NamedTuple):
    total: int
    appended: int
    failed: int

class SnapshotRefresher:
    """Appends one snapshot per tracked video on every refresh tick"""

    def __init__(
        self,
        source: VideoMetadataSource,
        session_factory: sessionmaker = SessionLocal,
        delay_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.source = source
        self.db: Session = session_factory()
        self.delay_seconds = RefreshSettings().refresh_delay_seconds if delay_seconds is None else delay_seconds
        self.sleep = sleep

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.db.close()

    def refresh_all(self, dry_run: bool = False) -> RefreshResult:
        """Fetch current metrics for every video and append a snapshot each"""
        video_pks = list(self.db.scalars(select(Video.id).order_by(Video.added_at)))
        # Taken after the listing so no listed video has a snapshot newer than the tick
        tick = utcnow()
        trace_id = f"refresh_snapshots_{tick.strftime('%Y%m%d_%H%M%S')}"

        logger.info(f"Starting snapshot refresh of {len(video_pks)} videos", extra={
            "trace_id": trace_id,
            "job": "refresh_snapshots"
        })

        appended = failed = 0

        for index, video_pk in enumerate(video_pks):
            if index and self.delay_seconds > 0:
                self.sleep(self.delay_seconds)

            if self._refresh_one(video_pk, tick, trace_id, dry_run):
                appended += 1
            else:
                failed += 1

        result = RefreshResult(total=len(video_pks), appended=appended, failed=failed)

        logger.info(
            f"Snapshot refresh completed: {result.appended}/{result.total} appended, {result.failed} failed",
            extra={"trace_id": trace_id, "job": "refresh_snapshots"}
        )
        return result

    def _refresh_one(self, video_pk: str, tick: datetime, trace_id: str, dry_run: bool) -> bool:
        """One video's unit of work; failures are logged and rolled back"""
        video = self.db.get(Video, video_pk)
        if video is None:
            # Deleted while the cycle was running
            return False

        external_id = video.video_id
        try:
            stats = self.source.fetch(external_id)
            if stats is None:
                logger.warning("Video no longer available upstream, skipping", extra={
                    "trace_id": trace_id,
                    "video_id": external_id
                })
                return False

            if dry_run:
                return True

            SnapshotStore(self.db).append(
                video,
                view_count=stats.view_count,
                like_count=stats.like_count,
                comment_count=stats.comment_count,
                captured_at=tick,
            )
            self.db.commit()
            return True

        except Exception as e:
            self.db.rollback()
            logger.warning(f"Skipping video {external_id} this cycle: {e}", extra={
                "trace_id": trace_id,
                "video_id": external_id
            })
            return False

def main(argv: Optional[list] = None):
    parser = argparse.ArgumentParser(description="Append a metrics snapshot for every tracked video")
    parser.add_argument("--dry-run", action="store_true", help="Fetch but don't write to database")
    parser.add_argument("--delay", type=float, help="Seconds between per-video fetches")

    args = parser.parse_args(argv)

    setup_json_logging()

    with YouTubeClient() as youtube, SnapshotRefresher(youtube, delay_seconds=args.delay) as refresher:
        refresher.refresh_all(dry_run=args.dry_run)

if __name__ == "__main__":
    main()
