from sqlalchemy import (
    Column, String, Integer, BigInteger, BIGINT, TIMESTAMP, ForeignKey, Index, CheckConstraint
)
from sqlalchemy.orm import relationship
from core.db import Base, utcnow

class VideoMetricsSnapshot(Base):
    """Video metrics snapshot table for time-series analysis"""
    __tablename__ = "video_metrics_snapshot"

    # SQLite only autoincrements INTEGER PRIMARY KEY
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    video_pk = Column(String(32), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False,
                      comment="Reference to tracked video")
    position = Column(Integer, nullable=False, comment="0-based index in the video's sequence")
    captured_at = Column(TIMESTAMP(timezone=True), nullable=False,
                         default=utcnow, comment="Snapshot capture time (UTC)")
    view_count = Column(BIGINT, nullable=False, default=0, comment="View count at capture time")
    like_count = Column(BIGINT, nullable=False, default=0, comment="Like count at capture time")
    comment_count = Column(BIGINT, nullable=False, default=0, comment="Comment count at capture time")

    video = relationship("Video", back_populates="metrics_snapshots")

    __table_args__ = (
        Index('idx_video_metrics_video_position_unique', 'video_pk', 'position', unique=True),
        CheckConstraint('view_count >= 0 AND like_count >= 0 AND comment_count >= 0',
                        name='ck_video_metrics_non_negative'),
    )
