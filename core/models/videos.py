from sqlalchemy import Column, String, Text, TIMESTAMP, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from core.db import Base, new_id, utcnow

class Video(Base):
    """Tracked video registered by a user"""
    __tablename__ = "videos"

    id = Column(String(32), primary_key=True, default=new_id, comment="Opaque video record ID")
    owner_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
                      index=True, comment="Owning user")
    video_id = Column(String(64), nullable=False, comment="YouTube video ID")
    title = Column(Text, nullable=False, comment="Video title")
    thumbnail_url = Column(Text, nullable=False, comment="Thumbnail image URL")
    url = Column(Text, nullable=False, comment="URL the video was registered with")
    added_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow,
                      comment="Registration time (UTC)")

    owner = relationship("User", back_populates="videos")
    # Storage order is position order; never re-sorted by captured_at
    metrics_snapshots = relationship(
        "VideoMetricsSnapshot",
        back_populates="video",
        order_by="VideoMetricsSnapshot.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("owner_id", "video_id", name="uq_videos_owner_video"),
    )
