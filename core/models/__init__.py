"""Core database models"""
from .users import User
from .videos import Video
from .video_metrics_snapshot import VideoMetricsSnapshot

__all__ = ["User", "Video", "VideoMetricsSnapshot"]
