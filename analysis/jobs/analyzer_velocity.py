#!/usr/bin/env python3
import logging
import argparse
import json
from datetime import datetime, timedelta, timezone
from typing import List, Dict, Any, Optional
import pandas as pd
import numpy as np

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from core.db import SessionLocal
from core.logging import setup_json_logging
from core.models import Video, VideoMetricsSnapshot

logger = logging.getLogger(__name__)

COLUMNS = ['video_pk', 'video_id', 'title', 'position', 'captured_at', 'view_count']
RESULT_COLUMNS = ['video_pk', 'video_id', 'title', 'views_per_hour', 'data_points', 'valid_intervals']

def calculate_velocity(df: pd.DataFrame) -> pd.DataFrame:
    """
    Views per hour for each video between consecutive snapshots.

    Rows are ordered by insertion position within each video. Intervals with
    a non-positive time delta or a negative view delta are dropped, and each
    video keeps its maximum valid velocity.
    """
    if df.empty:
        return pd.DataFrame(columns=RESULT_COLUMNS)

    velocity_results = []

    for video_pk, group in df.groupby('video_pk'):
        if len(group) < 2:
            continue  # Need at least 2 data points

        group_sorted = group.sort_values('position')

        time_diffs_hours = group_sorted['captured_at'].diff().dt.total_seconds() / 3600
        view_diffs = group_sorted['view_count'].diff()

        valid_mask = (time_diffs_hours > 0) & (view_diffs >= 0)
        if not valid_mask.any():
            continue

        velocities = view_diffs[valid_mask] / time_diffs_hours[valid_mask]
        velocities = velocities[np.isfinite(velocities)]

        if len(velocities) == 0:
            continue

        velocity_results.append({
            'video_pk': video_pk,
            'video_id': group_sorted['video_id'].iloc[0],
            'title': group_sorted['title'].iloc[0],
            'views_per_hour': float(velocities.max()),
            'data_points': len(group),
            'valid_intervals': len(velocities)
        })

    velocity_df = pd.DataFrame(velocity_results)
    if velocity_df.empty:
        return pd.DataFrame(columns=RESULT_COLUMNS)

    return clip_outliers(velocity_df)

def clip_outliers(df: pd.DataFrame, quantile: float = 0.99) -> pd.DataFrame:
    """Cap views_per_hour at the given percentile"""
    threshold = df['views_per_hour'].quantile(quantile)
    df_clipped = df.copy()
    df_clipped['views_per_hour'] = df_clipped['views_per_hour'].clip(upper=threshold)

    logger.info(f"Outlier clipping applied: {int((df['views_per_hour'] > threshold).sum())} values capped at {float(threshold):.2f}",
                extra={"job": "analyzer_velocity"})

    return df_clipped

class VelocityAnalyzer:
    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.db: Session = session_factory()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.db.close()

    def analyze_velocity(self, window_hours: int = 24, top_n: int = 10,
                         now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Top videos by views per hour within the time window"""
        now = now or datetime.now(timezone.utc)
        trace_id = f"velocity_analysis_{now.strftime('%Y%m%d_%H%M%S')}"

        try:
            logger.info("Starting velocity analysis", extra={
                "trace_id": trace_id,
                "job": "analyzer_velocity"
            })

            metrics_df = self._fetch_metrics_data(now - timedelta(hours=window_hours))
            if metrics_df.empty:
                logger.warning("No metrics data found", extra={"trace_id": trace_id})
                return []

            velocity_df = calculate_velocity(metrics_df)
            top_results = self._get_top_results(velocity_df, top_n)

            logger.info(f"Velocity analysis completed: {len(top_results)} of {len(velocity_df)} videos", extra={
                "trace_id": trace_id,
                "job": "analyzer_velocity"
            })

            return top_results

        except Exception as e:
            logger.error(f"Velocity analysis failed: {e}", extra={
                "trace_id": trace_id,
                "job": "analyzer_velocity"
            })
            raise

    def _fetch_metrics_data(self, since: datetime) -> pd.DataFrame:
        """Fetch metrics snapshots captured since the cutoff"""
        rows = self.db.execute(
            select(
                VideoMetricsSnapshot.video_pk,
                Video.video_id,
                Video.title,
                VideoMetricsSnapshot.position,
                VideoMetricsSnapshot.captured_at,
                VideoMetricsSnapshot.view_count,
            )
            .join(Video, Video.id == VideoMetricsSnapshot.video_pk)
            .where(VideoMetricsSnapshot.captured_at >= since)
            .order_by(VideoMetricsSnapshot.video_pk, VideoMetricsSnapshot.position)
        ).all()

        if not rows:
            return pd.DataFrame(columns=COLUMNS)

        df = pd.DataFrame([tuple(row) for row in rows], columns=COLUMNS)
        df['captured_at'] = pd.to_datetime(df['captured_at'], utc=True)
        return df

    def _get_top_results(self, df: pd.DataFrame, top_n: int) -> List[Dict[str, Any]]:
        """Get top N results sorted by velocity"""
        if df.empty:
            return []

        top_df = df.nlargest(top_n, 'views_per_hour')

        return [
            {
                "video_pk": row['video_pk'],
                "video_id": row['video_id'],
                "title": row['title'],
                "views_per_hour": float(row['views_per_hour']),
                "data_points": int(row['data_points']),
                "valid_intervals": int(row['valid_intervals'])
            }
            for _, row in top_df.iterrows()
        ]

def main(argv: Optional[list] = None):
    parser = argparse.ArgumentParser(description="Rank tracked videos by views per hour")
    parser.add_argument("--window", type=int, default=24, help="Time window in hours (default: 24)")
    parser.add_argument("--top-n", type=int, default=10, help="Top N results (default: 10)")
    parser.add_argument("--out-file", help="Output file path (optional)")

    args = parser.parse_args(argv)

    setup_json_logging()

    with VelocityAnalyzer() as analyzer:
        results = analyzer.analyze_velocity(args.window, args.top_n)

    output_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "analysis_params": {
            "window_hours": args.window,
            "top_n": args.top_n
        },
        "results": results
    }

    json_output = json.dumps(output_data, indent=2, ensure_ascii=False)

    if args.out_file:
        with open(args.out_file, 'w', encoding='utf-8') as f:
            f.write(json_output)
        print(f"Results saved to {args.out_file}")
    else:
        print(json_output)

if __name__ == "__main__":
    main()
