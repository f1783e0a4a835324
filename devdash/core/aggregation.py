# devdash/core/aggregation.py

"""
Aggregation / bucketing engine.

역할:
- 조회 기간(hours)에 맞는 버킷 폭을 고른다 (5분 / 15분 / 1시간 / 4시간).
- 샘플을 벽시계 기준으로 버킷 시작 시각에 내림(floor)한다.
  예) 5분 버킷에서 10:07:30 → 10:05:00 (rolling window 아님)
- 버킷별 avg / min / max 를 계산한다. 샘플이 없는 버킷은 만들지 않는다.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

import pandas as pd
from sqlalchemy.orm import Session

from devdash.core import queries
from devdash.core.persistence_models import utcnow
from devdash.models.metrics import ChartPoint, ChartSeries


@dataclass(frozen=True)
class BucketInterval:
    minutes: int
    label: str


FIVE_MINUTES = BucketInterval(5, "5 minutes")
FIFTEEN_MINUTES = BucketInterval(15, "15 minutes")
ONE_HOUR = BucketInterval(60, "1 hour")
FOUR_HOURS = BucketInterval(240, "4 hours")


def select_interval(hours: float) -> BucketInterval:
    if hours <= 4:
        return FIVE_MINUTES
    if hours <= 12:
        return FIFTEEN_MINUTES
    if hours <= 48:
        return ONE_HOUR
    return FOUR_HOURS


def bucket_start(ts: datetime, interval: BucketInterval) -> datetime:
    """ts가 속한 버킷의 시작 시각."""
    ts = ts.replace(second=0, microsecond=0)
    if interval.minutes < 60:
        return ts.replace(minute=ts.minute // interval.minutes * interval.minutes)
    if interval.minutes == 60:
        return ts.replace(minute=0)
    step = interval.minutes // 60
    return ts.replace(hour=ts.hour // step * step, minute=0)


def aggregate(samples: Iterable[Tuple[datetime, float]], interval: BucketInterval) -> List[ChartPoint]:
    """(recorded_at, value) 목록을 버킷별 집계로 변환한다. 결과는 시각 오름차순."""
    rows = [(bucket_start(ts, interval), float(value)) for ts, value in samples]
    if not rows:
        return []

    df = pd.DataFrame(rows, columns=["bucket", "value"])
    grouped = df.groupby("bucket", sort=True)["value"].agg(
        avg_value="mean", min_value="min", max_value="max", samples="count"
    )

    return [
        ChartPoint(
            timestamp=pd.Timestamp(row.Index).to_pydatetime(),
            avg_value=float(row.avg_value),
            min_value=float(row.min_value),
            max_value=float(row.max_value),
            count=int(row.samples),
        )
        for row in grouped.itertuples()
    ]


def chart_series(
    db: Session,
    source: str,
    metric_name: str,
    hours: int = 24,
    *,
    now: Optional[datetime] = None,
) -> ChartSeries:
    interval = select_interval(hours)
    since = (now or utcnow()) - timedelta(hours=hours)
    samples = queries.window_samples(db, source, metric_name, since)

    return ChartSeries(
        source=source,
        metric_name=metric_name,
        chart_data=aggregate(((m.recorded_at, m.value) for m in samples), interval),
        period_hours=hours,
        interval=interval.label,
    )
