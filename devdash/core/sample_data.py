"""
데모/개발용 샘플 메트릭 생성기.

docker source 아래에 cpu / memory / network rx·tx 시계열을 만든다.
- cpu_percent: 45% 기준 sine 패턴 + 노이즈, 5~95로 clamp
- memory_percent: 65% 기준 완만한 상승 + 노이즈, 30~90으로 clamp
- network_*_bytes: 1MB/s 기준, 10% 확률로 1~5배 spike
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

import numpy as np
from sqlalchemy.orm import Session

from devdash.core import store
from devdash.core.alerts import classify_metric
from devdash.core.metrics import get_metric_meta
from devdash.core.persistence_models import utcnow
from devdash.models.common import AlertLevel

logger = logging.getLogger(__name__)

SAMPLE_SOURCE = "docker"
NETWORK_BASE_BYTES = 1024 * 1024


@dataclass
class SampleMetric:
    metric_name: str
    value: float
    unit: Optional[str]
    alert_level: AlertLevel
    recorded_at: datetime


def _cpu_values(rng: np.random.Generator, n: int) -> np.ndarray:
    idx = np.arange(n)
    pattern = np.sin(idx / n * 2 * np.pi) * 15
    noise = rng.integers(-10, 11, size=n) / 10 * 5
    return np.clip(np.round(45 + pattern + noise, 2), 5, 95)


def _memory_values(rng: np.random.Generator, n: int) -> np.ndarray:
    drift = np.arange(n) / n * 10
    noise = rng.integers(-5, 6, size=n) / 10 * 3
    return np.clip(np.round(65 + drift + noise, 2), 30, 90)


def _network_values(rng: np.random.Generator, n: int) -> np.ndarray:
    spike = np.where(rng.integers(0, 101, size=n) < 10, rng.integers(1, 6, size=n), 1)
    multiplier = rng.integers(50, 201, size=n) / 100
    return np.round(NETWORK_BASE_BYTES * spike * multiplier, 0)


def generate_sample_metrics(
    hours: int = 2,
    interval: int = 5,
    now: Optional[datetime] = None,
    seed: Optional[int] = None,
) -> List[SampleMetric]:
    """hours 구간을 interval(분) 간격으로 채운 샘플을 만든다. 최신 시점이 index 0."""
    if hours <= 0 or interval <= 0:
        raise ValueError("hours and interval must be positive")

    now = now or utcnow()
    points = (hours * 60) // interval
    rng = np.random.default_rng(seed)

    series = {
        "cpu_percent": _cpu_values(rng, points),
        "memory_percent": _memory_values(rng, points),
        "network_rx_bytes": _network_values(rng, points),
        "network_tx_bytes": _network_values(rng, points),
    }

    samples: List[SampleMetric] = []
    for i in range(points):
        ts = now - timedelta(minutes=i * interval)
        for name, values in series.items():
            value = float(values[i])
            samples.append(
                SampleMetric(
                    metric_name=name,
                    value=value,
                    unit=get_metric_meta(name).unit,
                    alert_level=classify_metric(name, value),
                    recorded_at=ts,
                )
            )
    return samples


def replace_sample_metrics(db: Session, samples: List[SampleMetric], *, now: Optional[datetime] = None) -> int:
    """기존 docker source 메트릭을 지우고 샘플을 적재한다. 적재 건수 반환."""
    now = now or utcnow()
    deleted = store.delete_source_metrics(db, SAMPLE_SOURCE)
    for sample in samples:
        store.record_metric(
            db,
            source=SAMPLE_SOURCE,
            metric_name=sample.metric_name,
            value=sample.value,
            unit=sample.unit,
            alert_level=sample.alert_level,
            recorded_at=sample.recorded_at,
            now=now,
        )
    logger.info("Replaced sample metrics: deleted=%d inserted=%d", deleted, len(samples))
    return len(samples)
