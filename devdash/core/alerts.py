# devdash/core/alerts.py
"""
Alert classifier.

두 가지 모드를 제공한다.

- threshold-relative: 샘플의 threshold 대비 백분율로 판정 (classify)
- fixed-absolute: 시스템 합산 CPU/메모리처럼 고정 2단계 임계값으로 판정 (classify_fixed)

어떤 모드를 쓸지는 호출자가 메트릭 종류에 따라 결정한다.
classify_metric()은 메트릭 메타데이터를 보고 알맞은 모드를 고른다.
"""

from __future__ import annotations

from typing import Optional

from devdash.core.metrics import get_metric_meta
from devdash.models.common import AlertLevel

WARNING_PERCENT = 80.0
CRITICAL_PERCENT = 95.0


def classify(value: float, threshold: Optional[float]) -> AlertLevel:
    """threshold 대비 비율로 알림 단계를 결정한다. threshold가 없으면 normal."""
    if threshold is None or threshold <= 0:
        return "normal"

    percentage = value / threshold * 100
    if percentage >= CRITICAL_PERCENT:
        return "critical"
    if percentage >= WARNING_PERCENT:
        return "warning"
    return "normal"


def classify_fixed(value: float, warning: float, critical: float) -> AlertLevel:
    if value >= critical:
        return "critical"
    if value >= warning:
        return "warning"
    return "normal"


def classify_metric(metric_name: str, value: float, threshold: Optional[float] = None) -> AlertLevel:
    meta = get_metric_meta(metric_name)
    if meta.has_fixed_thresholds:
        return classify_fixed(value, meta.warning_at, meta.critical_at)  # type: ignore[arg-type]
    return classify(value, threshold)
