"""
Metric metadata helpers.

수집되는 메트릭별 단위 / 표시 이름 / 고정 알림 임계값을 한 곳에서 관리한다.
고정 임계값이 있는 메트릭(시스템 합산 CPU/메모리)은 절대값 기준으로 분류하고,
그 외 메트릭은 샘플에 저장된 threshold 대비 비율로 분류한다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class MetricMeta:
    name: str
    unit: Optional[str] = None
    display_name: Optional[str] = None
    warning_at: Optional[float] = None
    critical_at: Optional[float] = None

    @property
    def has_fixed_thresholds(self) -> bool:
        return self.warning_at is not None and self.critical_at is not None

    def label(self) -> str:
        if self.display_name:
            return self.display_name
        return self.name.replace("_", " ").title()


_METRICS: Dict[str, MetricMeta] = {
    "cpu_percent":        MetricMeta(name="cpu_percent", unit="%", display_name="CPU Usage", warning_at=80.0, critical_at=90.0),
    "memory_percent":     MetricMeta(name="memory_percent", unit="%", display_name="Memory Usage", warning_at=85.0, critical_at=95.0),
    "containers_running": MetricMeta(name="containers_running", unit="count", display_name="Running Containers"),
    "containers_total":   MetricMeta(name="containers_total", unit="count", display_name="Total Containers"),
    "network_rx_bytes":   MetricMeta(name="network_rx_bytes", unit="bytes/s", display_name="Network In"),
    "network_tx_bytes":   MetricMeta(name="network_tx_bytes", unit="bytes/s", display_name="Network Out"),
}


def get_metric_meta(metric_name: str) -> MetricMeta:
    """
    메트릭 이름에 해당하는 메타데이터를 반환한다.
    등록되지 않은 메트릭은 단위/고정 임계값이 없는 기본 정책으로 처리한다.
    """
    return _METRICS.get(metric_name, MetricMeta(name=metric_name))
