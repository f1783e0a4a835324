# tests/test_alerts.py

"""
alerts 모듈 단위 테스트.
"""

import pytest

from devdash.core.alerts import classify, classify_fixed, classify_metric
from devdash.core.metrics import get_metric_meta


@pytest.mark.parametrize(
    "value, threshold, expected",
    [
        (79.9, 100, "normal"),
        (80, 100, "warning"),
        (94.99, 100, "warning"),
        (95, 100, "critical"),
        (150, 100, "critical"),
        (8, 10, "warning"),
    ],
)
def test_classify_relative_to_threshold(value, threshold, expected):
    assert classify(value, threshold) == expected


def test_classify_without_threshold_is_normal():
    """threshold가 없거나 0 이하이면 항상 normal."""
    assert classify(1_000_000, None) == "normal"
    assert classify(50, 0) == "normal"
    assert classify(50, -10) == "normal"


def test_classify_fixed_boundaries():
    assert classify_fixed(79.99, 80, 90) == "normal"
    assert classify_fixed(80, 80, 90) == "warning"
    assert classify_fixed(90, 80, 90) == "critical"


def test_classify_metric_uses_fixed_tiers_for_cpu_and_memory():
    """cpu 80/90, memory 85/95 고정 임계값."""
    assert classify_metric("cpu_percent", 85) == "warning"
    assert classify_metric("cpu_percent", 90) == "critical"
    assert classify_metric("memory_percent", 84.9) == "normal"
    assert classify_metric("memory_percent", 85) == "warning"
    assert classify_metric("memory_percent", 95) == "critical"


def test_classify_metric_falls_back_to_threshold_mode():
    assert classify_metric("containers_running", 1000) == "normal"
    assert classify_metric("queue_depth", 90, threshold=100) == "warning"


def test_metric_meta_label():
    assert get_metric_meta("cpu_percent").label() == "CPU Usage"
    assert get_metric_meta("disk_read_bytes").label() == "Disk Read Bytes"
    assert not get_metric_meta("disk_read_bytes").has_fixed_thresholds
