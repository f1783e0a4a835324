# tests/test_sample_data.py

"""
샘플 메트릭 생성기 테스트.
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select

from devdash.core import store
from devdash.core.alerts import classify_fixed
from devdash.core.persistence_models import InfrastructureMetric
from devdash.core.sample_data import generate_sample_metrics, replace_sample_metrics

NOW = datetime(2024, 5, 1, 12, 0)


def _by_name(samples, name):
    return [s for s in samples if s.metric_name == name]


def test_generate_counts_and_spacing():
    samples = generate_sample_metrics(hours=2, interval=5, now=NOW, seed=1)

    assert len(samples) == 24 * 4
    cpu = _by_name(samples, "cpu_percent")
    assert len(cpu) == 24
    assert cpu[0].recorded_at == NOW
    assert cpu[1].recorded_at == NOW - timedelta(minutes=5)
    assert cpu[-1].recorded_at == NOW - timedelta(minutes=115)


def test_generate_value_ranges_and_levels():
    samples = generate_sample_metrics(hours=6, interval=5, now=NOW, seed=7)

    for s in _by_name(samples, "cpu_percent"):
        assert 5 <= s.value <= 95
        assert s.unit == "%"
        assert s.alert_level == classify_fixed(s.value, 80, 90)
    for s in _by_name(samples, "memory_percent"):
        assert 30 <= s.value <= 90
        assert s.alert_level == classify_fixed(s.value, 85, 95)
    for s in _by_name(samples, "network_rx_bytes"):
        assert s.unit == "bytes/s"
        assert s.alert_level == "normal"
        assert 0.5 * 1024 * 1024 <= s.value <= 10 * 1024 * 1024


def test_generate_is_reproducible_with_seed():
    a = generate_sample_metrics(now=NOW, seed=42)
    b = generate_sample_metrics(now=NOW, seed=42)
    assert [s.value for s in a] == [s.value for s in b]


@pytest.mark.parametrize("hours, interval", [(0, 5), (2, 0)])
def test_generate_rejects_non_positive_arguments(hours, interval):
    with pytest.raises(ValueError):
        generate_sample_metrics(hours=hours, interval=interval)


def test_replace_sample_metrics_keeps_other_sources(db):
    store.record_metric(db, source="docker", metric_name="stale", value=1.0, now=NOW)
    store.record_metric(db, source="github", metric_name="runs", value=1.0, now=NOW)
    db.commit()

    inserted = replace_sample_metrics(db, generate_sample_metrics(hours=1, interval=15, now=NOW, seed=3), now=NOW)
    db.commit()

    assert inserted == 16
    docker_names = set(
        db.execute(select(InfrastructureMetric.metric_name).where(InfrastructureMetric.source == "docker")).scalars()
    )
    assert "stale" not in docker_names
    assert db.execute(
        select(func.count(InfrastructureMetric.id)).where(InfrastructureMetric.source == "github")
    ).scalar_one() == 1
