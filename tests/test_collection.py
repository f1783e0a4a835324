# tests/test_collection.py

"""
수집 사이클(run_collection_cycle) 테스트.
"""

from datetime import timedelta
from unittest.mock import Mock

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from devdash.core import store
from devdash.core.collection import run_collection_cycle
from devdash.core.collectors import DockerCollector
from devdash.core.db_sqlalchemy import session_scope
from devdash.core.persistence_models import InfrastructureMetric, utcnow
from devdash.models.common import ContainerSnapshot, ContainerStats


def _fake_collector(containers, stats_by_id) -> Mock:
    collector = Mock(spec=DockerCollector)
    collector.collect_containers.return_value = containers
    collector.collect_container_stats.side_effect = lambda cid: stats_by_id.get(cid)
    return collector


def _stored(session_factory):
    with session_scope(session_factory) as s:
        rows = s.execute(select(InfrastructureMetric)).scalars().all()
        return {r.metric_name: (r.value, r.alert_level, r.unit) for r in rows}


CONTAINERS = [
    ContainerSnapshot(id="a", name="web", state="running"),
    ContainerSnapshot(id="b", name="db", state="running"),
    ContainerSnapshot(id="c", name="job", state="exited"),
    ContainerSnapshot(id="d", name="cache", state="running"),
]
STATS = {
    "a": ContainerStats(id="a", cpu_percent=80.0, memory_percent=90.0),
    "b": ContainerStats(id="b", cpu_percent=90.0, memory_percent=80.0),
    # "d"는 stats 조회 실패 → 평균에서 제외
}


def test_no_containers_stores_nothing(session_factory):
    report = run_collection_cycle(_fake_collector([], {}), session_factory)

    assert report.samples == []
    assert report.stored == 0
    assert _stored(session_factory) == {}


def test_cycle_averages_running_containers(session_factory):
    collector = _fake_collector(CONTAINERS, STATS)

    report = run_collection_cycle(collector, session_factory)

    called = [c.args[0] for c in collector.collect_container_stats.call_args_list]
    assert called == ["a", "b", "d"]
    assert report.containers_total == 4
    assert report.containers_running == 3
    assert report.stats_collected == 2
    assert report.stored == 4

    stored = _stored(session_factory)
    assert stored["cpu_percent"] == (85.0, "warning", "%")
    assert stored["memory_percent"] == (85.0, "warning", "%")
    assert stored["containers_running"] == (3.0, "normal", "count")
    assert stored["containers_total"] == (4.0, "normal", "count")


def test_dry_run_does_not_store(session_factory):
    report = run_collection_cycle(_fake_collector(CONTAINERS, STATS), session_factory, dry_run=True)

    assert report.dry_run is True
    assert len(report.samples) == 4
    assert report.stored == 0
    assert _stored(session_factory) == {}


def _old_sample(session_factory, source="docker"):
    old = utcnow() - timedelta(days=30)
    with session_scope(session_factory) as s:
        store.record_metric(s, source=source, metric_name="old", value=1.0, recorded_at=old)


def test_retention_purges_old_samples(session_factory):
    _old_sample(session_factory)
    _old_sample(session_factory, source="other")

    report = run_collection_cycle(_fake_collector(CONTAINERS, STATS), session_factory, cleanup_days=7)

    assert report.purged == 1
    with session_scope(session_factory) as s:
        names = set(s.execute(select(InfrastructureMetric.metric_name)).scalars())
    assert "old" in names  # other source 쪽은 남아 있음


def test_retention_disabled_when_cleanup_days_not_positive(session_factory):
    _old_sample(session_factory)

    report = run_collection_cycle(_fake_collector(CONTAINERS, STATS), session_factory, cleanup_days=0)

    assert report.purged == 0
    assert "old" in _stored(session_factory)


def test_fixed_tier_samples_store_no_threshold(session_factory):
    """고정 임계값으로 판정한 샘플은 threshold를 비워 둔다."""
    containers = [ContainerSnapshot(id="a", name="web", state="running")]
    stats = {"a": ContainerStats(id="a", cpu_percent=72.0, memory_percent=40.0)}

    run_collection_cycle(_fake_collector(containers, stats), session_factory)

    with session_scope(session_factory) as s:
        rows = {r.metric_name: r for r in s.execute(select(InfrastructureMetric)).scalars()}
    cpu = rows["cpu_percent"]
    assert (cpu.value, cpu.alert_level, cpu.threshold) == (72.0, "normal", None)
    assert all(r.threshold is None for r in rows.values())


def test_retention_failure_does_not_fail_cycle(session_factory, monkeypatch):
    def _locked(*args, **kwargs):
        raise OperationalError("DELETE FROM infrastructure_metrics", {}, Exception("database is locked"))

    monkeypatch.setattr(store, "purge_older_than", _locked)

    report = run_collection_cycle(_fake_collector(CONTAINERS, STATS), session_factory, cleanup_days=7)

    assert report.stored == 4
    assert report.purged == 0
