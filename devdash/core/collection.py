"""
시스템 메트릭 수집 사이클.

컨테이너 목록 -> 실행 중 컨테이너 stats -> 평균 CPU/메모리 -> 샘플 저장 -> 보존 정책 적용.
스케줄링은 외부(cron 등)에서 scripts/collect_metrics.py를 호출하는 방식으로 한다.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from devdash.core import store
from devdash.core.alerts import classify_metric
from devdash.core.collectors.docker_collector import DockerCollector
from devdash.core.db_sqlalchemy import SessionFactory
from devdash.core.errors import StoreError
from devdash.core.metrics import get_metric_meta
from devdash.core.persistence_models import utcnow
from devdash.models.common import AlertLevel

logger = logging.getLogger(__name__)


@dataclass
class MetricSample:
    metric_name: str
    value: float
    unit: Optional[str]
    alert_level: AlertLevel


@dataclass
class CollectionReport:
    source: str
    collected_at: datetime
    containers_total: int = 0
    containers_running: int = 0
    stats_collected: int = 0
    samples: List[MetricSample] = field(default_factory=list)
    stored: int = 0
    purged: int = 0
    dry_run: bool = False


def _sample(metric_name: str, value: float) -> MetricSample:
    # 고정 임계값 메트릭은 threshold 없이 판정된 alert_level만 저장한다
    meta = get_metric_meta(metric_name)
    return MetricSample(
        metric_name=metric_name,
        value=value,
        unit=meta.unit,
        alert_level=classify_metric(metric_name, value),
    )


def build_system_samples(cpu_values: List[float], memory_values: List[float], running: int, total: int) -> List[MetricSample]:
    """stats를 얻은 컨테이너들의 평균 CPU/메모리와 컨테이너 수로 샘플 4개를 만든다."""
    avg_cpu = sum(cpu_values) / len(cpu_values) if cpu_values else 0.0
    avg_memory = sum(memory_values) / len(memory_values) if memory_values else 0.0
    return [
        _sample("cpu_percent", round(avg_cpu, 2)),
        _sample("memory_percent", round(avg_memory, 2)),
        _sample("containers_running", float(running)),
        _sample("containers_total", float(total)),
    ]


def run_collection_cycle(
    collector: DockerCollector,
    session_factory: Optional[SessionFactory] = None,
    source: str = "docker",
    cleanup_days: int = 7,
    dry_run: bool = False,
) -> CollectionReport:
    now = utcnow()
    report = CollectionReport(source=source, collected_at=now, dry_run=dry_run)

    containers = collector.collect_containers()
    if not containers:
        logger.warning("No containers found; nothing to record")
        return report

    running = [c for c in containers if c.is_running]
    report.containers_total = len(containers)
    report.containers_running = len(running)

    cpu_values: List[float] = []
    memory_values: List[float] = []
    for container in running:
        stats = collector.collect_container_stats(container.id)
        if stats is None:
            continue
        cpu_values.append(stats.cpu_percent)
        memory_values.append(stats.memory_percent)
    report.stats_collected = len(cpu_values)

    report.samples = build_system_samples(cpu_values, memory_values, len(running), len(containers))

    if dry_run:
        for sample in report.samples:
            logger.info(
                "[dry-run] %s=%s%s (%s)",
                get_metric_meta(sample.metric_name).label(), sample.value, sample.unit or "", sample.alert_level,
            )
        return report

    for sample in report.samples:
        ok = store.persist_isolated(
            session_factory,
            lambda s, m=sample: store.record_metric(
                s,
                source=source,
                metric_name=m.metric_name,
                value=m.value,
                unit=m.unit,
                alert_level=m.alert_level,
                recorded_at=now,
                now=now,
            ),
            context=f"metric {source}/{sample.metric_name}",
        )
        if ok:
            report.stored += 1

    if cleanup_days > 0:
        try:
            report.purged = store.write_isolated(
                session_factory,
                lambda s: store.purge_older_than(s, source, cleanup_days, now=now),
                context=f"retention {source}",
            )
            if report.purged:
                logger.info("Purged old metrics: source=%s deleted=%d", source, report.purged)
        except StoreError as exc:
            logger.error("Retention cleanup failed: source=%s error=%s", source, exc)

    logger.info(
        "Collection cycle done: source=%s containers=%d running=%d stored=%d",
        source, report.containers_total, report.containers_running, report.stored,
    )
    return report
