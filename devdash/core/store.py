"""
Metric store: 세 테이블에 대한 쓰기 경로.

- 메트릭 샘플 / 서비스 스냅샷: 폴링마다 새 row insert (갱신 없음)
- 파이프라인 run: run_id 기준 find-then-update (upsert)
- 보존 정책: source 단위로 오래된 메트릭 삭제

수집기는 persist_isolated()로 레코드 하나씩 독립된 트랜잭션에 저장한다.
한 레코드 실패가 같은 배치의 다른 레코드에 영향을 주지 않는다.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Tuple, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from devdash.core.alerts import classify
from devdash.core.db_sqlalchemy import SessionFactory, session_scope
from devdash.core.errors import StoreError
from devdash.core.persistence_models import (
    CicdPipeline,
    DockerServiceSnapshot,
    InfrastructureMetric,
    derive_service_status,
    utcnow,
)
from devdash.models.common import AlertLevel, RunSnapshot, ServiceSnapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")


def write_isolated(factory: Optional[SessionFactory], write: Callable[[Session], T], *, context: str) -> T:
    """write(session)을 독립 트랜잭션으로 실행한다. DB 오류는 StoreError로 감싼다."""
    try:
        with session_scope(factory) as s:
            return write(s)
    except SQLAlchemyError as exc:
        raise StoreError(f"{context}: {exc}") from exc


def persist_isolated(factory: Optional[SessionFactory], write: Callable[[Session], object], *, context: str) -> bool:
    """write_isolated()와 같지만 실패 시 로그만 남기고 False."""
    try:
        write_isolated(factory, write, context=context)
        return True
    except StoreError as exc:
        logger.error("Failed to store %s: %s", context, exc)
        return False

# ---------------------------------------------------------------------------
# Metric samples
# ---------------------------------------------------------------------------

def record_metric(
    db: Session,
    *,
    source: str,
    metric_name: str,
    value: float,
    unit: Optional[str] = None,
    labels: Optional[Dict[str, str]] = None,
    threshold: Optional[float] = None,
    alert_level: Optional[AlertLevel] = None,
    recorded_at: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> InfrastructureMetric:
    """
    메트릭 샘플 한 건을 추가한다.

    alert_level을 넘기지 않으면 (value, threshold)로 계산한다.
    recorded_at이 적재 시각보다 미래면 적재 시각으로 맞춘다 (recorded_at <= created_at).
    """
    if value is None or not math.isfinite(value):
        raise StoreError(f"{source}/{metric_name}: value must be a finite number, got {value!r}")

    created_at = now or utcnow()
    observed_at = recorded_at or created_at
    if observed_at > created_at:
        observed_at = created_at

    metric = InfrastructureMetric(
        source=source,
        metric_name=metric_name,
        value=float(value),
        unit=unit,
        labels=labels,
        threshold=threshold,
        alert_level=alert_level or classify(value, threshold),
        recorded_at=observed_at,
        created_at=created_at,
    )
    db.add(metric)
    return metric


def purge_older_than(db: Session, source: str, days: int, *, now: Optional[datetime] = None) -> int:
    """source의 메트릭 중 recorded_at < now - days 인 row를 삭제하고 삭제 건수를 반환."""
    cutoff = (now or utcnow()) - timedelta(days=days)
    result = db.execute(
        delete(InfrastructureMetric)
        .where(InfrastructureMetric.source == source)
        .where(InfrastructureMetric.recorded_at < cutoff)
    )
    return result.rowcount or 0


def delete_source_metrics(db: Session, source: str) -> int:
    result = db.execute(delete(InfrastructureMetric).where(InfrastructureMetric.source == source))
    return result.rowcount or 0

# ---------------------------------------------------------------------------
# Docker service snapshots
# ---------------------------------------------------------------------------

def record_service_snapshot(
    db: Session,
    snapshot: ServiceSnapshot,
    *,
    recorded_at: Optional[datetime] = None,
) -> DockerServiceSnapshot:
    now = utcnow()
    row = DockerServiceSnapshot(
        service_id=snapshot.id,
        service_name=snapshot.name,
        status=derive_service_status(snapshot.running_replicas, snapshot.replicas),
        replicas=snapshot.replicas,
        running_replicas=snapshot.running_replicas,
        image=snapshot.image,
        ports=[p.model_dump() for p in snapshot.ports],
        labels=dict(snapshot.labels),
        recorded_at=min(recorded_at or now, now),
        created_at=now,
    )
    db.add(row)
    return row

# ---------------------------------------------------------------------------
# Pipeline runs (upsert by run_id)
# ---------------------------------------------------------------------------

def get_pipeline_run(db: Session, run_id: str) -> Optional[CicdPipeline]:
    stmt = select(CicdPipeline).where(CicdPipeline.run_id == run_id)
    return db.execute(stmt).scalars().first()


def upsert_pipeline_run(db: Session, run: RunSnapshot) -> Tuple[CicdPipeline, bool]:
    """
    run_id가 이미 있으면 상태 필드만 갱신하고, 없으면 새로 추가한다.

    Returns
    -------
    (row, created)

    Notes
    -----
    - completed 상태(terminal)는 되돌리지 않는다.
    - completed_at이 처음 채워지는 시점에만 duration을 계산한다.
    """
    existing = get_pipeline_run(db, run.id)
    now = utcnow()

    if existing is not None:
        if existing.is_terminal and run.status != "completed":
            logger.debug("Ignoring status regression for run %s: %s -> %s", run.id, existing.status, run.status)
        else:
            existing.status = run.status
            existing.conclusion = run.conclusion
        if run.completed_at is not None and existing.completed_at is None:
            existing.completed_at = run.completed_at
            existing.duration = existing.calculate_duration()
        existing.updated_at = now
        return existing, False

    row = CicdPipeline(
        run_id=run.id,
        workflow_id=run.workflow_id,
        workflow_name=run.workflow_name,
        repository=run.repository,
        status=run.status,
        conclusion=run.conclusion,
        branch=run.branch,
        commit_sha=run.commit_sha,
        commit_message=run.commit_message,
        actor=run.actor,
        event=run.event,
        html_url=run.html_url,
        started_at=run.started_at,
        completed_at=run.completed_at,
        recorded_at=now,
        created_at=now,
        updated_at=now,
    )
    row.duration = row.calculate_duration()
    db.add(row)
    # 같은 세션 안에서 다시 조회될 수 있도록 바로 flush
    db.flush()
    return row, True
