"""
Read-side queries over the metric store.

모든 함수는 Session을 받아 ORM row 또는 dict를 반환한다.
HTTP 라우트는 여기 결과를 pydantic 응답 모델로 감싸기만 한다.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from devdash.core.persistence_models import (
    CicdPipeline,
    DockerServiceSnapshot,
    InfrastructureMetric,
    utcnow,
)


def _since(hours: float = 0, *, days: float = 0, minutes: float = 0, now: Optional[datetime] = None) -> datetime:
    return (now or utcnow()) - timedelta(hours=hours, days=days, minutes=minutes)

# ---------------------------------------------------------------------------
# Metric samples
# ---------------------------------------------------------------------------

def list_metrics(
    db: Session,
    *,
    source: Optional[str] = None,
    metric_name: Optional[str] = None,
    hours: int = 1,
    now: Optional[datetime] = None,
) -> List[InfrastructureMetric]:
    stmt = select(InfrastructureMetric).where(InfrastructureMetric.recorded_at >= _since(hours, now=now))
    if source:
        stmt = stmt.where(InfrastructureMetric.source == source)
    if metric_name:
        stmt = stmt.where(InfrastructureMetric.metric_name == metric_name)
    stmt = stmt.order_by(InfrastructureMetric.recorded_at.desc(), InfrastructureMetric.id.desc())
    return list(db.execute(stmt).scalars())


def window_samples(
    db: Session,
    source: str,
    metric_name: str,
    since: datetime,
) -> List[InfrastructureMetric]:
    """차트용: (source, metric_name) 샘플을 recorded_at 오름차순으로."""
    stmt = (
        select(InfrastructureMetric)
        .where(InfrastructureMetric.source == source)
        .where(InfrastructureMetric.metric_name == metric_name)
        .where(InfrastructureMetric.recorded_at >= since)
        .order_by(InfrastructureMetric.recorded_at.asc(), InfrastructureMetric.id.asc())
    )
    return list(db.execute(stmt).scalars())


def latest_metrics(db: Session) -> List[InfrastructureMetric]:
    """(source, metric_name) 조합마다 recorded_at이 가장 최근인 샘플 한 건."""
    latest = (
        select(
            InfrastructureMetric.source,
            InfrastructureMetric.metric_name,
            func.max(InfrastructureMetric.recorded_at).label("max_recorded_at"),
        )
        .group_by(InfrastructureMetric.source, InfrastructureMetric.metric_name)
        .subquery()
    )
    stmt = (
        select(InfrastructureMetric)
        .join(
            latest,
            and_(
                InfrastructureMetric.source == latest.c.source,
                InfrastructureMetric.metric_name == latest.c.metric_name,
                InfrastructureMetric.recorded_at == latest.c.max_recorded_at,
            ),
        )
        .order_by(InfrastructureMetric.source, InfrastructureMetric.metric_name, InfrastructureMetric.id.desc())
    )

    # 같은 recorded_at이 여러 건이면 가장 나중에 적재된(id 큰) row만 남긴다
    result: List[InfrastructureMetric] = []
    seen = set()
    for row in db.execute(stmt).scalars():
        key = (row.source, row.metric_name)
        if key in seen:
            continue
        seen.add(key)
        result.append(row)
    return result


def metrics_summary(db: Session, hours: int = 24, *, now: Optional[datetime] = None) -> Dict[str, Any]:
    since = _since(hours, now=now)

    summary_stmt = (
        select(
            InfrastructureMetric.source,
            InfrastructureMetric.metric_name,
            func.count(InfrastructureMetric.id).label("count"),
            func.avg(InfrastructureMetric.value).label("avg_value"),
            func.max(InfrastructureMetric.value).label("max_value"),
            func.min(InfrastructureMetric.value).label("min_value"),
        )
        .where(InfrastructureMetric.recorded_at >= since)
        .group_by(InfrastructureMetric.source, InfrastructureMetric.metric_name)
        .order_by(InfrastructureMetric.source, InfrastructureMetric.metric_name)
    )
    summary = [
        {
            "source": r.source,
            "metric_name": r.metric_name,
            "count": int(r.count),
            "avg_value": float(r.avg_value),
            "max_value": float(r.max_value),
            "min_value": float(r.min_value),
        }
        for r in db.execute(summary_stmt)
    ]

    alert_stmt = (
        select(InfrastructureMetric.alert_level, func.count(InfrastructureMetric.id).label("count"))
        .where(InfrastructureMetric.recorded_at >= since)
        .where(InfrastructureMetric.alert_level.is_not(None))
        .where(InfrastructureMetric.alert_level != "normal")
        .group_by(InfrastructureMetric.alert_level)
        .order_by(InfrastructureMetric.alert_level)
    )
    alerts = [{"alert_level": r.alert_level, "count": int(r.count)} for r in db.execute(alert_stmt)]

    return {"summary": summary, "alerts": alerts, "period_hours": hours}


def list_sources(db: Session) -> List[str]:
    stmt = select(InfrastructureMetric.source).distinct().order_by(InfrastructureMetric.source)
    return list(db.execute(stmt).scalars())


def list_metric_names(db: Session, source: Optional[str] = None) -> List[str]:
    stmt = select(InfrastructureMetric.metric_name).distinct()
    if source:
        stmt = stmt.where(InfrastructureMetric.source == source)
    stmt = stmt.order_by(InfrastructureMetric.metric_name)
    return list(db.execute(stmt).scalars())


def health_status(db: Session, minutes: int = 5, *, now: Optional[datetime] = None) -> Dict[str, Any]:
    """최근 N분 동안의 critical / warning 샘플로 전체 상태를 판정한다."""
    since = _since(minutes=minutes, now=now)

    def _by_level(level: str) -> List[InfrastructureMetric]:
        stmt = (
            select(InfrastructureMetric)
            .where(InfrastructureMetric.recorded_at >= since)
            .where(InfrastructureMetric.alert_level == level)
            .order_by(InfrastructureMetric.recorded_at.desc())
        )
        return list(db.execute(stmt).scalars())

    critical = _by_level("critical")
    warning = _by_level("warning")

    status = "healthy"
    if critical:
        status = "critical"
    elif warning:
        status = "warning"

    return {
        "status": status,
        "critical_count": len(critical),
        "warning_count": len(warning),
        "critical_metrics": critical,
        "warning_metrics": warning,
    }

# ---------------------------------------------------------------------------
# Docker services / pipelines
# ---------------------------------------------------------------------------

def service_history(
    db: Session, service_name: str, hours: int = 24, *, now: Optional[datetime] = None
) -> List[DockerServiceSnapshot]:
    stmt = (
        select(DockerServiceSnapshot)
        .where(DockerServiceSnapshot.service_name == service_name)
        .where(DockerServiceSnapshot.recorded_at >= _since(hours, now=now))
        .order_by(DockerServiceSnapshot.recorded_at.desc(), DockerServiceSnapshot.id.desc())
    )
    return list(db.execute(stmt).scalars())


def pipeline_history(
    db: Session, repository: str, hours: int = 24, *, now: Optional[datetime] = None
) -> List[CicdPipeline]:
    stmt = (
        select(CicdPipeline)
        .where(CicdPipeline.repository == repository)
        .where(CicdPipeline.started_at >= _since(hours, now=now))
        .order_by(CicdPipeline.started_at.desc())
    )
    return list(db.execute(stmt).scalars())


def pipeline_stats(db: Session, repository: str, days: int = 7, *, now: Optional[datetime] = None) -> Dict[str, Any]:
    since = _since(days=days, now=now)
    in_window = and_(CicdPipeline.repository == repository, CicdPipeline.started_at >= since)

    total_runs = db.execute(select(func.count(CicdPipeline.id)).where(in_window)).scalar_one()
    successful_runs = db.execute(
        select(func.count(CicdPipeline.id)).where(in_window).where(CicdPipeline.conclusion == "success")
    ).scalar_one()
    avg_duration = db.execute(
        select(func.avg(CicdPipeline.duration)).where(in_window).where(CicdPipeline.duration.is_not(None))
    ).scalar_one()

    return {
        "total_runs": int(total_runs),
        "successful_runs": int(successful_runs),
        "success_rate": round(successful_runs / total_runs * 100, 2) if total_runs > 0 else 0.0,
        "average_duration": round(float(avg_duration), 2) if avg_duration is not None else None,
        "period_days": days,
    }
