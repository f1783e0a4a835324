"""
/api/infrastructure 라우트.

저장된 메트릭 샘플 조회 / 요약 / 차트 / 전체 헬스 상태.
모든 시간은 naive UTC 기준이다.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from devdash.core import queries
from devdash.core.aggregation import chart_series
from devdash.core.db_sqlalchemy import get_db
from devdash.core.persistence_models import utcnow
from devdash.models.metrics import (
    ChartResponse,
    HealthResponse,
    LatestMetricsResponse,
    MetricOut,
    MetricsResponse,
    SummaryResponse,
)

router = APIRouter()


@router.get("/metrics", response_model=MetricsResponse)
def get_metrics(
    source: Optional[str] = None,
    metric_name: Optional[str] = None,
    hours: int = Query(1, ge=1, le=24 * 30),
    db: Session = Depends(get_db),
) -> MetricsResponse:
    rows = queries.list_metrics(db, source=source, metric_name=metric_name, hours=hours)
    return MetricsResponse(
        metrics=[MetricOut.model_validate(r) for r in rows],
        count=len(rows),
        filters={"source": source, "metric_name": metric_name, "hours": hours},
        timestamp=utcnow(),
    )


@router.get("/metrics/latest", response_model=LatestMetricsResponse)
def get_latest_metrics(db: Session = Depends(get_db)) -> LatestMetricsResponse:
    rows = queries.latest_metrics(db)
    return LatestMetricsResponse(
        metrics=[MetricOut.model_validate(r) for r in rows],
        count=len(rows),
        timestamp=utcnow(),
    )


@router.get("/metrics/summary", response_model=SummaryResponse)
def get_metrics_summary(hours: int = Query(24, ge=1, le=24 * 30), db: Session = Depends(get_db)) -> SummaryResponse:
    data = queries.metrics_summary(db, hours)
    return SummaryResponse(**data, timestamp=utcnow())


@router.get("/metrics/sources", response_model=List[str])
def get_sources(db: Session = Depends(get_db)) -> List[str]:
    return queries.list_sources(db)


@router.get("/metrics/names", response_model=List[str])
def get_metric_names(source: Optional[str] = None, db: Session = Depends(get_db)) -> List[str]:
    return queries.list_metric_names(db, source)


@router.get("/metrics/chart/{source}/{metric_name}", response_model=ChartResponse)
def get_chart(
    source: str,
    metric_name: str,
    hours: int = Query(24, ge=1, le=24 * 30),
    db: Session = Depends(get_db),
) -> ChartResponse:
    series = chart_series(db, source, metric_name, hours)
    return ChartResponse(**series.model_dump(), timestamp=utcnow())


@router.get("/health", response_model=HealthResponse)
def get_health(minutes: int = Query(5, ge=1, le=60), db: Session = Depends(get_db)) -> HealthResponse:
    data = queries.health_status(db, minutes)
    return HealthResponse(
        status=data["status"],
        critical_count=data["critical_count"],
        warning_count=data["warning_count"],
        critical_metrics=[MetricOut.model_validate(r) for r in data["critical_metrics"]],
        warning_metrics=[MetricOut.model_validate(r) for r in data["warning_metrics"]],
        timestamp=utcnow(),
    )
