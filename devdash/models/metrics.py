from typing import Any, Dict, List, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from devdash.models.common import AlertLevel, HealthStatus


class MetricOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    source: str
    metric_name: str
    value: float
    unit: Optional[str] = None
    labels: Optional[Dict[str, str]] = None
    threshold: Optional[float] = None
    alert_level: AlertLevel = "normal"
    recorded_at: datetime
    created_at: datetime


class ChartPoint(BaseModel):
    """버킷 하나의 집계값. 원본 샘플 값 목록은 노출하지 않는다."""
    timestamp: datetime
    avg_value: float
    min_value: float
    max_value: float
    count: int


class ChartSeries(BaseModel):
    source: str
    metric_name: str
    chart_data: List[ChartPoint]
    period_hours: int
    interval: str


class MetricsResponse(BaseModel):
    metrics: List[MetricOut]
    count: int
    filters: Dict[str, Any] = {}
    timestamp: datetime


class LatestMetricsResponse(BaseModel):
    metrics: List[MetricOut]
    count: int
    timestamp: datetime


class SummaryRow(BaseModel):
    source: str
    metric_name: str
    count: int
    avg_value: float
    min_value: float
    max_value: float


class AlertCount(BaseModel):
    alert_level: AlertLevel
    count: int


class SummaryResponse(BaseModel):
    summary: List[SummaryRow]
    alerts: List[AlertCount]
    period_hours: int
    timestamp: datetime


class ChartResponse(ChartSeries):
    timestamp: datetime


class HealthResponse(BaseModel):
    status: HealthStatus
    critical_count: int
    warning_count: int
    critical_metrics: List[MetricOut]
    warning_metrics: List[MetricOut]
    timestamp: datetime
