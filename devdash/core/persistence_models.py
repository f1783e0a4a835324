"""
SQLAlchemy ORM models for persistence (infrastructure_metrics, docker_services, cicd_pipelines)

- InfrastructureMetric: 시점별 메트릭 샘플 (insert-only)
- DockerServiceSnapshot: 폴링마다 쌓이는 Swarm 서비스 상태 이력 (insert-only)
- CicdPipeline: GitHub Actions run, run_id 기준 upsert
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Integer, String, DateTime, Float, JSON, Index, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()

RUNNING_STATUSES = ("queued", "in_progress")
FAILED_CONCLUSIONS = ("failure", "cancelled", "timed_out")


def utcnow() -> datetime:
    """naive UTC now (DB에는 tz 없이 UTC로 저장)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def derive_service_status(running_replicas: int, replicas: int) -> str:
    """실행 중 replica 수와 목표 replica 수로 서비스 상태를 결정한다."""
    if running_replicas == 0:
        return "down"
    if running_replicas < replicas:
        return "degraded"
    if running_replicas == replicas:
        return "running"
    return "unknown"


class InfrastructureMetric(Base):
    __tablename__ = "infrastructure_metrics"
    __table_args__ = (
        Index("idx_metric_name", "metric_name"),
        Index("idx_source", "source"),
        Index("idx_recorded_at", "recorded_at"),
        Index("idx_metric_source_time", "metric_name", "source", "recorded_at"),
        {"mysql_engine": "InnoDB", "mysql_comment": "시점별 인프라 메트릭 샘플"}
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    metric_name = Column(String(255), nullable=False, comment="예: cpu_percent")
    source = Column(String(255), nullable=False, comment="예: docker, github")
    value = Column(Float, nullable=False)
    unit = Column(String(50), nullable=True)
    labels = Column(JSON, nullable=True, comment="자유 형식 dimension (str→str)")
    threshold = Column(Float, nullable=True)
    alert_level = Column(String(20), nullable=False, default="normal")
    recorded_at = Column(DateTime, nullable=False, comment="관측 시각 (UTC)")
    created_at = Column(DateTime, nullable=False, default=utcnow, comment="적재 시각")


class DockerServiceSnapshot(Base):
    __tablename__ = "docker_services"
    __table_args__ = (
        Index("idx_service_name", "service_name"),
        Index("idx_service_status", "status"),
        Index("idx_service_recorded_at", "recorded_at"),
        {"mysql_engine": "InnoDB", "mysql_comment": "Swarm 서비스 상태 이력"}
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    service_id = Column(String(255), nullable=False)
    service_name = Column(String(255), nullable=False)
    status = Column(String(50), nullable=False)
    replicas = Column(Integer, nullable=False, comment="목표 replica 수")
    running_replicas = Column(Integer, nullable=False, comment="실제 실행 중 replica 수")
    image = Column(String(255), nullable=False, default="")
    ports = Column(JSON, nullable=True)
    labels = Column(JSON, nullable=True)
    recorded_at = Column(DateTime, nullable=False, default=utcnow)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    @property
    def is_healthy(self) -> bool:
        return self.running_replicas == self.replicas and self.status == "running"


class CicdPipeline(Base):
    __tablename__ = "cicd_pipelines"
    __table_args__ = (
        UniqueConstraint("run_id", name="uk_run_id"),
        Index("idx_repository", "repository"),
        Index("idx_pipeline_status", "status"),
        Index("idx_started_at", "started_at"),
        Index("idx_workflow_name", "workflow_name"),
        {"mysql_engine": "InnoDB", "mysql_comment": "GitHub Actions workflow run (run_id 기준 upsert)"}
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(String(255), nullable=False)
    workflow_id = Column(String(255), nullable=False)
    workflow_name = Column(String(255), nullable=False)
    repository = Column(String(255), nullable=False, comment="owner/repo")
    status = Column(String(50), nullable=False)
    conclusion = Column(String(50), nullable=True)
    branch = Column(String(255), nullable=False)
    commit_sha = Column(String(255), nullable=False, default="")
    commit_message = Column(String(500), nullable=True)
    actor = Column(String(255), nullable=True)
    event = Column(String(50), nullable=False)
    duration = Column(Integer, nullable=True, comment="초 단위, 완료 전에는 NULL")
    html_url = Column(String(500), nullable=True)
    started_at = Column(DateTime, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    recorded_at = Column(DateTime, nullable=False, default=utcnow)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def is_running(self) -> bool:
        return self.status in RUNNING_STATUSES

    @property
    def is_successful(self) -> bool:
        return self.status == "completed" and self.conclusion == "success"

    @property
    def is_failed(self) -> bool:
        return self.status == "completed" and self.conclusion in FAILED_CONCLUSIONS

    @property
    def is_terminal(self) -> bool:
        return self.status == "completed"

    @property
    def display_status(self) -> str:
        if self.is_running:
            return "running"
        if self.is_successful:
            return "success"
        if self.is_failed:
            return "failed"
        return self.status

    def calculate_duration(self) -> Optional[int]:
        if self.completed_at is None or self.started_at is None:
            return None
        return int((self.completed_at - self.started_at).total_seconds())
