# 수집기 / 저장소 / API 전체에서 공통으로 쓰이는 스키마 모아둔 곳

from typing import Dict, Literal, Optional
from pydantic import BaseModel, Field
from datetime import datetime

AlertLevel = Literal["normal", "warning", "critical"]
ServiceStatus = Literal["running", "degraded", "down", "unknown"]
HealthStatus = Literal["healthy", "warning", "critical"]


class PortMapping(BaseModel):
    published: int
    target: int
    protocol: str = "tcp"


class ServiceSnapshot(BaseModel):
    """Swarm 서비스 한 개의 폴링 시점 상태."""
    id: str = ""
    name: str = "unknown"
    image: str = ""
    replicas: int = 1
    running_replicas: int = 0
    desired_replicas: int = 0
    status: ServiceStatus = "unknown"
    ports: list[PortMapping] = Field(default_factory=list)
    labels: Dict[str, str] = Field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    version: int = 0


class ContainerSnapshot(BaseModel):
    id: str = ""
    name: str = ""
    image: str = ""
    status: str = ""
    state: str = ""
    ports: list[PortMapping] = Field(default_factory=list)
    labels: Dict[str, str] = Field(default_factory=dict)
    created: Optional[int] = None
    network_mode: str = ""

    @property
    def is_running(self) -> bool:
        return self.state == "running"


class ContainerStats(BaseModel):
    """컨테이너 1회 stats 조회 결과 (CPU/메모리 % + 누적 I/O)."""
    id: str
    name: str = ""
    cpu_percent: float
    memory_usage: int = 0
    memory_limit: int = 0
    memory_percent: float
    network_rx: int = 0
    network_tx: int = 0
    block_read: int = 0
    block_write: int = 0


class ImageSnapshot(BaseModel):
    id: str = ""
    repo_tags: list[str] = Field(default_factory=list)
    size: int = 0
    created: Optional[int] = None
    containers: int = 0
    labels: Dict[str, str] = Field(default_factory=dict)


class LogLine(BaseModel):
    timestamp: Optional[str] = None
    message: str


class ActionResult(BaseModel):
    success: bool
    message: str


class RunSnapshot(BaseModel):
    """GitHub Actions workflow run 한 건."""
    id: str
    workflow_id: str
    workflow_name: str = "Unknown Workflow"
    repository: str
    status: str = "unknown"
    conclusion: Optional[str] = None
    branch: str = "unknown"
    commit_sha: str = ""
    commit_message: Optional[str] = None
    actor: Optional[str] = None
    event: str = "unknown"
    html_url: Optional[str] = None
    started_at: datetime
    completed_at: Optional[datetime] = None


class WorkflowInfo(BaseModel):
    id: int
    name: str
    path: str = ""
    state: str = "unknown"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    html_url: Optional[str] = None
    badge_url: Optional[str] = None


class RepositoryInfo(BaseModel):
    id: int
    name: str
    full_name: str
    description: Optional[str] = None
    private: bool = False
    default_branch: str = "main"
    language: Optional[str] = None
    size: int = 0
    stargazers_count: int = 0
    watchers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    pushed_at: Optional[str] = None
    html_url: Optional[str] = None
