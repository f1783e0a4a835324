from typing import Any, List, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from devdash.models.common import ContainerSnapshot, ImageSnapshot, LogLine, ServiceSnapshot


class ServicesResponse(BaseModel):
    services: List[ServiceSnapshot]
    count: int
    timestamp: datetime


class ContainersResponse(BaseModel):
    containers: List[ContainerSnapshot]
    count: int
    running: int
    timestamp: datetime


class ImagesResponse(BaseModel):
    images: List[ImageSnapshot]
    count: int
    timestamp: datetime


class LogsResponse(BaseModel):
    target_id: str
    logs: List[LogLine]
    count: int
    timestamp: datetime


class ServiceSnapshotOut(BaseModel):
    """docker_services 이력 row."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    service_id: str
    service_name: str
    status: str
    replicas: int
    running_replicas: int
    image: str = ""
    ports: Optional[List[Any]] = None
    labels: Optional[dict] = None
    recorded_at: datetime
    is_healthy: bool


class ServiceHistoryResponse(BaseModel):
    service_name: str
    history: List[ServiceSnapshotOut]
    period_hours: int
    timestamp: datetime
