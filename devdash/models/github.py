from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from devdash.models.common import RunSnapshot, WorkflowInfo


class WorkflowsResponse(BaseModel):
    repository: str
    workflows: List[WorkflowInfo]
    count: int
    timestamp: datetime


class RunsResponse(BaseModel):
    repository: str
    runs: List[RunSnapshot]
    count: int
    timestamp: datetime


class PipelineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    run_id: str
    workflow_id: str
    workflow_name: str
    repository: str
    status: str
    conclusion: Optional[str] = None
    branch: str
    commit_sha: str = ""
    commit_message: Optional[str] = None
    actor: Optional[str] = None
    event: str
    duration: Optional[int] = None
    html_url: Optional[str] = None
    started_at: datetime
    completed_at: Optional[datetime] = None
    display_status: str


class PipelineHistoryResponse(BaseModel):
    repository: str
    history: List[PipelineOut]
    period_hours: int
    timestamp: datetime


class PipelineStatsResponse(BaseModel):
    repository: str
    total_runs: int
    successful_runs: int
    success_rate: float
    average_duration: Optional[float] = None
    period_days: int
    timestamp: datetime
