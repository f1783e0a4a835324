# devdash/routes/github.py
from fastapi import APIRouter, Depends, HTTPException, Query

from devdash.core.collectors import GitHubCollector
from devdash.core.persistence_models import utcnow
from devdash.models.common import RepositoryInfo
from devdash.models.github import (
    PipelineHistoryResponse,
    PipelineOut,
    PipelineStatsResponse,
    RunsResponse,
    WorkflowsResponse,
)
from devdash.routes.deps import get_github_collector

router = APIRouter()


@router.get("/{owner}/{repo}", response_model=RepositoryInfo)
def get_repository(owner: str, repo: str, collector: GitHubCollector = Depends(get_github_collector)) -> RepositoryInfo:
    info = collector.collect_repository(owner, repo)
    if info is None:
        raise HTTPException(status_code=404, detail=f"Repository {owner}/{repo} not available")
    return info


@router.get("/{owner}/{repo}/workflows", response_model=WorkflowsResponse)
def list_workflows(owner: str, repo: str, collector: GitHubCollector = Depends(get_github_collector)) -> WorkflowsResponse:
    workflows = collector.collect_workflows(owner, repo)
    return WorkflowsResponse(
        repository=f"{owner}/{repo}", workflows=workflows, count=len(workflows), timestamp=utcnow()
    )


@router.get("/{owner}/{repo}/runs", response_model=RunsResponse)
def list_runs(
    owner: str,
    repo: str,
    limit: int = Query(10, ge=1, le=100),
    collector: GitHubCollector = Depends(get_github_collector),
) -> RunsResponse:
    # 조회와 동시에 cicd_pipelines 테이블에 upsert 된다
    runs = collector.collect_workflow_runs(owner, repo, limit)
    return RunsResponse(repository=f"{owner}/{repo}", runs=runs, count=len(runs), timestamp=utcnow())


@router.get("/{owner}/{repo}/stats", response_model=PipelineStatsResponse)
def pipeline_stats(
    owner: str,
    repo: str,
    days: int = Query(7, ge=1, le=365),
    collector: GitHubCollector = Depends(get_github_collector),
) -> PipelineStatsResponse:
    repository = f"{owner}/{repo}"
    stats = collector.pipeline_stats(repository, days)
    return PipelineStatsResponse(repository=repository, **stats, timestamp=utcnow())


@router.get("/{owner}/{repo}/history", response_model=PipelineHistoryResponse)
def pipeline_history(
    owner: str,
    repo: str,
    hours: int = Query(24, ge=1, le=24 * 30),
    collector: GitHubCollector = Depends(get_github_collector),
) -> PipelineHistoryResponse:
    repository = f"{owner}/{repo}"
    rows = collector.pipeline_history(repository, hours)
    return PipelineHistoryResponse(
        repository=repository,
        history=[PipelineOut.model_validate(r) for r in rows],
        period_hours=hours,
        timestamp=utcnow(),
    )
