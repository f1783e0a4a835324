"""
GitHub Actions API 응답 디코딩.

필드마다 기본값을 정해두고, 필수 식별자(id)가 없는 레코드만 ValueError로 거른다.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from devdash.models.common import RepositoryInfo, RunSnapshot, WorkflowInfo


def parse_timestamp(value: Any) -> Optional[datetime]:
    """ISO-8601 ("2024-05-01T10:00:00Z") → naive UTC datetime."""
    if not value:
        return None
    try:
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts


def parse_workflow_run(run: Mapping[str, Any], repository: str) -> RunSnapshot:
    if run.get("id") is None:
        raise ValueError("workflow run without id")

    status = run.get("status") or "unknown"
    started_at = parse_timestamp(run.get("run_started_at")) or parse_timestamp(run.get("created_at"))
    if started_at is None:
        raise ValueError(f"workflow run {run.get('id')} without start time")

    # updated_at은 진행 중에도 계속 바뀌므로 completed일 때만 완료 시각으로 본다
    completed_at = parse_timestamp(run.get("updated_at")) if status == "completed" else None

    actor = run.get("actor") or {}
    return RunSnapshot(
        id=str(run["id"]),
        workflow_id=str(run.get("workflow_id") or ""),
        workflow_name=run.get("name") or "Unknown Workflow",
        repository=repository,
        status=status,
        conclusion=run.get("conclusion"),
        branch=run.get("head_branch") or "unknown",
        commit_sha=run.get("head_sha") or "",
        commit_message=run.get("display_title"),
        actor=actor.get("login") if isinstance(actor, Mapping) else None,
        event=run.get("event") or "unknown",
        html_url=run.get("html_url"),
        started_at=started_at,
        completed_at=completed_at,
    )


def parse_workflow(workflow: Mapping[str, Any]) -> WorkflowInfo:
    return WorkflowInfo(
        id=int(workflow["id"]),
        name=workflow.get("name") or "",
        path=workflow.get("path") or "",
        state=workflow.get("state") or "unknown",
        created_at=workflow.get("created_at"),
        updated_at=workflow.get("updated_at"),
        html_url=workflow.get("html_url"),
        badge_url=workflow.get("badge_url"),
    )


def parse_repository(repo: Mapping[str, Any]) -> RepositoryInfo:
    return RepositoryInfo(
        id=int(repo["id"]),
        name=repo.get("name") or "",
        full_name=repo.get("full_name") or "",
        description=repo.get("description"),
        private=bool(repo.get("private", False)),
        default_branch=repo.get("default_branch") or "main",
        language=repo.get("language"),
        size=int(repo.get("size") or 0),
        stargazers_count=int(repo.get("stargazers_count") or 0),
        watchers_count=int(repo.get("watchers_count") or 0),
        forks_count=int(repo.get("forks_count") or 0),
        open_issues_count=int(repo.get("open_issues_count") or 0),
        created_at=repo.get("created_at"),
        updated_at=repo.get("updated_at"),
        pushed_at=repo.get("pushed_at"),
        html_url=repo.get("html_url"),
    )
