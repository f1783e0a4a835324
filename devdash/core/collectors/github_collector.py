"""
GitHub Actions collector.

- workflow run은 조회 즉시 run_id 기준으로 upsert한다.
- API 실패는 빈 결과로 대체하고 로그만 남긴다 (호출자에게 예외를 올리지 않음).
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from devdash.core import queries, store
from devdash.core.collectors import github_decoding as decode
from devdash.core.collectors.github_client import GitHubClient
from devdash.core.db_sqlalchemy import SessionFactory, session_scope
from devdash.core.errors import CollectorError
from devdash.core.persistence_models import CicdPipeline
from devdash.models.common import RepositoryInfo, RunSnapshot, WorkflowInfo

logger = logging.getLogger(__name__)


class GitHubCollector:
    """GitHub 저장소의 CI/CD 파이프라인 상태를 수집한다."""

    def __init__(self, client: GitHubClient, session_factory: Optional[SessionFactory] = None) -> None:
        self.client = client
        self.session_factory = session_factory

    def collect_workflow_runs(self, owner: str, repo: str, limit: int = 10) -> List[RunSnapshot]:
        repository = f"{owner}/{repo}"
        try:
            data = self.client.get_json(
                f"/repos/{owner}/{repo}/actions/runs",
                params={"per_page": limit, "page": 1},
            )
        except CollectorError as exc:
            logger.error("Failed to retrieve GitHub workflow runs: repository=%s error=%s", repository, exc)
            return []

        result: List[RunSnapshot] = []
        for raw in (data or {}).get("workflow_runs") or []:
            try:
                run = decode.parse_workflow_run(raw, repository)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed workflow run: repository=%s error=%s", repository, exc)
                continue
            result.append(run)
            store.persist_isolated(
                self.session_factory,
                lambda s, r=run: store.upsert_pipeline_run(s, r),
                context=f"workflow run {run.id}",
            )

        logger.info("Retrieved GitHub workflow runs: repository=%s run_count=%d", repository, len(result))
        return result

    def collect_workflows(self, owner: str, repo: str) -> List[WorkflowInfo]:
        repository = f"{owner}/{repo}"
        try:
            data = self.client.get_json(f"/repos/{owner}/{repo}/actions/workflows")
        except CollectorError as exc:
            logger.error("Failed to retrieve GitHub workflows: repository=%s error=%s", repository, exc)
            return []

        result: List[WorkflowInfo] = []
        for raw in (data or {}).get("workflows") or []:
            try:
                result.append(decode.parse_workflow(raw))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed workflow: repository=%s error=%s", repository, exc)

        logger.info("Retrieved GitHub workflows: repository=%s workflow_count=%d", repository, len(result))
        return result

    def collect_repository(self, owner: str, repo: str) -> Optional[RepositoryInfo]:
        repository = f"{owner}/{repo}"
        try:
            data = self.client.get_json(f"/repos/{owner}/{repo}")
            return decode.parse_repository(data)
        except CollectorError as exc:
            logger.error("Failed to retrieve GitHub repository: repository=%s error=%s", repository, exc)
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Malformed GitHub repository payload: repository=%s error=%s", repository, exc)
        return None

    def pipeline_history(self, repository: str, hours: int = 24) -> List[CicdPipeline]:
        with session_scope(self.session_factory) as s:
            return queries.pipeline_history(s, repository, hours)

    def pipeline_stats(self, repository: str, days: int = 7) -> Dict[str, Any]:
        with session_scope(self.session_factory) as s:
            return queries.pipeline_stats(s, repository, days)
