"""
Docker collector.

DockerClient(전송)와 세션 팩토리(저장)를 생성자로 주입받는다.
- 호출 하나가 실패하면 해당 호출만 빈 결과로 대체한다 (로그 남김).
- Swarm 서비스 스냅샷은 조회와 같은 호출 안에서 바로 이력 테이블에 쌓는다.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, TypeVar

from devdash.core import queries, store
from devdash.core.collectors import docker_decoding as decode
from devdash.core.collectors.docker_client import DockerClient
from devdash.core.db_sqlalchemy import SessionFactory, session_scope
from devdash.core.errors import CollectorError
from devdash.core.persistence_models import DockerServiceSnapshot
from devdash.models.common import (
    ActionResult,
    ContainerSnapshot,
    ContainerStats,
    ImageSnapshot,
    LogLine,
    ServiceSnapshot,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_DECODE_ERRORS = (KeyError, TypeError, ValueError, AttributeError)

_ACTION_DONE = {"start": "started", "stop": "stopped", "restart": "restarted"}


class DockerCollector:
    """Docker Engine에서 서비스/컨테이너/리소스 사용량을 수집한다."""

    def __init__(self, client: DockerClient, session_factory: Optional[SessionFactory] = None) -> None:
        self.client = client
        self.session_factory = session_factory

    def collect_swarm_services(self) -> List[ServiceSnapshot]:
        try:
            raw = self.client.get_json("/services", params={"status": "true"})
        except CollectorError as exc:
            logger.error("Failed to retrieve Docker Swarm services: %s", exc)
            return []

        result: List[ServiceSnapshot] = []
        for snapshot in self._decode_each(raw, decode.parse_service, "service"):
            result.append(snapshot)
            store.persist_isolated(
                self.session_factory,
                lambda s, snap=snapshot: store.record_service_snapshot(s, snap),
                context=f"service snapshot {snapshot.name}",
            )

        logger.info("Retrieved Docker Swarm services: service_count=%d", len(result))
        return result

    def collect_containers(self) -> List[ContainerSnapshot]:
        try:
            raw = self.client.get_json("/containers/json", params={"all": "true"})
        except CollectorError as exc:
            logger.error("Failed to retrieve Docker containers: %s", exc)
            return []

        result = self._decode_each(raw, decode.parse_container, "container")
        logger.info("Retrieved Docker containers: container_count=%d", len(result))
        return result

    def collect_container_stats(self, container_id: str) -> Optional[ContainerStats]:
        try:
            raw = self.client.get_json(f"/containers/{container_id}/stats", params={"stream": "false"})
        except CollectorError as exc:
            logger.error("Failed to retrieve container stats: container_id=%s error=%s", container_id, exc)
            return None
        try:
            return decode.parse_stats(container_id, raw or {})
        except _DECODE_ERRORS as exc:
            logger.warning("Malformed container stats: container_id=%s error=%s", container_id, exc)
            return None

    def collect_images(self) -> List[ImageSnapshot]:
        try:
            raw = self.client.get_json("/images/json")
        except CollectorError as exc:
            logger.error("Failed to retrieve Docker images: %s", exc)
            return []
        return self._decode_each(raw, decode.parse_image, "image")

    @staticmethod
    def _decode_each(raw: Any, parse: Callable[[Any], T], kind: str) -> List[T]:
        """항목별로 디코딩하고, 깨진 항목만 건너뛴다."""
        result: List[T] = []
        for item in raw or []:
            try:
                result.append(parse(item))
            except _DECODE_ERRORS as exc:
                logger.warning("Skipping malformed Docker %s: error=%s", kind, exc)
        return result

    def container_logs(self, container_id: str, lines: int = 100) -> List[LogLine]:
        return self._logs(f"/containers/{container_id}/logs", lines, container_id=container_id)

    def service_logs(self, service_id: str, lines: int = 100) -> List[LogLine]:
        return self._logs(f"/services/{service_id}/logs", lines, service_id=service_id)

    def _logs(self, endpoint: str, lines: int, **context: str) -> List[LogLine]:
        params = {"stdout": "true", "stderr": "true", "tail": str(lines), "timestamps": "true"}
        try:
            raw = self.client.get_raw(endpoint, params=params)
        except CollectorError as exc:
            logger.error("Failed to retrieve logs: %s error=%s", context, exc)
            return []
        return decode.parse_logs(raw)

    # ------------------------------------------------------------------
    # container actions
    # ------------------------------------------------------------------

    def start_container(self, container_id: str) -> ActionResult:
        return self._container_action(container_id, "start")

    def stop_container(self, container_id: str) -> ActionResult:
        return self._container_action(container_id, "stop")

    def restart_container(self, container_id: str) -> ActionResult:
        return self._container_action(container_id, "restart")

    def _container_action(self, container_id: str, action: str) -> ActionResult:
        try:
            status_code = self.client.post(f"/containers/{container_id}/{action}")
        except CollectorError as exc:
            logger.error("Container %s failed: container_id=%s error=%s", action, container_id, exc)
            return ActionResult(success=False, message=str(exc))

        if status_code == 304:
            return ActionResult(success=True, message=f"Container already {_ACTION_DONE[action]}")
        logger.info("Container %s: container_id=%s", _ACTION_DONE[action], container_id)
        return ActionResult(success=True, message=f"Container {_ACTION_DONE[action]} successfully")

    # ------------------------------------------------------------------
    # history
    # ------------------------------------------------------------------

    def service_history(self, service_name: str, hours: int = 24) -> List[DockerServiceSnapshot]:
        with session_scope(self.session_factory) as s:
            return queries.service_history(s, service_name, hours)
