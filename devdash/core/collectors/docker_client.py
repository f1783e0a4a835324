"""
Docker Engine API client (Unix socket).

httpx transport를 Unix domain socket에 연결해 Docker Engine HTTP API를 호출한다.
모든 호출은 고정 timeout(기본 10초)을 가지며, 실패는 CollectorError로 통일한다.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from devdash.core.errors import CollectorError

logger = logging.getLogger(__name__)

SUCCESS_CODES = (200, 204)


class DockerClient:
    """Docker Engine API 클라이언트"""

    def __init__(
        self,
        socket_path: str = "/var/run/docker.sock",
        timeout: float = 10.0,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Args:
            socket_path: Docker 데몬 소켓 경로
            timeout: 호출당 timeout (초)
            transport: 테스트용 transport 주입 (기본: UDS transport)
        """
        self.socket_path = socket_path
        self.timeout = timeout
        self._client = httpx.Client(
            base_url="http://localhost",
            transport=transport or httpx.HTTPTransport(uds=socket_path),
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    def _request(self, method: str, endpoint: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        try:
            return self._client.request(method, endpoint, params=params)
        except httpx.TimeoutException as exc:
            raise CollectorError(f"Docker API timeout ({self.timeout}s): {method} {endpoint}") from exc
        except httpx.HTTPError as exc:
            raise CollectorError(f"Docker API transport error: {method} {endpoint}: {exc}") from exc

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        try:
            return resp.json().get("message") or resp.text
        except (ValueError, AttributeError):
            return resp.text

    def get_json(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        resp = self._request("GET", endpoint, params)
        if resp.status_code not in SUCCESS_CODES:
            raise CollectorError(
                f"Docker API HTTP {resp.status_code}: GET {endpoint}: {self._error_message(resp)}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise CollectorError(f"Invalid JSON response from GET {endpoint}") from exc

    def get_raw(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> bytes:
        resp = self._request("GET", endpoint, params)
        if resp.status_code not in SUCCESS_CODES:
            raise CollectorError(
                f"Docker API HTTP {resp.status_code}: GET {endpoint}: {self._error_message(resp)}",
                status_code=resp.status_code,
            )
        return resp.content

    def post(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> int:
        """POST 액션을 실행하고 status code를 반환한다 (304는 호출자가 해석)."""
        resp = self._request("POST", endpoint, params)
        if resp.status_code not in SUCCESS_CODES and resp.status_code != 304:
            raise CollectorError(
                f"Docker API HTTP {resp.status_code}: POST {endpoint}: {self._error_message(resp)}",
                status_code=resp.status_code,
            )
        return resp.status_code

    def close(self) -> None:
        self._client.close()
