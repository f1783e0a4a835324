"""
GitHub REST API v3 client.

Bearer 토큰 인증 + 고정 timeout. 실패(연결/timeout/HTTP 오류/JSON 오류)는 CollectorError로 통일.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from devdash.core.errors import CollectorError


class GitHubClient:
    """GitHub API 클라이언트"""

    def __init__(
        self,
        token: str = "",
        base_url: str = "https://api.github.com",
        timeout: float = 10.0,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Args:
            token: GitHub API 토큰 (없으면 비인증 호출, rate limit 낮음)
            base_url: API 주소 (GitHub Enterprise 등)
            timeout: 호출당 timeout (초)
            session: 테스트용 세션 주입
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github.v3+json",
                "User-Agent": "devdash/0.1",
            }
        )
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.Timeout as exc:
            raise CollectorError(f"GitHub API 응답 시간 초과 ({self.timeout}초): {path}") from exc
        except requests.exceptions.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise CollectorError(f"GitHub API 오류: {exc}", status_code=status) from exc
        except requests.exceptions.RequestException as exc:
            raise CollectorError(f"GitHub API에 연결할 수 없습니다: {exc}") from exc
        except ValueError as exc:
            raise CollectorError(f"GitHub API 응답이 JSON이 아닙니다: {path}") from exc

    def close(self) -> None:
        self.session.close()
