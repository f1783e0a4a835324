"""
라우트 공용 의존성.

요청마다 클라이언트를 만들고 응답 후 닫는다. 테스트는 app.dependency_overrides로 교체한다.
"""
from typing import Iterator

from fastapi import Depends

from devdash.config.settings import settings
from devdash.core.collectors import DockerClient, DockerCollector, GitHubClient, GitHubCollector
from devdash.core.db_sqlalchemy import SessionFactory, get_session_factory


def get_docker_collector(factory: SessionFactory = Depends(get_session_factory)) -> Iterator[DockerCollector]:
    client = DockerClient(settings.DOCKER_SOCKET_PATH, settings.DOCKER_TIMEOUT)
    try:
        yield DockerCollector(client, factory)
    finally:
        client.close()


def get_github_collector(factory: SessionFactory = Depends(get_session_factory)) -> Iterator[GitHubCollector]:
    client = GitHubClient(settings.GITHUB_TOKEN, settings.GITHUB_API_URL, settings.GITHUB_TIMEOUT)
    try:
        yield GitHubCollector(client, factory)
    finally:
        client.close()
