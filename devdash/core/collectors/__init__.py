"""
Collectors package initialization.
"""

from .docker_client import DockerClient
from .docker_collector import DockerCollector
from .github_client import GitHubClient
from .github_collector import GitHubCollector

__all__ = ["DockerClient", "DockerCollector", "GitHubClient", "GitHubCollector"]
