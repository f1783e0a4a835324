# tests/test_docker_decoding.py

"""
Docker API 응답 디코딩 단위 테스트.
"""

import struct

import pytest

from devdash.core.collectors import docker_decoding as decode
from devdash.core.persistence_models import derive_service_status


def _frame(stream: int, text: str) -> bytes:
    payload = text.encode()
    return struct.pack(">BxxxI", stream, len(payload)) + payload


@pytest.mark.parametrize(
    "running, desired, expected",
    [
        (0, 3, "down"),
        (2, 3, "degraded"),
        (3, 3, "running"),
        (4, 3, "unknown"),
        (0, 0, "down"),
    ],
)
def test_derive_service_status(running, desired, expected):
    """running > desired 이면 unknown."""
    assert derive_service_status(running, desired) == expected


def test_parse_service_defaults_and_status():
    """Replicas가 없으면 1로 본다."""
    svc = decode.parse_service(
        {
            "ID": "svc1",
            "Spec": {"Name": "web", "TaskTemplate": {"ContainerSpec": {"Image": "nginx:1.25"}}},
            "ServiceStatus": {"RunningTasks": 1, "DesiredTasks": 1},
        }
    )
    assert svc.replicas == 1
    assert svc.status == "running"
    assert svc.image == "nginx:1.25"

    degraded = decode.parse_service(
        {"Spec": {"Name": "api", "Mode": {"Replicated": {"Replicas": 3}}}, "ServiceStatus": {"RunningTasks": 2}}
    )
    assert degraded.status == "degraded"
    assert decode.parse_service({}).status == "down"
    assert decode.parse_service({}).name == "unknown"


def test_parse_ports_handles_service_and_container_shapes():
    ports = decode.parse_ports(
        [
            {"PublishedPort": 8080, "TargetPort": 80, "Protocol": "tcp"},
            {"PublicPort": 5432, "PrivatePort": 5432, "Type": "udp"},
            {"PrivatePort": 9000},
        ]
    )
    assert [(p.published, p.target, p.protocol) for p in ports] == [(8080, 80, "tcp"), (5432, 5432, "udp")]


def test_parse_container_strips_leading_slash():
    c = decode.parse_container({"Id": "abc", "Names": ["/redis"], "State": "running", "Image": "redis:7"})
    assert c.name == "redis"
    assert c.is_running
    assert decode.parse_container({}).name == ""


def test_parse_image_ignores_negative_container_count():
    img = decode.parse_image({"Id": "sha256:1", "RepoTags": ["app:latest"], "Size": 100, "Containers": -1})
    assert img.containers == 0
    assert img.repo_tags == ["app:latest"]


def test_cpu_percent_from_deltas():
    stats = {
        "cpu_stats": {"cpu_usage": {"total_usage": 1200}, "system_cpu_usage": 11000, "online_cpus": 2},
        "precpu_stats": {"cpu_usage": {"total_usage": 1000}, "system_cpu_usage": 10000},
    }
    assert decode.cpu_percent(stats) == 40.0


def test_cpu_percent_zero_delta_and_missing_fields():
    assert decode.compute_cpu_percent(100, 0, 4) == 0.0
    assert decode.compute_cpu_percent(500, 100, 4) == 100.0
    assert decode.cpu_percent({}) == decode.CPU_SENTINEL
    assert decode.cpu_percent({"cpu_stats": {}, "precpu_stats": {}}) == decode.CPU_SENTINEL


def test_memory_percent():
    assert decode.memory_percent({"memory_stats": {"usage": 50, "limit": 200}}) == 25.0
    assert decode.memory_percent({"memory_stats": {"usage": 50, "limit": 0}}) == decode.MEMORY_SENTINEL
    assert decode.memory_percent({}) == decode.MEMORY_SENTINEL


def test_parse_stats_sums_network_and_block_io():
    stats = decode.parse_stats(
        "abc",
        {
            "name": "/web",
            "memory_stats": {"usage": 100, "limit": 400},
            "networks": {"eth0": {"rx_bytes": 10, "tx_bytes": 20}, "eth1": {"rx_bytes": 5, "tx_bytes": 1}},
            "blkio_stats": {
                "io_service_bytes_recursive": [
                    {"op": "Read", "value": 7},
                    {"op": "Write", "value": 3},
                    {"op": "read", "value": 1},
                ]
            },
        },
    )
    assert stats.name == "web"
    assert stats.memory_percent == 25.0
    assert (stats.network_rx, stats.network_tx) == (15, 21)
    assert (stats.block_read, stats.block_write) == (8, 3)
    assert stats.cpu_percent == decode.CPU_SENTINEL


def test_demultiplex_strips_frame_headers():
    raw = _frame(1, "hello\n") + _frame(2, "oops\n")
    assert decode.demultiplex(raw) == "hello\noops\n"


def test_demultiplex_passes_tty_stream_through():
    assert decode.demultiplex(b"plain text line\n") == "plain text line\n"


def test_parse_logs_newest_first_with_timestamps():
    raw = _frame(1, "2024-05-01T10:00:00.000000000Z first\n") + _frame(1, "2024-05-01T10:00:01Z second\nno-ts\n")
    logs = decode.parse_logs(raw)

    assert [line.message for line in logs] == ["no-ts", "second", "first"]
    assert logs[0].timestamp is None
    assert logs[1].timestamp == "2024-05-01T10:00:01Z"


@pytest.mark.parametrize("raw", [b"", b"\n\n"])
def test_parse_logs_empty(raw):
    assert decode.parse_logs(raw) == []
