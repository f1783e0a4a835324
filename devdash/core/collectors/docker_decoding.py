"""
Docker Engine API 응답 디코딩.

Docker JSON은 필드가 빠지거나 null인 경우가 많으므로 필드마다 기본값을 정해두고
레코드 전체를 버리지 않는다. CPU/메모리 계산이 불가능한 stats는 sentinel 값을 쓴다.
"""
from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping

from devdash.core.persistence_models import derive_service_status
from devdash.models.common import (
    ContainerSnapshot,
    ContainerStats,
    ImageSnapshot,
    LogLine,
    PortMapping,
    ServiceSnapshot,
)

CPU_SENTINEL = 0.1
MEMORY_SENTINEL = 5.0

_LOG_TS = re.compile(r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?Z)\s?(.*)$")


def _dig(data: Any, *keys: str, default: Any = None) -> Any:
    """중첩 dict를 따라가며 값을 꺼낸다. 중간에 없거나 None이면 default."""
    for key in keys:
        if not isinstance(data, Mapping):
            return default
        data = data.get(key)
        if data is None:
            return default
    return data


def _clamp_percent(value: float) -> float:
    return round(min(max(value, 0.0), 100.0), 2)


def _str_map(value: Any) -> Dict[str, str]:
    if not isinstance(value, Mapping):
        return {}
    return {str(k): "" if v is None else str(v) for k, v in value.items()}

# ---------------------------------------------------------------------------
# services / containers / images
# ---------------------------------------------------------------------------

def parse_ports(ports: Any) -> List[PortMapping]:
    """서비스(PublishedPort/TargetPort)와 컨테이너(PublicPort/PrivatePort) 포트 형식 모두 처리."""
    result: List[PortMapping] = []
    for port in ports or []:
        if not isinstance(port, Mapping):
            continue
        published = port.get("PublishedPort", port.get("PublicPort"))
        target = port.get("TargetPort", port.get("PrivatePort"))
        if published is None or target is None:
            continue
        result.append(
            PortMapping(
                published=int(published),
                target=int(target),
                protocol=port.get("Protocol") or port.get("Type") or "tcp",
            )
        )
    return result


def parse_service(service: Mapping[str, Any]) -> ServiceSnapshot:
    replicas = int(_dig(service, "Spec", "Mode", "Replicated", "Replicas", default=1))
    running = int(_dig(service, "ServiceStatus", "RunningTasks", default=0))

    return ServiceSnapshot(
        id=service.get("ID") or "",
        name=_dig(service, "Spec", "Name", default="unknown"),
        image=_dig(service, "Spec", "TaskTemplate", "ContainerSpec", "Image", default=""),
        replicas=replicas,
        running_replicas=running,
        desired_replicas=int(_dig(service, "ServiceStatus", "DesiredTasks", default=0)),
        status=derive_service_status(running, replicas),
        ports=parse_ports(_dig(service, "Spec", "EndpointSpec", "Ports", default=[])),
        labels=_str_map(_dig(service, "Spec", "Labels", default={})),
        created_at=service.get("CreatedAt"),
        updated_at=service.get("UpdatedAt"),
        version=int(_dig(service, "Version", "Index", default=0)),
    )


def parse_container(container: Mapping[str, Any]) -> ContainerSnapshot:
    names = container.get("Names") or [""]
    return ContainerSnapshot(
        id=container.get("Id") or "",
        name=str(names[0]).lstrip("/"),
        image=container.get("Image") or "",
        status=container.get("Status") or "",
        state=container.get("State") or "",
        ports=parse_ports(container.get("Ports")),
        labels=_str_map(container.get("Labels")),
        created=container.get("Created"),
        network_mode=_dig(container, "HostConfig", "NetworkMode", default=""),
    )


def parse_image(image: Mapping[str, Any]) -> ImageSnapshot:
    containers = image.get("Containers")
    return ImageSnapshot(
        id=image.get("Id") or "",
        repo_tags=[t for t in image.get("RepoTags") or [] if t],
        size=int(image.get("Size") or 0),
        created=image.get("Created"),
        containers=containers if isinstance(containers, int) and containers > 0 else 0,
        labels=_str_map(image.get("Labels")),
    )

# ---------------------------------------------------------------------------
# stats
# ---------------------------------------------------------------------------

def compute_cpu_percent(cpu_delta: float, system_delta: float, online_cpus: int) -> float:
    if system_delta <= 0 or cpu_delta <= 0:
        return 0.0
    return _clamp_percent((cpu_delta / system_delta) * online_cpus * 100)


def cpu_percent(stats: Mapping[str, Any]) -> float:
    """cpu_stats / precpu_stats 두 샘플의 차이로 CPU 사용률(%)을 계산한다."""
    try:
        cur = stats["cpu_stats"]
        prev = stats["precpu_stats"]
        cpu_delta = cur["cpu_usage"]["total_usage"] - prev["cpu_usage"]["total_usage"]
        system_delta = cur["system_cpu_usage"] - prev["system_cpu_usage"]
    except (KeyError, TypeError):
        return CPU_SENTINEL

    online_cpus = cur.get("online_cpus") or len(_dig(cur, "cpu_usage", "percpu_usage", default=[])) or 1
    return compute_cpu_percent(cpu_delta, system_delta, online_cpus)


def memory_percent(stats: Mapping[str, Any]) -> float:
    usage = _dig(stats, "memory_stats", "usage")
    limit = _dig(stats, "memory_stats", "limit")
    if not isinstance(usage, (int, float)) or not isinstance(limit, (int, float)) or limit <= 0:
        return MEMORY_SENTINEL
    return _clamp_percent(usage / limit * 100)


def parse_stats(container_id: str, stats: Mapping[str, Any]) -> ContainerStats:
    networks = stats.get("networks") or {}
    rx = sum(int(n.get("rx_bytes") or 0) for n in networks.values() if isinstance(n, Mapping))
    tx = sum(int(n.get("tx_bytes") or 0) for n in networks.values() if isinstance(n, Mapping))

    block_read = block_write = 0
    for entry in _dig(stats, "blkio_stats", "io_service_bytes_recursive", default=[]):
        if not isinstance(entry, Mapping):
            continue
        op = str(entry.get("op", "")).lower()
        if op == "read":
            block_read += int(entry.get("value") or 0)
        elif op == "write":
            block_write += int(entry.get("value") or 0)

    return ContainerStats(
        id=container_id,
        name=str(stats.get("name") or "").lstrip("/"),
        cpu_percent=cpu_percent(stats),
        memory_usage=int(_dig(stats, "memory_stats", "usage", default=0)),
        memory_limit=int(_dig(stats, "memory_stats", "limit", default=0)),
        memory_percent=memory_percent(stats),
        network_rx=rx,
        network_tx=tx,
        block_read=block_read,
        block_write=block_write,
    )

# ---------------------------------------------------------------------------
# logs
# ---------------------------------------------------------------------------

def demultiplex(raw: bytes) -> str:
    """
    Docker 로그 스트림의 8바이트 frame header를 제거한다.
    header: [stream(0/1/2), 0, 0, 0, size(uint32 big-endian)]
    TTY 컨테이너처럼 header가 없는 스트림은 그대로 디코딩한다.
    """
    chunks: List[bytes] = []
    offset = 0
    while offset + 8 <= len(raw):
        header = raw[offset:offset + 8]
        if header[0] not in (0, 1, 2) or header[1:4] != b"\x00\x00\x00":
            return raw.decode("utf-8", errors="replace")
        size = int.from_bytes(header[4:8], "big")
        chunks.append(raw[offset + 8:offset + 8 + size])
        offset += 8 + size
    if offset < len(raw):
        # 남은 꼬리가 frame이 아니면 전체를 raw 텍스트로 본다
        return raw.decode("utf-8", errors="replace")
    return b"".join(chunks).decode("utf-8", errors="replace")


def parse_logs(raw: bytes) -> List[LogLine]:
    """로그를 (timestamp, message) 목록으로 변환한다. 최신 로그가 먼저 온다."""
    result: List[LogLine] = []
    for line in demultiplex(raw).splitlines():
        if not line.strip():
            continue
        match = _LOG_TS.match(line)
        if match:
            result.append(LogLine(timestamp=match.group(1), message=match.group(2)))
        else:
            result.append(LogLine(timestamp=None, message=line))
    result.reverse()
    return result
