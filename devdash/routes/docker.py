# devdash/routes/docker.py
from fastapi import APIRouter, Depends, HTTPException, Query

from devdash.core.collectors import DockerCollector
from devdash.core.persistence_models import utcnow
from devdash.models.common import ActionResult, ContainerStats
from devdash.models.docker import (
    ContainersResponse,
    ImagesResponse,
    LogsResponse,
    ServiceHistoryResponse,
    ServiceSnapshotOut,
    ServicesResponse,
)
from devdash.routes.deps import get_docker_collector

router = APIRouter()


@router.get("/services", response_model=ServicesResponse)
def list_services(collector: DockerCollector = Depends(get_docker_collector)) -> ServicesResponse:
    services = collector.collect_swarm_services()
    return ServicesResponse(services=services, count=len(services), timestamp=utcnow())


@router.get("/containers", response_model=ContainersResponse)
def list_containers(collector: DockerCollector = Depends(get_docker_collector)) -> ContainersResponse:
    containers = collector.collect_containers()
    return ContainersResponse(
        containers=containers,
        count=len(containers),
        running=sum(1 for c in containers if c.is_running),
        timestamp=utcnow(),
    )


@router.get("/containers/{container_id}/stats", response_model=ContainerStats)
def container_stats(container_id: str, collector: DockerCollector = Depends(get_docker_collector)) -> ContainerStats:
    stats = collector.collect_container_stats(container_id)
    if stats is None:
        raise HTTPException(status_code=404, detail=f"Stats unavailable for container {container_id}")
    return stats


@router.get("/images", response_model=ImagesResponse)
def list_images(collector: DockerCollector = Depends(get_docker_collector)) -> ImagesResponse:
    images = collector.collect_images()
    return ImagesResponse(images=images, count=len(images), timestamp=utcnow())


@router.get("/containers/{container_id}/logs", response_model=LogsResponse)
def container_logs(
    container_id: str,
    lines: int = Query(100, ge=1, le=5000),
    collector: DockerCollector = Depends(get_docker_collector),
) -> LogsResponse:
    logs = collector.container_logs(container_id, lines)
    return LogsResponse(target_id=container_id, logs=logs, count=len(logs), timestamp=utcnow())


@router.get("/services/{service_id}/logs", response_model=LogsResponse)
def service_logs(
    service_id: str,
    lines: int = Query(100, ge=1, le=5000),
    collector: DockerCollector = Depends(get_docker_collector),
) -> LogsResponse:
    logs = collector.service_logs(service_id, lines)
    return LogsResponse(target_id=service_id, logs=logs, count=len(logs), timestamp=utcnow())


@router.get("/services/{service_name}/history", response_model=ServiceHistoryResponse)
def service_history(
    service_name: str,
    hours: int = Query(24, ge=1, le=24 * 30),
    collector: DockerCollector = Depends(get_docker_collector),
) -> ServiceHistoryResponse:
    rows = collector.service_history(service_name, hours)
    return ServiceHistoryResponse(
        service_name=service_name,
        history=[ServiceSnapshotOut.model_validate(r) for r in rows],
        period_hours=hours,
        timestamp=utcnow(),
    )


def _action_or_400(result: ActionResult) -> ActionResult:
    if not result.success:
        raise HTTPException(status_code=400, detail=result.message)
    return result


@router.post("/containers/{container_id}/start", response_model=ActionResult)
def start_container(container_id: str, collector: DockerCollector = Depends(get_docker_collector)) -> ActionResult:
    return _action_or_400(collector.start_container(container_id))


@router.post("/containers/{container_id}/stop", response_model=ActionResult)
def stop_container(container_id: str, collector: DockerCollector = Depends(get_docker_collector)) -> ActionResult:
    return _action_or_400(collector.stop_container(container_id))


@router.post("/containers/{container_id}/restart", response_model=ActionResult)
def restart_container(container_id: str, collector: DockerCollector = Depends(get_docker_collector)) -> ActionResult:
    return _action_or_400(collector.restart_container(container_id))
