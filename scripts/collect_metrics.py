"""Collect Docker system metrics once and store them.

Usage examples:
  # cron (every minute)
  * * * * * cd /srv/devdash && python scripts/collect_metrics.py

  # print what would be stored without touching the database
  python scripts/collect_metrics.py --dry-run

  # keep 14 days of history for a custom source name
  python scripts/collect_metrics.py --source docker-prod --cleanup-days 14

Scheduling is left to the caller; a failed cycle is simply retried on the
next invocation.
"""
from __future__ import annotations

import argparse
import logging

from dotenv import load_dotenv

# settings가 import 시점에 환경 변수를 읽으므로 먼저 로드
load_dotenv()

from devdash.config.settings import settings  # noqa: E402
from devdash.core.collection import run_collection_cycle  # noqa: E402
from devdash.core.collectors import DockerClient, DockerCollector  # noqa: E402
from devdash.core.db_sqlalchemy import SessionLocal, init_metadata  # noqa: E402


def main() -> None:
    ap = argparse.ArgumentParser(description="Collect Docker metrics into infrastructure_metrics")
    ap.add_argument("--dry-run", action="store_true", help="Collect but do not store")
    ap.add_argument("--source", default=settings.METRICS_SOURCE, help="Source name recorded on each sample")
    ap.add_argument(
        "--cleanup-days",
        type=int,
        default=settings.METRICS_RETENTION_DAYS,
        help="Delete samples older than N days (0 disables)",
    )
    args = ap.parse_args()

    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if not args.dry_run:
        init_metadata()

    client = DockerClient(settings.DOCKER_SOCKET_PATH, settings.DOCKER_TIMEOUT)
    try:
        report = run_collection_cycle(
            DockerCollector(client, SessionLocal),
            SessionLocal,
            source=args.source,
            cleanup_days=args.cleanup_days,
            dry_run=args.dry_run,
        )
    finally:
        client.close()

    prefix = "[dry-run] " if report.dry_run else ""
    print(
        f"{prefix}containers={report.containers_total} running={report.containers_running} "
        f"samples={len(report.samples)} stored={report.stored} purged={report.purged}"
    )


if __name__ == "__main__":
    main()
