"""Generate sample metrics for local dashboards.

Usage:
  python scripts/generate_metrics.py --hours 6 --interval 5

Existing rows of the `docker` source are deleted before the new series is
stored.
"""
from __future__ import annotations

import argparse
import logging

from dotenv import load_dotenv

# settings가 import 시점에 환경 변수를 읽으므로 먼저 로드
load_dotenv()

from devdash.config.settings import settings  # noqa: E402
from devdash.core.db_sqlalchemy import init_metadata, session_scope  # noqa: E402
from devdash.core.sample_data import generate_sample_metrics, replace_sample_metrics  # noqa: E402


def main() -> None:
    ap = argparse.ArgumentParser(description="Generate sample infrastructure metrics")
    ap.add_argument("--hours", type=int, default=2, help="Number of hours of data to generate")
    ap.add_argument("--interval", type=int, default=5, help="Minutes between data points")
    ap.add_argument("--seed", type=int, default=None, help="Random seed for reproducible data")
    args = ap.parse_args()

    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    init_metadata()
    samples = generate_sample_metrics(hours=args.hours, interval=args.interval, seed=args.seed)
    with session_scope() as db:
        inserted = replace_sample_metrics(db, samples)

    points = (args.hours * 60) // args.interval
    print(f"Generated {points} data points for each metric ({inserted} rows)")
    print("Metrics: cpu_percent, memory_percent, network_rx_bytes, network_tx_bytes")


if __name__ == "__main__":
    main()
