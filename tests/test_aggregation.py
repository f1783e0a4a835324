# tests/test_aggregation.py

"""
aggregation (버킷 집계) 단위 테스트.
"""

from datetime import datetime, timedelta

import pytest

from devdash.core import store
from devdash.core.aggregation import (
    FIFTEEN_MINUTES,
    FIVE_MINUTES,
    FOUR_HOURS,
    ONE_HOUR,
    aggregate,
    bucket_start,
    chart_series,
    select_interval,
)


@pytest.mark.parametrize(
    "hours, expected",
    [
        (1, FIVE_MINUTES),
        (4, FIVE_MINUTES),
        (5, FIFTEEN_MINUTES),
        (12, FIFTEEN_MINUTES),
        (24, ONE_HOUR),
        (48, ONE_HOUR),
        (168, FOUR_HOURS),
    ],
)
def test_select_interval(hours, expected):
    assert select_interval(hours) == expected


def test_interval_labels():
    assert FIVE_MINUTES.label == "5 minutes"
    assert FOUR_HOURS.label == "4 hours"


def test_bucket_start_floors_to_wall_clock():
    """rolling window가 아니라 벽시계 기준 내림."""
    assert bucket_start(datetime(2024, 5, 1, 10, 7, 30), FIVE_MINUTES) == datetime(2024, 5, 1, 10, 5)
    assert bucket_start(datetime(2024, 5, 1, 10, 14, 59), FIFTEEN_MINUTES) == datetime(2024, 5, 1, 10, 0)
    assert bucket_start(datetime(2024, 5, 1, 10, 59, 59), ONE_HOUR) == datetime(2024, 5, 1, 10, 0)
    assert bucket_start(datetime(2024, 5, 1, 15, 30), FOUR_HOURS) == datetime(2024, 5, 1, 12, 0)


def test_aggregate_groups_and_orders_buckets():
    samples = [
        (datetime(2024, 5, 1, 10, 6), 30.0),
        (datetime(2024, 5, 1, 10, 1), 10.0),
        (datetime(2024, 5, 1, 10, 4), 20.0),
    ]

    points = aggregate(samples, FIVE_MINUTES)

    assert [p.timestamp for p in points] == [datetime(2024, 5, 1, 10, 0), datetime(2024, 5, 1, 10, 5)]
    first, second = points
    assert first.avg_value == pytest.approx(15.0)
    assert first.min_value == 10.0
    assert first.max_value == 20.0
    assert first.count == 2
    assert second.avg_value == pytest.approx(30.0)
    assert second.count == 1


def test_aggregate_skips_empty_buckets():
    samples = [(datetime(2024, 5, 1, 10, 0), 1.0), (datetime(2024, 5, 1, 10, 30), 2.0)]
    assert len(aggregate(samples, FIVE_MINUTES)) == 2
    assert aggregate([], FIVE_MINUTES) == []


def test_chart_series_reads_window_from_store(db):
    now = datetime(2024, 5, 1, 12, 0)
    for minutes_ago, value in [(3, 40.0), (7, 60.0), (9, 80.0), (120, 99.0)]:
        store.record_metric(
            db, source="docker", metric_name="cpu_percent", value=value,
            recorded_at=now - timedelta(minutes=minutes_ago), now=now,
        )
    store.record_metric(db, source="docker", metric_name="memory_percent", value=1.0, recorded_at=now, now=now)
    db.commit()

    series = chart_series(db, "docker", "cpu_percent", hours=1, now=now)

    assert series.interval == "5 minutes"
    assert series.period_hours == 1
    assert [p.timestamp for p in series.chart_data] == [datetime(2024, 5, 1, 11, 50), datetime(2024, 5, 1, 11, 55)]
    assert series.chart_data[0].avg_value == pytest.approx(70.0)
    assert series.chart_data[1].max_value == 40.0
