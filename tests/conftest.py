from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest


def _records(speeds, directions, gusts=None):
    start = datetime(2025, 5, 17, 3, 0)
    gusts = gusts or ["14.0"] * len(speeds)
    return [
        {
            "time": (start + timedelta(minutes=15 * i)).isoformat(),
            "windSpeed": speed,
            "windGust": gust,
            "windDirection": direction,
        }
        for i, (speed, gust, direction) in enumerate(zip(speeds, gusts, directions))
    ]


GOOD_CONDITIONS = _records(
    ["11.5", "12.0", "11.8", "12.2", "11.7", "11.9", "12.1", "12.0"],
    ["180", "185", "178", "182", "181", "183", "179", "180"],
    ["14.2", "14.5", "13.9", "15.1", "14.0", "14.3", "14.7", "14.4"],
)

LOW_SPEED_CONDITIONS = _records(
    ["7.5", "7.0", "7.8", "7.2", "7.7", "7.9", "8.1", "8.0"],
    ["180", "185", "178", "182", "181", "183", "179", "180"],
    ["9.2", "9.5", "9.9", "10.1", "10.0", "10.3", "10.7", "10.4"],
)

INCONSISTENT_DIRECTION = _records(
    ["11.5", "12.0", "11.8", "12.2", "11.7", "11.9", "12.1", "12.0"],
    ["180", "220", "178", "240", "181", "260", "179", "230"],
    ["14.2", "14.5", "13.9", "15.1", "14.0", "14.3", "14.7", "14.4"],
)


def graph_payload(speeds_kph, gusts_kph=None, directions=None, start=None, step_minutes=15):
    """Build a getGraph-style payload of ``[epoch_ms, value]`` series."""
    start = start or datetime(2025, 5, 17, 3, 0, tzinfo=timezone.utc)
    times = [int((start + timedelta(minutes=step_minutes * i)).timestamp() * 1000)
             for i in range(len(speeds_kph))]
    payload = {"wind_avg_data": [[t, v] for t, v in zip(times, speeds_kph)]}
    if gusts_kph is not None:
        payload["wind_gust_data"] = [[t, v] for t, v in zip(times, gusts_kph)]
    if directions is not None:
        payload["wind_dir_data"] = [[t, v] for t, v in zip(times, directions)]
    return payload


@pytest.fixture
def good_records():
    return [dict(r) for r in GOOD_CONDITIONS]


@pytest.fixture
def low_speed_records():
    return [dict(r) for r in LOW_SPEED_CONDITIONS]


@pytest.fixture
def inconsistent_records():
    return [dict(r) for r in INCONSISTENT_DIRECTION]
