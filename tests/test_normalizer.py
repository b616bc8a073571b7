from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from wind_alarm_processor import (
    EmptyWindowError,
    MalformedInputError,
    NormalizedRow,
    RawObservation,
    kph_to_mph,
    normalize,
    parse_number,
    rows_from_records,
)

T0 = datetime(2025, 5, 16, 0, 0, tzinfo=timezone.utc)


def obs(hours: float, speed="20", gust="30", direction=180) -> RawObservation:
    return RawObservation(timestamp=T0 + timedelta(hours=hours), speed=speed, gust=gust, direction=direction)


def test_converts_kph_to_mph_with_two_decimals() -> None:
    (row,) = normalize([obs(0, speed="20", gust=30)])

    assert row.wind_speed == 12.43
    assert row.wind_gust == 18.64
    assert row.wind_direction == 180.0
    assert row.timestamp == T0


def test_unparsable_values_are_missing_not_zero() -> None:
    rows = normalize([
        obs(0, speed="abc", gust=None, direction="SSW"),
        obs(1, speed="", gust="n/a", direction=None),
        obs(2, speed="0", gust=0, direction="0"),
    ])

    assert [r.wind_speed for r in rows] == [None, None, 0.0]
    assert [r.wind_gust for r in rows] == [None, None, 0.0]
    assert [r.wind_direction for r in rows] == [None, None, 0.0]


def test_speed_presence_matches_numeric_source() -> None:
    raw_speeds = ["12", 7.5, "x", None, "", "3.25", float("nan"), True]
    rows = normalize([obs(i, speed=s) for i, s in enumerate(raw_speeds)])

    for raw, row in zip(raw_speeds, rows):
        assert (row.wind_speed is not None) == (parse_number(raw) is not None)
    assert [r.wind_speed is not None for r in rows] == [True, True, False, False, False, True, False, False]


def test_conversion_preserves_ordering() -> None:
    kph = [0, 1.5, 2, 10, 10.01, 33.3, 80]
    mph = [kph_to_mph(v) for v in kph]

    assert mph == sorted(mph)
    assert len(set(mph)) == len(mph)


def test_window_drops_rows_older_than_24_hours() -> None:
    # 30 hourly samples: hours 0..29, latest at 29h, cutoff at 5h
    rows = normalize([obs(h) for h in range(30)])

    assert len(rows) == 25
    assert rows[0].timestamp == T0 + timedelta(hours=5)
    assert rows[-1].timestamp == T0 + timedelta(hours=29)


def test_window_is_anchored_at_latest_sample() -> None:
    rows = normalize([obs(h) for h in range(30)], window=timedelta(hours=2))

    assert [r.timestamp for r in rows] == [T0 + timedelta(hours=h) for h in (27, 28, 29)]


def test_unordered_input_is_sorted_before_windowing() -> None:
    rows = normalize([obs(3, speed="30"), obs(1, speed="10"), obs(2, speed="20")])

    assert [r.timestamp for r in rows] == [T0 + timedelta(hours=h) for h in (1, 2, 3)]
    assert [r.wind_speed for r in rows] == [6.21, 12.43, 18.64]


def test_empty_batch_raises_empty_window() -> None:
    with pytest.raises(EmptyWindowError):
        normalize([])


def test_rejects_structurally_malformed_input() -> None:
    with pytest.raises(MalformedInputError):
        normalize("not a list")
    with pytest.raises(MalformedInputError):
        normalize([{"timestamp": T0, "speed": 1}])
    with pytest.raises(MalformedInputError):
        normalize([RawObservation(timestamp="yesterday", speed=1)])


def test_mixed_naive_and_aware_timestamps_are_malformed() -> None:
    naive = RawObservation(timestamp=datetime(2025, 5, 16, 1), speed=1)

    with pytest.raises(MalformedInputError):
        normalize([obs(0), naive])


def test_to_record_export_shape() -> None:
    row = NormalizedRow(timestamp=T0, wind_speed=12.4, wind_gust=None, wind_direction=182.0)

    assert row.to_record() == {
        "time": "2025-05-16T00:00:00+00:00",
        "windSpeed": "12.40",
        "windGust": "",
        "windDirection": 182,
    }


def test_rows_from_records_reads_export_shape(good_records) -> None:
    good_records[1]["windSpeed"] = ""
    good_records[2]["windDirection"] = ""

    rows = rows_from_records(good_records)

    assert len(rows) == 8
    assert rows[0].wind_speed == 11.5
    assert rows[0].wind_gust == 14.2
    assert rows[1].wind_speed is None
    assert rows[2].wind_direction is None
    assert rows[-1].timestamp == datetime(2025, 5, 17, 4, 45)


def test_rows_from_records_rejects_bad_records() -> None:
    with pytest.raises(MalformedInputError):
        rows_from_records([{"windSpeed": "12"}])
    with pytest.raises(MalformedInputError):
        rows_from_records([["2025-05-17T03:00:00", "12"]])
    with pytest.raises(MalformedInputError):
        rows_from_records([{"time": "not a time", "windSpeed": "12"}])


def test_rows_from_records_sorts_by_time(good_records) -> None:
    shuffled = [good_records[i] for i in (3, 0, 7, 1, 5, 2, 6, 4)]

    rows = rows_from_records(shuffled)

    assert [r.timestamp for r in rows] == sorted(r.timestamp for r in rows)
    assert [r.wind_speed for r in rows] == [11.5, 12.0, 11.8, 12.2, 11.7, 11.9, 12.1, 12.0]


def test_rows_from_records_rejects_mixed_timezones(good_records) -> None:
    good_records[0]["time"] = "2025-05-17T03:00:00Z"

    with pytest.raises(MalformedInputError):
        rows_from_records(good_records)
