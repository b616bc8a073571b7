#!/usr/bin/env python3
"""
wind_alarm_processor.py
=======================
Wind Alarm Processor for dawn-patrol wind checks (WindAlert spot graph data)

Takes the last day of wind observations for a spot (average speed, gust and
direction), converts them to mph, keeps the trailing 24-hour window and decides
whether conditions are worth getting out of bed for:

  ALARM_WORTHY        — average speed is good and either the direction is
                        steady or there is a long enough run of good points
  MARGINAL            — speed is good, or there is a good run, but not both
  NOT_WORTHY          — neither
  INSUFFICIENT_DATA   — too few points to decide

Usage:
    pip install requests numpy
    python3 wind_alarm_processor.py --url "<getGraph endpoint URL>"

    # Use a saved getGraph response (JSON or JSONP) and export the rows:
    python3 wind_alarm_processor.py --payload ./getGraph.jsonp --output wind_data.csv

    # Re-classify an already exported CSV with custom thresholds:
    python3 wind_alarm_processor.py --csv wind_data.csv --min-avg-speed 12 --min-point-speed 9

    # Load thresholds saved from the browser settings panel:
    python3 wind_alarm_processor.py --csv wind_data.csv --settings alarm_settings.json

Data source: https://windalert.com/spot/149264
"""

import argparse
import csv
import json
import math
import re
import sys
from dataclasses import dataclass, fields, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence

import numpy as np
import requests

# ─── CONFIG ──────────────────────────────────────────────────────────────────

SPOT_URL       = "https://windalert.com/spot/149264"
GRAPH_ENDPOINT = "/wxengine/rest/graph/getGraph"
USER_AGENT     = ("Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
                  "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36")
OUTPUT_CSV     = "wind_data.csv"

KPH_TO_MPH     = 0.621371
WINDOW_HOURS   = 24
FETCH_TIMEOUT  = 30     # seconds

CSV_FIELDS = ['time', 'windSpeed', 'windGust', 'windDirection']

# Direction arrays in the graph payload, in order of preference. The text
# array is only a fallback and is still indexed like the numeric ones.
DIRECTION_KEYS = ('wind_dir_data', 'wind_direction_data', 'wind_dir_text_data')


@dataclass(frozen=True)
class ThresholdConfig:
    """Alarm thresholds. Speeds in mph, consistency on a 0–100 scale."""

    min_avg_speed: float = 10           # minimum average wind speed
    min_dir_consistency: float = 70     # minimum direction consistency (%)
    min_data_points: int = 4            # minimum data points required
    min_consecutive_points: int = 4     # minimum consecutive good points
    min_point_speed: float = 8          # speed for a single point to count as "good"
    max_dir_deviation: float = 40       # reserved, not used by the decision rule

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Threshold {f.name} must be a number, got {value!r}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ThresholdConfig':
        """Build from camelCase (browser settings) or snake_case keys."""
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = _snake_case(key)
            if name not in known:
                raise ValueError(f"Unknown threshold setting: {key!r}")
            values[name] = value
        return cls(**values)

    def with_overrides(self, **overrides) -> 'ThresholdConfig':
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> dict:
        return {_camel_case(f.name): getattr(self, f.name) for f in fields(self)}


DEFAULT_THRESHOLDS = ThresholdConfig()

# Relaxed profile for light-wind spots
LOWER_THRESHOLDS = ThresholdConfig(
    min_avg_speed=7,
    min_dir_consistency=50,
    min_data_points=3,
    min_consecutive_points=3,
    min_point_speed=6,
    max_dir_deviation=60,
)


def _snake_case(name: str) -> str:
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


def _camel_case(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


# ─── ERRORS ──────────────────────────────────────────────────────────────────

class WindAlarmError(RuntimeError):
    """Base error for the wind alarm pipeline."""


class MalformedInputError(WindAlarmError):
    """Input is not shaped like a sequence of observations / rows."""


class EmptyWindowError(WindAlarmError):
    """No observations left inside the trailing window."""


class FetchError(WindAlarmError):
    """The graph data could not be retrieved or decoded."""


# ─── DATA MODEL ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RawObservation:
    """One sample as delivered by the graph feed (speeds in kph)."""

    timestamp: datetime
    speed: Any = None
    gust: Any = None
    direction: Any = None


@dataclass(frozen=True)
class NormalizedRow:
    """One sample in mph. ``None`` means the reading was missing or unparsable."""

    timestamp: datetime
    wind_speed: Optional[float]
    wind_gust: Optional[float]
    wind_direction: Optional[float]

    def to_record(self) -> dict:
        """Export shape shared with the CSV writer and the chart page."""
        return {
            'time': self.timestamp.isoformat(),
            'windSpeed': _format_mph(self.wind_speed),
            'windGust': _format_mph(self.wind_gust),
            'windDirection': _format_direction(self.wind_direction),
        }


class AlarmStatus(str, Enum):
    INSUFFICIENT_DATA = 'INSUFFICIENT_DATA'
    ALARM_WORTHY = 'ALARM_WORTHY'
    MARGINAL = 'MARGINAL'
    NOT_WORTHY = 'NOT_WORTHY'

    @property
    def label(self) -> str:
        return self.value.replace('_', ' ')


@dataclass(frozen=True)
class ConditionMetrics:
    is_speed_good: bool
    is_direction_consistent: bool
    has_consistent_streak: bool
    has_enough_data: bool


@dataclass(frozen=True)
class Verdict:
    avg_speed: float
    direction_consistency: float
    max_consecutive_streak: int
    status: AlarmStatus
    metrics: ConditionMetrics
    data_points: int = 0
    mean_direction: Optional[float] = None

    @property
    def is_alarm_worthy(self) -> bool:
        return self.status is AlarmStatus.ALARM_WORTHY

    def to_dict(self) -> dict:
        return {
            'avgSpeed': round(self.avg_speed, 2),
            'directionConsistency': round(self.direction_consistency, 1),
            'maxConsecutiveStreak': self.max_consecutive_streak,
            'status': self.status.value,
            'isAlarmWorthy': self.is_alarm_worthy,
            'dataPoints': self.data_points,
            'meanDirection': None if self.mean_direction is None else round(self.mean_direction, 1),
            'metrics': {
                'isSpeedGood': self.metrics.is_speed_good,
                'isDirectionConsistent': self.metrics.is_direction_consistent,
                'hasConsistentStreak': self.metrics.has_consistent_streak,
                'hasEnoughData': self.metrics.has_enough_data,
            },
        }


# ─── DATA PARSING ─────────────────────────────────────────────────────────────

def parse_number(value: Any) -> Optional[float]:
    """Lenient numeric parse. Anything that is not a finite number → None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        num = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    return num if math.isfinite(num) else None


def kph_to_mph(value: Any) -> Optional[float]:
    kph = parse_number(value)
    if kph is None:
        return None
    return round(kph * KPH_TO_MPH, 2)


def parse_timestamp(value: Any) -> datetime:
    """Epoch milliseconds (graph feed) or an ISO-8601 string (exported rows)."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (ValueError, OverflowError, OSError) as e:
            # NaN or an epoch outside the platform range
            raise MalformedInputError(f"Unparsable timestamp: {value!r}") from e
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            pass
    raise MalformedInputError(f"Unparsable timestamp: {value!r}")


def _format_mph(value: Optional[float]) -> str:
    return '' if value is None else f"{value:.2f}"


def _format_direction(value: Optional[float]):
    if value is None:
        return ''
    return int(value) if float(value).is_integer() else value


def _as_list(items: Any, what: str) -> list:
    """Materialize a sequence of records; strings, mappings and scalars are malformed."""
    if isinstance(items, (str, bytes, Mapping)) or not isinstance(items, Iterable):
        raise MalformedInputError(f"Expected a sequence of {what}, got {type(items).__name__}")
    return list(items)


def _sorted_by_time(items: list) -> list:
    """Stable sort on ``.timestamp``; already-ordered input keeps its order."""
    try:
        return sorted(items, key=lambda item: item.timestamp)
    except TypeError as e:
        # naive and aware timestamps mixed in one batch
        raise MalformedInputError(f"Inconsistent timestamps: {e}") from e


# ─── NORMALIZER ───────────────────────────────────────────────────────────────

def normalize_observation(obs: RawObservation) -> NormalizedRow:
    return NormalizedRow(
        timestamp=obs.timestamp,
        wind_speed=kph_to_mph(obs.speed),
        wind_gust=kph_to_mph(obs.gust),
        # degrees pass through; compass text ("SSW") is treated as missing
        wind_direction=parse_number(obs.direction),
    )


def normalize(observations: Sequence[RawObservation],
              window: timedelta = timedelta(hours=WINDOW_HOURS)) -> list[NormalizedRow]:
    """
    Convert raw kph observations to mph rows and keep the trailing window.

    Rows are sorted by timestamp (stable, so already-ordered input keeps its
    order) and only those at or after ``latest - window`` are kept, where
    ``latest`` is the newest timestamp. Raises MalformedInputError for input
    that is not a sequence of RawObservation and EmptyWindowError if nothing
    is left to classify.
    """
    observations = _as_list(observations, "observations")
    for i, obs in enumerate(observations):
        if not isinstance(obs, RawObservation) or not isinstance(obs.timestamp, datetime):
            raise MalformedInputError(f"Observation #{i} is not a RawObservation: {obs!r}")

    ordered = _sorted_by_time(observations)

    if not ordered:
        raise EmptyWindowError("No observations to normalize")

    latest = ordered[-1].timestamp
    cutoff = latest - window
    rows = [normalize_observation(o) for o in ordered if o.timestamp >= cutoff]
    if not rows:
        raise EmptyWindowError(f"No observations at or after {cutoff.isoformat()}")
    return rows


def rows_from_records(records: Iterable[Mapping[str, Any]]) -> list[NormalizedRow]:
    """Rebuild rows from the export shape (CSV rows or JSON fixtures, already in mph).
    Rows come back sorted by timestamp whatever the file order was."""
    rows = []
    for i, rec in enumerate(_as_list(records, "row records")):
        if not isinstance(rec, Mapping) or 'time' not in rec:
            raise MalformedInputError(f"Row #{i} is not a wind row record: {rec!r}")
        speed = parse_number(rec.get('windSpeed'))
        gust = parse_number(rec.get('windGust'))
        rows.append(NormalizedRow(
            timestamp=parse_timestamp(rec['time']),
            wind_speed=None if speed is None else round(speed, 2),
            wind_gust=None if gust is None else round(gust, 2),
            wind_direction=parse_number(rec.get('windDirection')),
        ))
    return _sorted_by_time(rows)


# ─── CIRCULAR STATISTICS ──────────────────────────────────────────────────────

def circular_mean(angles_deg: Sequence[float]) -> float:
    """Mean direction of a list of angles (degrees), handles wraparound."""
    if not len(angles_deg):
        return 0.0
    rad = np.radians(np.asarray(angles_deg, dtype=float))
    mean_rad = math.atan2(float(np.sin(rad).sum()), float(np.cos(rad).sum()))
    return (math.degrees(mean_rad) + 360) % 360


def mean_deviation(angles_deg: Sequence[float], mean_deg: float) -> float:
    """Average shortest angular distance from ``mean_deg``."""
    if not len(angles_deg):
        return 0.0
    diffs = np.abs(np.asarray(angles_deg, dtype=float) - mean_deg)
    return float(np.minimum(diffs, 360 - diffs).mean())


def direction_consistency(angles_deg: Sequence[float]) -> float:
    """0–100 score: 0° mean deviation → 100, 180° → 0."""
    if not len(angles_deg):
        return 100.0
    avg_dev = mean_deviation(angles_deg, circular_mean(angles_deg))
    return max(0.0, 100 - avg_dev / 1.8)


# ─── CLASSIFIER ───────────────────────────────────────────────────────────────

def longest_streak(rows: Sequence[NormalizedRow], min_point_speed: float) -> int:
    """Longest run of consecutive rows at or above ``min_point_speed``.
    A missing speed breaks the run."""
    current = best = 0
    for row in rows:
        if row.wind_speed is not None and row.wind_speed >= min_point_speed:
            current += 1
            best = max(best, current)
        else:
            current = 0
    return best


def classify(rows: Sequence[NormalizedRow],
             thresholds: Optional[ThresholdConfig] = None) -> Verdict:
    """
    Decide whether the rows describe alarm-worthy conditions.

    Never raises on well-shaped input: with no speeds the average is 0, with no
    directions consistency is 100, and too few rows gives INSUFFICIENT_DATA.
    Rows must already be in timestamp order.
    """
    t = thresholds or DEFAULT_THRESHOLDS
    rows = _as_list(rows, "rows")
    for i, row in enumerate(rows):
        if not isinstance(row, NormalizedRow):
            raise MalformedInputError(f"Row #{i} is not a NormalizedRow: {row!r}")

    speeds = [r.wind_speed for r in rows if r.wind_speed is not None]
    avg_speed = float(np.mean(speeds)) if speeds else 0.0

    directions = [r.wind_direction for r in rows if r.wind_direction is not None]
    consistency = direction_consistency(directions)
    mean_dir = circular_mean(directions) if directions else None

    streak = longest_streak(rows, t.min_point_speed)

    metrics = ConditionMetrics(
        is_speed_good=avg_speed >= t.min_avg_speed,
        is_direction_consistent=consistency >= t.min_dir_consistency,
        has_consistent_streak=streak >= t.min_consecutive_points,
        has_enough_data=len(rows) >= t.min_data_points,
    )

    if not metrics.has_enough_data:
        status = AlarmStatus.INSUFFICIENT_DATA
    elif metrics.is_speed_good and (metrics.is_direction_consistent or metrics.has_consistent_streak):
        status = AlarmStatus.ALARM_WORTHY
    elif metrics.is_speed_good or metrics.has_consistent_streak:
        status = AlarmStatus.MARGINAL
    else:
        status = AlarmStatus.NOT_WORTHY

    return Verdict(
        avg_speed=avg_speed,
        direction_consistency=consistency,
        max_consecutive_streak=streak,
        status=status,
        metrics=metrics,
        data_points=len(rows),
        mean_direction=mean_dir,
    )


def evaluate(observations: Sequence[RawObservation],
             thresholds: Optional[ThresholdConfig] = None,
             window: timedelta = timedelta(hours=WINDOW_HOURS)) -> tuple[list[NormalizedRow], Verdict]:
    """Full pipeline: raw observations → rows → verdict."""
    rows = normalize(observations, window)
    return rows, classify(rows, thresholds)


# ─── FETCH ────────────────────────────────────────────────────────────────────

_JSONP_RE = re.compile(r'^[^(]+\((.*)\)\s*;?$', re.S)


def unwrap_jsonp(text: str) -> Any:
    """Decode a getGraph response, which is JSONP (``cb({...})``) or plain JSON."""
    body = text.strip()
    if not body.startswith(('{', '[')):
        match = _JSONP_RE.match(body)
        if not match:
            raise FetchError("Response is neither JSON nor JSONP")
        body = match.group(1)
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise FetchError(f"Could not decode graph data: {e}") from e


def _series(payload: Mapping, key: str) -> list:
    data = payload.get(key) or []
    if not isinstance(data, list):
        raise MalformedInputError(f"{key} is not a list")
    return data


def _pair_value(series: list, i: int) -> Any:
    """Value of entry ``i`` of a ``[[epoch_ms, value], ...]`` series, or None."""
    if i >= len(series) or not series[i]:
        return None
    entry = series[i]
    if isinstance(entry, (list, tuple)) and len(entry) >= 2:
        return entry[1]
    return None


def parse_graph_payload(payload: Any) -> list[RawObservation]:
    """
    Turn the wind graph JSON into RawObservations.

    The average-speed series drives the timeline; gust and direction entries
    are paired with it by index. Direction comes from the first non-empty of
    DIRECTION_KEYS.
    """
    if not isinstance(payload, Mapping):
        raise MalformedInputError(f"Graph payload is not an object: {type(payload).__name__}")
    avg_arr = _series(payload, 'wind_avg_data')
    if not avg_arr:
        raise MalformedInputError(f"Missing wind_avg_data (keys: {sorted(payload)})")
    gust_arr = _series(payload, 'wind_gust_data')
    dir_arr = []
    for key in DIRECTION_KEYS:
        dir_arr = _series(payload, key)
        if dir_arr:
            break

    observations = []
    for i, entry in enumerate(avg_arr):
        if not isinstance(entry, (list, tuple)) or len(entry) < 2:
            raise MalformedInputError(f"wind_avg_data[{i}] is not a [time, value] pair: {entry!r}")
        observations.append(RawObservation(
            timestamp=parse_timestamp(entry[0]),
            speed=entry[1],
            gust=_pair_value(gust_arr, i),
            direction=_pair_value(dir_arr, i),
        ))
    return observations


def fetch_raw_observations(url: str, session: Optional[requests.Session] = None,
                           timeout: float = FETCH_TIMEOUT) -> list[RawObservation]:
    """Download one getGraph response and parse it. Raises FetchError on failure."""
    try:
        r = (session or requests).get(url, timeout=timeout, headers={'User-Agent': USER_AGENT, 'Referer': SPOT_URL})
    except requests.RequestException as e:
        raise FetchError(f"Request to {url} failed: {e}") from e
    if r.status_code >= 400:
        raise FetchError(f"HTTP {r.status_code} from {url}")
    return parse_graph_payload(unwrap_jsonp(r.text))


def load_raw_observations(path: Path) -> list[RawObservation]:
    """Parse a getGraph response saved to disk."""
    try:
        text = Path(path).read_text(encoding='utf-8')
    except OSError as e:
        raise FetchError(f"Could not read {path}: {e}") from e
    return parse_graph_payload(unwrap_jsonp(text))


# ─── EXPORT ───────────────────────────────────────────────────────────────────

def write_csv(rows: Iterable[NormalizedRow], path: Path) -> int:
    """Write rows in the export shape. Returns the number of rows written."""
    count = 0
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row.to_record())
            count += 1
    return count


def read_csv(path: Path) -> list[dict]:
    with open(path, 'r', newline='', encoding='utf-8') as f:
        return list(csv.DictReader(f))


# ─── REPORT ───────────────────────────────────────────────────────────────────

def format_report(verdict: Verdict, thresholds: Optional[ThresholdConfig] = None) -> str:
    t = thresholds or DEFAULT_THRESHOLDS
    m = verdict.metrics
    mean_dir = '—' if verdict.mean_direction is None else f"{verdict.mean_direction:.0f}°"
    lines = [
        '═' * 60,
        '  WIND ALARM CHECK',
        '═' * 60,
        f"  Data points:           {verdict.data_points} (threshold: {t.min_data_points})",
        f"  Avg speed:             {verdict.avg_speed:.1f} mph (threshold: {t.min_avg_speed} mph)",
        f"  Mean direction:        {mean_dir}",
        f"  Direction consistency: {verdict.direction_consistency:.1f}% (threshold: {t.min_dir_consistency}%)",
        f"  Max consecutive streak: {verdict.max_consecutive_streak} (threshold: {t.min_consecutive_points}"
        f" pts ≥ {t.min_point_speed} mph)",
        '─' * 60,
        f"  Speed good: {_yn(m.is_speed_good)}  |  Direction consistent: {_yn(m.is_direction_consistent)}",
        f"  Good streak: {_yn(m.has_consistent_streak)}  |  Enough data: {_yn(m.has_enough_data)}",
        '─' * 60,
        f"  Status: {verdict.status.label}",
        f"  Alarm worthy: {_yn(verdict.is_alarm_worthy)}",
        '═' * 60,
    ]
    return '\n'.join(lines)


def _yn(flag: bool) -> str:
    return 'YES' if flag else 'NO'


# ─── MAIN ─────────────────────────────────────────────────────────────────────

def load_thresholds(args: argparse.Namespace) -> ThresholdConfig:
    base = LOWER_THRESHOLDS if args.lower_thresholds else DEFAULT_THRESHOLDS
    if args.settings:
        try:
            data = json.loads(Path(args.settings).read_text(encoding='utf-8'))
        except (OSError, json.JSONDecodeError) as e:
            raise WindAlarmError(f"Could not load settings {args.settings}: {e}") from e
        if not isinstance(data, dict):
            raise WindAlarmError(f"Settings file {args.settings} must hold a JSON object")
        try:
            base = ThresholdConfig.from_dict({**base.to_dict(), **data})
        except (TypeError, ValueError) as e:
            raise WindAlarmError(f"Invalid settings in {args.settings}: {e}") from e
    return base.with_overrides(
        min_avg_speed=args.min_avg_speed,
        min_dir_consistency=args.min_dir_consistency,
        min_data_points=args.min_data_points,
        min_consecutive_points=args.min_consecutive_points,
        min_point_speed=args.min_point_speed,
        max_dir_deviation=args.max_dir_deviation,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Wind Alarm Processor — decides whether recent wind is worth an alarm'
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--url', type=str,
                        help='getGraph endpoint URL to fetch live data from')
    source.add_argument('--payload', type=str,
                        help='Saved getGraph response (JSON or JSONP)')
    source.add_argument('--csv', type=str,
                        help='Previously exported rows (time,windSpeed,windGust,windDirection)')
    parser.add_argument('--output', type=str, default=None,
                        help=f'Write normalized rows to this CSV (e.g. {OUTPUT_CSV})')
    parser.add_argument('--hours', type=float, default=WINDOW_HOURS,
                        help=f'Trailing window in hours (default: {WINDOW_HOURS})')
    parser.add_argument('--settings', type=str, default=None,
                        help='JSON file with threshold settings (camelCase or snake_case keys)')
    parser.add_argument('--lower-thresholds', action='store_true',
                        help='Start from the relaxed light-wind profile instead of the defaults')
    parser.add_argument('--min-avg-speed', type=float, help='Minimum average speed (mph)')
    parser.add_argument('--min-dir-consistency', type=float, help='Minimum direction consistency (0–100)')
    parser.add_argument('--min-data-points', type=int, help='Minimum number of data points')
    parser.add_argument('--min-consecutive-points', type=int, help='Minimum run of good points')
    parser.add_argument('--min-point-speed', type=float, help='Speed for a point to count as good (mph)')
    parser.add_argument('--max-dir-deviation', type=float, help='Reserved; accepted but not used')
    parser.add_argument('--json', action='store_true',
                        help='Print the verdict as JSON instead of the report')
    parser.add_argument('--fail-unless-worthy', action='store_true',
                        help='Exit with status 2 when conditions are not alarm worthy')
    parser.add_argument('--quiet', action='store_true',
                        help='Only print the result')
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    say = (lambda *a, **k: None) if args.quiet else print

    try:
        thresholds = load_thresholds(args)

        if args.csv:
            say(f"Loading {args.csv} ...", end='', flush=True)
            rows = rows_from_records(read_csv(Path(args.csv)))
            say(f" {len(rows):,} rows")
        else:
            if args.url:
                if GRAPH_ENDPOINT not in args.url:
                    say(f"WARNING: {args.url} does not look like a {GRAPH_ENDPOINT} URL")
                say(f"Fetching graph data from {args.url} ...", end='', flush=True)
                raw = fetch_raw_observations(args.url)
            else:
                say(f"Loading {args.payload} ...", end='', flush=True)
                raw = load_raw_observations(Path(args.payload))
            say(f" {len(raw):,} observations")

            rows = normalize(raw, timedelta(hours=args.hours))
            say(f"Kept {len(rows):,} rows in the last {args.hours:g} hours "
                f"({rows[0].timestamp.isoformat()} → {rows[-1].timestamp.isoformat()})")

            if args.output:
                n = write_csv(rows, Path(args.output))
                say(f"  ✓ {args.output} — {n:,} rows")

        verdict = classify(rows, thresholds)
    except (WindAlarmError, OSError) as e:
        print(f"ERROR: {e}")
        return 1

    if args.json:
        print(json.dumps(verdict.to_dict(), indent=2))
    else:
        print(format_report(verdict, thresholds))

    if args.fail_unless_worthy and not verdict.is_alarm_worthy:
        return 2
    return 0


if __name__ == '__main__':
    sys.exit(main())
