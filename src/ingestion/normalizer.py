"""
Row Normalizer

Converts raw daily records (CSV rows) and raw event records (JSON events with
nested rankings) into one uniform, immutable row shape that the points
aggregator and the breakdown matrices consume.

Malformed rows (bad date, bad rank) are dropped here rather than raised:
a single bad scrape line must not stop a month from being computed.

Usage:
    from src.ingestion.normalizer import normalize_daily_rows, normalize_event_rows
    daily_rows = normalize_daily_rows(records)
    event_rows = normalize_event_rows(events)
"""

import math
from collections import defaultdict
from datetime import date
from typing import Any, Iterable, NamedTuple, Optional

from src.config import (
    UNKNOWN_NAME,
    PLAYER_ID_NAME_PREFIX,
    EVENT_INDEX_STRIDE,
    ISO_DATE_LENGTH,
)
from src.utils import setup_logging, make_event_id

# --- Module Logger ---
logger = setup_logging(__name__)


class NormalizedRow(NamedTuple):
    """One player's result in one daily board or one event."""
    date: str
    month: str
    rank: int
    player_id: str
    name: str
    avatar: str
    score: Optional[float]
    sequence_index: int
    event_id: Optional[str] = None


def sort_key(row: NormalizedRow) -> tuple[str, int, int]:
    return (row.date, row.rank, row.sequence_index)


def sort_rows(rows: Iterable[NormalizedRow]) -> list[NormalizedRow]:
    """Sort rows by (date, rank, sequence_index), the order every pass relies on."""
    return sorted(rows, key=sort_key)


def parse_date(value: Any) -> Optional[str]:
    """Return the value if it is a real YYYY-MM-DD date, otherwise None."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    if len(value) != ISO_DATE_LENGTH:
        return None
    try:
        date.fromisoformat(value)
    except ValueError:
        return None
    return value


def parse_rank(value: Any) -> Optional[int]:
    """Return a positive integer rank, or None for anything else."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(number) or number < 1 or not number.is_integer():
        return None
    return int(number)


def parse_score(value: Any) -> Optional[float]:
    """
    Parse a raw score such as 1234, "1,234" or "1234.5".

    Integral values come back as int so they serialize without a trailing .0.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).replace(",", "").strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def _text(value: Any) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    return str(value).strip()


def resolve_identity(raw_id: Any, raw_name: Any) -> tuple[str, str]:
    """Return (player_id, name), synthesizing the id from the name when absent."""
    name = _text(raw_name) or UNKNOWN_NAME
    player_id = _text(raw_id) or f"{PLAYER_ID_NAME_PREFIX}{name}"
    return player_id, name


def merge_identity(entry: dict, name: str, avatar: str) -> None:
    """
    Fill in a player's display fields without overwriting known values.

    The stored name is only replaced while it is still the "Unknown"
    placeholder; the avatar only while empty.
    """
    if name and name != UNKNOWN_NAME and entry["name"] in ("", UNKNOWN_NAME):
        entry["name"] = name
    if avatar and not entry["avatar"]:
        entry["avatar"] = avatar


def event_identity(event: Any) -> Optional[tuple[str, str, str]]:
    """Return (event_id, name, date) for a raw event, or None if it has no valid date."""
    if not isinstance(event, dict):
        return None
    event_date = parse_date(event.get("date"))
    if event_date is None:
        return None
    name = _text(event.get("name")) or UNKNOWN_NAME
    return make_event_id(name, event_date), name, event_date


def normalize_daily_rows(records: Iterable[dict]) -> list[NormalizedRow]:
    """
    Normalize raw daily records.

    Args:
        records: Dicts with keys dailyDate (or date), rank, playerId, name,
                 score (or the scraper's points column) and avatarUrl

    Returns:
        Sorted list of NormalizedRow; sequence_index is the record position
    """
    rows = []
    dropped = 0

    for index, record in enumerate(records):
        row_date = parse_date(record.get("dailyDate", record.get("date")))
        rank = parse_rank(record.get("rank"))
        if row_date is None or rank is None:
            dropped += 1
            continue

        player_id, name = resolve_identity(record.get("playerId"), record.get("name"))
        raw_score = record.get("score", record.get("points"))
        rows.append(NormalizedRow(
            date=row_date,
            month=row_date[:7],
            rank=rank,
            player_id=player_id,
            name=name,
            avatar=_text(record.get("avatarUrl")),
            score=parse_score(raw_score),
            sequence_index=index,
        ))

    if dropped:
        logger.debug(f"Dropped {dropped} malformed daily rows")

    return sort_rows(rows)


def normalize_event_rows(events: Iterable[dict]) -> list[NormalizedRow]:
    """
    Flatten raw events into normalized ranking rows.

    Args:
        events: Dicts with keys name, date and rankings (list of dicts with
                rank, playerId, name, score or points, avatar)

    Returns:
        Sorted list of NormalizedRow; sequence_index is
        event_index * EVENT_INDEX_STRIDE + ranking_index
    """
    rows = []
    dropped = 0

    for event_index, event in enumerate(events):
        identity = event_identity(event)
        if identity is None:
            continue
        event_id, _, event_date = identity

        rankings = event.get("rankings")
        if not isinstance(rankings, list):
            rankings = []

        for ranking_index, entry in enumerate(rankings):
            if not isinstance(entry, dict):
                dropped += 1
                continue
            rank = parse_rank(entry.get("rank"))
            if rank is None:
                dropped += 1
                continue

            player_id, name = resolve_identity(entry.get("playerId"), entry.get("name"))
            raw_score = entry.get("score", entry.get("points"))
            rows.append(NormalizedRow(
                date=event_date,
                month=event_date[:7],
                rank=rank,
                player_id=player_id,
                name=name,
                avatar=_text(entry.get("avatar")),
                score=parse_score(raw_score),
                sequence_index=event_index * EVENT_INDEX_STRIDE + ranking_index,
                event_id=event_id,
            ))

    if dropped:
        logger.debug(f"Dropped {dropped} malformed event ranking rows")

    return sort_rows(rows)


def group_by_month(rows: Iterable[NormalizedRow]) -> dict[str, list[NormalizedRow]]:
    """Group rows by month key, preserving their relative order."""
    grouped: defaultdict[str, list[NormalizedRow]] = defaultdict(list)
    for row in rows:
        grouped[row.month].append(row)
    return dict(grouped)


def group_events_by_month(events: Iterable[dict]) -> dict[str, list[dict]]:
    """Group raw events by the month of their (valid) final date."""
    grouped: defaultdict[str, list[dict]] = defaultdict(list)
    for event in events:
        identity = event_identity(event)
        if identity is not None:
            grouped[identity[2][:7]].append(event)
    return dict(grouped)


def collect_months(*row_sets: Iterable[NormalizedRow]) -> list[str]:
    """Sorted distinct month keys across any number of row lists."""
    months = set()
    for rows in row_sets:
        months.update(row.month for row in rows)
    return sorted(months)
