"""
Breakdown Matrices

Player x day and player x event grids of {rank, score, points} for the
month drill-down views. They are read-only views over the same rows the
aggregator consumes and can be recomputed from those rows alone.
"""

from typing import Iterable, Optional

from src.config import UNKNOWN_NAME
from src.ingestion.normalizer import NormalizedRow, sort_rows, merge_identity, event_identity
from src.points.scoring import daily_points, event_points, is_bonus_day
from src.utils import name_sort_key


def _add_cell(players: dict, row: NormalizedRow, key: str, points: int) -> None:
    player = players.get(row.player_id)
    if player is None:
        player = {
            'playerId': row.player_id,
            'name': UNKNOWN_NAME,
            'avatar': '',
            'total': 0,
            'totalScore': 0,
            'scores': {},
        }
        players[row.player_id] = player
    merge_identity(player, row.name, row.avatar)

    cell = player['scores'].get(key)
    if cell is None:
        player['scores'][key] = {'rank': row.rank, 'score': row.score, 'points': points}
        if row.score is not None:
            player['totalScore'] += row.score
    else:
        # Repeated qualifying entries for the same cell are additive
        cell['points'] += points
    player['total'] += points


def _sorted_players(players: dict) -> list[dict]:
    return sorted(
        players.values(),
        key=lambda p: (-p['total'], -p['totalScore'], *name_sort_key(p['name']), p['playerId']),
    )


def build_daily_matrix(daily_rows: Iterable[NormalizedRow], cutoff_date: str) -> Optional[dict]:
    """Player x day grid, or None when there is nothing to show."""
    rows = sort_rows(row for row in daily_rows if row.date <= cutoff_date)
    players: dict[str, dict] = {}

    for row in rows:
        _add_cell(players, row, row.date, daily_points(row.rank, is_bonus_day(row.date)))

    days = sorted({row.date for row in rows})
    if not days or not players:
        return None

    return {
        'days': [{'date': day} for day in days],
        'players': _sorted_players(players),
    }


def _month_events(raw_events: Iterable[dict], cutoff_date: str) -> list[dict]:
    events = []
    seen = set()
    for event in raw_events:
        identity = event_identity(event)
        if identity is None:
            continue
        event_id, name, event_date = identity
        if event_date > cutoff_date or event_id in seen:
            continue
        seen.add(event_id)
        events.append({'id': event_id, 'name': name, 'date': event_date})
    # Stable: same-date events keep their source order
    return sorted(events, key=lambda e: e['date'])


def build_event_matrix(
    event_rows: Iterable[NormalizedRow],
    raw_events: Iterable[dict],
    cutoff_date: str,
) -> Optional[dict]:
    """Player x event grid, or None when there is nothing to show."""
    events = _month_events(raw_events, cutoff_date)
    event_ids = {event['id'] for event in events}

    rows = sort_rows(
        row for row in event_rows
        if row.date <= cutoff_date and row.event_id in event_ids
    )
    players: dict[str, dict] = {}
    for row in rows:
        _add_cell(players, row, row.event_id, event_points(row.rank))

    if not events or not players:
        return None

    return {
        'events': events,
        'players': _sorted_players(players),
    }


def build_matrices(
    daily_rows: Iterable[NormalizedRow],
    event_rows: Iterable[NormalizedRow],
    raw_events: Iterable[dict],
    cutoff_date: str,
) -> dict:
    """
    Build both breakdown matrices for one month.

    Args:
        daily_rows: Normalized daily rows for the month
        event_rows: Normalized event rows for the month
        raw_events: Raw event records for the month (names and dates)
        cutoff_date: Inclusive ISO cutoff

    Returns:
        {"daily": matrix or None, "event": matrix or None}
    """
    return {
        'daily': build_daily_matrix(daily_rows, cutoff_date),
        'event': build_event_matrix(event_rows, raw_events, cutoff_date),
    }
