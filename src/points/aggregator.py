"""
Monthly Points Aggregator

Turns one month of normalized daily and event rows into the points
leaderboard:
- Daily points by rank, doubled on Saturdays
- Event points by rank (ranks 1-15)
- Medal-set bonus for the first five players to collect gold, silver and
  bronze daily finishes, in completion order
- Streak bonus for every player holding the month's longest top-10 streak

Each call is an independent computation; no state survives between calls.

Usage:
    from src.points import aggregate
    leaderboard = aggregate(daily_rows, event_rows, "2024-06-30")
"""

from typing import Iterable

from src.config import (
    UNKNOWN_NAME,
    MEDAL_SET_BONUS,
    STREAK_BONUS,
    TOP_N_STREAK_RANK,
)
from src.ingestion.normalizer import NormalizedRow, sort_rows, merge_identity
from src.points.scoring import (
    daily_points,
    event_points,
    is_bonus_day,
    compute_streak_length,
)
from src.utils import setup_logging, round_half_up, name_sort_key

# --- Module Logger ---
logger = setup_logging(__name__)

MEDAL_BY_RANK = {1: 'gold', 2: 'silver', 3: 'bronze'}


def _new_player(player_id: str) -> dict:
    return {
        'player_id': player_id,
        'name': UNKNOWN_NAME,
        'avatar': '',
        'daily_points': 0,
        'event_points': 0,
        'medal_bonus': 0,
        'streak_bonus': 0,
        'medal_counts': {'gold': 0, 'silver': 0, 'bronze': 0},
        'medal_set_rank': None,
        'medal_set_completed_on': None,
        'top10_dates': set(),
        'longest_top10_streak': 0,
        'daily_games_played': 0,
        'event_games_played': 0,
        'total_daily_score': 0,
        'total_event_score': 0,
        'total_daily_rank': 0,
        'total_event_rank': 0,
    }


def upsert_player(players: dict, row: NormalizedRow) -> dict:
    """Fetch or create the accumulator for a row's player and merge its identity."""
    player = players.get(row.player_id)
    if player is None:
        player = _new_player(row.player_id)
        players[row.player_id] = player
    merge_identity(player, row.name, row.avatar)
    return player


def _average(total, games: int) -> float:
    if games <= 0:
        return 0
    return round_half_up(total / games)


def _apply_daily_rows(players: dict, daily_rows: list[NormalizedRow]) -> list[tuple[str, int, str]]:
    """
    Accumulate daily points, medals and top-10 dates.

    Returns:
        Medal-set completions as (date, sequence_index, player_id), one per
        player, in the order they were reached
    """
    completions = []

    for row in daily_rows:
        player = upsert_player(players, row)
        player['daily_points'] += daily_points(row.rank, is_bonus_day(row.date))
        player['daily_games_played'] += 1
        player['total_daily_rank'] += row.rank
        if row.score is not None:
            player['total_daily_score'] += row.score

        if row.rank <= TOP_N_STREAK_RANK:
            player['top10_dates'].add(row.date)

        medal = MEDAL_BY_RANK.get(row.rank)
        if medal is None:
            continue
        player['medal_counts'][medal] += 1

        has_all_medals = all(count > 0 for count in player['medal_counts'].values())
        if has_all_medals and player['medal_set_completed_on'] is None:
            player['medal_set_completed_on'] = row.date
            completions.append((row.date, row.sequence_index, row.player_id))

    return completions


def _apply_medal_set_bonus(players: dict, completions: list[tuple[str, int, str]]) -> None:
    """Award bonus tiers by global completion order (date, then sequence index)."""
    ordered = sorted(completions, key=lambda c: (c[0], c[1]))
    for idx, (_, _, player_id) in enumerate(ordered[:len(MEDAL_SET_BONUS)]):
        player = players[player_id]
        player['medal_bonus'] += MEDAL_SET_BONUS[idx]
        player['medal_set_rank'] = idx + 1


def _apply_event_rows(players: dict, event_rows: list[NormalizedRow]) -> None:
    for row in event_rows:
        points = event_points(row.rank)
        # Non-scoring rows (outside the top 15) do not count as event games
        if not points:
            continue
        player = upsert_player(players, row)
        player['event_points'] += points
        player['event_games_played'] += 1
        player['total_event_rank'] += row.rank
        if row.score is not None:
            player['total_event_score'] += row.score


def _apply_streak_bonus(players: dict) -> int:
    best_streak = 0
    for player in players.values():
        player['longest_top10_streak'] = compute_streak_length(player['top10_dates'])
        best_streak = max(best_streak, player['longest_top10_streak'])

    if best_streak > 0:
        for player in players.values():
            if player['longest_top10_streak'] == best_streak:
                player['streak_bonus'] += STREAK_BONUS

    return best_streak


def _finalize(player: dict) -> dict:
    medals = player['medal_counts']
    total = (
        player['daily_points']
        + player['event_points']
        + player['medal_bonus']
        + player['streak_bonus']
    )
    return {
        'playerId': player['player_id'],
        'name': player['name'],
        'avatar': player['avatar'],
        'dailyPoints': player['daily_points'],
        'eventPoints': player['event_points'],
        'dailyGamesPlayed': player['daily_games_played'],
        'eventGamesPlayed': player['event_games_played'],
        'averageDailyRank': _average(player['total_daily_rank'], player['daily_games_played']),
        'averageDailyScore': _average(player['total_daily_score'], player['daily_games_played']),
        'averageEventRank': _average(player['total_event_rank'], player['event_games_played']),
        'averageEventScore': _average(player['total_event_score'], player['event_games_played']),
        'goldCount': medals['gold'],
        'silverCount': medals['silver'],
        'bronzeCount': medals['bronze'],
        'medalCount': medals['gold'] + medals['silver'] + medals['bronze'],
        'medalBonus': player['medal_bonus'],
        'streakBonus': player['streak_bonus'],
        'totalPoints': total,
        'longestTop10Streak': player['longest_top10_streak'],
        'medalSetRank': player['medal_set_rank'],
        'medalSetCompletedOn': player['medal_set_completed_on'],
    }


def leaderboard_sort_key(row: dict) -> tuple:
    """Order: total desc, daily desc, event desc, name asc ignoring case (player id settles exact ties)."""
    return (
        -row['totalPoints'],
        -row['dailyPoints'],
        -row['eventPoints'],
        *name_sort_key(row['name']),
        row['playerId'],
    )


def aggregate(
    daily_rows: Iterable[NormalizedRow],
    event_rows: Iterable[NormalizedRow],
    cutoff_date: str,
) -> list[dict]:
    """
    Compute the points leaderboard for one month.

    Args:
        daily_rows: Normalized daily rows for the month
        event_rows: Normalized event rows for the month
        cutoff_date: Inclusive ISO cutoff; later rows are ignored

    Returns:
        Leaderboard rows sorted by the leaderboard order; empty if no rows
    """
    daily = sort_rows(row for row in daily_rows if row.date <= cutoff_date)
    events = sort_rows(row for row in event_rows if row.date <= cutoff_date)

    if not daily and not events:
        return []

    players: dict[str, dict] = {}

    completions = _apply_daily_rows(players, daily)
    _apply_medal_set_bonus(players, completions)
    _apply_event_rows(players, events)
    best_streak = _apply_streak_bonus(players)

    leaderboard = sorted((_finalize(p) for p in players.values()), key=leaderboard_sort_key)

    logger.debug(
        f"Aggregated {len(daily)} daily rows and {len(events)} event rows "
        f"through {cutoff_date}: {len(leaderboard)} players, "
        f"{len(completions)} medal sets, best streak {best_streak}"
    )

    return leaderboard
