"""
Monthly Points Pipeline

Loads the scraped daily scores and event rankings, computes every month's
points leaderboard and breakdown matrices, and writes the JSON documents
the site reads:
- points.json: month -> leaderboard
- daily_breakdown.json: month -> player x day matrix
- event_breakdown.json: month -> player x event matrix

Usage:
    python -m src.points.pipeline
    OR
    from src.points import compute_all_months, run_points
    results = run_points(month="2024-06", through="2024-06-15")
"""

import sys
from pathlib import Path

# Enable both `python src/points/pipeline.py` and `python -m src.points.pipeline` execution.
# Required for src.config/src.utils imports to resolve correctly.
_project_root = str(Path(__file__).parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from typing import Optional

import pandas as pd

from src.config import (
    DAILY_SCORES_FILE,
    EVENT_RANKINGS_FILE,
    POINTS_OUTPUT,
    DAILY_BREAKDOWN_OUTPUT,
    EVENT_BREAKDOWN_OUTPUT,
    TOP_PLAYERS_TO_LOG,
)
from src.ingestion.loaders import IngestionError, load_daily_scores, load_event_rankings
from src.ingestion.normalizer import (
    NormalizedRow,
    normalize_daily_rows,
    normalize_event_rows,
    group_by_month,
    group_events_by_month,
    collect_months,
)
from src.points.aggregator import aggregate
from src.points.matrix import build_matrices
from src.utils import (
    setup_logging,
    atomic_write_json,
    validate_month,
    month_range,
    normalize_through,
)

# --- Module Logger ---
logger = setup_logging(__name__)


def compute_month(
    month: str,
    daily_rows: list[NormalizedRow],
    event_rows: list[NormalizedRow],
    raw_events: list[dict],
    through_date: str,
) -> dict:
    """
    Compute one month's leaderboard and breakdowns as of through_date.

    Returns:
        Dict with keys leaderboard, daily, event and lastUpdated (latest row
        date within the cutoff, or None)
    """
    leaderboard = aggregate(daily_rows, event_rows, through_date)
    matrices = build_matrices(daily_rows, event_rows, raw_events, through_date)

    dates = [row.date for row in daily_rows if row.date <= through_date]
    dates += [row.date for row in event_rows if row.date <= through_date]

    return {
        'leaderboard': leaderboard,
        'daily': matrices['daily'],
        'event': matrices['event'],
        'lastUpdated': max(dates) if dates else None,
    }


def compute_all_months(
    daily_rows: list[NormalizedRow],
    event_rows: list[NormalizedRow],
    raw_events: list[dict],
    month: Optional[str] = None,
    through: Optional[str] = None,
) -> dict:
    """
    Compute output documents for every month present in the data.

    Args:
        daily_rows: All normalized daily rows
        event_rows: All normalized event rows
        raw_events: All raw event records
        month: Restrict the run to this YYYY-MM month
        through: Inclusive cutoff inside `month` (default: end of month)

    Returns:
        {"points": ..., "dailyBreakdown": ..., "eventBreakdown": ...,
         "lastUpdated": ...}, each keyed by month

    Raises:
        ValueError: If month/through are malformed or inconsistent
    """
    if through and not month:
        raise ValueError("A through date can only be used together with a month")
    if month:
        validate_month(month)
        through = normalize_through(through, month)
        months = [month]
    else:
        months = collect_months(daily_rows, event_rows)

    daily_by_month = group_by_month(daily_rows)
    event_by_month = group_by_month(event_rows)
    raw_events_by_month = group_events_by_month(raw_events)

    results = {
        'points': {},
        'dailyBreakdown': {},
        'eventBreakdown': {},
        'lastUpdated': {},
    }

    for month_key in months:
        through_date = through if month_key == month else month_range(month_key)[1]
        output = compute_month(
            month_key,
            daily_by_month.get(month_key, []),
            event_by_month.get(month_key, []),
            raw_events_by_month.get(month_key, []),
            through_date,
        )

        if output['leaderboard']:
            results['points'][month_key] = output['leaderboard']
        if output['daily'] is not None:
            results['dailyBreakdown'][month_key] = output['daily']
        if output['event'] is not None:
            results['eventBreakdown'][month_key] = output['event']
        if output['lastUpdated'] is not None:
            results['lastUpdated'][month_key] = output['lastUpdated']

        logger.info(
            f"{month_key} through {through_date}: "
            f"{len(output['leaderboard'])} players on the leaderboard"
        )

    return results


def log_top_players(month: str, leaderboard: list[dict], limit: int = TOP_PLAYERS_TO_LOG) -> None:
    """Log the head of a month's leaderboard as a table."""
    if not leaderboard:
        logger.info(f"No leaderboard data found for {month}.")
        return

    df = pd.DataFrame(leaderboard).head(limit)
    df.insert(0, 'rank', range(1, len(df) + 1))
    columns = ['rank', 'name', 'totalPoints', 'dailyPoints', 'eventPoints', 'medalBonus', 'streakBonus']
    logger.info(f"Top {len(df)} Players ({month}):")
    logger.info("\n" + df[columns].to_string(index=False))


def main(month: Optional[str] = None, through: Optional[str] = None) -> dict:
    """
    Run the full points pipeline from the configured input files.

    Args:
        month: Restrict the run to one YYYY-MM month
        through: Inclusive cutoff date within `month`

    Returns:
        The computed result documents
    """
    logger.info("=" * 60)
    logger.info("Monthly Points Calculation")
    logger.info("=" * 60)

    try:
        daily_records = load_daily_scores(DAILY_SCORES_FILE)
        raw_events = load_event_rankings(EVENT_RANKINGS_FILE)
    except IngestionError as e:
        logger.error(str(e))
        raise

    daily_rows = normalize_daily_rows(daily_records)
    event_rows = normalize_event_rows(raw_events)
    logger.info(f"Normalized {len(daily_rows)} daily rows and {len(event_rows)} event rows")

    results = compute_all_months(daily_rows, event_rows, raw_events, month=month, through=through)

    atomic_write_json(results['points'], POINTS_OUTPUT)
    atomic_write_json(results['dailyBreakdown'], DAILY_BREAKDOWN_OUTPUT)
    atomic_write_json(results['eventBreakdown'], EVENT_BREAKDOWN_OUTPUT)

    for month_key, leaderboard in results['points'].items():
        log_top_players(month_key, leaderboard)

    logger.info("Exported JSON files:")
    logger.info(f"  Points: {POINTS_OUTPUT}")
    logger.info(f"  Daily breakdown: {DAILY_BREAKDOWN_OUTPUT}")
    logger.info(f"  Event breakdown: {EVENT_BREAKDOWN_OUTPUT}")

    months = ', '.join(results['points']) or 'none'
    logger.info(f"Calculated leaderboards for {len(results['points'])} month(s): {months}")

    return results


if __name__ == "__main__":
    results = main()
