"""
Scraper Output Loaders

Reads the files written by the scrapers:
- daily_scores.csv: one row per player per daily board
- event_rankings.json: array of events with nested rankings

Any problem with a file (missing, wrong shape, unreadable) is a hard stop:
the points pipeline never runs on a partial or misread input.

Usage:
    from src.ingestion.loaders import load_daily_scores, load_event_rankings
    records = load_daily_scores(DAILY_SCORES_FILE)
    events = load_event_rankings(EVENT_RANKINGS_FILE)
"""

import json
from pathlib import Path

import pandas as pd

from src.config import DAILY_CSV_FIRST_COLUMN
from src.utils import setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)


class IngestionError(Exception):
    """Custom exception for ingestion errors"""
    pass


class ValidationError(IngestionError):
    """Raised when a file exists but does not have the expected shape"""
    pass


def _require_file(path: Path, label: str) -> None:
    if not path.exists():
        raise IngestionError(f"Cannot find {label} file at {path}")
    if not path.is_file():
        raise IngestionError(f"{label} path is not a file: {path}")


def load_daily_scores(csv_path: Path) -> list[dict]:
    """
    Load the daily scores CSV as a list of string-valued records.

    Args:
        csv_path: Path to daily_scores.csv

    Returns:
        List of dicts keyed by the CSV header (dailyDate, rank, playerId,
        name, points, avatarUrl); empty list for an empty file

    Raises:
        IngestionError: If the file is missing or cannot be parsed
        ValidationError: If the header does not start with dailyDate
    """
    csv_path = Path(csv_path)
    _require_file(csv_path, "daily scores")

    try:
        df = pd.read_csv(
            csv_path,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8",
        )
    except pd.errors.EmptyDataError:
        logger.warning(f"Daily scores file is empty: {csv_path}")
        return []
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise IngestionError(f"Failed to parse daily scores CSV {csv_path}: {e}") from e

    columns = [str(c).strip() for c in df.columns]
    if not columns or columns[0] != DAILY_CSV_FIRST_COLUMN:
        raise ValidationError(
            f"Unexpected daily CSV header in {csv_path}: "
            f"expected first column '{DAILY_CSV_FIRST_COLUMN}', found {columns[:1]}"
        )
    df.columns = columns

    logger.info(f"Loaded {len(df)} daily rows from {csv_path}")
    return df.to_dict('records')


def load_event_rankings(json_path: Path) -> list[dict]:
    """
    Load the event rankings JSON.

    Args:
        json_path: Path to event_rankings.json

    Returns:
        List of raw event dicts; empty list for an empty file

    Raises:
        IngestionError: If the file is missing or is not valid JSON
        ValidationError: If the top-level value is not an array
    """
    json_path = Path(json_path)
    _require_file(json_path, "event rankings")

    with open(json_path, encoding="utf-8") as f:
        raw = f.read()

    if not raw.strip():
        logger.warning(f"Event rankings file is empty: {json_path}")
        return []

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise IngestionError(f"Failed to parse event rankings JSON {json_path}: {e}") from e

    if not isinstance(data, list):
        raise ValidationError(
            f"{json_path} must contain an array of events, found {type(data).__name__}"
        )

    logger.info(f"Loaded {len(data)} events from {json_path}")
    return data
