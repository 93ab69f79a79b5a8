"""
Shared utilities for the Word Blitz points system.

This module provides common functions used across multiple modules
to avoid code duplication.
"""

import sys
from pathlib import Path

# Enable both `python src/utils.py` and `python -m src.utils` execution modes.
# This ensures src.config imports work regardless of how the script is invoked.
_project_root = str(Path(__file__).parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import calendar
import json
import logging
import re
import shutil
import tempfile
import unicodedata
from decimal import Decimal, ROUND_HALF_UP, localcontext

from src.config import AVERAGE_DECIMALS

# --- Shared Regex Patterns ---
MONTH_RE = re.compile(r"^\d{4}-\d{2}$")
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Event slug: JS-style ASCII \w plus whitespace and hyphen survive
SLUG_STRIP_RE = re.compile(r"[^A-Za-z0-9_\s-]")
SLUG_SEPARATOR_RE = re.compile(r"[\s_-]+")
SLUG_EDGE_RE = re.compile(r"^-+|-+$")


# --- Logging Setup ---
def setup_logging(name: str | None = None, level: int = logging.INFO) -> logging.Logger:
    """
    Configure and return a logger with consistent formatting.

    Args:
        name: Logger name (usually __name__ from the calling module)
        level: Logging level (default: INFO)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


# --- File Operations ---
def atomic_write_json(data, path: Path) -> None:
    """
    Write a JSON document atomically using a temporary file.

    This prevents a half-written document if the write is interrupted.

    Args:
        data: JSON-serializable object
        path: Destination path for the JSON file
    """
    logger = setup_logging(__name__)

    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with tempfile.NamedTemporaryFile(
            mode='w',
            encoding='utf-8',
            delete=False,
            suffix='.json',
            dir=path.parent  # Same filesystem for atomic move
        ) as tmp:
            tmp_path = Path(tmp.name)
            json.dump(data, tmp, indent=2, ensure_ascii=False)
            tmp.write("\n")

        shutil.move(str(tmp_path), str(path))
        logger.debug(f"Atomically wrote {len(data)} entries to {path}")

    except Exception:
        if 'tmp_path' in locals() and tmp_path.exists():
            tmp_path.unlink()
        raise


# --- Month Handling ---
def validate_month(month: str) -> str:
    """
    Validate a month key.

    Args:
        month: Month in YYYY-MM format

    Returns:
        The month, unchanged

    Raises:
        ValueError: If the month is missing or malformed
    """
    if not month or not MONTH_RE.match(month):
        raise ValueError(f"Invalid month: '{month}'. Expected format: YYYY-MM")
    _, month_part = month.split("-")
    if not 1 <= int(month_part) <= 12:
        raise ValueError(f"Invalid month: '{month}'. Month must be between 01 and 12")
    return month


def month_range(month: str) -> tuple[str, str]:
    """Return the first and last ISO dates of a YYYY-MM month."""
    year, month_number = (int(part) for part in month.split("-"))
    last_day = calendar.monthrange(year, month_number)[1]
    return f"{month}-01", f"{month}-{last_day:02d}"


def normalize_through(through: str | None, month: str) -> str:
    """
    Resolve the inclusive cutoff date for a month.

    Args:
        through: Cutoff date (YYYY-MM-DD) or None for the end of the month
        month: Month the cutoff must fall in

    Returns:
        The cutoff as an ISO date string

    Raises:
        ValueError: If the cutoff is malformed or outside the month
    """
    if not through:
        return month_range(month)[1]
    if not ISO_DATE_RE.match(through):
        raise ValueError(f"Invalid through date: '{through}'. Expected format: YYYY-MM-DD")
    if not through.startswith(f"{month}-"):
        raise ValueError(f"Through date {through} must fall within {month}")
    return through


# --- Identifiers ---
def slugify(value: str) -> str:
    """Lowercase ASCII slug with accents dropped and separators collapsed to '-'."""
    text = unicodedata.normalize("NFKD", value.lower())
    text = SLUG_STRIP_RE.sub("", text).strip()
    text = SLUG_SEPARATOR_RE.sub("-", text)
    return SLUG_EDGE_RE.sub("", text)


def make_event_id(name: str, date: str) -> str:
    """Build the event identifier used to cross-reference breakdowns and pages."""
    return f"{slugify(name)}-{date}"


# --- Numbers ---
def round_half_up(value: float, decimals: int = AVERAGE_DECIMALS) -> float:
    """
    Round using half-away-from-zero on the shortest decimal repr of value.

    round_half_up(2.675) == 2.68, where round(2.675, 2) gives 2.67 because
    the binary float sits just below the midpoint.
    """
    quantum = Decimal(1).scaleb(-decimals)
    number = Decimal(repr(value))
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the decimals
        ctx.prec = max(ctx.prec, number.adjusted() + decimals + 2)
        return float(number.quantize(quantum, rounding=ROUND_HALF_UP))


def name_sort_key(name: str) -> tuple[str, str]:
    """
    Alphabetical key for display names that ignores case first.

    On a case-only difference the lowercase spelling sorts first, so
    "alice" < "Alice" < "Bob".
    """
    return (name.casefold(), name.swapcase())


__all__ = [
    # Logging
    'setup_logging',
    # File operations
    'atomic_write_json',
    # Month handling
    'validate_month',
    'month_range',
    'normalize_through',
    # Identifiers
    'slugify',
    'make_event_id',
    # Numbers
    'round_half_up',
    'name_sort_key',
]
