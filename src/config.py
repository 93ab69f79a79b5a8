"""
Central configuration for the Word Blitz points system.

All shared constants and configuration values should be defined here
to avoid duplication and ensure consistency across modules.
"""

from pathlib import Path
from types import MappingProxyType

# --- Project Paths ---
PROJECT_ROOT = Path(__file__).parent.parent
DATA_FOLDER = PROJECT_ROOT / "data"
OUTPUT_FOLDER = DATA_FOLDER

# Input files (written by the scrapers)
DAILY_SCORES_FILE = DATA_FOLDER / "daily_scores.csv"
EVENT_RANKINGS_FILE = DATA_FOLDER / "event_rankings.json"

# Output documents (read by the site)
POINTS_OUTPUT = OUTPUT_FOLDER / "points.json"
DAILY_BREAKDOWN_OUTPUT = OUTPUT_FOLDER / "daily_breakdown.json"
EVENT_BREAKDOWN_OUTPUT = OUTPUT_FOLDER / "event_breakdown.json"

# --- Input Format ---
DAILY_CSV_FIRST_COLUMN = "dailyDate"
UNKNOWN_NAME = "Unknown"
PLAYER_ID_NAME_PREFIX = "name:"
EVENT_INDEX_STRIDE = 1000  # sequence_index = event_index * stride + ranking_index
ISO_DATE_LENGTH = 10

# --- Daily Scoring ---
DAILY_POINTS = MappingProxyType({
    1: 19,
    2: 15,
    3: 11,
    4: 7,
    5: 6,
    6: 5,
    7: 4,
    8: 3,
    9: 2,
    10: 1,
})
BONUS_WEEKDAY = 5  # Saturday (date.weekday())
BONUS_DAY_MULTIPLIER = 2
TOP_N_STREAK_RANK = 10  # Ranks counted towards the top-10 streak

# --- Event Scoring ---
EVENT_POINTS_BASE = 64
EVENT_POINTS_STEP = 4
EVENT_MAX_SCORING_RANK = 15

# --- Bonuses ---
MEDAL_SET_BONUS = (50, 40, 30, 20, 10)  # By medal-set completion order
STREAK_BONUS = 25

# --- Output ---
AVERAGE_DECIMALS = 2
TOP_PLAYERS_TO_LOG = 20
