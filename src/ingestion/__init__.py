"""
Data Ingestion

Modules:
- loaders: Read the scraped daily scores CSV and event rankings JSON
- normalizer: Normalize daily and event records into uniform rows
"""


def __getattr__(name):
    """Lazy imports to avoid RuntimeWarning when running modules directly."""
    if name == "normalize_daily_rows":
        from src.ingestion.normalizer import normalize_daily_rows
        return normalize_daily_rows
    if name == "normalize_event_rows":
        from src.ingestion.normalizer import normalize_event_rows
        return normalize_event_rows
    if name == "load_daily_scores":
        from src.ingestion.loaders import load_daily_scores
        return load_daily_scores
    if name == "load_event_rankings":
        from src.ingestion.loaders import load_event_rankings
        return load_event_rankings
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
