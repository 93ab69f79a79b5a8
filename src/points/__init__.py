"""
Monthly Points System

Modules:
- scoring: Daily and event points tables, bonus day and streak helpers
- aggregator: Monthly leaderboard with medal-set and streak bonuses
- matrix: Per-day and per-event breakdown matrices
- pipeline: Month orchestration and JSON export
"""


def __getattr__(name):
    """Lazy imports to avoid RuntimeWarning when running modules directly."""
    if name == "aggregate":
        from src.points.aggregator import aggregate
        return aggregate
    if name == "build_matrices":
        from src.points.matrix import build_matrices
        return build_matrices
    if name == "compute_all_months":
        from src.points.pipeline import compute_all_months
        return compute_all_months
    if name == "run_points":
        from src.points.pipeline import main
        return main
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
