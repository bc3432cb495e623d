# ABOUTME: Groups the skill analytics engine: projection choice, trends, and reports.
# ABOUTME: Re-exports the report entrypoints and the tool surface.

from .projection import AggregatedProjection, RecomputedProjection, StatsProjectionReader
from .trends import TrendLabel, classify_aggregate_trend, classify_event_trend
from .weak_categories import CategoryAnalysis, analyze_weak_categories
from .user_stats import report_user_stats
from .answers_history import get_answers_history
from .tools import TOOLS, call_tool, run_tool

__all__ = [
    "AggregatedProjection",
    "RecomputedProjection",
    "StatsProjectionReader",
    "TrendLabel",
    "classify_aggregate_trend",
    "classify_event_trend",
    "CategoryAnalysis",
    "analyze_weak_categories",
    "report_user_stats",
    "get_answers_history",
    "TOOLS",
    "call_tool",
    "run_tool",
]
