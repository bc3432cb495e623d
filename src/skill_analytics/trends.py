# ABOUTME: Classifies a category's recent performance direction.
# ABOUTME: Covers both the aggregate trend deltas and the raw-event window comparison.

from __future__ import annotations

from enum import Enum
from typing import Tuple

import pandas as pd


class TrendLabel(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


class TrendThresholds:
    # Fixed to match the labels other services already store and display.
    DELTA = 0.1
    WINDOW_SIZE = 5
    MIN_EVENTS = 10


def classify_aggregate_trend(weekly_trend: float, monthly_trend: float) -> TrendLabel:
    """Weekly delta decides first; the monthly delta only breaks a flat week."""

    if weekly_trend > TrendThresholds.DELTA:
        return TrendLabel.IMPROVING
    if weekly_trend < -TrendThresholds.DELTA:
        return TrendLabel.DECLINING
    if monthly_trend > TrendThresholds.DELTA:
        return TrendLabel.IMPROVING
    if monthly_trend < -TrendThresholds.DELTA:
        return TrendLabel.DECLINING
    return TrendLabel.STABLE


def window_accuracies(category_events: pd.DataFrame) -> Tuple[float, float]:
    """
    Accuracy of the newest window and the window right before it.

    Expects ``is_correct`` and ``answered_at`` columns. Both windows divide by the
    full window size.
    """

    window = TrendThresholds.WINDOW_SIZE
    ordered = category_events.sort_values("answered_at", ascending=False, kind="mergesort")
    recent = ordered.iloc[:window]
    previous = ordered.iloc[window : 2 * window]
    recent_accuracy = int(recent["is_correct"].sum()) / window
    previous_accuracy = int(previous["is_correct"].sum()) / window
    return recent_accuracy, previous_accuracy


def classify_event_trend(category_events: pd.DataFrame) -> TrendLabel:
    if len(category_events) < TrendThresholds.MIN_EVENTS:
        return TrendLabel.INSUFFICIENT_DATA

    recent_accuracy, previous_accuracy = window_accuracies(category_events)
    if recent_accuracy > previous_accuracy + TrendThresholds.DELTA:
        return TrendLabel.IMPROVING
    if recent_accuracy < previous_accuracy - TrendThresholds.DELTA:
        return TrendLabel.DECLINING
    return TrendLabel.STABLE
