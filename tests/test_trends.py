# ABOUTME: Tests trend labels from aggregate deltas and from raw answer windows.
# ABOUTME: Covers threshold edges, weekly priority, and the minimum event count.

from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest

from src.skill_analytics.trends import (
    TrendLabel,
    TrendThresholds,
    classify_aggregate_trend,
    classify_event_trend,
    window_accuracies,
)


def _category_events(correct_newest_first):
    """Frame whose first row is the newest answer."""
    base = datetime(2024, 3, 1, tzinfo=timezone.utc)
    count = len(correct_newest_first)
    return pd.DataFrame(
        {
            "is_correct": list(correct_newest_first),
            "answered_at": pd.to_datetime([base - timedelta(hours=i) for i in range(count)], utc=True),
        }
    )


@pytest.mark.parametrize("monthly", [-0.9, -0.2, 0.0, 0.2, 0.9])
def test_weekly_improvement_overrides_monthly(monthly):
    assert classify_aggregate_trend(0.2, monthly) == TrendLabel.IMPROVING


@pytest.mark.parametrize("monthly", [-0.9, 0.0, 0.9])
def test_weekly_decline_overrides_monthly(monthly):
    assert classify_aggregate_trend(-0.2, monthly) == TrendLabel.DECLINING


def test_monthly_breaks_flat_week():
    assert classify_aggregate_trend(0.05, 0.3) == TrendLabel.IMPROVING
    assert classify_aggregate_trend(-0.05, -0.3) == TrendLabel.DECLINING
    assert classify_aggregate_trend(0.0, 0.0) == TrendLabel.STABLE


def test_aggregate_thresholds_are_strict():
    assert classify_aggregate_trend(0.1, 0.1) == TrendLabel.STABLE
    assert classify_aggregate_trend(-0.1, -0.1) == TrendLabel.STABLE


def test_security_scenario_weekly_decline():
    assert classify_aggregate_trend(-0.3, 0.5) == TrendLabel.DECLINING
    assert classify_aggregate_trend(-0.3, -0.5) == TrendLabel.DECLINING


@pytest.mark.parametrize("count", [0, 1, 5, 9])
def test_event_trend_needs_ten_answers(count):
    assert classify_event_trend(_category_events([True] * count)) == TrendLabel.INSUFFICIENT_DATA
    assert classify_event_trend(_category_events([False] * count)) == TrendLabel.INSUFFICIENT_DATA


def test_event_trend_declining_window():
    # Newest five: one correct. Previous five: four correct. Two older answers ignored.
    flags = [True, False, False, False, False] + [True, True, True, True, False] + [True, True]
    frame = _category_events(flags)

    assert window_accuracies(frame) == (pytest.approx(0.2), pytest.approx(0.8))
    assert classify_event_trend(frame) == TrendLabel.DECLINING


def test_event_trend_improving_and_stable():
    improving = _category_events([True] * 4 + [False] + [True] * 2 + [False] * 3)
    assert classify_event_trend(improving) == TrendLabel.IMPROVING

    stable = _category_events([True, False, True, False, True] * 2)
    assert classify_event_trend(stable) == TrendLabel.STABLE


def test_event_trend_sorts_by_time_not_row_order():
    base = datetime(2024, 3, 1, tzinfo=timezone.utc)
    # Rows arrive oldest first; the newest five are all correct.
    frame = pd.DataFrame(
        {
            "is_correct": [False] * 5 + [True] * 5,
            "answered_at": pd.to_datetime([base + timedelta(hours=i) for i in range(10)], utc=True),
        }
    )
    assert classify_event_trend(frame) == TrendLabel.IMPROVING


def test_threshold_constants():
    assert TrendThresholds.DELTA == 0.1
    assert TrendThresholds.WINDOW_SIZE == 5
    assert TrendThresholds.MIN_EVENTS == 10
