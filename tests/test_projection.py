# ABOUTME: Tests the choice between aggregate records and the raw answer log.
# ABOUTME: Ensures the two sources are never read together for one analysis.

from unittest.mock import Mock

import pandas as pd

from src.common.schemas import Category
from src.event_store.base import EventStore
from src.skill_analytics.projection import (
    AggregatedProjection,
    RecomputedProjection,
    StatsProjectionReader,
    events_to_frame,
)
from tests.factories import answers_for, make_store, skill_stats_doc


def test_prefers_aggregates_when_any_exist():
    store = make_store(
        answers=answers_for("logic", [True] * 4),
        skill_stats=[skill_stats_doc("security", 3, 1)],
    )

    projection = StatsProjectionReader(store).read("u1")

    assert isinstance(projection, AggregatedProjection)
    assert [a.category for a in projection.aggregates] == [Category.SECURITY]
    assert projection.skill_stats_available


def test_aggregate_path_never_reads_answers():
    store = Mock(spec=EventStore)
    store.get_skill_stats_by_user.return_value = make_store(
        skill_stats=[skill_stats_doc("logic", 5, 5)]
    ).get_skill_stats_by_user("u1")

    StatsProjectionReader(store).read("u1")

    store.get_answers_by_user.assert_not_called()


def test_falls_back_to_full_answer_log():
    store = make_store(answers=answers_for("logic", [True, False]) + answers_for("security", [True], start_hour=10))

    projection = StatsProjectionReader(store).read("u1")

    assert isinstance(projection, RecomputedProjection)
    assert not projection.skill_stats_available
    assert len(projection.events) == 3
    # Newest first.
    assert projection.events[0].category == Category.SECURITY


def test_event_limit_only_applies_to_fallback():
    store = make_store(answers=answers_for("logic", [True] * 8))
    projection = StatsProjectionReader(store).read("u1", event_limit=5)
    assert len(projection.events) == 5


def test_events_to_frame_columns_and_empty():
    empty = events_to_frame([])
    assert empty.empty
    assert list(empty.columns) == ["answer_id", "quiz_id", "category", "difficulty", "is_correct", "answered_at"]

    store = make_store(answers=answers_for("bug_fix", [True, False]))
    frame = events_to_frame(store.get_answers_by_user("u1"))
    assert list(frame["category"]) == ["bug_fix", "bug_fix"]
    assert pd.api.types.is_datetime64_any_dtype(frame["answered_at"])
    assert frame["is_correct"].tolist() == [False, True]
