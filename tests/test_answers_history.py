# ABOUTME: Tests filtered answer history and its summary block.
# ABOUTME: Covers category, difficulty, and correctness filters plus limit bounds.

import pytest

from src.common.errors import InvalidInputError
from src.common.schemas import Category, Difficulty
from src.skill_analytics.answers_history import get_answers_history
from tests.factories import answer_doc, make_store


@pytest.fixture
def store():
    return make_store(
        answers=[
            answer_doc("security", True, 1, difficulty="hard"),
            answer_doc("security", False, 2, difficulty="easy"),
            answer_doc("logic", False, 3, difficulty="hard"),
            answer_doc("security", False, 4, difficulty="hard"),
            answer_doc("bug_fix", True, 5, difficulty="medium"),
        ]
    )


def test_default_history_newest_first(store):
    result = get_answers_history(store, "u1")

    assert result["found"] is True
    assert result["totalReturned"] == 5
    assert result["totalInDatabase"] == 5
    assert result["summary"] == {"correct": 2, "incorrect": 3, "accuracyRate": 40}
    assert [a["category"] for a in result["answers"]] == ["bug_fix", "security", "logic", "security", "security"]
    assert set(result["answers"][0]) == {
        "answerId",
        "quizId",
        "mergeRequestId",
        "category",
        "difficulty",
        "selectedAnswerIndex",
        "isCorrect",
        "answeredAt",
    }


def test_filters_apply_before_limit(store):
    result = get_answers_history(store, "u1", category=Category.SECURITY, difficulty=Difficulty.HARD, limit=1)

    assert result["totalInDatabase"] == 2
    assert result["totalReturned"] == 1
    assert result["answers"][0]["isCorrect"] is False


def test_correct_only_wins_over_incorrect_only(store):
    result = get_answers_history(store, "u1", correct_only=True, incorrect_only=True)
    assert all(a["isCorrect"] for a in result["answers"])
    assert result["summary"]["accuracyRate"] == 100


def test_incorrect_only(store):
    result = get_answers_history(store, "u1", incorrect_only=True)
    assert result["summary"] == {"correct": 0, "incorrect": 3, "accuracyRate": 0}


def test_empty_history_summary():
    result = get_answers_history(make_store(), "u1")
    assert result["summary"] == {"correct": 0, "incorrect": 0, "accuracyRate": 0}


@pytest.mark.parametrize("limit", [0, 101, -5])
def test_limit_bounds(store, limit):
    with pytest.raises(InvalidInputError):
        get_answers_history(store, "u1", limit=limit)


def test_unknown_account(store):
    assert get_answers_history(store, "ghost")["found"] is False
