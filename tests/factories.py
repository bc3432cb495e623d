# ABOUTME: Builds store documents for tests in the persisted camelCase layout.
# ABOUTME: Keeps answer timestamps deterministic so ordering assertions are stable.

from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Dict, Iterable, List, Optional

from src.event_store import InMemoryEventStore

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)
_ids = count(1)


def user_doc(account_id: str = "u1", total: int = 0, correct: int = 0) -> Dict:
    return {
        "accountId": account_id,
        "platform": "github",
        "totalQuizzes": total,
        "correctCount": correct,
        "createdAt": BASE_TIME.isoformat(),
        "updatedAt": BASE_TIME.isoformat(),
    }


def answer_doc(
    category: str,
    correct: bool,
    hours: int,
    account_id: str = "u1",
    difficulty: str = "medium",
) -> Dict:
    n = next(_ids)
    return {
        "answerId": f"a{n}",
        "accountId": account_id,
        "quizId": f"q{n}",
        "mergeRequestId": "github_org_repo_1",
        "category": category,
        "difficulty": difficulty,
        "selectedAnswerIndex": 1 if correct else 0,
        "isCorrect": correct,
        "answeredAt": (BASE_TIME + timedelta(hours=hours)).isoformat(),
    }


def answers_for(category: str, flags_oldest_first: Iterable[bool], start_hour: int = 0, **kwargs) -> List[Dict]:
    return [answer_doc(category, flag, start_hour + i, **kwargs) for i, flag in enumerate(flags_oldest_first)]


def skill_stats_doc(
    category: str,
    total: int,
    correct: int,
    weekly: float = 0.0,
    monthly: float = 0.0,
    account_id: str = "u1",
    average_difficulty: float = 2.0,
) -> Dict:
    return {
        "statId": f"s{next(_ids)}",
        "accountId": account_id,
        "category": category,
        "totalQuizzes": total,
        "correctCount": correct,
        "correctRate": round(correct / total, 2) if total else 0.0,
        "averageDifficulty": average_difficulty,
        "weeklyTrend": weekly,
        "monthlyTrend": monthly,
        "lastAnsweredAt": BASE_TIME.isoformat(),
        "calculatedAt": BASE_TIME.isoformat(),
    }


def make_store(
    answers: Optional[List[Dict]] = None,
    skill_stats: Optional[List[Dict]] = None,
    users: Optional[List[Dict]] = None,
    **collections,
) -> InMemoryEventStore:
    docs = {
        "users": users if users is not None else [user_doc()],
        "answers": answers or [],
        "skillStats": skill_stats or [],
    }
    docs.update(collections)
    return InMemoryEventStore(docs)
