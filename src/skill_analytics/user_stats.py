# ABOUTME: Builds the per-account dashboard numbers: overall, per-category and per-difficulty accuracy.
# ABOUTME: Category figures prefer the aggregate projection; difficulty always uses recent answers.

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from src.common.schemas import CATEGORIES, DIFFICULTIES, CategoryAggregate, isoformat
from src.event_store.base import EventStore

from .metrics import accuracy_percent, count_breakdown
from .projection import AggregatedProjection, StatsProjectionReader, events_to_frame

logger = logging.getLogger(__name__)

RECENT_ANSWERS_LIMIT = 100


def aggregate_breakdown(aggregates: Sequence[CategoryAggregate]) -> List[Dict]:
    return [
        {
            "name": agg.category.value,
            "total": agg.total_quizzes,
            "correct": agg.correct_count,
            "accuracyRate": accuracy_percent(agg.correct_count, agg.total_quizzes),
            "weeklyTrend": agg.weekly_trend,
            "monthlyTrend": agg.monthly_trend,
            "averageDifficulty": agg.average_difficulty,
        }
        for agg in aggregates
    ]


def report_user_stats(store: EventStore, account_id: str, recent_limit: int = RECENT_ANSWERS_LIMIT) -> Dict:
    logger.info("Executing get_user_stats", extra={"account_id": account_id})

    user = store.get_user(account_id)
    if user is None:
        return {"found": False, "message": f'User with accountId "{account_id}" not found'}

    projection = StatsProjectionReader(store).read(account_id, event_limit=recent_limit)
    if isinstance(projection, AggregatedProjection):
        recent_events = store.get_answers_by_user(account_id, limit=recent_limit)
        category_breakdown = aggregate_breakdown(projection.aggregates)
        recent = events_to_frame(recent_events)
    else:
        recent_events = projection.events
        recent = projection.frame()
        category_breakdown = count_breakdown(recent, "category", [c.value for c in CATEGORIES])

    logger.info("get_user_stats completed", extra={"account_id": account_id})
    return {
        "found": True,
        "user": {
            "accountId": user.account_id,
            "platform": user.platform,
            "totalQuizzes": user.total_quizzes,
            "correctCount": user.correct_count,
            "overallAccuracyRate": accuracy_percent(user.correct_count, user.total_quizzes),
            "createdAt": isoformat(user.created_at),
            "updatedAt": isoformat(user.updated_at),
        },
        "categoryBreakdown": category_breakdown,
        "difficultyBreakdown": count_breakdown(recent, "difficulty", [d.value for d in DIFFICULTIES]),
        "recentAnswersCount": len(recent_events),
        "skillStatsAvailable": projection.skill_stats_available,
    }
