# ABOUTME: Finds a learner's weakest quiz categories and suggests where to practice.
# ABOUTME: Works from whichever projection is active for the account.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import pandas as pd

from src.common.errors import InvalidInputError
from src.common.schemas import CATEGORIES, Category, CategoryAggregate
from src.event_store.base import EventStore

from .metrics import accuracy_percent
from .projection import AggregatedProjection, StatsProjection, StatsProjectionReader
from .trends import TrendLabel, classify_aggregate_trend, classify_event_trend

logger = logging.getLogger(__name__)

DEFAULT_MIN_ANSWERS = 3
WEAK_ACCURACY_THRESHOLD = 60
MAX_RECOMMENDATIONS = 3
NO_WEAK_AREAS_MESSAGE = "Great job! No significant weak areas detected. Keep up the good work!"


@dataclass
class CategoryAnalysis:
    category: Category
    total_answers: int
    correct_answers: int
    accuracy_rate: int
    recent_trend: TrendLabel

    @property
    def incorrect_answers(self) -> int:
        return self.total_answers - self.correct_answers

    @property
    def is_weak(self) -> bool:
        return self.accuracy_rate < WEAK_ACCURACY_THRESHOLD

    def to_dict(self) -> Dict:
        return {
            "category": self.category.value,
            "totalAnswers": self.total_answers,
            "correctAnswers": self.correct_answers,
            "incorrectAnswers": self.incorrect_answers,
            "accuracyRate": self.accuracy_rate,
            "recentTrend": self.recent_trend.value,
        }


def resolve_min_answers(min_answers: Optional[int]) -> int:
    if min_answers is None:
        return DEFAULT_MIN_ANSWERS
    if isinstance(min_answers, bool) or not isinstance(min_answers, int) or min_answers <= 0:
        raise InvalidInputError(f"minAnswers must be a positive integer, got {min_answers!r}.")
    return min_answers


def analyze_aggregates(aggregates: Sequence[CategoryAggregate], min_answers: int) -> List[CategoryAnalysis]:
    analyses = []
    for agg in aggregates:
        if agg.total_quizzes < min_answers:
            continue
        analyses.append(
            CategoryAnalysis(
                category=agg.category,
                total_answers=agg.total_quizzes,
                correct_answers=agg.correct_count,
                accuracy_rate=accuracy_percent(agg.correct_count, agg.total_quizzes),
                recent_trend=classify_aggregate_trend(agg.weekly_trend, agg.monthly_trend),
            )
        )
    return analyses


def analyze_events(events: pd.DataFrame, min_answers: int) -> List[CategoryAnalysis]:
    """Bucket raw answers into every category, then score the buckets large enough to judge."""

    analyses = []
    for category in CATEGORIES:
        bucket = events[events["category"] == category.value]
        total = len(bucket)
        if total < min_answers:
            continue
        correct = int(bucket["is_correct"].sum())
        analyses.append(
            CategoryAnalysis(
                category=category,
                total_answers=total,
                correct_answers=correct,
                accuracy_rate=accuracy_percent(correct, total),
                recent_trend=classify_event_trend(bucket),
            )
        )
    return analyses


def analyze_projection(projection: StatsProjection, min_answers: int) -> List[CategoryAnalysis]:
    """Score qualifying categories, weakest first (ties keep encounter order)."""

    if isinstance(projection, AggregatedProjection):
        analyses = analyze_aggregates(projection.aggregates, min_answers)
    else:
        analyses = analyze_events(projection.frame(), min_answers)
    return sorted(analyses, key=lambda a: a.accuracy_rate)


def build_recommendations(analyses: Sequence[CategoryAnalysis]) -> List[str]:
    weak = [a for a in analyses if a.is_weak]
    recommendations = []
    for item in weak[:MAX_RECOMMENDATIONS]:
        name = item.category.value
        rate = item.accuracy_rate
        if item.recent_trend == TrendLabel.DECLINING:
            recommendations.append(
                f"{name}: Accuracy is declining ({rate}%). Focus on reviewing {name} concepts."
            )
        elif item.recent_trend == TrendLabel.IMPROVING:
            recommendations.append(f"{name}: Good progress! Continue practicing to improve from {rate}%.")
        else:
            recommendations.append(f"{name}: Accuracy is {rate}%. Consider more practice in this area.")

    if not weak and analyses:
        recommendations.append(NO_WEAK_AREAS_MESSAGE)
    return recommendations


def analyze_weak_categories(store: EventStore, account_id: str, min_answers: Optional[int] = None) -> Dict:
    """
    Report per-category accuracy and trend for one account, flagging weak categories.

    Returns ``{"found": False, "message": ...}`` for unknown accounts. Store
    failures propagate unchanged.
    """

    threshold = resolve_min_answers(min_answers)
    logger.info("Executing analyze_weak_categories", extra={"account_id": account_id})

    user = store.get_user(account_id)
    if user is None:
        return {"found": False, "message": f'User with accountId "{account_id}" not found'}

    projection = StatsProjectionReader(store).read(account_id)
    analyses = analyze_projection(projection, threshold)
    weak = [a for a in analyses if a.is_weak]

    logger.info(
        "analyze_weak_categories completed",
        extra={"account_id": account_id, "weak_categories": len(weak)},
    )
    return {
        "found": True,
        "accountId": account_id,
        "totalCategoriesAnalyzed": len(analyses),
        "allCategories": [a.to_dict() for a in analyses],
        "weakCategories": [a.to_dict() for a in weak],
        "recommendations": build_recommendations(analyses),
        "analysisNote": f"Categories with fewer than {threshold} answers are excluded from analysis.",
        "skillStatsAvailable": projection.skill_stats_available,
    }
