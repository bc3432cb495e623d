# ABOUTME: Chooses between the precomputed category aggregates and the raw answer log.
# ABOUTME: Resolves the source once per request as a tagged projection variant.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import pandas as pd

from src.common.schemas import AnswerEvent, CategoryAggregate
from src.event_store.base import EventStore

logger = logging.getLogger(__name__)

EVENT_COLUMNS = ["answer_id", "quiz_id", "category", "difficulty", "is_correct", "answered_at"]


@dataclass(frozen=True)
class AggregatedProjection:
    """Aggregate path: one precomputed record per category the account has answered."""

    aggregates: List[CategoryAggregate]

    @property
    def skill_stats_available(self) -> bool:
        return True


@dataclass(frozen=True)
class RecomputedProjection:
    """Event path: raw answers, newest first, to be summarized from scratch."""

    events: List[AnswerEvent]

    @property
    def skill_stats_available(self) -> bool:
        return False

    def frame(self) -> pd.DataFrame:
        return events_to_frame(self.events)


StatsProjection = Union[AggregatedProjection, RecomputedProjection]


def events_to_frame(events: Sequence[AnswerEvent]) -> pd.DataFrame:
    """
    Flatten answer events into a frame keyed by enum values.

    Row order follows the input order so later stable sorts keep store order on ties.
    """

    if not events:
        return pd.DataFrame(
            {
                "answer_id": pd.Series(dtype="object"),
                "quiz_id": pd.Series(dtype="object"),
                "category": pd.Series(dtype="object"),
                "difficulty": pd.Series(dtype="object"),
                "is_correct": pd.Series(dtype="bool"),
                "answered_at": pd.Series(dtype="datetime64[ns, UTC]"),
            }
        )
    frame = pd.DataFrame(
        {
            "answer_id": [e.answer_id for e in events],
            "quiz_id": [e.quiz_id for e in events],
            "category": [e.category.value for e in events],
            "difficulty": [e.difficulty.value for e in events],
            "is_correct": [bool(e.is_correct) for e in events],
            "answered_at": [e.answered_at for e in events],
        }
    )
    frame["answered_at"] = pd.to_datetime(frame["answered_at"], utc=True)
    return frame[EVENT_COLUMNS]


class StatsProjectionReader:
    """
    Reads the per-category source for one account.

    The aggregate projection is preferred; the answer log is only read when the
    account has no aggregate records at all. The two are never combined.
    """

    def __init__(self, store: EventStore) -> None:
        self.store = store

    def read(self, account_id: str, event_limit: Optional[int] = None) -> StatsProjection:
        aggregates = self.store.get_skill_stats_by_user(account_id)
        if aggregates:
            logger.debug("Using aggregate projection", extra={"account_id": account_id, "records": len(aggregates)})
            return AggregatedProjection(aggregates=list(aggregates))

        events = self.store.get_answers_by_user(account_id, limit=event_limit)
        logger.debug("Recomputing from answer log", extra={"account_id": account_id, "events": len(events)})
        return RecomputedProjection(events=list(events))
