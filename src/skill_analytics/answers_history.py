# ABOUTME: Returns a learner's filtered answer history with a correctness summary.
# ABOUTME: Filters apply before the limit so totals reflect every matching answer.

from __future__ import annotations

import logging
from typing import Dict, Optional

from src.common.errors import InvalidInputError
from src.common.schemas import Category, Difficulty
from src.event_store.base import EventStore

from .metrics import accuracy_percent

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50
MAX_HISTORY_LIMIT = 100


def get_answers_history(
    store: EventStore,
    account_id: str,
    limit: Optional[int] = None,
    category: Optional[Category] = None,
    difficulty: Optional[Difficulty] = None,
    correct_only: bool = False,
    incorrect_only: bool = False,
) -> Dict:
    """
    Filter the full answer log, then keep the newest ``limit`` answers.

    ``correct_only`` takes precedence when both correctness filters are set.
    ``totalInDatabase`` counts matches after filtering, before the limit.
    """

    limit = DEFAULT_HISTORY_LIMIT if limit is None else limit
    if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= MAX_HISTORY_LIMIT:
        raise InvalidInputError(f"limit must be an integer between 1 and {MAX_HISTORY_LIMIT}, got {limit!r}.")

    logger.info("Executing get_answers_history", extra={"account_id": account_id})
    if store.get_user(account_id) is None:
        return {"found": False, "message": f'User with accountId "{account_id}" not found'}

    answers = store.get_answers_by_user(account_id)
    if category is not None:
        answers = [a for a in answers if a.category == category]
    if difficulty is not None:
        answers = [a for a in answers if a.difficulty == difficulty]
    if correct_only:
        answers = [a for a in answers if a.is_correct]
    elif incorrect_only:
        answers = [a for a in answers if not a.is_correct]

    limited = answers[:limit]
    correct = sum(1 for a in limited if a.is_correct)

    logger.info("get_answers_history completed", extra={"account_id": account_id, "count": len(limited)})
    return {
        "found": True,
        "accountId": account_id,
        "totalReturned": len(limited),
        "totalInDatabase": len(answers),
        "summary": {
            "correct": correct,
            "incorrect": len(limited) - correct,
            "accuracyRate": accuracy_percent(correct, len(limited)),
        },
        "answers": [a.to_dict() for a in limited],
    }
