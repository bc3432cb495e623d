# ABOUTME: Defines the read-only document store interface consumed by the analytics engine.
# ABOUTME: Adapters return canonical records and raise StoreUnavailableError on backend failure.

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional

from src.common.errors import StoreUnavailableError
from src.common.schemas import (
    AnswerEvent,
    Category,
    CategoryAggregate,
    Difficulty,
    GrowthMilestone,
    MergeRequest,
    Quiz,
    UserProfile,
    UserRecord,
)

logger = logging.getLogger(__name__)


class Collections:
    USERS = "users"
    QUIZZES = "quizzes"
    ANSWERS = "answers"
    MERGE_REQUESTS = "mergeRequests"
    USER_PROFILES = "userProfiles"
    SKILL_STATS = "skillStats"
    GROWTH_MILESTONES = "growthMilestones"

    ALL = (USERS, QUIZZES, ANSWERS, MERGE_REQUESTS, USER_PROFILES, SKILL_STATS, GROWTH_MILESTONES)


@contextmanager
def malformed_documents(collection: str) -> Iterator[None]:
    """Report a stored document that cannot be mapped to its record as an unreadable store."""

    try:
        yield
    except (KeyError, TypeError, ValueError) as exc:
        logger.error("Malformed stored document", extra={"collection": collection, "error": repr(exc)})
        raise StoreUnavailableError(f"Malformed document in {collection}: {exc!r}") from exc


@dataclass(frozen=True)
class QuizQuery:
    category: Optional[Category] = None
    difficulty: Optional[Difficulty] = None
    status: Optional[str] = None
    account_id: Optional[str] = None
    merge_request_id: Optional[str] = None
    limit: Optional[int] = None

    def filters(self) -> dict:
        """Equality filters keyed by persisted field name."""
        pairs = {
            "category": self.category.value if self.category else None,
            "difficulty": self.difficulty.value if self.difficulty else None,
            "status": self.status,
            "accountId": self.account_id,
            "mergeRequestId": self.merge_request_id,
        }
        return {k: v for k, v in pairs.items() if v}


@dataclass(frozen=True)
class MergeRequestQuery:
    platform: Optional[str] = None
    owner: Optional[str] = None
    repo: Optional[str] = None
    author_account_id: Optional[str] = None
    status: Optional[str] = None
    limit: Optional[int] = None

    def filters(self) -> dict:
        pairs = {
            "platform": self.platform,
            "owner": self.owner,
            "repo": self.repo,
            "authorAccountId": self.author_account_id,
            "status": self.status,
        }
        return {k: v for k, v in pairs.items() if v}


class EventStore(ABC):
    """
    Read access to the answer log, the per-category aggregate projection and
    the surrounding account documents.

    Ordered queries return newest first. ``limit=None`` means unbounded.
    """

    @abstractmethod
    def get_user(self, account_id: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    def get_answers_by_user(self, account_id: str, limit: Optional[int] = None) -> List[AnswerEvent]:
        ...

    @abstractmethod
    def get_skill_stats_by_user(self, account_id: str) -> List[CategoryAggregate]:
        ...

    @abstractmethod
    def get_user_profile(self, account_id: str) -> Optional[UserProfile]:
        ...

    @abstractmethod
    def get_growth_milestones_by_user(self, account_id: str, limit: Optional[int] = None) -> List[GrowthMilestone]:
        ...

    @abstractmethod
    def query_quizzes(self, query: QuizQuery) -> List[Quiz]:
        ...

    @abstractmethod
    def query_merge_requests(self, query: MergeRequestQuery) -> List[MergeRequest]:
        ...
