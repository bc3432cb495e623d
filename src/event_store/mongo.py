# ABOUTME: Implements the event store on MongoDB collections via pymongo.
# ABOUTME: Translates driver failures into StoreUnavailableError for the engine.

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Mapping, Optional, TypeVar

from pymongo import DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from src.common.errors import StoreUnavailableError
from src.common.schemas import (
    AnswerEvent,
    CategoryAggregate,
    GrowthMilestone,
    MergeRequest,
    Quiz,
    UserProfile,
    UserRecord,
)

from .base import Collections, EventStore, MergeRequestQuery, QuizQuery, malformed_documents

T = TypeVar("T")

logger = logging.getLogger(__name__)

# Strip the driver's ObjectId from every read.
_PROJECTION = {"_id": 0}


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except PyMongoError as exc:
        logger.error("Store read failed", extra={"operation": operation, "error": str(exc)})
        raise StoreUnavailableError(f"{operation} failed: {exc}") from exc


class MongoEventStore(EventStore):
    def __init__(
        self,
        database: Optional[Database] = None,
        uri: str = "mongodb://localhost:27017",
        database_name: str = "skill_analytics",
        server_selection_timeout_ms: int = 5000,
    ) -> None:
        self._database = database
        self._uri = uri
        self._database_name = database_name
        self._timeout_ms = server_selection_timeout_ms

    @property
    def db(self) -> Database:
        # Lazily connect so building the store never touches the network.
        if self._database is None:
            logger.info("Connecting to MongoDB", extra={"database": self._database_name})
            client = MongoClient(self._uri, serverSelectionTimeoutMS=self._timeout_ms, tz_aware=True)
            self._database = client[self._database_name]
        return self._database

    def _find_one(self, collection: str, filters: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
        with _store_errors(f"find_one {collection}"):
            return self.db[collection].find_one(dict(filters), _PROJECTION)

    def _find(
        self,
        collection: str,
        filters: Mapping[str, Any],
        order_field: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Mapping[str, Any]]:
        with _store_errors(f"find {collection}"):
            cursor = self.db[collection].find(dict(filters), _PROJECTION)
            if order_field:
                cursor = cursor.sort(order_field, DESCENDING)
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)

    @staticmethod
    def _parse(collection: str, docs: List[Mapping[str, Any]], parse: Callable[[Mapping[str, Any]], T]) -> List[T]:
        with malformed_documents(collection):
            return [parse(doc) for doc in docs]

    def get_user(self, account_id: str) -> Optional[UserRecord]:
        doc = self._find_one(Collections.USERS, {"accountId": account_id})
        if doc is None:
            return None
        return self._parse(Collections.USERS, [doc], UserRecord.from_document)[0]

    def get_answers_by_user(self, account_id: str, limit: Optional[int] = None) -> List[AnswerEvent]:
        docs = self._find(Collections.ANSWERS, {"accountId": account_id}, "answeredAt", limit)
        return self._parse(Collections.ANSWERS, docs, AnswerEvent.from_document)

    def get_skill_stats_by_user(self, account_id: str) -> List[CategoryAggregate]:
        docs = self._find(Collections.SKILL_STATS, {"accountId": account_id})
        return self._parse(Collections.SKILL_STATS, docs, CategoryAggregate.from_document)

    def get_user_profile(self, account_id: str) -> Optional[UserProfile]:
        doc = self._find_one(Collections.USER_PROFILES, {"accountId": account_id})
        if doc is None:
            return None
        return self._parse(Collections.USER_PROFILES, [doc], UserProfile.from_document)[0]

    def get_growth_milestones_by_user(self, account_id: str, limit: Optional[int] = None) -> List[GrowthMilestone]:
        docs = self._find(Collections.GROWTH_MILESTONES, {"accountId": account_id}, "achievedAt", limit)
        return self._parse(Collections.GROWTH_MILESTONES, docs, GrowthMilestone.from_document)

    def query_quizzes(self, query: QuizQuery) -> List[Quiz]:
        docs = self._find(Collections.QUIZZES, query.filters(), "createdAt", query.limit)
        return self._parse(Collections.QUIZZES, docs, Quiz.from_document)

    def query_merge_requests(self, query: MergeRequestQuery) -> List[MergeRequest]:
        docs = self._find(Collections.MERGE_REQUESTS, query.filters(), "createdAt", query.limit)
        return self._parse(Collections.MERGE_REQUESTS, docs, MergeRequest.from_document)
