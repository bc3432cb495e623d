# ABOUTME: Implements the event store over in-process documents or a JSON fixture file.
# ABOUTME: Backs local demos and tests with the same query semantics as the document store.

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TypeVar

from src.common.errors import StoreUnavailableError
from src.common.schemas import (
    AnswerEvent,
    CategoryAggregate,
    GrowthMilestone,
    MergeRequest,
    Quiz,
    UserProfile,
    UserRecord,
    to_datetime,
)

from .base import Collections, EventStore, MergeRequestQuery, QuizQuery, malformed_documents

T = TypeVar("T")


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Cannot serialize {type(value).__name__} to JSON.")


class InMemoryEventStore(EventStore):
    """Holds raw documents per collection and parses them on read."""

    def __init__(self, documents: Optional[Mapping[str, Iterable[Mapping[str, Any]]]] = None) -> None:
        self._documents: Dict[str, List[Dict[str, Any]]] = {name: [] for name in Collections.ALL}
        for name, docs in (documents or {}).items():
            if name not in self._documents:
                raise ValueError(f"Unknown collection '{name}'.")
            self._documents[name] = [dict(doc) for doc in docs]

    @classmethod
    def from_json(cls, path: Path) -> "InMemoryEventStore":
        try:
            with open(path, encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreUnavailableError(f"Cannot read store fixture at {path}: {exc}") from exc
        return cls(payload)

    def to_json(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self._documents, f, indent=2, ensure_ascii=False, default=_json_default)

    def add(self, collection: str, doc: Mapping[str, Any]) -> None:
        self._documents[collection].append(dict(doc))

    def _find(self, collection: str, filters: Mapping[str, Any]) -> List[Dict[str, Any]]:
        return [
            doc for doc in self._documents[collection] if all(doc.get(k) == v for k, v in filters.items())
        ]

    def _find_sorted(
        self,
        collection: str,
        filters: Mapping[str, Any],
        order_field: str,
        limit: Optional[int],
        parse: Callable[[Mapping[str, Any]], T],
    ) -> List[T]:
        with malformed_documents(collection):
            docs = sorted(
                self._find(collection, filters),
                key=lambda d: to_datetime(d[order_field]),
                reverse=True,
            )
            if limit:
                docs = docs[:limit]
            return [parse(doc) for doc in docs]

    def get_user(self, account_id: str) -> Optional[UserRecord]:
        docs = self._find(Collections.USERS, {"accountId": account_id})
        with malformed_documents(Collections.USERS):
            return UserRecord.from_document(docs[0]) if docs else None

    def get_answers_by_user(self, account_id: str, limit: Optional[int] = None) -> List[AnswerEvent]:
        return self._find_sorted(
            Collections.ANSWERS, {"accountId": account_id}, "answeredAt", limit, AnswerEvent.from_document
        )

    def get_skill_stats_by_user(self, account_id: str) -> List[CategoryAggregate]:
        docs = self._find(Collections.SKILL_STATS, {"accountId": account_id})
        with malformed_documents(Collections.SKILL_STATS):
            return [CategoryAggregate.from_document(doc) for doc in docs]

    def get_user_profile(self, account_id: str) -> Optional[UserProfile]:
        docs = self._find(Collections.USER_PROFILES, {"accountId": account_id})
        with malformed_documents(Collections.USER_PROFILES):
            return UserProfile.from_document(docs[0]) if docs else None

    def get_growth_milestones_by_user(self, account_id: str, limit: Optional[int] = None) -> List[GrowthMilestone]:
        return self._find_sorted(
            Collections.GROWTH_MILESTONES,
            {"accountId": account_id},
            "achievedAt",
            limit,
            GrowthMilestone.from_document,
        )

    def query_quizzes(self, query: QuizQuery) -> List[Quiz]:
        return self._find_sorted(Collections.QUIZZES, query.filters(), "createdAt", query.limit, Quiz.from_document)

    def query_merge_requests(self, query: MergeRequestQuery) -> List[MergeRequest]:
        return self._find_sorted(
            Collections.MERGE_REQUESTS, query.filters(), "createdAt", query.limit, MergeRequest.from_document
        )
