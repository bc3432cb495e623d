# ABOUTME: Exposes the analytics operations as named tools with validated JSON inputs.
# ABOUTME: Each tool parses camelCase params, runs against a store, and returns a JSON payload.

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.common.errors import InvalidInputError
from src.common.schemas import MERGE_REQUEST_STATUSES, PLATFORMS, QUIZ_STATUSES, Category, Difficulty
from src.event_store.base import EventStore, MergeRequestQuery, QuizQuery

from .accounts import get_growth_milestones, get_user_profile
from .answers_history import DEFAULT_HISTORY_LIMIT, MAX_HISTORY_LIMIT, get_answers_history
from .catalog import DEFAULT_SEARCH_LIMIT, query_quizzes, search_merge_requests
from .user_stats import report_user_stats
from .weak_categories import analyze_weak_categories


class ToolInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)


def _one_of(value: Optional[str], allowed: Sequence[str], field_name: str) -> Optional[str]:
    if value is not None and value not in allowed:
        raise ValueError(f"{field_name} must be one of: {', '.join(allowed)}")
    return value


class AccountInput(ToolInput):
    account_id: str = Field(..., alias="accountId", min_length=1, description="User account ID (GitHub/GitLab username)")


class AnalyzeWeakCategoriesInput(AccountInput):
    min_answers: Optional[int] = Field(
        None, alias="minAnswers", gt=0, strict=True, description="Minimum answers in a category to consider (default: 3)"
    )


class GetUserStatsInput(AccountInput):
    pass


class GetUserProfileInput(AccountInput):
    pass


class GetAnswersHistoryInput(AccountInput):
    limit: Optional[int] = Field(
        None, ge=1, le=MAX_HISTORY_LIMIT, strict=True, description=f"Maximum results (default: {DEFAULT_HISTORY_LIMIT})"
    )
    category: Optional[Category] = None
    difficulty: Optional[Difficulty] = None
    correct_only: bool = Field(False, alias="correctOnly")
    incorrect_only: bool = Field(False, alias="incorrectOnly")


class GetGrowthMilestonesInput(AccountInput):
    limit: Optional[int] = Field(None, ge=1, le=100, strict=True)


class QueryQuizzesInput(ToolInput):
    category: Optional[Category] = None
    difficulty: Optional[Difficulty] = None
    status: Optional[str] = None
    account_id: Optional[str] = Field(None, alias="accountId")
    merge_request_id: Optional[str] = Field(None, alias="mergeRequestId")
    limit: Optional[int] = Field(None, ge=1, le=100, strict=True)

    @field_validator("status")
    @classmethod
    def known_status(cls, value: Optional[str]) -> Optional[str]:
        return _one_of(value, QUIZ_STATUSES, "status")


class SearchMergeRequestsInput(ToolInput):
    platform: Optional[str] = None
    owner: Optional[str] = None
    repo: Optional[str] = None
    author_account_id: Optional[str] = Field(None, alias="authorAccountId")
    status: Optional[str] = None
    limit: Optional[int] = Field(None, ge=1, le=100, strict=True)

    @field_validator("platform")
    @classmethod
    def known_platform(cls, value: Optional[str]) -> Optional[str]:
        return _one_of(value, PLATFORMS, "platform")

    @field_validator("status")
    @classmethod
    def known_status(cls, value: Optional[str]) -> Optional[str]:
        return _one_of(value, MERGE_REQUEST_STATUSES, "status")


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    input_model: Type[ToolInput]
    handler: Callable[[EventStore, Any], Dict]


def _analyze(store: EventStore, params: AnalyzeWeakCategoriesInput) -> Dict:
    return analyze_weak_categories(store, params.account_id, min_answers=params.min_answers)


def _user_stats(store: EventStore, params: GetUserStatsInput) -> Dict:
    return report_user_stats(store, params.account_id)


def _answers_history(store: EventStore, params: GetAnswersHistoryInput) -> Dict:
    return get_answers_history(
        store,
        params.account_id,
        limit=params.limit,
        category=params.category,
        difficulty=params.difficulty,
        correct_only=params.correct_only,
        incorrect_only=params.incorrect_only,
    )


def _profile(store: EventStore, params: GetUserProfileInput) -> Dict:
    return get_user_profile(store, params.account_id)


def _milestones(store: EventStore, params: GetGrowthMilestonesInput) -> Dict:
    return get_growth_milestones(store, params.account_id, limit=params.limit)


def _quizzes(store: EventStore, params: QueryQuizzesInput) -> Dict:
    query = QuizQuery(
        category=params.category,
        difficulty=params.difficulty,
        status=params.status,
        account_id=params.account_id,
        merge_request_id=params.merge_request_id,
        limit=params.limit or DEFAULT_SEARCH_LIMIT,
    )
    return query_quizzes(store, query)


def _merge_requests(store: EventStore, params: SearchMergeRequestsInput) -> Dict:
    query = MergeRequestQuery(
        platform=params.platform,
        owner=params.owner,
        repo=params.repo,
        author_account_id=params.author_account_id,
        status=params.status,
        limit=params.limit or DEFAULT_SEARCH_LIMIT,
    )
    return search_merge_requests(store, query)


TOOLS: Dict[str, Tool] = {
    tool.name: tool
    for tool in (
        Tool(
            "query_quizzes",
            "Search quizzes by category, difficulty, status, user, or merge request.",
            QueryQuizzesInput,
            _quizzes,
        ),
        Tool(
            "get_user_stats",
            "Get overall accuracy plus category and difficulty breakdowns for a user.",
            GetUserStatsInput,
            _user_stats,
        ),
        Tool(
            "analyze_weak_categories",
            "Identify a user's weak categories with trends and practice recommendations.",
            AnalyzeWeakCategoriesInput,
            _analyze,
        ),
        Tool(
            "get_answers_history",
            "Get a user's answer history filtered by category, difficulty, and correctness.",
            GetAnswersHistoryInput,
            _answers_history,
        ),
        Tool(
            "search_merge_requests",
            "Search merge requests by platform, repository, author, or status.",
            SearchMergeRequestsInput,
            _merge_requests,
        ),
        Tool(
            "get_user_profile",
            "Get a user's career goal, experience level, focus areas, and self-assessment.",
            GetUserProfileInput,
            _profile,
        ),
        Tool(
            "get_growth_milestones",
            "Get a user's growth milestones, newest first.",
            GetGrowthMilestonesInput,
            _milestones,
        ),
    )
}


def parse_tool_input(name: str, params: Optional[Mapping[str, Any]]) -> ToolInput:
    tool = TOOLS.get(name)
    if tool is None:
        raise InvalidInputError(f"Unknown tool '{name}'. Expected one of: {', '.join(sorted(TOOLS))}.")
    try:
        return tool.input_model.model_validate(dict(params or {}))
    except ValidationError as exc:
        raise InvalidInputError(f"Invalid input for {name}: {exc}") from exc


def run_tool(name: str, params: Optional[Mapping[str, Any]], store: EventStore) -> Dict:
    """Validate ``params`` before touching the store, then run the tool."""

    parsed = parse_tool_input(name, params)
    return TOOLS[name].handler(store, parsed)


def call_tool(name: str, params: Optional[Mapping[str, Any]], store: EventStore) -> str:
    return json.dumps(run_tool(name, params, store), indent=2, ensure_ascii=False)
