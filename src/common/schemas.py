# ABOUTME: Defines canonical records shared by the store adapters and the analytics engine.
# ABOUTME: Centralizes the category/difficulty taxonomy and the persisted document mappings.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class Category(str, Enum):
    BUG_FIX = "bug_fix"
    PERFORMANCE = "performance"
    REFACTORING = "refactoring"
    SECURITY = "security"
    LOGIC = "logic"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# Iteration order for buckets and breakdowns.
CATEGORIES: List[Category] = [
    Category.BUG_FIX,
    Category.PERFORMANCE,
    Category.REFACTORING,
    Category.SECURITY,
    Category.LOGIC,
]
DIFFICULTIES: List[Difficulty] = [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD]

QUIZ_STATUSES = ("pending", "answered", "skipped", "expired")
PLATFORMS = ("github", "gitlab")
MERGE_REQUEST_STATUSES = ("open", "merged", "closed")


def to_datetime(value: Any) -> Optional[datetime]:
    """
    Normalize a stored timestamp into an aware UTC datetime.

    Accepts datetimes, ISO-8601 strings, epoch seconds and
    ``{"seconds": ..., "nanoseconds": ...}`` mappings exported by the document store.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, Mapping) and "seconds" in value:
        seconds = float(value["seconds"]) + float(value.get("nanoseconds", 0)) / 1e9
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    raise ValueError(f"Unsupported timestamp value {value!r}.")


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class AnswerEvent:
    """One learner response to one quiz instance."""

    answer_id: str
    account_id: str
    quiz_id: str
    merge_request_id: str
    category: Category
    difficulty: Difficulty
    selected_answer_index: int
    is_correct: bool
    answered_at: datetime

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "AnswerEvent":
        return cls(
            answer_id=str(doc["answerId"]),
            account_id=str(doc["accountId"]),
            quiz_id=str(doc["quizId"]),
            merge_request_id=str(doc.get("mergeRequestId", "")),
            category=Category(doc["category"]),
            difficulty=Difficulty(doc["difficulty"]),
            selected_answer_index=int(doc["selectedAnswerIndex"]),
            is_correct=bool(doc["isCorrect"]),
            answered_at=to_datetime(doc["answeredAt"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "answerId": self.answer_id,
            "quizId": self.quiz_id,
            "mergeRequestId": self.merge_request_id,
            "category": self.category.value,
            "difficulty": self.difficulty.value,
            "selectedAnswerIndex": self.selected_answer_index,
            "isCorrect": self.is_correct,
            "answeredAt": isoformat(self.answered_at),
        }


@dataclass(frozen=True)
class CategoryAggregate:
    """Precomputed per-(account, category) statistics maintained outside the engine."""

    account_id: str
    category: Category
    total_quizzes: int
    correct_count: int
    correct_rate: float
    average_difficulty: float
    weekly_trend: float
    monthly_trend: float
    last_answered_at: Optional[datetime] = None
    calculated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.total_quizzes < 0 or self.correct_count < 0:
            raise ValueError(f"Negative counts in {self.category.value} aggregate.")
        if self.correct_count > self.total_quizzes:
            raise ValueError(
                f"{self.category.value} aggregate has correctCount {self.correct_count} "
                f"above totalQuizzes {self.total_quizzes}."
            )

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "CategoryAggregate":
        total = int(doc.get("totalQuizzes", 0))
        correct = int(doc.get("correctCount", 0))
        rate = doc.get("correctRate")
        return cls(
            account_id=str(doc["accountId"]),
            category=Category(doc["category"]),
            total_quizzes=total,
            correct_count=correct,
            correct_rate=float(rate) if rate is not None else (correct / total if total else 0.0),
            average_difficulty=float(doc.get("averageDifficulty", 0.0)),
            weekly_trend=float(doc.get("weeklyTrend", 0.0)),
            monthly_trend=float(doc.get("monthlyTrend", 0.0)),
            last_answered_at=to_datetime(doc.get("lastAnsweredAt")),
            calculated_at=to_datetime(doc.get("calculatedAt")),
        )


@dataclass(frozen=True)
class UserRecord:
    account_id: str
    platform: str
    total_quizzes: int
    correct_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "UserRecord":
        return cls(
            account_id=str(doc["accountId"]),
            platform=str(doc.get("platform", "")),
            total_quizzes=int(doc.get("totalQuizzes", 0)),
            correct_count=int(doc.get("correctCount", 0)),
            created_at=to_datetime(doc.get("createdAt")),
            updated_at=to_datetime(doc.get("updatedAt")),
        )


@dataclass(frozen=True)
class UserProfile:
    """Self-declared learner goals and self-assessment per category."""

    account_id: str
    career_goal: Optional[str] = None
    experience_level: Optional[str] = None
    years_of_experience: Optional[int] = None
    focus_areas: List[str] = field(default_factory=list)
    self_assessment: Mapping[str, int] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "UserProfile":
        years = doc.get("yearsOfExperience")
        return cls(
            account_id=str(doc["accountId"]),
            career_goal=doc.get("careerGoal"),
            experience_level=doc.get("experienceLevel"),
            years_of_experience=int(years) if years is not None else None,
            focus_areas=list(doc.get("focusAreas") or []),
            self_assessment=dict(doc.get("selfAssessment") or {}),
            created_at=to_datetime(doc.get("createdAt")),
            updated_at=to_datetime(doc.get("updatedAt")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accountId": self.account_id,
            "careerGoal": self.career_goal,
            "experienceLevel": self.experience_level,
            "yearsOfExperience": self.years_of_experience,
            "focusAreas": list(self.focus_areas),
            "selfAssessment": dict(self.self_assessment),
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }


@dataclass(frozen=True)
class GrowthMilestone:
    milestone_id: str
    account_id: str
    type: str
    achievement: str
    achieved_at: datetime
    category: Optional[Category] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "GrowthMilestone":
        category = doc.get("category")
        return cls(
            milestone_id=str(doc["milestoneId"]),
            account_id=str(doc["accountId"]),
            type=str(doc["type"]),
            achievement=str(doc["achievement"]),
            achieved_at=to_datetime(doc["achievedAt"]),
            category=Category(category) if category else None,
            metadata=dict(doc.get("metadata") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "milestoneId": self.milestone_id,
            "type": self.type,
            "category": self.category.value if self.category else None,
            "achievement": self.achievement,
            "metadata": dict(self.metadata),
            "achievedAt": isoformat(self.achieved_at),
        }


@dataclass(frozen=True)
class Quiz:
    quiz_id: str
    merge_request_id: str
    account_id: str
    question_text: str
    category: Category
    difficulty: Difficulty
    options: List[str]
    correct_answer_index: int
    explanation: str
    status: str
    created_at: datetime
    diff_reference: Optional[str] = None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Quiz":
        status = str(doc["status"])
        if status not in QUIZ_STATUSES:
            raise ValueError(f"Unknown quiz status '{status}'.")
        return cls(
            quiz_id=str(doc["quizId"]),
            merge_request_id=str(doc["mergeRequestId"]),
            account_id=str(doc["accountId"]),
            question_text=str(doc["questionText"]),
            category=Category(doc["category"]),
            difficulty=Difficulty(doc["difficulty"]),
            options=[str(o) for o in doc["options"]],
            correct_answer_index=int(doc["correctAnswerIndex"]),
            explanation=str(doc["explanation"]),
            status=status,
            created_at=to_datetime(doc["createdAt"]),
            diff_reference=doc.get("diffReference"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "quizId": self.quiz_id,
            "mergeRequestId": self.merge_request_id,
            "accountId": self.account_id,
            "questionText": self.question_text,
            "category": self.category.value,
            "difficulty": self.difficulty.value,
            "status": self.status,
            "options": list(self.options),
            "correctAnswerIndex": self.correct_answer_index,
            "explanation": self.explanation,
            "diffReference": self.diff_reference,
            "createdAt": isoformat(self.created_at),
        }


@dataclass(frozen=True)
class MergeRequest:
    merge_request_id: str
    platform: str
    owner: str
    repo: str
    number: int
    author_account_id: str
    title: str
    status: str
    created_at: datetime
    diff_summary: Optional[str] = None
    files_changed: List[str] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "MergeRequest":
        platform = str(doc["platform"])
        status = str(doc["status"])
        if platform not in PLATFORMS:
            raise ValueError(f"Unknown merge request platform '{platform}'.")
        if status not in MERGE_REQUEST_STATUSES:
            raise ValueError(f"Unknown merge request status '{status}'.")
        return cls(
            merge_request_id=str(doc["mergeRequestId"]),
            platform=platform,
            owner=str(doc["owner"]),
            repo=str(doc["repo"]),
            number=int(doc["number"]),
            author_account_id=str(doc["authorAccountId"]),
            title=str(doc["title"]),
            status=status,
            created_at=to_datetime(doc["createdAt"]),
            diff_summary=doc.get("diffSummary"),
            files_changed=list(doc.get("filesChanged") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mergeRequestId": self.merge_request_id,
            "platform": self.platform,
            "owner": self.owner,
            "repo": self.repo,
            "number": self.number,
            "authorAccountId": self.author_account_id,
            "title": self.title,
            "status": self.status,
            "diffSummary": self.diff_summary,
            "filesChanged": list(self.files_changed),
            "createdAt": isoformat(self.created_at),
        }
