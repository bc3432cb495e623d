# ABOUTME: Makes the shared common package importable across the store and analytics packages.
# ABOUTME: Re-exports the taxonomy, record types, and error classes for convenience.

from .errors import InvalidInputError, SkillAnalyticsError, StoreUnavailableError
from .schemas import (
    CATEGORIES,
    DIFFICULTIES,
    AnswerEvent,
    Category,
    CategoryAggregate,
    Difficulty,
    UserRecord,
)

__all__ = [
    "CATEGORIES",
    "DIFFICULTIES",
    "AnswerEvent",
    "Category",
    "CategoryAggregate",
    "Difficulty",
    "UserRecord",
    "InvalidInputError",
    "SkillAnalyticsError",
    "StoreUnavailableError",
]
