# ABOUTME: Exposes the document store interface and its adapters.
# ABOUTME: Builds the configured adapter from analytics settings.

from src.common.settings import StoreSettings

from .base import Collections, EventStore, MergeRequestQuery, QuizQuery
from .memory import InMemoryEventStore


def build_store(settings: StoreSettings) -> EventStore:
    """Construct the adapter named by ``settings.backend``."""

    if settings.backend == "mongo":
        from .mongo import MongoEventStore

        return MongoEventStore(
            uri=settings.mongodb_uri,
            database_name=settings.database,
            server_selection_timeout_ms=settings.server_selection_timeout_ms,
        )
    if settings.fixture_path is not None and settings.fixture_path.exists():
        return InMemoryEventStore.from_json(settings.fixture_path)
    return InMemoryEventStore()


__all__ = [
    "Collections",
    "EventStore",
    "InMemoryEventStore",
    "MergeRequestQuery",
    "QuizQuery",
    "build_store",
]
