# ABOUTME: Tests the in-memory and MongoDB store adapters against the shared interface.
# ABOUTME: Mongo reads are exercised through a mocked database handle.

import json
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from pymongo import DESCENDING
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from src.common.errors import StoreUnavailableError
from src.common.schemas import Category, CategoryAggregate, Difficulty, to_datetime
from src.common.settings import StoreSettings
from src.event_store import InMemoryEventStore, QuizQuery, build_store
from src.event_store.mongo import MongoEventStore
from tests.factories import answer_doc, answers_for, make_store, skill_stats_doc, user_doc


class InMemoryEventStoreTest(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = Path(self.tmpdir.name) / "store.json"

    def tearDown(self) -> None:
        self.tmpdir.cleanup()

    def test_answers_filtered_by_account_and_ordered(self):
        store = make_store(
            answers=answers_for("logic", [True, False, True]) + [answer_doc("logic", True, 99, account_id="other")]
        )

        answers = store.get_answers_by_user("u1")

        self.assertEqual(len(answers), 3)
        self.assertTrue(all(a.account_id == "u1" for a in answers))
        times = [a.answered_at for a in answers]
        self.assertEqual(times, sorted(times, reverse=True))
        self.assertEqual(len(store.get_answers_by_user("u1", limit=2)), 2)

    def test_json_fixture_reload(self):
        store = make_store(answers=answers_for("security", [True]), skill_stats=[skill_stats_doc("security", 1, 1)])
        store.add("users", user_doc("u2", total=4, correct=1))
        store.to_json(self.path)

        reloaded = InMemoryEventStore.from_json(self.path)

        self.assertEqual(reloaded.get_user("u2").total_quizzes, 4)
        self.assertEqual(reloaded.get_skill_stats_by_user("u1")[0].category, Category.SECURITY)
        self.assertEqual(reloaded.get_answers_by_user("u1")[0].difficulty, Difficulty.MEDIUM)

    def test_missing_fixture_is_store_unavailable(self):
        with self.assertRaises(StoreUnavailableError):
            InMemoryEventStore.from_json(self.path)

    def test_corrupt_fixture_is_store_unavailable(self):
        self.path.write_text("{not json", encoding="utf-8")
        with self.assertRaises(StoreUnavailableError):
            InMemoryEventStore.from_json(self.path)

    def test_unknown_collection_rejected(self):
        with self.assertRaises(ValueError):
            InMemoryEventStore({"sessions": []})

    def test_inconsistent_aggregate_is_store_unavailable(self):
        store = make_store(skill_stats=[{**skill_stats_doc("bug_fix", 3, 2), "correctCount": 5}])

        with self.assertRaises(StoreUnavailableError) as ctx:
            store.get_skill_stats_by_user("u1")
        self.assertIsInstance(ctx.exception.__cause__, ValueError)

    def test_malformed_answers_are_store_unavailable(self):
        unknown_category = {**answer_doc("logic", True, 1), "category": "style"}
        missing_time = answer_doc("logic", True, 2)
        del missing_time["answeredAt"]

        for doc in (unknown_category, missing_time):
            with self.subTest(doc=doc), self.assertRaises(StoreUnavailableError):
                make_store(answers=[doc]).get_answers_by_user("u1")

    def test_quiz_query_without_filters_returns_all(self):
        self.assertEqual(make_store().query_quizzes(QuizQuery()), [])


def test_timestamp_formats_normalize_to_utc():
    expected = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert to_datetime({"seconds": expected.timestamp(), "nanoseconds": 0}) == expected
    assert to_datetime("2024-01-01T00:00:00Z") == expected
    assert to_datetime(expected.timestamp()) == expected
    assert to_datetime(datetime(2024, 1, 1)) == expected
    assert to_datetime(None) is None


def test_aggregate_rejects_more_correct_than_total():
    with pytest.raises(ValueError):
        CategoryAggregate.from_document(skill_stats_doc("logic", 2, 3))


def test_aggregate_derives_missing_correct_rate():
    doc = skill_stats_doc("logic", 4, 3)
    del doc["correctRate"]
    assert CategoryAggregate.from_document(doc).correct_rate == 0.75


def test_build_store_from_settings(tmp_path):
    fixture = tmp_path / "demo.json"
    fixture.write_text(json.dumps({"users": [user_doc("demo")]}), encoding="utf-8")

    memory = build_store(StoreSettings(backend="memory", fixture_path=fixture))
    empty = build_store(StoreSettings(backend="memory", fixture_path=tmp_path / "missing.json"))
    mongo = build_store(StoreSettings(backend="mongo", mongodb_uri="mongodb://db:27017", database="analytics"))

    assert memory.get_user("demo") is not None
    assert empty.get_user("demo") is None
    assert isinstance(mongo, MongoEventStore)


def _mock_database(collections):
    db = MagicMock()
    mocks = {}
    for name, docs in collections.items():
        cursor = MagicMock()
        cursor.sort.return_value = cursor
        cursor.limit.return_value = cursor
        cursor.__iter__.return_value = iter(docs)
        collection = MagicMock()
        collection.find.return_value = cursor
        collection.find_one.return_value = docs[0] if docs else None
        mocks[name] = (collection, cursor)
    db.__getitem__.side_effect = lambda name: mocks[name][0]
    return db, mocks


class MongoEventStoreTest(unittest.TestCase):
    def test_answers_query_sorted_and_limited(self):
        docs = answers_for("logic", [True, False])[::-1]
        db, mocks = _mock_database({"answers": docs})
        store = MongoEventStore(database=db)

        answers = store.get_answers_by_user("u1", limit=100)

        collection, cursor = mocks["answers"]
        collection.find.assert_called_once_with({"accountId": "u1"}, {"_id": 0})
        cursor.sort.assert_called_once_with("answeredAt", DESCENDING)
        cursor.limit.assert_called_once_with(100)
        self.assertEqual([a.is_correct for a in answers], [False, True])

    def test_unbounded_answers_skip_limit(self):
        db, mocks = _mock_database({"answers": []})
        MongoEventStore(database=db).get_answers_by_user("u1")
        mocks["answers"][1].limit.assert_not_called()

    def test_user_and_skill_stats(self):
        db, _ = _mock_database({"users": [user_doc(total=3, correct=2)], "skillStats": [skill_stats_doc("bug_fix", 3, 2)]})
        store = MongoEventStore(database=db)

        self.assertEqual(store.get_user("u1").correct_count, 2)
        self.assertEqual(store.get_skill_stats_by_user("u1")[0].total_quizzes, 3)

    def test_missing_user(self):
        db, _ = _mock_database({"users": []})
        self.assertIsNone(MongoEventStore(database=db).get_user("ghost"))

    def test_driver_errors_become_store_unavailable(self):
        db, mocks = _mock_database({"skillStats": []})
        mocks["skillStats"][0].find.side_effect = ServerSelectionTimeoutError("no servers")

        with self.assertRaises(StoreUnavailableError) as ctx:
            MongoEventStore(database=db).get_skill_stats_by_user("u1")
        self.assertIsInstance(ctx.exception.__cause__, PyMongoError)

    def test_malformed_documents_become_store_unavailable(self):
        missing_time = answer_doc("logic", True, 1)
        del missing_time["answeredAt"]
        db, _ = _mock_database(
            {
                "skillStats": [{**skill_stats_doc("security", 3, 1), "correctCount": 4}],
                "answers": [missing_time],
            }
        )
        store = MongoEventStore(database=db)

        with self.assertRaises(StoreUnavailableError):
            store.get_skill_stats_by_user("u1")
        with self.assertRaises(StoreUnavailableError) as ctx:
            store.get_answers_by_user("u1")
        self.assertIsInstance(ctx.exception.__cause__, KeyError)

    def test_quiz_query_filters(self):
        db, mocks = _mock_database({"quizzes": []})
        MongoEventStore(database=db).query_quizzes(QuizQuery(category=Category.LOGIC, status="pending", limit=5))

        mocks["quizzes"][0].find.assert_called_once_with({"category": "logic", "status": "pending"}, {"_id": 0})
        mocks["quizzes"][1].limit.assert_called_once_with(5)
