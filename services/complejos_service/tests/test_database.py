from unittest.mock import MagicMock

import pytest
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from database import Database, DatabaseError, DocumentCollection, NotFoundError


@pytest.fixture
def events(database):
    return database.collection("COMPLEJOS_TEST", "event")


def test_insert_and_find_one(events):
    events.insert({"_id": "e1", "title": "Meetup", "participants": []})
    assert events.find_one("e1")["title"] == "Meetup"


def test_find_one_missing_raises_not_found(events):
    with pytest.raises(NotFoundError):
        events.find_one("missing")


def test_find_all_on_empty_collection(events):
    assert events.find_all() == []


def test_update_one_reports_matched_and_modified_separately(events):
    events.insert({"_id": "e1", "participants": []})

    first = events.update_one({"_id": "e1"}, {"$addToSet": {"participants": "ana"}})
    again = events.update_one({"_id": "e1"}, {"$addToSet": {"participants": "ana"}})
    missing = events.update_one({"_id": "nope"}, {"$addToSet": {"participants": "ana"}})

    assert (first.matched_count, first.modified_count) == (1, 1)
    assert (again.matched_count, again.modified_count) == (1, 0)
    assert (missing.matched_count, missing.modified_count) == (0, 0)
    assert events.find_one("e1")["participants"] == ["ana"]


def test_driver_errors_become_database_errors():
    collection = MagicMock()
    collection.find_one.side_effect = PyMongoError("connection reset")
    gateway = DocumentCollection(collection)

    with pytest.raises(DatabaseError, match="connection reset"):
        gateway.find_one("e1")


def test_connect_fails_when_server_unreachable(monkeypatch):
    client = MagicMock()
    client.admin.command.side_effect = ServerSelectionTimeoutError("no servers")
    monkeypatch.setattr("database.MongoClient", MagicMock(return_value=client))

    with pytest.raises(DatabaseError):
        Database.connect("mongodb://unreachable:27017", timeout_seconds=0.1)

    client.close.assert_called_once()


def test_connect_passes_timeouts(monkeypatch):
    factory = MagicMock()
    monkeypatch.setattr("database.MongoClient", factory)

    Database.connect("mongodb://localhost:27017", timeout_seconds=2)

    factory.assert_called_once_with(
        "mongodb://localhost:27017",
        serverSelectionTimeoutMS=2000,
        connectTimeoutMS=2000,
    )


def test_close_is_idempotent(database):
    database.close()
    database.close()
    assert database.client is None
    with pytest.raises(DatabaseError):
        database.collection("COMPLEJOS_TEST", "event")
