"""Unit tests for saved book stores."""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from app.core.exceptions import ConflictException, MongoDBException
from app.models.saved_book import ReadingStatus, SavedBook
from app.repositories.saved_book_store import InMemorySavedBookStore, MongoSavedBookStore

SAVED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_book(owner_id="u1", external_id="gb-42", title="Dune"):
    return SavedBook(owner_id=owner_id, external_id=external_id, title=title, saved_at=SAVED_AT)


def make_doc(**overrides):
    doc = {
        "_id": ObjectId(),
        "owner_id": "u1",
        "external_id": "gb-42",
        "title": "Dune",
        "authors": ["Frank Herbert"],
        "description": "",
        "thumbnail": "",
        "info_link": "",
        "status": "Reading",
        "review": None,
        "saved_at": SAVED_AT,
    }
    doc.update(overrides)
    return doc


class TestInMemorySavedBookStore:
    """Test InMemorySavedBookStore operations."""

    def test_insert_assigns_object_id(self):
        store = InMemorySavedBookStore()
        saved = store.insert(make_book())
        assert ObjectId.is_valid(saved.id)
        assert store.find_one_by_id_and_owner(saved.id, "u1") == saved

    def test_owner_scoped_lookups(self):
        store = InMemorySavedBookStore()
        saved = store.insert(make_book())

        assert store.find_one_by_id_and_owner(saved.id, "u2") is None
        assert store.find_one_by_owner_and_external_id("u1", "gb-42") == saved
        assert store.find_one_by_owner_and_external_id("u2", "gb-42") is None
        assert store.find_all_by_owner("u2") == []

    def test_update_and_delete_require_owner(self):
        store = InMemorySavedBookStore()
        saved = store.insert(make_book())

        assert store.update_by_id_and_owner(saved.id, "u2", {"review": "x"}) is None
        assert store.delete_by_id_and_owner(saved.id, "u2") is False

        updated = store.update_by_id_and_owner(saved.id, "u1", {"status": ReadingStatus.COMPLETED})
        assert updated.status is ReadingStatus.COMPLETED
        assert store.delete_by_id_and_owner(saved.id, "u1") is True
        assert store.delete_by_id_and_owner(saved.id, "u1") is False

    def test_returned_records_are_copies(self):
        store = InMemorySavedBookStore()
        saved = store.insert(make_book())
        saved.title = "changed"
        saved.authors.append("someone")

        stored = store.find_one_by_id_and_owner(saved.id, "u1")
        assert stored.title == "Dune"
        assert stored.authors == []

    def test_concurrent_inserts(self):
        store = InMemorySavedBookStore()
        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda i: store.insert(make_book(external_id=f"gb-{i}")), range(200)))
        assert len(store.find_all_by_owner("u1")) == 200


class TestMongoSavedBookStore:
    """Test MongoSavedBookStore against a mocked collection."""

    @pytest.fixture
    def collection(self):
        return MagicMock()

    @pytest.fixture
    def store(self, collection):
        return MongoSavedBookStore(collection)

    def test_find_all_by_owner(self, store, collection):
        doc = make_doc()
        oid = str(doc["_id"])
        collection.find.return_value = [doc]

        books = store.find_all_by_owner("u1")

        collection.find.assert_called_once_with({"owner_id": "u1"})
        assert len(books) == 1
        assert books[0].id == oid
        assert books[0].status is ReadingStatus.READING
        assert books[0].authors == ["Frank Herbert"]

    def test_naive_saved_at_is_treated_as_utc(self, store, collection):
        collection.find_one.return_value = make_doc(saved_at=datetime(2024, 5, 1, 12, 0))
        book = store.find_one_by_owner_and_external_id("u1", "gb-42")
        assert book.saved_at == SAVED_AT

    def test_find_one_by_id_and_owner_filters_on_both(self, store, collection):
        oid = ObjectId()
        collection.find_one.return_value = None

        assert store.find_one_by_id_and_owner(str(oid), "u1") is None
        collection.find_one.assert_called_once_with({"_id": oid, "owner_id": "u1"})

    def test_malformed_id_never_queries(self, store, collection):
        assert store.find_one_by_id_and_owner("not-an-id", "u1") is None
        assert store.update_by_id_and_owner("not-an-id", "u1", {"review": "x"}) is None
        assert store.delete_by_id_and_owner("not-an-id", "u1") is False
        collection.find_one.assert_not_called()
        collection.find_one_and_update.assert_not_called()
        collection.delete_one.assert_not_called()

    def test_insert(self, store, collection):
        oid = ObjectId()
        collection.insert_one.return_value = MagicMock(inserted_id=oid)

        saved = store.insert(make_book())

        assert saved.id == str(oid)
        doc = collection.insert_one.call_args.args[0]
        assert doc["owner_id"] == "u1"
        assert doc["external_id"] == "gb-42"
        assert doc["status"] == "Want to Read"
        assert doc["saved_at"] == SAVED_AT

    def test_insert_duplicate_key_is_conflict(self, store, collection):
        collection.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")
        with pytest.raises(ConflictException):
            store.insert(make_book())

    def test_update_sets_enum_value(self, store, collection):
        oid = ObjectId()
        collection.find_one_and_update.return_value = make_doc(_id=oid, status="Completed")

        updated = store.update_by_id_and_owner(str(oid), "u1", {"status": ReadingStatus.COMPLETED})

        assert updated.status is ReadingStatus.COMPLETED
        filter_, update = collection.find_one_and_update.call_args.args
        assert filter_ == {"_id": oid, "owner_id": "u1"}
        assert update == {"$set": {"status": "Completed"}}

    def test_delete_single_scoped_call(self, store, collection):
        oid = ObjectId()
        collection.delete_one.return_value = MagicMock(deleted_count=1)

        assert store.delete_by_id_and_owner(str(oid), "u1") is True
        collection.delete_one.assert_called_once_with({"_id": oid, "owner_id": "u1"})

        collection.delete_one.return_value = MagicMock(deleted_count=0)
        assert store.delete_by_id_and_owner(str(oid), "u1") is False

    @pytest.mark.parametrize("call", [
        lambda s: s.find_all_by_owner("u1"),
        lambda s: s.find_one_by_owner_and_external_id("u1", "gb-42"),
        lambda s: s.find_one_by_id_and_owner(str(ObjectId()), "u1"),
        lambda s: s.insert(make_book()),
        lambda s: s.update_by_id_and_owner(str(ObjectId()), "u1", {"review": "x"}),
        lambda s: s.delete_by_id_and_owner(str(ObjectId()), "u1"),
    ])
    def test_pymongo_errors_become_storage_errors(self, store, collection, call):
        error = ServerSelectionTimeoutError("no servers")
        for method in ("find", "find_one", "insert_one", "find_one_and_update", "delete_one"):
            getattr(collection, method).side_effect = error
        with pytest.raises(MongoDBException):
            call(store)

    def test_ensure_indexes(self, store, collection):
        store.ensure_indexes()
        assert collection.create_index.call_count == 1

        collection.reset_mock()
        store.ensure_indexes(unique_owner_external_id=True)
        assert collection.create_index.call_count == 2
        assert collection.create_index.call_args.kwargs["unique"] is True

    def test_ping(self, store, collection):
        assert store.ping() is True
        collection.database.command.side_effect = ServerSelectionTimeoutError("down")
        assert store.ping() is False
