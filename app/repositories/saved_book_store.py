"""
저장 도서(SavedBook) 저장소.

서비스 계층이 사용하는 저장소 인터페이스와 구현체를 정의합니다.
- MongoSavedBookStore: 운영용 (pymongo)
- InMemorySavedBookStore: 로컬 실행/테스트용

저장소 자체는 권한을 검사하지 않습니다.
소유자 범위(owner_id) 필터는 서비스가 모든 호출에 넘겨야 합니다.
"""

from __future__ import annotations
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.core.exceptions import ConflictException, MongoDBException
from app.models.saved_book import ReadingStatus, SavedBook
from app.utils.mongodb import parse_object_id, serialize_object_id

logger = logging.getLogger(__name__)

OWNER_EXTERNAL_ID_INDEX = "uq_owner_external_id"


class SavedBookStore(ABC):
    """
    저장 도서 저장소 인터페이스.

    update/delete는 id와 owner_id를 함께 받아 한 번의 조건부 연산으로 처리합니다.
    """

    @abstractmethod
    def find_all_by_owner(self, owner_id: str) -> List[SavedBook]:
        """소유자의 모든 도서 (저장 순서)."""

    @abstractmethod
    def find_one_by_owner_and_external_id(self, owner_id: str, external_id: str) -> Optional[SavedBook]:
        """중복 저장 체크용 조회."""

    @abstractmethod
    def find_one_by_id_and_owner(self, book_id: str, owner_id: str) -> Optional[SavedBook]:
        """id와 owner_id가 모두 일치하는 도서. 형식이 잘못된 id도 None."""

    @abstractmethod
    def insert(self, book: SavedBook) -> SavedBook:
        """새 id를 부여해 저장하고 저장된 레코드를 반환."""

    @abstractmethod
    def update_by_id_and_owner(self, book_id: str, owner_id: str, patch: Dict[str, Any]) -> Optional[SavedBook]:
        """patch 적용 후 레코드 반환. 일치하는 도서가 없으면 None."""

    @abstractmethod
    def delete_by_id_and_owner(self, book_id: str, owner_id: str) -> bool:
        """삭제되면 True, 일치하는 도서가 없으면 False."""

    def ping(self) -> bool:
        return True


# MongoDB 문서 필드명 (snake_case)
def _to_document(book: SavedBook) -> Dict[str, Any]:
    return {
        "owner_id": book.owner_id,
        "external_id": book.external_id,
        "title": book.title,
        "authors": list(book.authors),
        "description": book.description,
        "thumbnail": book.thumbnail,
        "info_link": book.info_link,
        "status": book.status.value,
        "review": book.review,
        "saved_at": book.saved_at,
    }


def _from_document(doc: Dict[str, Any]) -> SavedBook:
    serialize_object_id(doc, "_id")
    saved_at = doc["saved_at"]
    # tz_aware가 아닌 클라이언트에서 읽은 경우 UTC로 간주
    if saved_at.tzinfo is None:
        saved_at = saved_at.replace(tzinfo=timezone.utc)
    return SavedBook(
        id=doc["_id"],
        owner_id=doc["owner_id"],
        external_id=doc["external_id"],
        title=doc["title"],
        authors=list(doc.get("authors") or []),
        description=doc.get("description") or "",
        thumbnail=doc.get("thumbnail") or "",
        info_link=doc.get("info_link") or "",
        status=ReadingStatus.parse(doc.get("status")) or ReadingStatus.WANT_TO_READ,
        review=doc.get("review"),
        saved_at=saved_at,
    )


def _patch_to_document(patch: Dict[str, Any]) -> Dict[str, Any]:
    doc = {}
    for key, value in patch.items():
        doc[key] = value.value if isinstance(value, ReadingStatus) else value
    return doc


def _copy(book: SavedBook) -> SavedBook:
    return replace(book, authors=list(book.authors))


class MongoSavedBookStore(SavedBookStore):
    """
    MongoDB saved_books 컬렉션 기반 저장소.

    PyMongoError는 MongoDBException으로 변환해 전파합니다.
    타임아웃은 MongoClient 설정(serverSelectionTimeoutMS)을 따릅니다.
    """

    def __init__(self, collection: Collection):
        self._collection = collection

    def ensure_indexes(self, unique_owner_external_id: bool = False) -> None:
        try:
            self._collection.create_index([("owner_id", ASCENDING)], name="owner_id_idx")
            if unique_owner_external_id:
                self._collection.create_index(
                    [("owner_id", ASCENDING), ("external_id", ASCENDING)],
                    name=OWNER_EXTERNAL_ID_INDEX,
                    unique=True,
                )
                logger.info(f"Unique index {OWNER_EXTERNAL_ID_INDEX} ensured on {self._collection.name}")
        except PyMongoError as e:
            logger.error(f"Failed to create indexes on {self._collection.name}: {e}")
            raise MongoDBException("Failed to create saved book indexes") from e

    def find_all_by_owner(self, owner_id: str) -> List[SavedBook]:
        try:
            return [_from_document(doc) for doc in self._collection.find({"owner_id": owner_id})]
        except PyMongoError as e:
            logger.error(f"find_all_by_owner failed for owner {owner_id}: {e}")
            raise MongoDBException("Failed to list saved books") from e

    def find_one_by_owner_and_external_id(self, owner_id: str, external_id: str) -> Optional[SavedBook]:
        try:
            doc = self._collection.find_one({"owner_id": owner_id, "external_id": external_id})
        except PyMongoError as e:
            logger.error(f"find_one_by_owner_and_external_id failed for owner {owner_id}: {e}")
            raise MongoDBException("Failed to look up saved book") from e
        return _from_document(doc) if doc else None

    def find_one_by_id_and_owner(self, book_id: str, owner_id: str) -> Optional[SavedBook]:
        obj_id = parse_object_id(book_id)
        if obj_id is None:
            return None
        try:
            doc = self._collection.find_one({"_id": obj_id, "owner_id": owner_id})
        except PyMongoError as e:
            logger.error(f"find_one_by_id_and_owner failed for book {book_id}: {e}")
            raise MongoDBException("Failed to look up saved book") from e
        return _from_document(doc) if doc else None

    def insert(self, book: SavedBook) -> SavedBook:
        doc = _to_document(book)
        try:
            result = self._collection.insert_one(doc)
        except DuplicateKeyError as e:
            # ENFORCE_UNIQUE_SAVED_BOOKS로 unique 인덱스를 켠 경우에만 발생
            logger.warning(f"Duplicate saved book for owner {book.owner_id}: {book.external_id}")
            raise ConflictException("Book already saved") from e
        except PyMongoError as e:
            logger.error(f"insert failed for owner {book.owner_id}: {e}")
            raise MongoDBException("Failed to save book") from e
        return replace(book, id=str(result.inserted_id))

    def update_by_id_and_owner(self, book_id: str, owner_id: str, patch: Dict[str, Any]) -> Optional[SavedBook]:
        obj_id = parse_object_id(book_id)
        if obj_id is None:
            return None
        try:
            doc = self._collection.find_one_and_update(
                {"_id": obj_id, "owner_id": owner_id},
                {"$set": _patch_to_document(patch)},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"update failed for book {book_id}: {e}")
            raise MongoDBException("Failed to update saved book") from e
        return _from_document(doc) if doc else None

    def delete_by_id_and_owner(self, book_id: str, owner_id: str) -> bool:
        obj_id = parse_object_id(book_id)
        if obj_id is None:
            return False
        try:
            result = self._collection.delete_one({"_id": obj_id, "owner_id": owner_id})
        except PyMongoError as e:
            logger.error(f"delete failed for book {book_id}: {e}")
            raise MongoDBException("Failed to delete saved book") from e
        return result.deleted_count > 0

    def ping(self) -> bool:
        try:
            self._collection.database.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False


class InMemorySavedBookStore(SavedBookStore):
    """
    메모리(dict) 기반 저장소.

    프로세스 재시작 시 데이터가 사라집니다. 테스트와 STORE_BACKEND=memory 실행용.
    FastAPI는 동기 라우터를 스레드풀에서 실행하므로 lock으로 보호합니다.
    """

    def __init__(self):
        self._books: Dict[str, SavedBook] = {}
        self._lock = threading.Lock()

    def find_all_by_owner(self, owner_id: str) -> List[SavedBook]:
        with self._lock:
            return [_copy(b) for b in self._books.values() if b.owner_id == owner_id]

    def find_one_by_owner_and_external_id(self, owner_id: str, external_id: str) -> Optional[SavedBook]:
        with self._lock:
            for book in self._books.values():
                if book.owner_id == owner_id and book.external_id == external_id:
                    return _copy(book)
        return None

    def find_one_by_id_and_owner(self, book_id: str, owner_id: str) -> Optional[SavedBook]:
        with self._lock:
            book = self._books.get(book_id)
            if book is None or book.owner_id != owner_id:
                return None
            return _copy(book)

    def insert(self, book: SavedBook) -> SavedBook:
        stored = replace(book, id=str(ObjectId()), authors=list(book.authors))
        with self._lock:
            self._books[stored.id] = stored
        return _copy(stored)

    def update_by_id_and_owner(self, book_id: str, owner_id: str, patch: Dict[str, Any]) -> Optional[SavedBook]:
        with self._lock:
            book = self._books.get(book_id)
            if book is None or book.owner_id != owner_id:
                return None
            updated = book.with_patch(patch)
            self._books[book_id] = updated
            return _copy(updated)

    def delete_by_id_and_owner(self, book_id: str, owner_id: str) -> bool:
        with self._lock:
            book = self._books.get(book_id)
            if book is None or book.owner_id != owner_id:
                return False
            del self._books[book_id]
            return True
