"""
저장 도서 소유권 서비스.

목록/저장/수정/삭제 4가지 작업을 전송 계층(HTTP)과 무관하게 구현합니다.
모든 저장소 호출은 요청자의 owner_id로 범위가 제한됩니다.
다른 사용자의 도서에 대한 요청은 존재하지 않는 도서와 똑같이 처리합니다.

예외는 여기서 처리하지 않고 그대로 전파합니다.
- ValidationException: 필수값 누락, 잘못된 status
- ConflictException: 이미 저장된 도서
- ResourceNotFoundException: 없는 도서 또는 타인 소유 도서
- DatabaseException: 저장소 오류
"""

from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Any, List

from app.core.exceptions import (
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from app.core.security import CallerIdentity
from app.models.saved_book import BookCreate, BookUpdate, ReadingStatus, SavedBook
from app.repositories.saved_book_store import SavedBookStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


class BookOwnershipService:
    def __init__(self, store: SavedBookStore, clock: Callable[[], datetime] = _utcnow):
        self._store = store
        self._clock = clock

    def list_books(self, caller: CallerIdentity) -> List[SavedBook]:
        return self._store.find_all_by_owner(caller.owner_id)

    def create_book(self, caller: CallerIdentity, payload: BookCreate) -> SavedBook:
        if _is_blank(payload.external_id) or _is_blank(payload.title):
            raise ValidationException("Required field missing: externalId and title are required")

        # check-then-insert: 동시 요청 경합은 허용 (unique 인덱스는 설정으로 선택)
        existing = self._store.find_one_by_owner_and_external_id(caller.owner_id, payload.external_id)
        if existing is not None:
            raise ConflictException("Book already saved")

        book = SavedBook(
            owner_id=caller.owner_id,
            external_id=payload.external_id,
            title=payload.title,
            authors=list(payload.authors or []),
            description=payload.description or "",
            thumbnail=payload.thumbnail or "",
            info_link=payload.info_link or "",
            status=ReadingStatus.WANT_TO_READ,
            review=None,
            saved_at=self._clock(),
        )
        saved = self._store.insert(book)
        logger.info(f"Book saved: owner={caller.owner_id} book={saved.id} external_id={saved.external_id}")
        return saved

    def update_book(self, caller: CallerIdentity, book_id: str, payload: BookUpdate) -> SavedBook:
        book = self._store.find_one_by_id_and_owner(book_id, caller.owner_id)
        if book is None:
            raise ResourceNotFoundException("Book not found")

        patch: Dict[str, Any] = {}
        if payload.status is not None:
            status = ReadingStatus.parse(payload.status)
            if status is None:
                raise ValidationException("Invalid status value")
            patch["status"] = status
        if payload.review is not None:
            patch["review"] = payload.review

        if not patch:
            return book

        updated = self._store.update_by_id_and_owner(book_id, caller.owner_id, patch)
        if updated is None:
            # 조회와 수정 사이에 삭제된 경우
            raise ResourceNotFoundException("Book not found")
        logger.info(f"Book updated: owner={caller.owner_id} book={book_id} fields={sorted(patch)}")
        return updated

    def delete_book(self, caller: CallerIdentity, book_id: str) -> None:
        if not self._store.delete_by_id_and_owner(book_id, caller.owner_id):
            raise ResourceNotFoundException("Book not found")
        logger.info(f"Book deleted: owner={caller.owner_id} book={book_id}")
