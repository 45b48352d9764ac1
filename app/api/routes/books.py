from typing import List, Optional

from fastapi import APIRouter, Depends, status

from app.api.deps import get_book_service, get_current_caller
from app.core.security import CallerIdentity
from app.schemas.book import (
    MessageOut,
    SavedBookCreate,
    SavedBookMutationOut,
    SavedBookOut,
    SavedBookUpdate,
)
from app.services.book_service import BookOwnershipService

router = APIRouter(prefix="/books", tags=["books"])


@router.get("", response_model=List[SavedBookOut])
def list_books(
    caller: CallerIdentity = Depends(get_current_caller),
    service: BookOwnershipService = Depends(get_book_service),
):
    return [SavedBookOut.from_domain(b) for b in service.list_books(caller)]


@router.post("", response_model=SavedBookMutationOut, status_code=status.HTTP_201_CREATED)
def save_book(
    payload: SavedBookCreate,
    caller: CallerIdentity = Depends(get_current_caller),
    service: BookOwnershipService = Depends(get_book_service),
):
    book = service.create_book(caller, payload.to_domain())
    return SavedBookMutationOut(message="Book saved successfully", book=SavedBookOut.from_domain(book))


@router.put("/{book_id}", response_model=SavedBookMutationOut)
def update_book(
    book_id: str,
    payload: Optional[SavedBookUpdate] = None,
    caller: CallerIdentity = Depends(get_current_caller),
    service: BookOwnershipService = Depends(get_book_service),
):
    # 본문이 없으면 변경 필드 없음으로 처리
    payload = payload or SavedBookUpdate()
    book = service.update_book(caller, book_id, payload.to_domain())
    return SavedBookMutationOut(message="Book updated successfully", book=SavedBookOut.from_domain(book))


@router.delete("/{book_id}", response_model=MessageOut)
def delete_book(
    book_id: str,
    caller: CallerIdentity = Depends(get_current_caller),
    service: BookOwnershipService = Depends(get_book_service),
):
    service.delete_book(caller, book_id)
    return MessageOut(message="Book deleted successfully")
