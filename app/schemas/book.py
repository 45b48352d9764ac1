"""
저장 도서(SavedBook) 관련 Pydantic 스키마.

API 요청/응답 모델을 정의합니다. JSON 필드명은 camelCase(externalId, infoLink, savedAt)이며
snake_case 입력도 허용합니다. 도메인 모델(app/models/saved_book.py)로의 변환은
이 모듈에서만 수행합니다.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.saved_book import BookCreate, BookUpdate, SavedBook


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SavedBookCreate(_CamelModel):
    """
    도서 저장 요청 모델.

    externalId/title 누락은 서비스에서 400으로 처리하므로 여기서는 Optional.
    기존 클라이언트의 googleBookId도 externalId로 받습니다.
    """
    external_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("externalId", "googleBookId", "external_id"),
        description="외부 카탈로그 도서 ID",
    )
    title: Optional[str] = None
    authors: Optional[List[str]] = None
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    info_link: Optional[str] = None

    def to_domain(self) -> BookCreate:
        return BookCreate(
            external_id=self.external_id,
            title=self.title,
            authors=list(self.authors or []),
            description=self.description or "",
            thumbnail=self.thumbnail or "",
            info_link=self.info_link or "",
        )


class SavedBookUpdate(_CamelModel):
    """
    도서 수정 요청 모델.
    """
    status: Optional[str] = Field(default=None, description="Want to Read | Reading | Completed")
    review: Optional[str] = None

    def to_domain(self) -> BookUpdate:
        return BookUpdate(status=self.status, review=self.review)


class SavedBookOut(_CamelModel):
    """
    저장 도서 응답 모델.
    """
    id: str
    owner_id: str
    external_id: str
    title: str
    authors: List[str]
    description: str = ""
    thumbnail: str = ""
    info_link: str = ""
    status: str
    review: Optional[str] = None
    saved_at: datetime

    @classmethod
    def from_domain(cls, book: SavedBook) -> "SavedBookOut":
        return cls(
            id=book.id,
            owner_id=book.owner_id,
            external_id=book.external_id,
            title=book.title,
            authors=list(book.authors),
            description=book.description,
            thumbnail=book.thumbnail,
            info_link=book.info_link,
            status=book.status.value,
            review=book.review,
            saved_at=book.saved_at,
        )


class SavedBookMutationOut(BaseModel):
    """
    저장/수정 결과 응답 모델.
    """
    message: str
    book: SavedBookOut


class MessageOut(BaseModel):
    message: str
