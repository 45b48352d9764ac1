"""
저장 도서(SavedBook) 도메인 모델.

프레임워크(FastAPI, pymongo)와 무관한 내부 표현입니다.
API 스키마 변환은 app/schemas/book.py, 문서 변환은 저장소에서 담당합니다.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class ReadingStatus(str, Enum):
    WANT_TO_READ = "Want to Read"
    READING = "Reading"
    COMPLETED = "Completed"

    @classmethod
    def parse(cls, value: str) -> Optional["ReadingStatus"]:
        """허용된 값이면 ReadingStatus, 아니면 None."""
        for status in cls:
            if status.value == value:
                return status
        return None


@dataclass
class SavedBook:
    owner_id: str
    external_id: str
    title: str
    saved_at: datetime
    authors: List[str] = field(default_factory=list)
    description: str = ""
    thumbnail: str = ""
    info_link: str = ""
    status: ReadingStatus = ReadingStatus.WANT_TO_READ
    review: Optional[str] = None
    # insert 전에는 None, 저장소가 부여
    id: Optional[str] = None

    def with_patch(self, patch: Dict[str, Any]) -> "SavedBook":
        return replace(self, **patch)


@dataclass
class BookCreate:
    """Create 요청. 필수값 검증은 서비스에서 수행."""
    external_id: Optional[str]
    title: Optional[str]
    authors: List[str] = field(default_factory=list)
    description: str = ""
    thumbnail: str = ""
    info_link: str = ""


@dataclass
class BookUpdate:
    """Update 요청. None은 '전달되지 않음'을 의미 (review의 빈 문자열은 값으로 취급)."""
    status: Optional[str] = None
    review: Optional[str] = None
