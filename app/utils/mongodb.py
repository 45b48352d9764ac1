"""
MongoDB 관련 유틸리티 함수.

ObjectId 변환, 문서 직렬화 등 MongoDB 작업에 필요한 공통 함수를 제공합니다.
"""

from bson import ObjectId
from bson.errors import InvalidId
from typing import Any, Dict, Optional


def parse_object_id(id_str: Any) -> Optional[ObjectId]:
    """
    문자열을 ObjectId로 변환.

    유효하지 않은 형식이면 None을 반환합니다.
    소유자 범위 조회에서는 형식 오류도 "찾을 수 없음"과 같게 취급하므로
    예외 대신 None을 사용합니다.

    Args:
        id_str: 변환할 문자열 ID

    Returns:
        Optional[ObjectId]: 변환된 ObjectId 또는 None

    Example:
        >>> parse_object_id("507f1f77bcf86cd799439011")
        ObjectId('507f1f77bcf86cd799439011')
        >>> parse_object_id("not-an-id") is None
        True
    """
    if isinstance(id_str, ObjectId):
        return id_str
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError):
        return None


def serialize_object_id(doc: Dict[str, Any], *fields: str) -> Dict[str, Any]:
    """
    MongoDB 문서의 ObjectId 필드를 문자열로 변환.

    지정된 필드들의 ObjectId를 문자열로 변환합니다.
    필드가 지정되지 않으면 "_id"만 변환합니다.
    원본 문서를 수정하며, 체이닝을 위해 문서를 반환합니다.

    Args:
        doc: MongoDB 문서 (딕셔너리)
        *fields: 변환할 필드 이름들 (기본: "_id")

    Returns:
        Dict[str, Any]: 변환된 문서 (원본 수정됨)

    Example:
        >>> doc = {"_id": ObjectId(...), "owner_id": "u1"}
        >>> serialize_object_id(doc)
        {"_id": "507f...", "owner_id": "u1"}
    """
    if not fields:
        fields = ("_id",)

    for field in fields:
        if field in doc and doc[field] is not None:
            doc[field] = str(doc[field])

    return doc
