import logging
from typing import Generator
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from app.core.exceptions import MongoDBException
from app.core.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

# 글로벌 MongoDB 클라이언트 인스턴스
_mongo_client: MongoClient | None = None
_mongo_db: Database | None = None


def init_mongo(settings: Settings | None = None) -> Database:
    """
    애플리케이션 시작 시 MongoDB 클라이언트 초기화.
    FastAPI lifespan과 CLI 스크립트에서 호출됨.
    연결 실패는 MongoDBException으로 전파 (mongo 백엔드에서는 기동 실패).
    """
    global _mongo_client, _mongo_db

    settings = settings or default_settings
    if _mongo_db is not None:
        return _mongo_db

    try:
        client = MongoClient(
            settings.mongo_connection_uri(),
            serverSelectionTimeoutMS=5000,
            maxPoolSize=100,  # 연결 풀 크기 명시
            tz_aware=True,
        )
        # 연결 테스트
        client.admin.command("ping")
    except PyMongoError as e:
        logger.error(f"MongoDB initialization failed: {e}")
        raise MongoDBException("MongoDB is unavailable") from e

    _mongo_client = client
    _mongo_db = client[settings.mongo_db]
    logger.info(
        f"MongoDB initialized: db={settings.mongo_db} "
        f"user={settings.mongo_user or 'none'}"
    )
    return _mongo_db


def close_mongo() -> None:
    """
    애플리케이션 종료 시 MongoDB 클라이언트 종료.
    FastAPI lifespan에서 호출됨.
    """
    global _mongo_client, _mongo_db

    if _mongo_client:
        try:
            _mongo_client.close()
            logger.info("MongoDB connection closed")
        except PyMongoError as e:
            logger.error(f"Error closing MongoDB connection: {e}")
        finally:
            _mongo_client = None
            _mongo_db = None


def get_mongo_db() -> Generator[Database, None, None]:
    """
    MongoDB 데이터베이스 제공 (Dependency / 스크립트용).

    Usage:
        db = next(get_mongo_db())
        collection = db[settings.saved_books_collection]
    """
    if _mongo_db is None:
        raise RuntimeError(
            "MongoDB is not initialized. Call init_mongo() first."
        )

    # PyMongo는 자체적으로 연결 풀을 관리하므로
    # 단순히 db 인스턴스를 yield하면 됨
    yield _mongo_db


def get_mongo_client_direct() -> MongoClient:
    """
    Dependency Injection을 사용할 수 없는 곳(CLI 스크립트 등)에서
    MongoDB 클라이언트에 직접 접근하기 위한 헬퍼 함수.
    """
    if _mongo_client is None:
        raise RuntimeError(
            "MongoDB is not initialized. Call init_mongo() first."
        )
    return _mongo_client
