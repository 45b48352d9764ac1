"""
Dev 환경용 Mock 데이터 생성 CLI 스크립트.

MongoDB saved_books 컬렉션에 mock 데이터를 삽입합니다.
- dev 환경에서만 실행됩니다.

사용 예시:
    python run_seed.py
    python run_seed.py --owners u1 u2 --count 50
    python run_seed.py --force  # dev 환경 체크 무시
"""
from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path

# 프로젝트 루트를 sys.path에 추가
BACKEND_ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(BACKEND_ROOT))

from app.core.logging_config import setup_logging
from app.core.settings import settings
from app.db.mongodb import close_mongo, get_mongo_client_direct, get_mongo_db, init_mongo
from app.repositories.saved_book_store import MongoSavedBookStore
from app.seed.saved_books_seed import BOOKS_PER_OWNER, seed_saved_books

logger = logging.getLogger(__name__)

DEFAULT_OWNERS = ["dev-user-1", "dev-user-2", "dev-user-3"]


def check_environment(force: bool = False) -> None:
    """
    dev 환경인지 확인합니다.
    """
    app_env = settings.app_env.lower()

    if app_env != "dev" and not force:
        logger.error(
            f"❌ Current environment is '{app_env}'. "
            "Mock data seeding is only allowed in 'dev' environment."
        )
        logger.info("If you want to run anyway, use --force flag.")
        sys.exit(1)

    if force and app_env != "dev":
        logger.warning(f"⚠️ Force mode enabled. Seeding in '{app_env}' environment...")
    else:
        logger.info(f"✅ Environment check passed: {app_env}")


def seed_mongo_all(owner_ids: list[str], count: int) -> None:
    """
    MongoDB saved_books 컬렉션에 mock 데이터를 시딩합니다.
    """
    logger.info("=" * 60)
    logger.info("MongoDB Mock Data Seeding")
    logger.info("=" * 60)

    init_mongo(settings)
    try:
        db = next(get_mongo_db())
        server_version = get_mongo_client_direct().server_info().get("version", "unknown")
        logger.info(f"Seeding {settings.mongo_db}.{settings.saved_books_collection} (MongoDB {server_version})")
        store = MongoSavedBookStore(db[settings.saved_books_collection])
        store.ensure_indexes(unique_owner_external_id=settings.enforce_unique_saved_books)
        seed_saved_books(store, owner_ids, books_per_owner=count)
    except Exception as e:
        logger.error(f"❌ Error during MongoDB seeding: {e}")
        raise
    finally:
        close_mongo()

    logger.info("✅ MongoDB seeding completed!")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed mock saved books for development")
    parser.add_argument("--owners", nargs="+", default=DEFAULT_OWNERS, help="시딩할 owner ID 목록")
    parser.add_argument("--count", type=int, default=BOOKS_PER_OWNER, help="owner당 도서 수")
    parser.add_argument("--force", action="store_true", help="dev 환경 체크 무시")
    args = parser.parse_args()

    setup_logging()
    check_environment(force=args.force)
    seed_mongo_all(args.owners, args.count)


if __name__ == "__main__":
    main()
