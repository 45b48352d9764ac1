"""
Dev 환경용 Mock saved_books 데이터 생성 스크립트.

owner ID별로 저장 도서를 생성합니다. 같은 owner 안에서 external_id는 중복되지 않습니다.
"""
from __future__ import annotations
import logging
import random
from datetime import datetime, timedelta, timezone
from typing import Sequence
from faker import Faker

from app.models.saved_book import ReadingStatus, SavedBook
from app.repositories.saved_book_store import SavedBookStore

logger = logging.getLogger(__name__)

fake = Faker()
BOOKS_PER_OWNER = 20


def _fake_book(owner_id: str, external_id: str, now: datetime) -> SavedBook:
    status = random.choice(list(ReadingStatus))
    return SavedBook(
        owner_id=owner_id,
        external_id=external_id,
        title=fake.sentence(nb_words=4).rstrip("."),
        authors=[fake.name() for _ in range(random.randint(1, 3))],
        description=fake.paragraph(nb_sentences=3),
        thumbnail=fake.image_url(),
        info_link=fake.url(),
        status=status,
        # 다 읽은 책은 70% 확률로 리뷰 작성
        review=fake.sentence() if status is ReadingStatus.COMPLETED and random.random() < 0.7 else None,
        saved_at=now - timedelta(days=random.randint(0, 180), hours=random.randint(0, 23)),
    )


def seed_saved_books(
    store: SavedBookStore,
    owner_ids: Sequence[str],
    books_per_owner: int = BOOKS_PER_OWNER,
) -> int:
    """
    owner별 mock saved books를 생성합니다.

    - external_id는 Google Books 형식과 비슷한 12자리 랜덤 문자열
    - 이미 저장된 external_id는 건너뜀

    Returns:
        생성된 saved books 개수
    """
    now = datetime.now(timezone.utc)
    created = 0

    for owner_id in owner_ids:
        for _ in range(books_per_owner):
            external_id = fake.pystr(min_chars=12, max_chars=12)
            if store.find_one_by_owner_and_external_id(owner_id, external_id):
                continue
            store.insert(_fake_book(owner_id, external_id, now))
            created += 1
        logger.info(f"Seeded saved books for owner {owner_id}")

    logger.info(f"✅ Total {created} saved books created!")
    return created
