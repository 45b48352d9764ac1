"""
개발용 JWT 발급 CLI.

로그인 없이 특정 owner ID로 API를 호출할 때 사용합니다.
SECRET_KEY(JWT_SECRET)는 .env 계층 또는 환경변수에서 읽습니다.

사용 예시:
    python create_token.py 507f1f77bcf86cd799439011
    python create_token.py u1 --exp 60  # 60분 뒤 만료
"""
from __future__ import annotations
import argparse
import logging
import sys
from datetime import timedelta
from pathlib import Path

# 프로젝트 루트를 sys.path에 추가
BACKEND_ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(BACKEND_ROOT))

from app.core.exceptions import ConfigurationException
from app.core.logging_config import setup_logging
from app.core.security import create_access_token
from app.core.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a bearer token for an owner ID")
    parser.add_argument("owner_id", help="토큰 payload에 들어갈 owner ID")
    parser.add_argument(
        "--exp", "--expires", "-e",
        dest="expires_minutes",
        type=int,
        default=None,
        help="만료까지 분 (기본: ACCESS_TOKEN_EXPIRE_MINUTES)",
    )
    return parser


def main(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    setup_logging()
    settings = settings or default_settings
    args = build_parser().parse_args(argv)

    try:
        secret_key = settings.require_secret_key()
    except ConfigurationException as e:
        logger.error(f"❌ {e}")
        return 1

    minutes = args.expires_minutes if args.expires_minutes is not None else settings.access_token_expire_minutes
    token = create_access_token(
        args.owner_id,
        secret_key,
        algorithm=settings.jwt_algorithm,
        owner_claim=settings.jwt_owner_claim,
        expires_delta=timedelta(minutes=minutes),
    )

    print(token)
    logger.info(f"Payload: {{'{settings.jwt_owner_claim}': '{args.owner_id}'}}, expires in {minutes} minutes")
    return 0


if __name__ == "__main__":
    sys.exit(main())
