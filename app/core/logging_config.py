import logging
import logging.config
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def setup_logging(level: str | None = None) -> None:
    """
    프로세스 전체 로깅 설정.
    - LOG_LEVEL 환경변수(기본 INFO)를 사용
    - 여러 번 호출되어도 한 번만 적용
    - uvicorn 로거는 자체 핸들러를 유지하고 레벨만 맞춤
    """
    global _configured
    if _configured:
        return

    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr",
            },
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            "uvicorn": {"level": level},
            "uvicorn.access": {"level": level},
            # pymongo 디버그 로그는 너무 많음
            "pymongo": {"level": "WARNING"},
        },
    })
    _configured = True
