from __future__ import annotations
from pathlib import Path
import os
from typing import Literal, Sequence
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.exceptions import ConfigurationException

def _base_dir() -> Path:
    return Path(__file__).resolve().parents[2]

def _env_files() -> Sequence[Path]:
    base = _base_dir()
    app_env = os.getenv("APP_ENV", "local")
    candidates = [
        base / ".env",
        base / f".env.{app_env}",
        base / ".env.local",
        base / f".env.{app_env}.local",
        base / "env" / app_env / ".env",
    ]
    seen = []
    for p in candidates:
        if p.is_file() and p not in seen:
            seen.append(p)
    return seen

class Settings(BaseSettings):
    app_env: str = Field(default="local", validation_alias="APP_ENV")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # 저장소 선택: mongo(기본) 또는 memory(로컬 실행/테스트용)
    store_backend: Literal["mongo", "memory"] = Field(default="mongo", validation_alias="STORE_BACKEND")

    # Mongo: MONGODB_URI가 있으면 host/port 설정보다 우선
    mongo_uri: str | None = Field(default=None, validation_alias="MONGODB_URI")
    mongo_host: str = Field(default="localhost", validation_alias="MONGO_HOST")
    mongo_port: int = Field(default=27017, validation_alias="MONGO_PORT")
    mongo_user: str | None = Field(default=None, validation_alias="MONGO_USER")
    mongo_password: str | None = Field(default=None, validation_alias="MONGO_PASSWORD")
    mongo_auth_source: str = Field(default="admin", validation_alias="MONGO_AUTH_SOURCE")
    mongo_db: str = Field(default="library", validation_alias="MONGO_DB")
    saved_books_collection: str = Field(default="saved_books", validation_alias="SAVED_BOOKS_COLLECTION")
    # (owner_id, external_id) unique 인덱스 사용 여부. 기본은 서비스 레벨 중복 체크만 수행
    enforce_unique_saved_books: bool = Field(default=False, validation_alias="ENFORCE_UNIQUE_SAVED_BOOKS")

    # Auth/JWT: 시크릿은 기본값 없음. 누락 시 기동 실패
    secret_key: str | None = Field(default=None, validation_alias=AliasChoices("SECRET_KEY", "JWT_SECRET"))
    jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
    jwt_owner_claim: str = Field(default="userId", validation_alias="JWT_OWNER_CLAIM")
    access_token_expire_minutes: int = Field(default=60 * 24 * 7, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    cors_origins: str = Field(default="http://localhost:3000,http://localhost:5173", validation_alias="CORS_ORIGINS")

    model_config = SettingsConfigDict(
        env_file=_env_files(),
        env_file_encoding="utf-8",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def mongo_connection_uri(self) -> str:
        if self.mongo_uri:
            return self.mongo_uri
        if self.mongo_user and self.mongo_password:
            return (
                f"mongodb://{self.mongo_user}:{self.mongo_password}"
                f"@{self.mongo_host}:{self.mongo_port}/?authSource={self.mongo_auth_source}"
            )
        return f"mongodb://{self.mongo_host}:{self.mongo_port}/"

    def require_secret_key(self) -> str:
        """SECRET_KEY(JWT_SECRET)가 없으면 ConfigurationException."""
        if not self.secret_key:
            raise ConfigurationException(
                "SECRET_KEY (or JWT_SECRET) is not set. The API cannot verify tokens."
            )
        return self.secret_key

settings = Settings()
