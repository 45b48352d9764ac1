from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

# 앱 시작 시 로깅 설정 적용
from app.core.logging_config import setup_logging
setup_logging()  # 가장 먼저 호출

# Settings를 초기화하여 .env 계층을 로드
from app.core.settings import Settings, settings as default_settings
from app.core.exceptions import (
    AppException,
    AuthenticationException,
    DatabaseException,
    MongoDBException,
    BusinessLogicException,
    ResourceNotFoundException,
    ValidationException,
)
from app.core.security import TokenVerifier
from app.api.routes.books import router as books_router
from app.api.routes.health import router as health_router
from app.db.mongodb import init_mongo, close_mongo
from app.repositories.saved_book_store import (
    InMemorySavedBookStore,
    MongoSavedBookStore,
    SavedBookStore,
)
from app.services.book_service import BookOwnershipService

logger = logging.getLogger(__name__)


def _build_store(settings: Settings) -> SavedBookStore:
    if settings.store_backend == "memory":
        logger.warning("STORE_BACKEND=memory: saved books are not persisted")
        return InMemorySavedBookStore()

    db = init_mongo(settings)
    store = MongoSavedBookStore(db[settings.saved_books_collection])
    try:
        store.ensure_indexes(unique_owner_external_id=settings.enforce_unique_saved_books)
    except MongoDBException:
        # 기동 실패 시 글로벌 클라이언트를 남기지 않음
        close_mongo()
        raise
    return store


def _error_response(request: Request, status_code: int, detail: str, error_type: str, headers=None):
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": detail,
            "type": error_type,
            "path": str(request.url.path),
        },
        headers=headers,
    )


def create_app(settings: Settings | None = None, store: SavedBookStore | None = None) -> FastAPI:
    """
    FastAPI 앱 생성.
    settings/store를 주입하지 않으면 전역 settings와 설정된 백엔드를 사용.
    SECRET_KEY가 없으면 lifespan 시작 단계에서 ConfigurationException으로 기동 실패.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: 시크릿 누락은 요청 단위 에러가 아니라 기동 실패
        secret_key = settings.require_secret_key()
        app.state.token_verifier = TokenVerifier(
            secret_key,
            algorithm=settings.jwt_algorithm,
            owner_claim=settings.jwt_owner_claim,
        )
        saved_book_store = store or _build_store(settings)
        app.state.saved_book_store = saved_book_store
        app.state.book_service = BookOwnershipService(saved_book_store)
        logger.info(f"API started: env={settings.app_env} store={type(saved_book_store).__name__}")

        yield

        # Shutdown
        if store is None and settings.store_backend == "mongo":
            close_mongo()

    app = FastAPI(title="Personal Library API", lifespan=lifespan)

    # Exception handlers
    @app.exception_handler(DatabaseException)
    async def database_exception_handler(request: Request, exc: DatabaseException):
        """데이터베이스 관련 예외 처리 (내부 정보는 응답에 포함하지 않음)"""
        logger.error(f"Database error at {request.url.path}: {exc}", exc_info=True)
        return _error_response(request, 500, "Database operation failed", "database_error")

    @app.exception_handler(AuthenticationException)
    async def authentication_exception_handler(request: Request, exc: AuthenticationException):
        """인증 실패 예외 처리"""
        logger.warning(f"Authentication failed at {request.url.path}: {exc}")
        return _error_response(
            request, 401, str(exc), "authentication_error",
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ResourceNotFoundException)
    async def resource_not_found_handler(request: Request, exc: ResourceNotFoundException):
        """리소스를 찾을 수 없음 예외 처리"""
        logger.warning(f"Resource not found at {request.url.path}: {exc}")
        return _error_response(request, 404, str(exc), "resource_not_found")

    @app.exception_handler(ValidationException)
    async def validation_exception_handler(request: Request, exc: ValidationException):
        """입력값 검증 실패 예외 처리"""
        logger.warning(f"Validation error at {request.url.path}: {exc}")
        return _error_response(request, 400, str(exc), "validation_error")

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
        """요청 형식 오류(타입 불일치 등)도 400으로 통일"""
        logger.warning(f"Request validation error at {request.url.path}: {exc.errors()}")
        return _error_response(request, 400, "Invalid request body", "validation_error")

    @app.exception_handler(BusinessLogicException)
    async def business_logic_exception_handler(request: Request, exc: BusinessLogicException):
        """비즈니스 로직 예외 처리 (중복 저장 포함)"""
        logger.warning(f"Business logic error at {request.url.path}: {exc}")
        return _error_response(request, 400, str(exc), "business_logic_error")

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        """일반 애플리케이션 예외 처리"""
        logger.warning(f"Application error at {request.url.path}: {exc}")
        return _error_response(request, 400, str(exc), "application_error")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["Authorization"],
    )

    app.include_router(books_router)
    app.include_router(health_router)

    @app.get("/")
    def root():
        return {"message": "Personal Library Manager API"}

    return app


app = create_app()
