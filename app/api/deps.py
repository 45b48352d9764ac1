from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.security import CallerIdentity, TokenVerifier
from app.services.book_service import BookOwnershipService

# Authorization 헤더가 없으면 None → TokenVerifier가 401 처리
bearer_scheme = HTTPBearer(auto_error=False)


def get_token_verifier(request: Request) -> TokenVerifier:
    return request.app.state.token_verifier


def get_book_service(request: Request) -> BookOwnershipService:
    return request.app.state.book_service


def get_current_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> CallerIdentity:
    token = credentials.credentials if credentials else None
    return verifier.verify(token)
