import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Any, Dict
from jose import JWTError, jwt

from app.core.exceptions import AuthenticationException, ConfigurationException

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "HS256"
DEFAULT_OWNER_CLAIM = "userId"
DEFAULT_EXPIRE_MINUTES = 60 * 24 * 7

NO_CREDENTIAL_MESSAGE = "No token provided"
INVALID_CREDENTIAL_MESSAGE = "Invalid or expired token"


@dataclass(frozen=True)
class CallerIdentity:
    """검증된 토큰에서 얻은 요청자 정보. 요청마다 새로 만들어지며 저장되지 않음."""
    owner_id: str


class TokenVerifier:
    """
    Bearer 토큰 검증기.

    토큰의 서명과 만료만 검증하고, payload의 owner claim을 그대로 신뢰합니다.
    사용자 저장소 조회는 하지 않습니다. 상태가 없으므로 요청 간 공유해도 안전합니다.
    """

    def __init__(
        self,
        secret_key: str | None,
        algorithm: str = DEFAULT_ALGORITHM,
        owner_claim: str = DEFAULT_OWNER_CLAIM,
    ):
        if not secret_key:
            raise ConfigurationException("TokenVerifier requires a signing secret")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._owner_claim = owner_claim

    def verify(self, credential: str | None) -> CallerIdentity:
        if not credential:
            raise AuthenticationException(NO_CREDENTIAL_MESSAGE)

        try:
            payload = jwt.decode(credential, self._secret_key, algorithms=[self._algorithm])
        except JWTError as e:
            # 형식 오류 / 만료 / 서명 불일치는 외부에 구분하지 않음
            logger.debug(f"Token verification failed: {e}")
            raise AuthenticationException(INVALID_CREDENTIAL_MESSAGE)

        owner_id = payload.get(self._owner_claim)
        if isinstance(owner_id, int) and not isinstance(owner_id, bool):
            owner_id = str(owner_id)
        if not isinstance(owner_id, str) or not owner_id:
            logger.debug(f"Token payload has no usable '{self._owner_claim}' claim")
            raise AuthenticationException(INVALID_CREDENTIAL_MESSAGE)

        return CallerIdentity(owner_id=owner_id)


def create_access_token(
    owner_id: str,
    secret_key: str,
    algorithm: str = DEFAULT_ALGORITHM,
    owner_claim: str = DEFAULT_OWNER_CLAIM,
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[Dict[str, Any]] = None,
) -> str:
    """owner_id를 owner claim에 담은 토큰 발급. 로그인 대신 개발/테스트용으로 사용."""
    to_encode: Dict[str, Any] = dict(extra_claims or {})
    to_encode[owner_claim] = owner_id
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=DEFAULT_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)
