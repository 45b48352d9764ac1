"""
커스텀 예외 클래스 정의.

이 모듈은 애플리케이션 전체에서 사용할 예외 클래스들을 정의합니다.
예외 계층 구조를 통해 타입별 에러 처리가 가능합니다.
서비스 계층은 이 예외들을 직접 처리하지 않고 그대로 전파하며,
main.py의 exception handler가 HTTP 상태 코드로 변환합니다.
"""


class AppException(Exception):
    """
    애플리케이션 기본 예외.
    
    모든 커스텀 예외의 기본 클래스입니다.
    일반적인 애플리케이션 에러에 사용됩니다.
    """
    pass


class ConfigurationException(AppException):
    """
    설정 오류.
    
    SECRET_KEY 누락 등 서비스를 시작할 수 없는 설정 문제에 사용됩니다.
    요청 단위 에러가 아니라 기동 실패로 처리됩니다.
    """
    pass


class AuthenticationException(AppException):
    """
    인증 실패.
    
    토큰이 없거나, 서명/만료 검증에 실패한 경우 사용됩니다.
    검증 실패 원인(형식 오류, 만료, 서명 불일치)은 외부에 구분하지 않습니다.
    """
    pass


class DatabaseException(AppException):
    """
    데이터베이스 관련 예외.
    
    MongoDB 등 저장소 작업 중 발생하는 일반적인 에러에 사용됩니다.
    """
    pass


class MongoDBException(DatabaseException):
    """
    MongoDB 관련 예외.
    
    MongoDB 연결 실패, 쿼리 실패 등에 사용됩니다.
    """
    pass


class BusinessLogicException(AppException):
    """
    비즈니스 로직 예외.
    
    비즈니스 규칙 위반, 잘못된 상태 전환 등
    도메인 로직과 관련된 에러에 사용됩니다.
    """
    pass


class ConflictException(BusinessLogicException):
    """
    중복 저장.
    
    같은 사용자가 같은 외부 도서(external_id)를 다시 저장하려 할 때 사용됩니다.
    """
    pass


class ResourceNotFoundException(AppException):
    """
    리소스를 찾을 수 없음.
    
    요청한 리소스가 존재하지 않거나 다른 사용자의 소유일 때 사용됩니다.
    두 경우는 구분하지 않습니다.
    """
    pass


class ValidationException(AppException):
    """
    입력값 검증 실패.
    
    요청 데이터의 형식이나 값이 유효하지 않을 때 사용됩니다.
    """
    pass
