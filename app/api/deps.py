# ============================================
# app/api/deps.py - API 의존성
# ============================================
# FastAPI의 Dependency Injection에서 사용하는 공통 의존성을 정의합니다.
# ============================================

import enum
import logging
from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, Query
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.core.security import verify_access_token
from app.core.exceptions import UnauthorizedException, InvalidTokenException
from app.models.user import User

logger = logging.getLogger(__name__)

# HTTP Bearer 인증 스킴 (Swagger UI에서 인증 버튼 표시)
security = HTTPBearer(auto_error=False)


class AuthState(str, enum.Enum):
    """
    인증 결과 상태

    - AUTHENTICATED: 유효한 토큰 + 존재하는 사용자
    - ANONYMOUS: 토큰이 없음
    - REJECTED: 토큰이 있지만 거부됨 (서명/만료 오류, 탈퇴한 사용자 등)
    """
    AUTHENTICATED = "AUTHENTICATED"
    ANONYMOUS = "ANONYMOUS"
    REJECTED = "REJECTED"


# 거부 사유
REASON_INVALID_TOKEN = "INVALID_TOKEN"
REASON_ACCOUNT_DELETED = "ACCOUNT_DELETED"
REASON_USER_NOT_FOUND = "USER_NOT_FOUND"


@dataclass
class AuthResult:
    state: AuthState
    user: Optional[User] = None
    reason: Optional[str] = None


def authenticate_token(token: str, db: Session) -> AuthResult:
    """
    토큰을 검증하고 사용자를 조회합니다.

    [검증 순서]
    1. 서명 / 만료 / type=access 확인 (python-jose)
    2. sub(사용자 ID)로 사용자 조회 (요청당 DB 조회 1회)
    3. 탈퇴(soft delete)한 사용자면 거부

    에러를 던지지 않고 AuthResult로 돌려주므로
    필수 인증과 선택 인증에서 같은 함수를 사용할 수 있습니다.
    """
    payload = verify_access_token(token)
    if payload is None:
        logger.info(f"Token rejected: invalid token ({token[:10]}...)")
        return AuthResult(AuthState.REJECTED, reason=REASON_INVALID_TOKEN)

    user = db.query(User).filter(User.id == payload["sub"]).first()
    if user is None:
        logger.info(f"Token rejected: user not found (sub={payload['sub']})")
        return AuthResult(AuthState.REJECTED, reason=REASON_USER_NOT_FOUND)
    if user.deleted_at is not None:
        logger.info(f"Token rejected: account deleted (sub={payload['sub']})")
        return AuthResult(AuthState.REJECTED, reason=REASON_ACCOUNT_DELETED)

    return AuthResult(AuthState.AUTHENTICATED, user=user)


def get_auth_result(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> AuthResult:
    """Authorization 헤더가 없으면 ANONYMOUS, 있으면 토큰 검증 결과"""
    if not credentials:
        return AuthResult(AuthState.ANONYMOUS)
    return authenticate_token(credentials.credentials, db)


def _require_user(result: AuthResult) -> User:
    if result.state == AuthState.AUTHENTICATED:
        return result.user
    if result.state == AuthState.ANONYMOUS:
        raise UnauthorizedException()
    if result.reason == REASON_ACCOUNT_DELETED:
        raise UnauthorizedException(message="탈퇴한 계정입니다", error_code="ACCOUNT_DELETED")
    raise InvalidTokenException()


def get_current_user(result: AuthResult = Depends(get_auth_result)) -> User:
    """
    현재 로그인한 사용자를 반환하는 의존성 함수 (인증 필수)

    [신입 개발자를 위한 팁]
    - 이 함수를 라우터 파라미터에 추가하면 자동으로 인증 체크
    - 인증 실패 시 401 에러가 반환됨
      (토큰 없음: UNAUTHORIZED, 잘못된 토큰: INVALID_TOKEN, 탈퇴: ACCOUNT_DELETED)

    사용 예시:
        @router.get("/me")
        def get_my_profile(
            current_user: User = Depends(get_current_user)
        ):
            return current_user
    """
    return _require_user(result)


def get_current_user_optional(result: AuthResult = Depends(get_auth_result)) -> Optional[User]:
    """
    현재 사용자를 반환 (선택적 인증)

    인증이 필수가 아닌 엔드포인트에서 사용합니다.
    토큰이 없거나 거부되어도 에러 없이 None을 반환하고, 요청은 비로그인으로 처리됩니다.

    사용 예시:
        @router.get("/feed")
        def get_feed(
            current_user: Optional[User] = Depends(get_current_user_optional)
        ):
            if current_user:
                # 팔로우한 사용자의 기록까지 포함
                pass
    """
    if result.state == AuthState.REJECTED:
        logger.debug(f"Optional auth rejected ({result.reason}), continuing as anonymous")
    return result.user if result.state == AuthState.AUTHENTICATED else None


def get_sse_user(
    token: Optional[str] = Query(None, description="액세스 토큰 (EventSource는 헤더를 보낼 수 없음)"),
    db: Session = Depends(get_db)
) -> User:
    """SSE 연결용 인증 (쿼리 파라미터 ?token=)"""
    if not token:
        return _require_user(AuthResult(AuthState.ANONYMOUS))
    return _require_user(authenticate_token(token, db))
