# ============================================
# app/core/security.py - 보안 관련 유틸리티
# ============================================
# JWT 토큰 생성/검증과 OAuth state 서명을 담당합니다.
# ============================================

import secrets
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt

from app.config import settings


# ============================================
# JWT 토큰 함수들
# ============================================
# 구조: Header.Payload.Signature
#
# [신입 개발자를 위한 팁]
# - Access Token: 짧은 유효기간, API 호출 시 사용
# - Refresh Token: 긴 유효기간, Access Token 갱신 시 사용
# - 서버에 저장하지 않으므로 만료 전 강제 폐기는 불가능합니다.
#   대신 요청마다 사용자 탈퇴 여부를 DB에서 확인합니다 (api/deps.py).
# ============================================

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"
OAUTH_STATE_TYPE = "oauth_state"

# OAuth state 유효시간 (분)
OAUTH_STATE_EXPIRE_MINUTES = 10


def _encode(data: Dict[str, Any], token_type: str, expires_delta: timedelta) -> str:
    now = datetime.utcnow()
    to_encode = data.copy()
    to_encode.update({
        "exp": now + expires_delta,   # 만료 시간
        "iat": now,                   # 발급 시간
        "type": token_type            # 토큰 타입
    })
    return jwt.encode(
        to_encode,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM
    )


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Access Token 생성

    Args:
        data: 토큰에 담을 데이터 ({"sub": user_id, "email": email})
        expires_delta: 만료 시간 (기본값: ACCESS_TOKEN_EXPIRE_MINUTES)

    Returns:
        str: JWT 액세스 토큰 문자열

    [토큰 구조]
    - sub (subject): 사용자 ID
    - email: 사용자 이메일
    - exp / iat: 만료 / 발급 시간
    - type: access
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(data, ACCESS_TOKEN_TYPE, expires_delta)


def create_refresh_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None
) -> str:
    """Refresh Token 생성 (기본 유효기간: REFRESH_TOKEN_EXPIRE_DAYS)"""
    if expires_delta is None:
        expires_delta = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    return _encode(data, REFRESH_TOKEN_TYPE, expires_delta)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """
    JWT 토큰 디코딩 (검증)

    [검증 항목]
    1. 서명 검증: JWT_SECRET으로 서명이 맞는지 확인
    2. 만료 검증: exp 시간이 지나지 않았는지 확인

    Returns:
        Optional[Dict]: 토큰이 유효하면 페이로드, 아니면 None
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        # 만료, 서명 불일치, 형식 오류 등
        return None


def _verify_typed_token(token: str, token_type: str) -> Optional[Dict[str, Any]]:
    payload = decode_token(token)
    if payload is None:
        return None
    if payload.get("type") != token_type:
        return None
    if not payload.get("sub"):
        return None
    return payload


def verify_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Access Token 검증

    Returns:
        Optional[Dict]: 유효하면 페이로드 ({sub, email, ...}), 아니면 None
    """
    return _verify_typed_token(token, ACCESS_TOKEN_TYPE)


def verify_refresh_token(token: str) -> Optional[Dict[str, Any]]:
    """Refresh Token 검증 (유효하면 페이로드, 아니면 None)"""
    return _verify_typed_token(token, REFRESH_TOKEN_TYPE)


# ============================================
# OAuth state
# ============================================
# 로그인 시작 시 발급하고 콜백에서 검증하여 CSRF를 막습니다.
# 서버 세션 없이 서명된 JWT로 처리합니다.
# ============================================

def create_oauth_state(provider: str) -> str:
    """OAuth 로그인 시작 시 provider에 묶인 state 값을 생성합니다."""
    return _encode(
        {"sub": provider, "nonce": secrets.token_urlsafe(16)},
        OAUTH_STATE_TYPE,
        timedelta(minutes=OAUTH_STATE_EXPIRE_MINUTES)
    )


def verify_oauth_state(state: Optional[str], provider: str) -> bool:
    """콜백으로 돌아온 state가 같은 provider에 대해 발급된 것인지 확인합니다."""
    if not state:
        return False
    payload = _verify_typed_token(state, OAUTH_STATE_TYPE)
    return payload is not None and payload.get("sub") == provider
