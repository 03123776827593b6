# ============================================
# app/schemas/auth.py - 인증 관련 스키마
# ============================================
# 소셜 로그인, 토큰 관련 요청/응답 스키마를 정의합니다.
# ============================================

from typing import Optional
from pydantic import BaseModel, Field


# ============================================
# 요청 스키마 (Request Schemas)
# ============================================

class RefreshTokenRequest(BaseModel):
    """
    토큰 갱신 요청 스키마
    """
    refresh_token: str = Field(..., description="리프레시 토큰")


# ============================================
# 내부 / 응답 스키마
# ============================================

class OAuthProfile(BaseModel):
    """
    소셜 로그인 제공자 프로필 (정규화된 형태)

    Google / Kakao / Naver 응답 구조가 모두 달라서,
    각 제공자의 normalize()가 이 형태로 맞춰줍니다.
    """
    provider: str
    provider_account_id: str
    email: Optional[str] = None
    name: str = "사용자"
    profile_image: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None


class TokenSchema(BaseModel):
    """
    토큰 정보 스키마

    [필드 설명]
    - access_token: API 요청 시 사용하는 토큰 (짧은 유효기간)
    - refresh_token: access_token 갱신용 토큰 (긴 유효기간)
    - token_type: 항상 "Bearer"
    - expires_in: access_token 만료까지 남은 시간 (초)
    """
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
