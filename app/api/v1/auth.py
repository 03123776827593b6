# ============================================
# app/api/v1/auth.py - 인증 API 라우터
# ============================================
# 소셜 로그인(Google/Kakao/Naver), 토큰 갱신, 내 정보 조회,
# 개발용 로그인 API를 제공합니다.
# ============================================

import logging
from typing import Optional
from urllib.parse import urlencode
from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from app.config import settings
from app.db.database import get_db
from app.api.deps import get_current_user
from app.models.user import User
from app.services.auth_service import AuthService
from app.services.oauth_service import get_provider
from app.core.security import create_oauth_state, verify_oauth_state
from app.core.exceptions import RunnersClubException
from app.schemas.auth import RefreshTokenRequest
from app.schemas.user import UserSummarySchema
from app.schemas.common import success_response

logger = logging.getLogger(__name__)

# APIRouter 인스턴스 생성
# prefix: 모든 엔드포인트 앞에 붙는 경로
# tags: Swagger UI에서 그룹화할 태그
router = APIRouter(prefix="/auth", tags=["Authentication"])


def _frontend_redirect(**params) -> RedirectResponse:
    """프론트엔드 콜백 페이지로 302 리다이렉트"""
    url = f"{settings.FRONTEND_URL}/auth/callback?{urlencode(params)}"
    return RedirectResponse(url=url, status_code=302)


# ============================================
# 토큰 갱신 / 내 정보 / 개발용 로그인
# ============================================
# /{provider} 경로보다 먼저 등록해야 합니다.
# ============================================

@router.post(
    "/refresh",
    summary="토큰 갱신",
    description="""
    Refresh Token으로 새 Access/Refresh 토큰을 발급합니다.

    - 유효하지 않거나 만료된 토큰: 401 INVALID_TOKEN
    - 탈퇴한 사용자: 401 ACCOUNT_DELETED
    """
)
def refresh_token(
    request: RefreshTokenRequest,
    db: Session = Depends(get_db)
):
    tokens = AuthService(db).refresh_tokens(request.refresh_token)
    return success_response(tokens, "토큰이 갱신되었습니다")


@router.get("/me", summary="내 정보 조회")
def get_me(current_user: User = Depends(get_current_user)):
    data = UserSummarySchema.model_validate(current_user).model_dump()
    data["email"] = current_user.email
    return success_response(data)


@router.post(
    "/dev-login",
    summary="개발용 로그인",
    description="고정된 개발용 사용자로 로그인합니다. 운영 환경에서는 403입니다."
)
def dev_login(db: Session = Depends(get_db)):
    tokens = AuthService(db).dev_login()
    return success_response(tokens, "개발용 로그인 성공")


# ============================================
# 소셜 로그인
# ============================================

@router.get(
    "/{provider}",
    summary="소셜 로그인 시작",
    description="""
    제공자 로그인 페이지로 리다이렉트합니다 (302).

    **지원 제공자:** google, kakao, naver
    """
)
def oauth_login(provider: str):
    oauth_provider = get_provider(provider)
    state = create_oauth_state(oauth_provider.name)
    return RedirectResponse(url=oauth_provider.build_authorize_url(state), status_code=302)


@router.get(
    "/{provider}/callback",
    summary="소셜 로그인 콜백",
    description="""
    제공자가 돌려준 인가 코드로 로그인을 완료하고 프론트엔드로 리다이렉트합니다.

    - 성공: {FRONTEND_URL}/auth/callback?accessToken=..&refreshToken=..
    - 실패: {FRONTEND_URL}/auth/callback?error=<code>
    """
)
async def oauth_callback(
    provider: str,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    """
    소셜 로그인 콜백 엔드포인트

    [신입 개발자를 위한 팁]
    - 브라우저가 직접 호출하는 주소라서 JSON 에러 대신
      프론트엔드 페이지로 리다이렉트해서 에러를 알려줍니다.
    """
    oauth_provider = get_provider(provider)

    if error:
        logger.info(f"[{provider}] provider returned error: {error}")
        return _frontend_redirect(error=error)
    if not code:
        return _frontend_redirect(error="missing_code")
    if not verify_oauth_state(state, oauth_provider.name):
        logger.warning(f"[{provider}] invalid oauth state")
        return _frontend_redirect(error="invalid_state")

    try:
        profile = await oauth_provider.authenticate(code, state)
        auth_service = AuthService(db)
        user = auth_service.upsert_oauth_user(profile)
        tokens = auth_service.create_tokens(user)
    except RunnersClubException as e:
        logger.warning(f"[{provider}] login failed: {e.error_code}")
        return _frontend_redirect(error=e.error_code.lower())

    return _frontend_redirect(accessToken=tokens.access_token, refreshToken=tokens.refresh_token)
