# ============================================
# app/services/oauth_service.py - 소셜 로그인 제공자 서비스
# ============================================
# Google / Kakao / Naver OAuth 2.0 인가 코드 흐름을 처리합니다.
# 인가 URL 생성 → 코드 교환 → 프로필 조회 → 프로필 정규화
# ============================================

import logging
from typing import Optional, Dict, Any
from urllib.parse import urlencode

import httpx

from app.config import settings
from app.core.exceptions import SocialAuthFailedException, NotFoundException
from app.schemas.auth import OAuthProfile

logger = logging.getLogger(__name__)

DEFAULT_NAME = "사용자"
HTTP_TIMEOUT_SECONDS = 10.0


class OAuthProvider:
    """
    OAuth 제공자 기본 클래스

    [신입 개발자를 위한 팁]
    - OAuth 2.0 인가 코드 흐름:
      1. 백엔드가 사용자를 제공자 로그인 페이지로 리다이렉트 (state 포함)
      2. 사용자가 로그인 및 동의
      3. 제공자가 callback URL로 인가 코드(code)와 state를 전달
      4. 백엔드가 code를 액세스 토큰으로 교환
      5. 액세스 토큰으로 프로필 조회
    - 제공자마다 응답 구조가 달라서 normalize()를 각자 구현합니다.
    """

    name: str = ""
    display_name: str = ""
    authorize_url: str = ""
    token_url: str = ""
    profile_url: str = ""
    scope: Optional[str] = None

    def __init__(self, client_id: str, client_secret: str, callback_url: str):
        self.client_id = client_id
        self.client_secret = client_secret
        self.callback_url = callback_url

    def build_authorize_url(self, state: str) -> str:
        """제공자 로그인 페이지 URL을 만듭니다."""
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.callback_url,
            "state": state,
        }
        if self.scope:
            params["scope"] = self.scope
        return f"{self.authorize_url}?{urlencode(params)}"

    async def exchange_code(self, code: str, state: str) -> Dict[str, Any]:
        """
        인가 코드를 토큰으로 교환합니다.

        Returns:
            Dict: 제공자 토큰 응답 (access_token, refresh_token 등)

        Raises:
            SocialAuthFailedException: 교환 실패 시
        """
        data = {
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.callback_url,
            "code": code,
            "state": state,
        }
        async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS) as client:
            try:
                response = await client.post(
                    self.token_url,
                    data=data,
                    headers={"Accept": "application/json"}
                )
            except httpx.HTTPError as e:
                logger.warning(f"[{self.name}] token exchange request failed: {e}")
                raise SocialAuthFailedException(self.display_name)

        if response.status_code != 200:
            logger.warning(f"[{self.name}] token exchange rejected: status={response.status_code}")
            raise SocialAuthFailedException(self.display_name)

        tokens = response.json()
        if not tokens.get("access_token"):
            logger.warning(f"[{self.name}] token response without access_token: {tokens.get('error')}")
            raise SocialAuthFailedException(self.display_name)
        return tokens

    async def fetch_profile(self, access_token: str) -> Dict[str, Any]:
        """
        액세스 토큰으로 제공자 프로필(원본 JSON)을 조회합니다.

        Raises:
            SocialAuthFailedException: 조회 실패 시
        """
        async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS) as client:
            try:
                response = await client.get(
                    self.profile_url,
                    headers={"Authorization": f"Bearer {access_token}"}
                )
            except httpx.HTTPError as e:
                logger.warning(f"[{self.name}] profile request failed: {e}")
                raise SocialAuthFailedException(self.display_name)

        if response.status_code != 200:
            logger.warning(f"[{self.name}] profile request rejected: status={response.status_code}")
            raise SocialAuthFailedException(self.display_name)
        return response.json()

    def normalize(self, raw: Dict[str, Any], tokens: Dict[str, Any]) -> OAuthProfile:
        raise NotImplementedError

    async def authenticate(self, code: str, state: str) -> OAuthProfile:
        """코드 교환부터 프로필 정규화까지 한 번에 처리합니다."""
        tokens = await self.exchange_code(code, state)
        raw = await self.fetch_profile(tokens["access_token"])
        profile = self.normalize(raw, tokens)
        logger.info(f"[{self.name}] profile fetched: account_id={profile.provider_account_id}")
        return profile

    def _build_profile(
        self,
        account_id: Any,
        email: Optional[str],
        name: Optional[str],
        image: Optional[str],
        tokens: Dict[str, Any]
    ) -> OAuthProfile:
        if account_id is None or str(account_id) == "":
            logger.warning(f"[{self.name}] profile without account id")
            raise SocialAuthFailedException(self.display_name)
        return OAuthProfile(
            provider=self.name,
            provider_account_id=str(account_id),
            email=email or None,
            name=name or DEFAULT_NAME,
            profile_image=image or None,
            access_token=tokens.get("access_token"),
            refresh_token=tokens.get("refresh_token"),
        )


class GoogleProvider(OAuthProvider):
    """
    Google OAuth

    [API 응답 예시 - userinfo]
    {"sub": "1098...", "email": "user@gmail.com", "name": "홍길동", "picture": "https://..."}
    """
    name = "google"
    display_name = "구글"
    authorize_url = "https://accounts.google.com/o/oauth2/v2/auth"
    token_url = "https://oauth2.googleapis.com/token"
    profile_url = "https://www.googleapis.com/oauth2/v3/userinfo"
    scope = "openid email profile"

    def normalize(self, raw: Dict[str, Any], tokens: Dict[str, Any]) -> OAuthProfile:
        return self._build_profile(
            account_id=raw.get("sub") or raw.get("id"),
            email=raw.get("email"),
            name=raw.get("name"),
            image=raw.get("picture"),
            tokens=tokens,
        )


class KakaoProvider(OAuthProvider):
    """
    Kakao OAuth

    [API 응답 예시 - /v2/user/me]
    {
        "id": 1234567890,
        "kakao_account": {
            "email": "user@example.com",
            "profile": {"nickname": "홍길동", "profile_image_url": "https://..."}
        },
        "properties": {"nickname": "홍길동", "profile_image": "https://..."}
    }
    """
    name = "kakao"
    display_name = "카카오"
    authorize_url = "https://kauth.kakao.com/oauth/authorize"
    token_url = "https://kauth.kakao.com/oauth/token"
    profile_url = "https://kapi.kakao.com/v2/user/me"

    def normalize(self, raw: Dict[str, Any], tokens: Dict[str, Any]) -> OAuthProfile:
        kakao_account = raw.get("kakao_account") or {}
        profile = kakao_account.get("profile") or {}
        properties = raw.get("properties") or {}
        return self._build_profile(
            account_id=raw.get("id"),
            email=kakao_account.get("email"),
            name=properties.get("nickname") or profile.get("nickname"),
            image=properties.get("profile_image") or profile.get("profile_image_url"),
            tokens=tokens,
        )


class NaverProvider(OAuthProvider):
    """
    Naver OAuth

    [API 응답 예시 - /v1/nid/me]
    {"resultcode": "00", "response": {"id": "abc", "email": "...", "nickname": "...", "profile_image": "..."}}
    """
    name = "naver"
    display_name = "네이버"
    authorize_url = "https://nid.naver.com/oauth2.0/authorize"
    token_url = "https://nid.naver.com/oauth2.0/token"
    profile_url = "https://openapi.naver.com/v1/nid/me"

    def normalize(self, raw: Dict[str, Any], tokens: Dict[str, Any]) -> OAuthProfile:
        response = raw.get("response") or {}
        return self._build_profile(
            account_id=response.get("id"),
            email=response.get("email"),
            name=response.get("nickname") or response.get("name"),
            image=response.get("profile_image"),
            tokens=tokens,
        )


# 제공자 인스턴스 (애플리케이션 전체에서 하나씩만 사용)
oauth_providers: Dict[str, OAuthProvider] = {
    "google": GoogleProvider(
        settings.GOOGLE_CLIENT_ID, settings.GOOGLE_CLIENT_SECRET, settings.GOOGLE_CALLBACK_URL
    ),
    "kakao": KakaoProvider(
        settings.KAKAO_CLIENT_ID, settings.KAKAO_CLIENT_SECRET, settings.KAKAO_CALLBACK_URL
    ),
    "naver": NaverProvider(
        settings.NAVER_CLIENT_ID, settings.NAVER_CLIENT_SECRET, settings.NAVER_CALLBACK_URL
    ),
}


def get_provider(name: str) -> OAuthProvider:
    """
    이름으로 제공자를 찾습니다.

    Raises:
        NotFoundException: 지원하지 않는 제공자 (404)
    """
    provider = oauth_providers.get(name)
    if provider is None:
        raise NotFoundException(resource="로그인 제공자", error_code="PROVIDER_NOT_FOUND")
    return provider
