"""
인증 API / 인증 의존성 테스트
토큰 검증, 탈퇴 계정 거부, 선택적 인증, 소셜 로그인 콜백을 검증합니다.
"""

import unittest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch
from urllib.parse import urlparse, parse_qs

from app.config import settings
from app.core.security import create_access_token, create_refresh_token, create_oauth_state
from app.core.exceptions import SocialAuthFailedException
from app.db.testing import ApiTestCase
from app.models.user import User, Account
from app.schemas.auth import OAuthProfile
from app.services.oauth_service import oauth_providers


def _query(response) -> dict:
    return parse_qs(urlparse(response.headers["location"]).query)


class TestAuthDependency(ApiTestCase):
    """인증 의존성 테스트"""

    def test_no_token(self):
        """토큰 없이 인증 필수 API 호출 → 401 UNAUTHORIZED"""
        response = self.client.get(self.api("/auth/me"))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.error_code(response), "UNAUTHORIZED")

    def test_invalid_token(self):
        """잘못된 토큰 → 401 INVALID_TOKEN"""
        response = self.client.get(self.api("/auth/me"), headers={"Authorization": "Bearer nope"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.error_code(response), "INVALID_TOKEN")

    def test_expired_token(self):
        """만료된 토큰 → 401 INVALID_TOKEN"""
        user = self.create_user("runner")
        token = create_access_token({"sub": user.id}, expires_delta=timedelta(seconds=-5))
        response = self.client.get(self.api("/auth/me"), headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(self.error_code(response), "INVALID_TOKEN")

    def test_deleted_account(self):
        """탈퇴한 사용자의 유효한 토큰 → 401 ACCOUNT_DELETED"""
        user = self.create_user("leaver", deleted_at=datetime.utcnow())
        response = self.client.get(self.api("/auth/me"), headers=self.auth_headers(user))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.error_code(response), "ACCOUNT_DELETED")

    def test_me(self):
        user = self.create_user("runner")
        response = self.client.get(self.api("/auth/me"), headers=self.auth_headers(user))
        self.assertEqual(response.status_code, 200)
        data = self.data(response)
        self.assertEqual(data["id"], user.id)
        self.assertEqual(data["email"], "runner@example.com")

    def test_optional_auth_with_bad_token(self):
        """선택적 인증 API는 잘못된 토큰이어도 비로그인으로 처리"""
        response = self.client.get(self.api("/feed"), headers={"Authorization": "Bearer broken"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.data(response)["items"], [])


class TestRefreshAndDevLogin(ApiTestCase):
    """토큰 갱신 / 개발용 로그인 테스트"""

    def test_refresh(self):
        user = self.create_user("runner")
        refresh = create_refresh_token({"sub": user.id, "email": user.email})
        response = self.client.post(self.api("/auth/refresh"), json={"refresh_token": refresh})
        self.assertEqual(response.status_code, 200)
        data = self.data(response)
        self.assertEqual(data["token_type"], "Bearer")
        self.assertTrue(data["access_token"])

    def test_refresh_with_access_token(self):
        """access 토큰으로는 갱신할 수 없음"""
        user = self.create_user("runner")
        response = self.client.post(
            self.api("/auth/refresh"),
            json={"refresh_token": create_access_token({"sub": user.id})}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.error_code(response), "INVALID_TOKEN")

    def test_refresh_deleted_account(self):
        user = self.create_user("leaver", deleted_at=datetime.utcnow())
        response = self.client.post(
            self.api("/auth/refresh"),
            json={"refresh_token": create_refresh_token({"sub": user.id})}
        )
        self.assertEqual(self.error_code(response), "ACCOUNT_DELETED")

    def test_dev_login_is_idempotent(self):
        """두 번 로그인해도 같은 사용자"""
        first = self.client.post(self.api("/auth/dev-login"))
        second = self.client.post(self.api("/auth/dev-login"))
        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 200)
        self.assertEqual(self.db.query(User).count(), 1)

    def test_dev_login_forbidden_in_production(self):
        with patch.object(settings, "ENVIRONMENT", "production"):
            response = self.client.post(self.api("/auth/dev-login"))
        self.assertEqual(response.status_code, 403)


class TestOAuthFlow(ApiTestCase):
    """소셜 로그인 시작 / 콜백 테스트"""

    def test_login_redirects_to_provider(self):
        response = self.client.get(self.api("/auth/kakao"), follow_redirects=False)
        self.assertEqual(response.status_code, 302)
        self.assertTrue(response.headers["location"].startswith("https://kauth.kakao.com/oauth/authorize"))
        self.assertIn("state", _query(response))

    def test_unknown_provider(self):
        response = self.client.get(self.api("/auth/github"), follow_redirects=False)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.error_code(response), "PROVIDER_NOT_FOUND")

    def test_callback_invalid_state(self):
        response = self.client.get(
            self.api("/auth/google/callback"),
            params={"code": "abc", "state": create_oauth_state("naver")},
            follow_redirects=False
        )
        self.assertEqual(response.status_code, 302)
        self.assertEqual(_query(response)["error"], ["invalid_state"])

    def test_callback_missing_code(self):
        response = self.client.get(self.api("/auth/google/callback"), follow_redirects=False)
        self.assertEqual(_query(response)["error"], ["missing_code"])

    def test_callback_provider_error(self):
        response = self.client.get(
            self.api("/auth/naver/callback"),
            params={"error": "access_denied"},
            follow_redirects=False
        )
        self.assertEqual(_query(response)["error"], ["access_denied"])

    def test_callback_creates_user_and_redirects_with_tokens(self):
        profile = OAuthProfile(
            provider="google",
            provider_account_id="g-123",
            email="new@example.com",
            name="새러너"
        )
        with patch.object(oauth_providers["google"], "authenticate", new=AsyncMock(return_value=profile)):
            response = self.client.get(
                self.api("/auth/google/callback"),
                params={"code": "abc", "state": create_oauth_state("google")},
                follow_redirects=False
            )

        self.assertEqual(response.status_code, 302)
        query = _query(response)
        self.assertIn("accessToken", query)
        self.assertIn("refreshToken", query)
        self.assertTrue(response.headers["location"].startswith(f"{settings.FRONTEND_URL}/auth/callback"))

        account = self.db.query(Account).filter(Account.provider_account_id == "g-123").one()
        self.assertEqual(account.user.email, "new@example.com")

    def test_callback_links_existing_email(self):
        """같은 이메일의 사용자가 있으면 계정만 연결"""
        user = self.create_user("runner")
        profile = OAuthProfile(provider="kakao", provider_account_id="k-1", email=user.email, name="러너")
        with patch.object(oauth_providers["kakao"], "authenticate", new=AsyncMock(return_value=profile)):
            self.client.get(
                self.api("/auth/kakao/callback"),
                params={"code": "abc", "state": create_oauth_state("kakao")},
                follow_redirects=False
            )
        self.assertEqual(self.db.query(User).count(), 1)
        account = self.db.query(Account).one()
        self.assertEqual(account.user_id, user.id)

    def test_callback_provider_failure(self):
        failing = AsyncMock(side_effect=SocialAuthFailedException("구글"))
        with patch.object(oauth_providers["google"], "authenticate", new=failing):
            response = self.client.get(
                self.api("/auth/google/callback"),
                params={"code": "abc", "state": create_oauth_state("google")},
                follow_redirects=False
            )
        self.assertEqual(_query(response)["error"], ["social_auth_failed"])


class TestProviderNormalize(unittest.TestCase):
    """제공자 프로필 정규화 테스트"""

    def test_kakao_without_email(self):
        raw = {"id": 42, "properties": {"nickname": "카카오러너"}}
        profile = oauth_providers["kakao"].normalize(raw, {"access_token": "t"})
        self.assertEqual(profile.provider_account_id, "42")
        self.assertIsNone(profile.email)
        self.assertEqual(profile.name, "카카오러너")

    def test_naver_nested_response(self):
        raw = {"resultcode": "00", "response": {"id": "n-1", "email": "n@example.com", "nickname": "네이버러너"}}
        profile = oauth_providers["naver"].normalize(raw, {"access_token": "t"})
        self.assertEqual(profile.provider, "naver")
        self.assertEqual(profile.email, "n@example.com")

    def test_google_default_name(self):
        profile = oauth_providers["google"].normalize({"sub": "g-1"}, {})
        self.assertEqual(profile.name, "사용자")

    def test_missing_account_id(self):
        with self.assertRaises(SocialAuthFailedException):
            oauth_providers["google"].normalize({"email": "x@example.com"}, {})


if __name__ == "__main__":
    unittest.main()
