"""
security.py 모듈의 단위 테스트
JWT 발급 / 검증과 OAuth state의 동작을 검증합니다.
"""

import unittest
from datetime import timedelta

from app.core.security import (
    create_access_token, create_refresh_token, decode_token,
    verify_access_token, verify_refresh_token,
    create_oauth_state, verify_oauth_state
)


class TestTokens(unittest.TestCase):
    """Access / Refresh 토큰 테스트"""

    def test_access_token_roundtrip(self):
        """발급한 토큰의 sub와 type 확인"""
        token = create_access_token({"sub": "user-1", "email": "a@example.com"})
        payload = verify_access_token(token)
        self.assertIsNotNone(payload)
        self.assertEqual(payload["sub"], "user-1")
        self.assertEqual(payload["type"], "access")

    def test_refresh_token_is_not_access_token(self):
        """refresh 토큰은 access 검증을 통과하지 못함"""
        token = create_refresh_token({"sub": "user-1"})
        self.assertIsNone(verify_access_token(token))
        self.assertIsNotNone(verify_refresh_token(token))

    def test_expired_token(self):
        """만료된 토큰은 None"""
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-1))
        self.assertIsNone(decode_token(token))
        self.assertIsNone(verify_access_token(token))

    def test_garbage_token(self):
        """형식이 잘못된 토큰은 None"""
        self.assertIsNone(decode_token("not-a-jwt"))

    def test_token_without_subject(self):
        """sub가 없으면 거부"""
        token = create_access_token({"email": "a@example.com"})
        self.assertIsNone(verify_access_token(token))


class TestOAuthState(unittest.TestCase):
    """OAuth state 테스트"""

    def test_state_bound_to_provider(self):
        state = create_oauth_state("kakao")
        self.assertTrue(verify_oauth_state(state, "kakao"))
        self.assertFalse(verify_oauth_state(state, "naver"))

    def test_missing_state(self):
        self.assertFalse(verify_oauth_state(None, "google"))
        self.assertFalse(verify_oauth_state("", "google"))

    def test_access_token_is_not_state(self):
        """다른 종류의 토큰은 state로 사용할 수 없음"""
        token = create_access_token({"sub": "google"})
        self.assertFalse(verify_oauth_state(token, "google"))


if __name__ == "__main__":
    unittest.main()
