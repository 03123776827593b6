# ============================================
# app/services/auth_service.py - 인증 서비스
# ============================================
# 소셜 로그인 사용자 생성/연결, 토큰 발급/갱신 등
# 인증 관련 비즈니스 로직을 처리합니다.
# ============================================

import logging
from typing import Optional
from sqlalchemy.orm import Session

from app.models.user import User, Account
from app.schemas.auth import OAuthProfile, TokenSchema
from app.core.security import (
    create_access_token, create_refresh_token, verify_refresh_token
)
from app.core.exceptions import (
    UnauthorizedException, InvalidTokenException, ForbiddenException
)
from app.config import settings

logger = logging.getLogger(__name__)

PLACEHOLDER_EMAIL_DOMAIN = "placeholder.local"

# 개발용 로그인 사용자 (production에서는 사용 불가)
DEV_PROFILE = OAuthProfile(
    provider="dev",
    provider_account_id="dev-1",
    email="dev@runners.local",
    name="개발 테스터",
)


class AuthService:
    """
    인증 서비스 클래스

    [신입 개발자를 위한 팁]
    - 서비스 클래스는 비즈니스 로직을 담당합니다.
    - 데이터베이스 세션(db)을 파라미터로 받아 사용합니다.
    - 예외는 core/exceptions.py에 정의된 것을 사용합니다.
    """

    def __init__(self, db: Session):
        self.db = db

    # ============================================
    # 사용자 조회 메서드
    # ============================================

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        """탈퇴하지 않은 사용자를 ID로 조회합니다."""
        return self.db.query(User).filter(
            User.id == user_id,
            User.deleted_at.is_(None)
        ).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        """탈퇴하지 않은 사용자를 이메일로 조회합니다."""
        return self.db.query(User).filter(
            User.email == email,
            User.deleted_at.is_(None)
        ).first()

    # ============================================
    # 소셜 로그인 사용자 생성 / 연결
    # ============================================

    def upsert_oauth_user(self, profile: OAuthProfile) -> User:
        """
        소셜 로그인 프로필로 사용자를 찾거나 만듭니다.

        [처리 순서]
        1. (provider, provider_account_id)로 연결된 계정이 있으면
           제공자 토큰만 갱신하고 그 사용자를 반환
        2. 같은 이메일의 사용자가 있으면 새 계정을 연결
        3. 둘 다 없으면 사용자 + 계정을 한 트랜잭션으로 생성
           (이메일이 없으면 {provider}_{id}@placeholder.local)

        Args:
            profile: 정규화된 제공자 프로필

        Returns:
            User: 로그인할 사용자

        Raises:
            UnauthorizedException: 연결된 사용자가 탈퇴한 경우 (ACCOUNT_DELETED)
        """
        account = self.db.query(Account).filter(
            Account.provider == profile.provider,
            Account.provider_account_id == profile.provider_account_id
        ).first()

        if account:
            if account.user.is_deleted:
                logger.info(f"OAuth login for deleted user rejected: user_id={account.user_id}")
                raise UnauthorizedException(
                    message="탈퇴한 계정입니다",
                    error_code="ACCOUNT_DELETED"
                )
            account.access_token = profile.access_token
            account.refresh_token = profile.refresh_token
            self.db.commit()
            return account.user

        user = None
        if profile.email:
            user = self.get_user_by_email(profile.email)

        if user is None:
            email = profile.email or (
                f"{profile.provider}_{profile.provider_account_id}@{PLACEHOLDER_EMAIL_DOMAIN}"
            )
            user = User(
                email=email,
                name=profile.name,
                profile_image=profile.profile_image
            )
            self.db.add(user)
            self.db.flush()  # ID를 얻기 위해 flush (commit은 아직 안함)
            logger.info(f"New user created via {profile.provider}: user_id={user.id}")
        else:
            logger.info(f"Linking {profile.provider} account to existing user: user_id={user.id}")

        self.db.add(Account(
            user_id=user.id,
            provider=profile.provider,
            provider_account_id=profile.provider_account_id,
            access_token=profile.access_token,
            refresh_token=profile.refresh_token
        ))
        self.db.commit()
        self.db.refresh(user)
        return user

    # ============================================
    # 토큰 발급 / 갱신
    # ============================================

    def create_tokens(self, user: User) -> TokenSchema:
        """
        사용자에게 Access/Refresh 토큰을 발급합니다.

        서버에 토큰을 저장하지 않습니다 (무상태 JWT).
        """
        token_data = {"sub": user.id, "email": user.email}
        return TokenSchema(
            access_token=create_access_token(token_data),
            refresh_token=create_refresh_token(token_data),
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        )

    def refresh_tokens(self, refresh_token: str) -> TokenSchema:
        """
        Refresh Token으로 새 토큰 쌍을 발급합니다.

        Raises:
            InvalidTokenException: 토큰이 유효하지 않거나 만료된 경우
            UnauthorizedException: 사용자가 없거나 탈퇴한 경우
        """
        payload = verify_refresh_token(refresh_token)
        if payload is None:
            raise InvalidTokenException()

        user = self.db.query(User).filter(User.id == payload["sub"]).first()
        if user is None:
            raise InvalidTokenException()
        if user.is_deleted:
            raise UnauthorizedException(message="탈퇴한 계정입니다", error_code="ACCOUNT_DELETED")

        return self.create_tokens(user)

    def dev_login(self) -> TokenSchema:
        """
        개발용 로그인

        Raises:
            ForbiddenException: production 환경
        """
        if settings.is_production:
            raise ForbiddenException("운영 환경에서는 사용할 수 없습니다")
        user = self.upsert_oauth_user(DEV_PROFILE)
        return self.create_tokens(user)
