# ============================================
# app/models/user.py - 사용자 관련 데이터베이스 모델
# ============================================
# 사용자와 소셜 로그인 계정 테이블을 정의합니다.
# ============================================

import uuid
from datetime import datetime
from sqlalchemy import (
    Column, String, Boolean, Text, DateTime,
    ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship

from app.db.database import Base


def generate_uuid() -> str:
    """UUID를 생성하는 헬퍼 함수"""
    return str(uuid.uuid4())


# 공개 범위 (게시물 / 운동 기록 공통)
VISIBILITY_PRIVATE = "PRIVATE"
VISIBILITY_FOLLOWERS = "FOLLOWERS"
VISIBILITY_PUBLIC = "PUBLIC"
VISIBILITIES = (VISIBILITY_PRIVATE, VISIBILITY_FOLLOWERS, VISIBILITY_PUBLIC)


class User(Base):
    """
    사용자 테이블 (users)

    OAuth(Google/Kakao/Naver)로 가입한 사용자 정보를 저장합니다.
    비밀번호는 저장하지 않습니다.

    [신입 개발자를 위한 팁]
    - deleted_at이 있으면 탈퇴한 사용자입니다 (Soft Delete)
    - 탈퇴한 사용자의 토큰은 서명이 유효해도 401로 거부됩니다
    """
    __tablename__ = "users"

    # ========== 기본 필드 ==========
    id = Column(String(36), primary_key=True, default=generate_uuid, comment='UUID, 사용자 고유 식별자')
    email = Column(String(255), unique=True, nullable=False, index=True, comment='이메일')
    name = Column(String(100), nullable=False, comment='사용자 이름')
    profile_image = Column(String(500), nullable=True, comment='프로필 이미지 URL')
    background_image = Column(String(500), nullable=True, comment='배경 이미지 URL')
    bio = Column(String(300), nullable=True, comment='자기소개')

    # ========== 공개 설정 ==========
    is_private = Column(Boolean, nullable=False, default=False, comment='비공개 계정 (팔로우 승인 필요)')
    workout_sharing_default = Column(
        String(20), nullable=False, default=VISIBILITY_FOLLOWERS,
        comment='운동 기록 기본 공개 범위'
    )

    # ========== 시간 관련 필드 ==========
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, comment='가입일')
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow, comment='마지막 수정일')
    deleted_at = Column(DateTime, nullable=True, comment='탈퇴일 (Soft Delete)')

    # ========== 관계 정의 ==========
    accounts = relationship("Account", back_populates="user", lazy="select")

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, name={self.name})>"


class Account(Base):
    """
    소셜 로그인 계정 테이블 (accounts)

    한 사용자는 여러 제공자 계정을 연결할 수 있습니다.
    (provider, provider_account_id) 조합은 유일합니다.
    """
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid, comment='UUID')
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True, comment='사용자 ID')

    provider = Column(String(20), nullable=False, comment='google / kakao / naver')
    provider_account_id = Column(String(255), nullable=False, comment='제공자 측 사용자 ID')

    # 제공자에서 받은 토큰 (재발급 시 갱신)
    access_token = Column(Text, nullable=True)
    refresh_token = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('provider', 'provider_account_id', name='unique_provider_account'),
    )

    user = relationship("User", back_populates="accounts")

    def __repr__(self):
        return f"<Account(provider={self.provider}, user_id={self.user_id})>"
