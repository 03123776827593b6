# ============================================
# app/models/social.py - 팔로우 / 차단 모델
# ============================================
# 사용자 간 관계(팔로우, 차단)를 저장하는 테이블을 정의합니다.
# ============================================

from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint

from app.db.database import Base
from app.models.user import generate_uuid


FOLLOW_PENDING = "PENDING"
FOLLOW_ACCEPTED = "ACCEPTED"


class Follow(Base):
    """
    팔로우 테이블 (follows)

    follower가 following을 팔로우합니다.

    [신입 개발자를 위한 팁]
    - 비공개 계정을 팔로우하면 PENDING 상태로 생성되고,
      상대가 수락하면 ACCEPTED로 바뀝니다.
    - 팔로워 전용(FOLLOWERS) 콘텐츠는 ACCEPTED 관계에서만 보입니다.
    """
    __tablename__ = "follows"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    follower_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    following_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=FOLLOW_ACCEPTED)  # PENDING / ACCEPTED

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('follower_id', 'following_id', name='unique_follow'),
    )

    def __repr__(self):
        return f"<Follow({self.follower_id} -> {self.following_id}, {self.status})>"


class Block(Base):
    """
    차단 테이블 (blocks)

    한 방향으로 저장하지만, 차단 효과는 양방향입니다.
    (내가 차단했든 상대가 나를 차단했든 서로의 콘텐츠가 보이지 않음)
    """
    __tablename__ = "blocks"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    blocker_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    blocked_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('blocker_id', 'blocked_id', name='unique_block'),
    )

    def __repr__(self):
        return f"<Block({self.blocker_id} -x- {self.blocked_id})>"
