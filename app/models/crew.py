# ============================================
# app/models/crew.py - 크루 / 크루 게시판 모델
# ============================================
# 크루(러닝 모임), 멤버, 가입 금지 목록, 게시판 채널과
# 채널 게시글 / 댓글 / 좋아요 테이블을 정의합니다.
# ============================================

from datetime import datetime
from sqlalchemy import (
    Column, String, Boolean, Integer, Text, DateTime,
    ForeignKey, JSON, UniqueConstraint
)
from sqlalchemy.orm import relationship

from app.db.database import Base
from app.models.user import generate_uuid


# 멤버 역할
ROLE_OWNER = "OWNER"
ROLE_ADMIN = "ADMIN"
ROLE_MEMBER = "MEMBER"
ADMIN_ROLES = (ROLE_OWNER, ROLE_ADMIN)

MEMBER_ACTIVE = "ACTIVE"

# 게시판 채널
BOARD_GENERAL = "GENERAL"
BOARD_ANNOUNCEMENT = "ANNOUNCEMENT"
WRITE_ALL = "ALL"
WRITE_ADMIN_ONLY = "ADMIN_ONLY"


class Crew(Base):
    """
    크루 테이블 (crews)

    [신입 개발자를 위한 팁]
    - 크루를 만든 사람은 OWNER 멤버로 자동 등록됩니다.
    - max_members가 None이면 인원 제한이 없습니다.
    """
    __tablename__ = "crews"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(50), nullable=False)
    description = Column(String(500), nullable=True)
    image_url = Column(String(500), nullable=True)
    creator_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    is_public = Column(Boolean, nullable=False, default=True)
    max_members = Column(Integer, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True)

    members = relationship("CrewMember", back_populates="crew", lazy="select")

    def __repr__(self):
        return f"<Crew(id={self.id}, name={self.name})>"


class CrewMember(Base):
    """크루 멤버 테이블 (crew_members)"""
    __tablename__ = "crew_members"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    crew_id = Column(String(36), ForeignKey("crews.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    role = Column(String(10), nullable=False, default=ROLE_MEMBER)     # OWNER / ADMIN / MEMBER
    status = Column(String(10), nullable=False, default=MEMBER_ACTIVE)

    joined_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('crew_id', 'user_id', name='unique_crew_member'),
    )

    crew = relationship("Crew", back_populates="members")
    user = relationship("User", lazy="joined")


class CrewBan(Base):
    """강퇴되어 다시 가입할 수 없는 사용자 (crew_bans)"""
    __tablename__ = "crew_bans"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    crew_id = Column(String(36), ForeignKey("crews.id"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    banned_by = Column(String(36), ForeignKey("users.id"), nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('crew_id', 'user_id', name='unique_crew_ban'),
    )


class CrewBoard(Base):
    """
    크루 게시판 채널 (crew_boards)

    크루 생성 시 삭제할 수 없는 공지(ANNOUNCEMENT) 채널이 하나 만들어집니다.
    """
    __tablename__ = "crew_boards"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    crew_id = Column(String(36), ForeignKey("crews.id"), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    type = Column(String(20), nullable=False, default=BOARD_GENERAL)              # GENERAL / ANNOUNCEMENT
    write_permission = Column(String(20), nullable=False, default=WRITE_ALL)      # ALL / ADMIN_ONLY
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class CrewBoardPost(Base):
    """크루 채널 게시글 (crew_board_posts)"""
    __tablename__ = "crew_board_posts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    board_id = Column(String(36), ForeignKey("crew_boards.id"), nullable=False, index=True)
    author_id = Column(String(36), ForeignKey("users.id"), nullable=False)

    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    image_urls = Column(JSON, nullable=False, default=list)
    is_pinned = Column(Boolean, nullable=False, default=False)

    like_count = Column(Integer, nullable=False, default=0)
    comment_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True)

    author = relationship("User", lazy="joined")


class CrewBoardComment(Base):
    """크루 채널 게시글 댓글 (crew_board_comments) - 답글은 한 단계까지"""
    __tablename__ = "crew_board_comments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    post_id = Column(String(36), ForeignKey("crew_board_posts.id"), nullable=False, index=True)
    author_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    parent_id = Column(String(36), ForeignKey("crew_board_comments.id"), nullable=True)

    content = Column(String(1000), nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True)


class CrewBoardLike(Base):
    """크루 채널 게시글 좋아요 (crew_board_likes)"""
    __tablename__ = "crew_board_likes"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    post_id = Column(String(36), ForeignKey("crew_board_posts.id"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('post_id', 'user_id', name='unique_crew_board_like'),
    )
