# ============================================
# app/models/community.py - 커뮤니티 관련 데이터베이스 모델
# ============================================
# 게시물, 게시물-운동 연결, 좋아요, 댓글 테이블을 정의합니다.
# ============================================

from datetime import datetime
from sqlalchemy import (
    Column, String, Integer, Text, DateTime,
    ForeignKey, JSON, UniqueConstraint
)
from sqlalchemy.orm import relationship

from app.db.database import Base
from app.models.user import generate_uuid, VISIBILITY_FOLLOWERS


class Post(Base):
    """
    게시물 테이블 (posts)

    텍스트, 이미지, 해시태그와 함께 운동 기록을 공유합니다.

    [신입 개발자를 위한 팁]
    - like_count, comment_count는 캐시 값입니다.
      매번 COUNT 하지 않도록 좋아요/댓글 시 DB에서 원자적으로 증감합니다.
    - visibility 기본값은 FOLLOWERS (팔로워 공개)
    """
    __tablename__ = "posts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    # ========== 게시물 내용 ==========
    content = Column(Text, nullable=True)               # 본문 (최대 2000자)
    visibility = Column(String(20), nullable=False, default=VISIBILITY_FOLLOWERS)
    hashtags = Column(JSON, nullable=False, default=list)     # ["러닝", "한강"]
    image_urls = Column(JSON, nullable=False, default=list)   # 이미지 URL 목록

    # ========== 통계 (캐시) ==========
    like_count = Column(Integer, nullable=False, default=0)
    comment_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True)        # 삭제일 (Soft Delete)

    # ========== 관계 정의 ==========
    author = relationship("User", lazy="joined")
    workout_links = relationship(
        "PostWorkout", back_populates="post", lazy="select", cascade="all, delete-orphan"
    )

    @property
    def workout_ids(self):
        return [link.workout_id for link in self.workout_links]

    def __repr__(self):
        return f"<Post(id={self.id}, user_id={self.user_id})>"


class PostWorkout(Base):
    """게시물에 첨부된 운동 기록 (post_workouts)"""
    __tablename__ = "post_workouts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    post_id = Column(String(36), ForeignKey("posts.id"), nullable=False, index=True)
    workout_id = Column(String(36), ForeignKey("workouts.id"), nullable=False)

    __table_args__ = (
        UniqueConstraint('post_id', 'workout_id', name='unique_post_workout'),
    )

    post = relationship("Post", back_populates="workout_links")


class PostLike(Base):
    """
    게시물 좋아요 테이블 (post_likes)

    같은 게시물에 중복 좋아요는 불가능합니다.
    """
    __tablename__ = "post_likes"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    post_id = Column(String(36), ForeignKey("posts.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('post_id', 'user_id', name='unique_post_like'),
    )


class Comment(Base):
    """
    댓글 테이블 (comments)

    parent_id가 있으면 답글입니다 (한 단계만 허용).
    mentioned_user_id로 특정 사용자를 언급할 수 있습니다.
    """
    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    post_id = Column(String(36), ForeignKey("posts.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    parent_id = Column(String(36), ForeignKey("comments.id"), nullable=True)
    mentioned_user_id = Column(String(36), ForeignKey("users.id"), nullable=True)

    content = Column(String(500), nullable=False)       # 댓글 내용 (최대 500자)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True)

    author = relationship("User", foreign_keys=[user_id], lazy="joined")

    def __repr__(self):
        return f"<Comment(id={self.id}, post_id={self.post_id})>"
