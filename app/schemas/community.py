# ============================================
# app/schemas/community.py - 커뮤니티 관련 스키마
# ============================================
# 게시물, 좋아요, 댓글 관련 요청/응답 스키마를 정의합니다.
# ============================================

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from app.schemas.user import UserSummarySchema, Visibility


MAX_HASHTAGS = 30
MAX_HASHTAG_LENGTH = 50
MAX_POST_IMAGES = 10


def normalize_hashtags(tags: List[str]) -> List[str]:
    """
    해시태그를 정규화합니다.

    앞의 '#' 제거 → 소문자 변환 → 빈 값 제거 → 중복 제거 (순서 유지)

    Examples:
        >>> normalize_hashtags(["#Running", "running", " #한강 "])
        ['running', '한강']
    """
    result = []
    for tag in tags:
        cleaned = tag.strip().lstrip("#").strip().lower()
        if cleaned and cleaned not in result:
            result.append(cleaned)
    return result


# ============================================
# 게시물 요청 스키마
# ============================================

class PostCreateRequest(BaseModel):
    """
    게시물 작성 요청 스키마

    [필드 설명]
    - content: 본문 (최대 2000자)
    - visibility: 공개 범위 (기본 FOLLOWERS)
    - hashtags: 최대 30개, 각 50자 이하
    - workout_ids: 첨부할 내 운동 기록 ID 목록
    - image_urls: 최대 10장
    """
    content: Optional[str] = Field(None, max_length=2000, description="본문")
    visibility: Visibility = Field("FOLLOWERS", description="공개 범위")
    hashtags: List[str] = Field(default_factory=list, max_length=MAX_HASHTAGS, description="해시태그")
    workout_ids: List[str] = Field(default_factory=list, description="첨부할 운동 기록 ID")
    image_urls: List[str] = Field(default_factory=list, max_length=MAX_POST_IMAGES, description="이미지 URL")

    @field_validator("hashtags")
    @classmethod
    def check_hashtags(cls, value: List[str]) -> List[str]:
        for tag in value:
            if len(tag) > MAX_HASHTAG_LENGTH:
                raise ValueError(f"해시태그는 {MAX_HASHTAG_LENGTH}자 이하여야 합니다")
        return normalize_hashtags(value)

    class Config:
        json_schema_extra = {
            "example": {
                "content": "오늘 한강 10km 완주!",
                "visibility": "PUBLIC",
                "hashtags": ["#러닝", "한강"],
                "workout_ids": [],
                "image_urls": []
            }
        }


class PostUpdateRequest(BaseModel):
    """게시물 수정 요청 스키마 (보낸 필드만 수정)"""
    content: Optional[str] = Field(None, max_length=2000)
    visibility: Optional[Visibility] = None
    hashtags: Optional[List[str]] = Field(None, max_length=MAX_HASHTAGS)
    image_urls: Optional[List[str]] = Field(None, max_length=MAX_POST_IMAGES)

    @field_validator("hashtags")
    @classmethod
    def check_hashtags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return value
        for tag in value:
            if len(tag) > MAX_HASHTAG_LENGTH:
                raise ValueError(f"해시태그는 {MAX_HASHTAG_LENGTH}자 이하여야 합니다")
        return normalize_hashtags(value)


# ============================================
# 게시물 응답 스키마
# ============================================

class PostSchema(BaseModel):
    """
    게시물 스키마

    liked는 현재 조회하는 사용자 기준입니다 (비로그인이면 False).
    """
    id: str
    author: UserSummarySchema
    content: Optional[str] = None
    visibility: str
    hashtags: List[str] = []
    image_urls: List[str] = []
    workout_ids: List[str] = []
    like_count: int = 0
    comment_count: int = 0
    liked: bool = False
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LikeStatusSchema(BaseModel):
    """좋아요 상태 스키마"""
    liked: bool
    like_count: int


# ============================================
# 댓글 스키마
# ============================================

class CommentCreateRequest(BaseModel):
    """
    댓글 작성 요청 스키마

    [신입 개발자를 위한 팁]
    - parent_id: 답글을 달 댓글 ID (같은 게시물의 최상위 댓글만 가능)
    - mentioned_user_id: 언급할 사용자 ID
    """
    content: str = Field(..., min_length=1, max_length=500, description="댓글 내용 (500자 이하)")
    parent_id: Optional[str] = Field(None, description="부모 댓글 ID")
    mentioned_user_id: Optional[str] = Field(None, description="언급한 사용자 ID")

    class Config:
        json_schema_extra = {
            "example": {
                "content": "페이스 대박이네요!",
                "parent_id": None
            }
        }


class CommentSchema(BaseModel):
    """댓글 스키마"""
    id: str
    post_id: str
    author: UserSummarySchema
    content: str
    parent_id: Optional[str] = None
    mentioned_user_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
