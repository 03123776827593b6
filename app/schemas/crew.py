# ============================================
# app/schemas/crew.py - 크루 / 크루 게시판 스키마
# ============================================

from typing import Optional, List, Literal
from datetime import datetime
from pydantic import BaseModel, Field

from app.schemas.user import UserSummarySchema


# ============================================
# 크루
# ============================================

class CrewCreateRequest(BaseModel):
    """
    크루 생성 요청 스키마

    [필드 설명]
    - name: 크루 이름 (2~50자)
    - max_members: 최대 인원 (2명 이상, 생략하면 제한 없음)
    """
    name: str = Field(..., min_length=2, max_length=50, description="크루 이름")
    description: Optional[str] = Field(None, max_length=500, description="소개")
    image_url: Optional[str] = Field(None, max_length=500, description="대표 이미지")
    is_public: bool = Field(True, description="공개 여부")
    max_members: Optional[int] = Field(None, ge=2, description="최대 인원")

    class Config:
        json_schema_extra = {
            "example": {
                "name": "새벽 한강 크루",
                "description": "매주 화/목 06시 반포",
                "is_public": True,
                "max_members": 30
            }
        }


class CrewUpdateRequest(BaseModel):
    """크루 수정 요청 스키마"""
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    image_url: Optional[str] = Field(None, max_length=500)
    is_public: Optional[bool] = None
    max_members: Optional[int] = Field(None, ge=2)


class CrewSchema(BaseModel):
    """크루 스키마 (my_role은 조회하는 사용자 기준)"""
    id: str
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    creator_id: str
    is_public: bool
    max_members: Optional[int] = None
    member_count: int = 0
    my_role: Optional[str] = None
    created_at: datetime


class CrewMemberSchema(BaseModel):
    """크루 멤버 스키마"""
    user: UserSummarySchema
    role: str
    joined_at: datetime


class RoleUpdateRequest(BaseModel):
    """멤버 역할 변경 요청 (OWNER 권한은 넘길 수 없음)"""
    role: Literal["ADMIN", "MEMBER"]


# ============================================
# 크루 게시판
# ============================================

class BoardCreateRequest(BaseModel):
    """채널 생성 요청 스키마"""
    name: str = Field(..., min_length=1, max_length=50)
    write_permission: Literal["ALL", "ADMIN_ONLY"] = "ALL"
    sort_order: int = 0


class BoardUpdateRequest(BaseModel):
    """채널 수정 요청 스키마"""
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    write_permission: Optional[Literal["ALL", "ADMIN_ONLY"]] = None
    sort_order: Optional[int] = None


class BoardSchema(BaseModel):
    """채널 스키마"""
    id: str
    crew_id: str
    name: str
    type: str
    write_permission: str
    sort_order: int
    created_at: datetime

    class Config:
        from_attributes = True


class BoardPostCreateRequest(BaseModel):
    """채널 게시글 작성 요청 스키마"""
    title: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1, max_length=5000)
    image_urls: List[str] = Field(default_factory=list, max_length=10)


class BoardPostUpdateRequest(BaseModel):
    """채널 게시글 수정 요청 스키마"""
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    content: Optional[str] = Field(None, min_length=1, max_length=5000)
    image_urls: Optional[List[str]] = Field(None, max_length=10)


class BoardPostSchema(BaseModel):
    """채널 게시글 스키마"""
    id: str
    board_id: str
    author: UserSummarySchema
    title: str
    content: str
    image_urls: List[str] = []
    is_pinned: bool = False
    like_count: int = 0
    comment_count: int = 0
    liked: bool = False
    created_at: datetime
    updated_at: datetime


class BoardCommentCreateRequest(BaseModel):
    """채널 댓글 작성 요청 스키마"""
    content: str = Field(..., min_length=1, max_length=1000)
    parent_id: Optional[str] = None


class BoardCommentSchema(BaseModel):
    """채널 댓글 스키마"""
    id: str
    post_id: str
    author_id: str
    parent_id: Optional[str] = None
    content: str
    created_at: datetime

    class Config:
        from_attributes = True
