# ============================================
# app/schemas/user.py - 사용자 / 프로필 스키마
# ============================================
# 프로필 조회, 수정 요청/응답 스키마를 정의합니다.
# ============================================

from typing import Optional, Literal
from datetime import datetime
from pydantic import BaseModel, Field


Visibility = Literal["PRIVATE", "FOLLOWERS", "PUBLIC"]


# ============================================
# 공통 스키마
# ============================================

class UserSummarySchema(BaseModel):
    """
    사용자 요약 스키마

    게시물 작성자, 팔로워 목록, 댓글 작성자 등 다른 응답 안에 포함됩니다.
    """
    id: str
    name: str
    profile_image: Optional[str] = None

    class Config:
        from_attributes = True


class ProfileStatsSchema(BaseModel):
    """
    프로필 통계 스키마

    [필드 설명]
    - total_distance: 누적 거리 (m)
    - total_duration: 누적 시간 (초)
    - average_pace: 평균 페이스 (초/km), 기록이 없으면 None
    """
    total_workouts: int = 0
    total_distance: float = 0
    total_duration: int = 0
    average_pace: Optional[float] = None
    follower_count: int = 0
    following_count: int = 0


# ============================================
# 응답 스키마
# ============================================

class ProfileSchema(BaseModel):
    """프로필 상세 스키마"""
    id: str
    email: Optional[str] = None     # 본인 프로필에서만 포함
    name: str
    profile_image: Optional[str] = None
    background_image: Optional[str] = None
    bio: Optional[str] = None
    is_private: bool = False
    workout_sharing_default: str = "FOLLOWERS"
    created_at: datetime
    stats: ProfileStatsSchema

    # 다른 사용자 프로필 조회 시 (본인이면 None)
    is_following: Optional[bool] = None
    follow_status: Optional[str] = None

    class Config:
        from_attributes = True


# ============================================
# 요청 스키마
# ============================================

class ProfileUpdateRequest(BaseModel):
    """
    프로필 수정 요청 스키마

    [신입 개발자를 위한 팁]
    - 보낸 필드만 수정됩니다 (model_dump(exclude_unset=True))
    """
    name: Optional[str] = Field(None, min_length=2, max_length=50, description="이름 (2~50자)")
    bio: Optional[str] = Field(None, max_length=300, description="자기소개 (300자 이하)")
    profile_image: Optional[str] = Field(None, max_length=500, description="프로필 이미지 URL")
    background_image: Optional[str] = Field(None, max_length=500, description="배경 이미지 URL")
    is_private: Optional[bool] = Field(None, description="비공개 계정 여부")
    workout_sharing_default: Optional[Visibility] = Field(None, description="운동 기록 기본 공개 범위")

    class Config:
        json_schema_extra = {
            "example": {
                "name": "한강러너",
                "bio": "주 3회 한강 10km",
                "is_private": False,
                "workout_sharing_default": "FOLLOWERS"
            }
        }
