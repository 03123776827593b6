# ============================================
# app/schemas/workout.py - 운동 관련 스키마
# ============================================
# 운동 기록 생성, 수정, 조회 요청/응답 스키마를 정의합니다.
# ============================================

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from app.schemas.user import UserSummarySchema, Visibility


MAX_DISTANCE_M = 500000     # 500km
MAX_DURATION_S = 86400      # 24시간


# ============================================
# 요청 스키마
# ============================================

class WorkoutCreateRequest(BaseModel):
    """
    운동 기록 직접 입력 요청 스키마

    [필드 설명]
    - distance: 거리 (m, 1 ~ 500000)
    - duration: 시간 (초, 1 ~ 86400)
    - visibility: 생략하면 내 프로필의 기본 공개 범위를 사용
    """
    distance: float = Field(..., ge=1, le=MAX_DISTANCE_M, description="거리 (m)")
    duration: int = Field(..., ge=1, le=MAX_DURATION_S, description="시간 (초)")
    date: datetime = Field(..., description="운동 날짜")
    title: Optional[str] = Field(None, max_length=100, description="제목")
    memo: Optional[str] = Field(None, max_length=2000, description="메모")
    visibility: Optional[Visibility] = Field(None, description="공개 범위")

    class Config:
        json_schema_extra = {
            "example": {
                "distance": 10000,
                "duration": 3000,
                "date": "2026-10-18T07:00:00",
                "title": "아침 한강 러닝",
                "visibility": "PUBLIC"
            }
        }


class WorkoutUpdateRequest(BaseModel):
    """운동 기록 수정 요청 스키마 (보낸 필드만 수정)"""
    distance: Optional[float] = Field(None, ge=1, le=MAX_DISTANCE_M)
    duration: Optional[int] = Field(None, ge=1, le=MAX_DURATION_S)
    date: Optional[datetime] = None
    title: Optional[str] = Field(None, max_length=100)
    memo: Optional[str] = Field(None, max_length=2000)
    visibility: Optional[Visibility] = None


# ============================================
# 응답 스키마
# ============================================

class WorkoutSchema(BaseModel):
    """
    운동 기록 스키마

    피드 아이템으로도 그대로 사용됩니다.
    """
    id: str
    user: UserSummarySchema
    title: Optional[str] = None
    memo: Optional[str] = None
    visibility: str
    source: str
    distance: float             # m
    duration: int               # 초
    pace: Optional[float] = None            # 초/km
    elevation_gain: Optional[float] = None  # m
    date: datetime
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    route_polyline: Optional[str] = None
    like_count: int = 0
    comment_count: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ============================================
# 좋아요 / 댓글 스키마
# ============================================

class WorkoutCommentCreateRequest(BaseModel):
    """운동 기록 댓글 작성 요청 스키마"""
    content: str = Field(..., min_length=1, max_length=500, description="댓글 내용 (500자 이하)")


class WorkoutCommentSchema(BaseModel):
    """운동 기록 댓글 스키마"""
    id: str
    workout_id: str
    author: UserSummarySchema
    content: str
    created_at: datetime

    class Config:
        from_attributes = True
