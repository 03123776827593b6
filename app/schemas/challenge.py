# ============================================
# app/schemas/challenge.py - 챌린지 스키마
# ============================================

from typing import Optional, Literal
from datetime import datetime
from pydantic import BaseModel, Field, model_validator

from app.schemas.user import UserSummarySchema


ChallengeType = Literal["DISTANCE", "FREQUENCY", "STREAK", "PACE"]
TargetUnit = Literal["KM", "COUNT", "DAYS", "SEC_PER_KM"]


class ChallengeCreateRequest(BaseModel):
    """
    챌린지 생성 요청 스키마

    [신입 개발자를 위한 팁]
    - end_date는 start_date보다 뒤여야 합니다 (model_validator에서 검사)
    - crew_id를 지정하면 크루 전용 챌린지가 됩니다
    """
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    type: ChallengeType
    target_value: float = Field(..., gt=0)
    target_unit: TargetUnit
    start_date: datetime
    end_date: datetime
    crew_id: Optional[str] = None
    is_public: bool = True
    image_url: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def check_period(self):
        if self.end_date <= self.start_date:
            raise ValueError("종료일은 시작일 이후여야 합니다")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "title": "11월 100km 달리기",
                "type": "DISTANCE",
                "target_value": 100,
                "target_unit": "KM",
                "start_date": "2026-11-01T00:00:00",
                "end_date": "2026-11-30T23:59:59"
            }
        }


class ChallengeUpdateRequest(BaseModel):
    """챌린지 수정 요청 스키마"""
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    target_value: Optional[float] = Field(None, gt=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_public: Optional[bool] = None
    image_url: Optional[str] = Field(None, max_length=500)


class ProgressUpdateRequest(BaseModel):
    """진행 상황 갱신 요청 스키마"""
    current_value: float = Field(..., ge=0)


class ChallengeSchema(BaseModel):
    """챌린지 스키마"""
    id: str
    creator_id: str
    crew_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    type: str
    target_value: float
    target_unit: str
    start_date: datetime
    end_date: datetime
    is_public: bool
    image_url: Optional[str] = None
    participant_count: int = 0
    joined: bool = False
    created_at: datetime


class ParticipantSchema(BaseModel):
    """챌린지 참가자 / 리더보드 항목 스키마"""
    user: UserSummarySchema
    current_value: float
    is_completed: bool
    completed_at: Optional[datetime] = None
    rank: Optional[int] = None
