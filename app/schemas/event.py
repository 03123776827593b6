# ============================================
# app/schemas/event.py - 이벤트(대회) 스키마
# ============================================

from typing import Optional, Literal
from datetime import datetime
from pydantic import BaseModel, Field

from app.schemas.user import UserSummarySchema


EventType = Literal["MARATHON", "HALF", "TEN_K", "FIVE_K", "ULTRA", "TRAIL", "OTHER"]


class EventCreateRequest(BaseModel):
    """
    이벤트 생성 요청 스키마

    [필드 설명]
    - event_type: MARATHON / HALF / TEN_K / FIVE_K / ULTRA / TRAIL / OTHER
    - max_participants: 최대 참가 인원 (1명 이상, 생략하면 제한 없음)
    """
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=5000)
    event_type: EventType
    event_date: datetime
    location: Optional[str] = Field(None, max_length=200)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    image_url: Optional[str] = Field(None, max_length=500)
    max_participants: Optional[int] = Field(None, ge=1)

    class Config:
        json_schema_extra = {
            "example": {
                "title": "가을 한강 하프",
                "event_type": "HALF",
                "event_date": "2026-11-08T08:00:00",
                "location": "여의도 한강공원",
                "max_participants": 500
            }
        }


class EventUpdateRequest(BaseModel):
    """이벤트 수정 요청 스키마"""
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=5000)
    event_type: Optional[EventType] = None
    event_date: Optional[datetime] = None
    location: Optional[str] = Field(None, max_length=200)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    image_url: Optional[str] = Field(None, max_length=500)
    max_participants: Optional[int] = Field(None, ge=1)


class EventSchema(BaseModel):
    """이벤트 스키마"""
    id: str
    organizer_id: str
    title: str
    description: Optional[str] = None
    event_type: str
    event_date: datetime
    location: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    image_url: Optional[str] = None
    max_participants: Optional[int] = None
    participant_count: int = 0
    my_status: Optional[str] = None
    created_at: datetime


class EventResultRequest(BaseModel):
    """
    대회 기록 제출 요청 스키마

    status가 COMPLETED일 때만 result_time이 의미가 있습니다.
    """
    status: Literal["COMPLETED", "DNS", "DNF"]
    result_time: Optional[int] = Field(None, ge=1, description="완주 기록 (초)")
    result_rank: Optional[int] = Field(None, ge=1, description="순위")
    bib_number: Optional[str] = Field(None, max_length=20, description="배번")


class EventRegistrationSchema(BaseModel):
    """참가 신청 / 기록 스키마"""
    id: str
    event_id: str
    user: UserSummarySchema
    status: str
    result_time: Optional[int] = None
    result_rank: Optional[int] = None
    bib_number: Optional[str] = None
    registered_at: datetime

    class Config:
        from_attributes = True
