# ============================================
# app/models/event.py - 대회/이벤트 모델
# ============================================
# 러닝 대회(이벤트)와 참가 신청/기록 테이블을 정의합니다.
# ============================================

from datetime import datetime
from sqlalchemy import (
    Column, String, Integer, Float, Text, DateTime,
    ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship

from app.db.database import Base
from app.models.user import generate_uuid


EVENT_TYPES = ("MARATHON", "HALF", "TEN_K", "FIVE_K", "ULTRA", "TRAIL", "OTHER")

# 참가 상태
REGISTRATION_REGISTERED = "REGISTERED"
REGISTRATION_CANCELLED = "CANCELLED"
REGISTRATION_COMPLETED = "COMPLETED"
REGISTRATION_DNS = "DNS"     # Did Not Start
REGISTRATION_DNF = "DNF"     # Did Not Finish
RESULT_STATUSES = (REGISTRATION_COMPLETED, REGISTRATION_DNS, REGISTRATION_DNF)


class Event(Base):
    """
    이벤트 테이블 (events)

    주최자(organizer)만 수정/삭제할 수 있습니다.
    """
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    organizer_id = Column(String(36), ForeignKey("users.id"), nullable=False)

    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    event_type = Column(String(20), nullable=False)      # MARATHON / HALF / ...
    event_date = Column(DateTime, nullable=False, index=True)

    # ========== 장소 ==========
    location = Column(String(200), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    image_url = Column(String(500), nullable=True)
    max_participants = Column(Integer, nullable=True)   # None이면 제한 없음

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True)

    registrations = relationship("EventRegistration", back_populates="event", lazy="select")

    def __repr__(self):
        return f"<Event(id={self.id}, title={self.title})>"


class EventRegistration(Base):
    """
    이벤트 참가 신청 테이블 (event_registrations)

    [상태 흐름]
    REGISTERED → CANCELLED (참가 취소, 다시 신청하면 REGISTERED)
    REGISTERED → COMPLETED / DNS / DNF (기록 제출)
    """
    __tablename__ = "event_registrations"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=REGISTRATION_REGISTERED)

    # ========== 대회 기록 ==========
    result_time = Column(Integer, nullable=True)        # 완주 기록 (초)
    result_rank = Column(Integer, nullable=True)        # 순위
    bib_number = Column(String(20), nullable=True)      # 배번

    registered_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('event_id', 'user_id', name='unique_event_registration'),
    )

    event = relationship("Event", back_populates="registrations")
    user = relationship("User", lazy="joined")
