# ============================================
# app/models/challenge.py - 챌린지 모델
# ============================================

from datetime import datetime
from sqlalchemy import (
    Column, String, Boolean, Float, Text, DateTime,
    ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship

from app.db.database import Base
from app.models.user import generate_uuid


CHALLENGE_TYPES = ("DISTANCE", "FREQUENCY", "STREAK", "PACE")
TARGET_UNITS = ("KM", "COUNT", "DAYS", "SEC_PER_KM")

# PACE 챌린지는 값이 작을수록 좋은 기록입니다.
LOWER_IS_BETTER_TYPES = ("PACE",)


class Challenge(Base):
    """
    챌린지 테이블 (challenges)

    기간 안에 목표(target_value, target_unit)를 달성하는 도전입니다.
    crew_id가 있으면 해당 크루 전용 챌린지입니다.
    """
    __tablename__ = "challenges"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    creator_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    crew_id = Column(String(36), ForeignKey("crews.id"), nullable=True, index=True)

    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(20), nullable=False)           # DISTANCE / FREQUENCY / STREAK / PACE
    target_value = Column(Float, nullable=False)
    target_unit = Column(String(20), nullable=False)    # KM / COUNT / DAYS / SEC_PER_KM

    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)

    is_public = Column(Boolean, nullable=False, default=True)
    image_url = Column(String(500), nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True)

    participants = relationship("ChallengeParticipant", back_populates="challenge", lazy="select")

    @property
    def lower_is_better(self) -> bool:
        return self.type in LOWER_IS_BETTER_TYPES


class ChallengeParticipant(Base):
    """챌린지 참가자와 진행 상황 (challenge_participants)"""
    __tablename__ = "challenge_participants"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    challenge_id = Column(String(36), ForeignKey("challenges.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    current_value = Column(Float, nullable=False, default=0)
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)

    joined_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('challenge_id', 'user_id', name='unique_challenge_participant'),
    )

    challenge = relationship("Challenge", back_populates="participants")
    user = relationship("User", lazy="joined")
