# ============================================
# app/models/workout.py - 운동 관련 데이터베이스 모델
# ============================================
# 운동 기록, 업로드된 운동 파일(GPX/FIT), 운동 기록 좋아요/댓글 테이블을 정의합니다.
# ============================================

from datetime import datetime
from sqlalchemy import (
    Column, String, Integer, Float, Text, DateTime, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship

from app.db.database import Base
from app.models.user import generate_uuid, VISIBILITY_FOLLOWERS


# 운동 기록 출처
SOURCE_MANUAL = "MANUAL"
SOURCE_GPX = "GPX"
SOURCE_FIT = "FIT"


class Workout(Base):
    """
    운동 테이블 (workouts)

    직접 입력하거나 GPX/FIT 파일에서 만들어진 운동 기록입니다.
    피드(/feed)는 이 테이블을 created_at, id 역순으로 페이지네이션합니다.

    [신입 개발자를 위한 팁]
    - distance는 미터, duration은 초 단위입니다.
    - pace = duration / (distance / 1000) → 1km당 초
    - Soft Delete: deleted_at이 있으면 삭제된 기록
    """
    __tablename__ = "workouts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(100), nullable=True)
    memo = Column(Text, nullable=True)
    visibility = Column(String(20), nullable=False, default=VISIBILITY_FOLLOWERS)
    source = Column(String(10), nullable=False, default=SOURCE_MANUAL)   # MANUAL / GPX / FIT

    # ========== 운동 통계 ==========
    distance = Column(Float, nullable=False)            # 총 거리 (m)
    duration = Column(Integer, nullable=False)          # 총 시간 (초)
    pace = Column(Float, nullable=True)                 # 평균 페이스 (초/km)
    elevation_gain = Column(Float, nullable=True)       # 상승 고도 (m)

    # ========== 시간 정보 ==========
    date = Column(DateTime, nullable=False)             # 운동 날짜
    start_time = Column(DateTime, nullable=True)        # 파일에서 읽은 시작 시각
    end_time = Column(DateTime, nullable=True)          # 파일에서 읽은 종료 시각

    # 단순화된 이동 경로 (Google encoded polyline)
    route_polyline = Column(Text, nullable=True)

    # ========== 통계 (캐시) ==========
    like_count = Column(Integer, nullable=False, default=0)
    comment_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True)        # 삭제일 (Soft Delete)

    # ========== 관계 정의 ==========
    user = relationship("User", lazy="joined")
    files = relationship("WorkoutFile", back_populates="workout", lazy="select")

    def __repr__(self):
        return f"<Workout(id={self.id}, distance={self.distance}, source={self.source})>"


class WorkoutFile(Base):
    """
    운동 파일 테이블 (workout_files)

    업로드 후 파싱된 GPX/FIT 파일과 생성된 운동 기록을 연결합니다.
    """
    __tablename__ = "workout_files"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    workout_id = Column(String(36), ForeignKey("workouts.id"), nullable=True)

    file_key = Column(String(500), nullable=False)      # 저장소 키
    file_type = Column(String(10), nullable=False)      # GPX / FIT
    original_file_name = Column(String(255), nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    workout = relationship("Workout", back_populates="files")


class WorkoutLike(Base):
    """
    운동 기록 좋아요 테이블 (workout_likes)

    피드 아이템(운동 기록)에 바로 누르는 좋아요입니다. 중복 좋아요는 불가능합니다.
    """
    __tablename__ = "workout_likes"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    workout_id = Column(String(36), ForeignKey("workouts.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('workout_id', 'user_id', name='unique_workout_like'),
    )


class WorkoutComment(Base):
    """운동 기록 댓글 테이블 (workout_comments, 답글 없음)"""
    __tablename__ = "workout_comments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    workout_id = Column(String(36), ForeignKey("workouts.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)

    content = Column(String(500), nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True)

    author = relationship("User", lazy="joined")

    def __repr__(self):
        return f"<WorkoutComment(id={self.id}, workout_id={self.workout_id})>"
