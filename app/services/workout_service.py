# ============================================
# app/services/workout_service.py - 운동 서비스
# ============================================
# 운동 기록 생성, 조회, 수정, 삭제 비즈니스 로직을 처리합니다.
# ============================================

import logging
from datetime import datetime
from typing import Optional, List, Tuple
from sqlalchemy.orm import Session

from app.models.user import User
from app.models.workout import Workout, SOURCE_MANUAL
from app.schemas.workout import WorkoutCreateRequest, WorkoutUpdateRequest
from app.services.block_service import is_blocked
from app.services.visibility import can_view
from app.core.exceptions import WorkoutNotFoundException, ForbiddenException
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


def calculate_pace(distance_m: float, duration_s: int) -> Optional[float]:
    """
    평균 페이스를 계산합니다 (초/km).

    Examples:
        >>> calculate_pace(10000, 3000)   # 10km 50분
        300.0
    """
    if not distance_m or distance_m <= 0:
        return None
    return round(duration_s / (distance_m / 1000), 1)


class WorkoutService:
    """
    운동 서비스 클래스

    [신입 개발자를 위한 팁]
    - 공개 범위를 생략하면 사용자 프로필의 workout_sharing_default를 사용합니다.
    - 삭제는 deleted_at만 기록합니다 (Soft Delete).
    """

    def __init__(self, db: Session):
        self.db = db

    # ============================================
    # 생성
    # ============================================

    def create_workout(self, user: User, request: WorkoutCreateRequest) -> Workout:
        """운동 기록을 직접 입력해서 생성합니다."""
        workout = Workout(
            user_id=user.id,
            title=request.title,
            memo=request.memo,
            visibility=request.visibility or user.workout_sharing_default,
            source=SOURCE_MANUAL,
            distance=request.distance,
            duration=request.duration,
            pace=calculate_pace(request.distance, request.duration),
            date=request.date
        )
        self.db.add(workout)
        self.db.commit()
        self.db.refresh(workout)
        logger.info(f"Workout created: id={workout.id} user_id={user.id} distance={workout.distance}")
        return workout

    # ============================================
    # 조회
    # ============================================

    def get_workout_list(
        self,
        user: User,
        cursor: Optional[str],
        limit: int
    ) -> Tuple[List[Workout], Optional[str]]:
        """내 운동 기록 목록 (최신순)"""
        query = self.db.query(Workout).filter(
            Workout.user_id == user.id,
            Workout.deleted_at.is_(None)
        )
        return paginate(query, Workout, cursor, limit)

    def get_workout_detail(self, workout_id: str, viewer_id: Optional[str]) -> Workout:
        """
        운동 기록 상세 조회

        Raises:
            WorkoutNotFoundException: 없거나 삭제됨 (404)
            ForbiddenException: 공개 범위 밖이거나 차단 관계 (403)
        """
        workout = self.db.query(Workout).filter(
            Workout.id == workout_id,
            Workout.deleted_at.is_(None)
        ).first()
        if not workout or workout.user.is_deleted:
            raise WorkoutNotFoundException()

        if viewer_id and viewer_id != workout.user_id and is_blocked(self.db, viewer_id, workout.user_id):
            raise ForbiddenException("차단된 사용자의 기록입니다")

        if not can_view(self.db, viewer_id, workout.user_id, workout.visibility):
            raise ForbiddenException("이 운동 기록을 볼 권한이 없습니다")

        return workout

    # ============================================
    # 수정 / 삭제
    # ============================================

    def update_workout(self, workout_id: str, user: User, request: WorkoutUpdateRequest) -> Workout:
        workout = self._get_workout(workout_id, user.id)

        changes = request.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None and field in ("distance", "duration", "date", "visibility"):
                continue
            setattr(workout, field, value)

        if "distance" in changes or "duration" in changes:
            workout.pace = calculate_pace(workout.distance, workout.duration)

        self.db.commit()
        self.db.refresh(workout)
        return workout

    def delete_workout(self, workout_id: str, user: User) -> None:
        workout = self._get_workout(workout_id, user.id)
        workout.deleted_at = datetime.utcnow()
        self.db.commit()
        logger.info(f"Workout soft-deleted: id={workout_id}")

    # ============================================
    # 헬퍼 메서드
    # ============================================

    def _get_workout(self, workout_id: str, user_id: str) -> Workout:
        """
        본인 운동 기록 조회 (수정/삭제용)

        Raises:
            WorkoutNotFoundException: 없거나 삭제됨 (404)
            ForbiddenException: 본인 기록이 아님 (403)
        """
        workout = self.db.query(Workout).filter(
            Workout.id == workout_id,
            Workout.deleted_at.is_(None)
        ).first()
        if not workout:
            raise WorkoutNotFoundException()
        if workout.user_id != user_id:
            raise ForbiddenException("본인의 운동 기록만 수정할 수 있습니다")
        return workout
