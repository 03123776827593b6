# ============================================
# app/services/profile_service.py - 프로필 서비스
# ============================================
# 프로필 조회 / 수정 / 탈퇴와 누적 통계 계산을 처리합니다.
# ============================================

import logging
from datetime import datetime
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.user import User
from app.models.social import Follow, FOLLOW_ACCEPTED
from app.models.workout import Workout
from app.schemas.user import ProfileSchema, ProfileStatsSchema, ProfileUpdateRequest
from app.services.block_service import is_blocked
from app.services.follow_service import get_follow
from app.core.exceptions import UserNotFoundException, ForbiddenException

logger = logging.getLogger(__name__)


class ProfileService:
    """프로필 서비스 클래스"""

    def __init__(self, db: Session):
        self.db = db

    def get_stats(self, user_id: str) -> ProfileStatsSchema:
        """
        사용자 누적 통계를 계산합니다.

        [계산 방식]
        - 삭제되지 않은 운동 기록만 집계
        - average_pace = 총 시간 / (총 거리 / 1000) → 초/km
        - 팔로워/팔로잉 수는 ACCEPTED 관계만
        """
        total_workouts, total_distance, total_duration = self.db.query(
            func.count(Workout.id),
            func.coalesce(func.sum(Workout.distance), 0),
            func.coalesce(func.sum(Workout.duration), 0)
        ).filter(
            Workout.user_id == user_id,
            Workout.deleted_at.is_(None)
        ).one()

        total_distance = float(total_distance or 0)
        total_duration = int(total_duration or 0)
        average_pace = None
        if total_distance > 0:
            average_pace = round(total_duration / (total_distance / 1000), 1)

        follower_count = self.db.query(Follow).filter(
            Follow.following_id == user_id,
            Follow.status == FOLLOW_ACCEPTED
        ).count()
        following_count = self.db.query(Follow).filter(
            Follow.follower_id == user_id,
            Follow.status == FOLLOW_ACCEPTED
        ).count()

        return ProfileStatsSchema(
            total_workouts=total_workouts or 0,
            total_distance=total_distance,
            total_duration=total_duration,
            average_pace=average_pace,
            follower_count=follower_count,
            following_count=following_count
        )

    def _to_schema(self, user: User, viewer_id: Optional[str]) -> ProfileSchema:
        is_self = viewer_id == user.id
        follow_status = None
        if viewer_id and not is_self:
            follow = get_follow(self.db, viewer_id, user.id)
            follow_status = follow.status if follow else None

        return ProfileSchema(
            id=user.id,
            email=user.email if is_self else None,
            name=user.name,
            profile_image=user.profile_image,
            background_image=user.background_image,
            bio=user.bio,
            is_private=user.is_private,
            workout_sharing_default=user.workout_sharing_default,
            created_at=user.created_at,
            stats=self.get_stats(user.id),
            is_following=None if is_self or not viewer_id else follow_status == FOLLOW_ACCEPTED,
            follow_status=follow_status
        )

    def get_my_profile(self, user: User) -> ProfileSchema:
        return self._to_schema(user, user.id)

    def get_profile(self, user_id: str, viewer_id: Optional[str]) -> ProfileSchema:
        """
        다른 사용자 프로필 조회

        Raises:
            UserNotFoundException: 없거나 탈퇴한 사용자 (404)
            ForbiddenException: 차단 관계 (403)
        """
        user = self.db.query(User).filter(User.id == user_id, User.deleted_at.is_(None)).first()
        if not user:
            raise UserNotFoundException()
        if viewer_id and viewer_id != user_id and is_blocked(self.db, viewer_id, user_id):
            raise ForbiddenException("차단된 사용자입니다")
        return self._to_schema(user, viewer_id)

    def update_profile(self, user: User, request: ProfileUpdateRequest) -> ProfileSchema:
        """보낸 필드만 수정합니다."""
        changes = request.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if field in ("name", "is_private", "workout_sharing_default") and value is None:
                continue
            setattr(user, field, value)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Profile updated: user_id={user.id} fields={list(changes)}")
        return self.get_my_profile(user)

    def delete_account(self, user: User) -> None:
        """
        회원 탈퇴 (Soft Delete)

        deleted_at만 기록합니다. 이미 발급된 토큰은 다음 요청부터 401로 거부됩니다.
        """
        user.deleted_at = datetime.utcnow()
        self.db.commit()
        logger.info(f"User soft-deleted: user_id={user.id}")
