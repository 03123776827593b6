# ============================================
# app/services/workout_social_service.py - 운동 기록 좋아요 / 댓글 서비스
# ============================================
# 피드에 올라온 운동 기록에 바로 좋아요와 댓글을 남깁니다.
# 게시물(post_service.py)과 같은 규칙을 따르되, 답글과 멘션은 없습니다.
# ============================================

import logging
from datetime import datetime
from typing import Optional, List, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.user import User
from app.models.workout import Workout, WorkoutLike, WorkoutComment
from app.models.notification import NOTIFICATION_LIKE, NOTIFICATION_COMMENT
from app.schemas.community import LikeStatusSchema
from app.services.block_service import blocked_user_ids
from app.services.notification_service import NotificationService
from app.services.workout_service import WorkoutService
from app.core.exceptions import (
    WorkoutNotFoundException, CommentNotFoundException, ForbiddenException,
    AlreadyLikedException, ConflictException, NotFoundException
)
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


class WorkoutSocialService:
    """
    운동 기록 좋아요 / 댓글 서비스 클래스

    [신입 개발자를 위한 팁]
    - 볼 수 있는지 여부는 WorkoutService.get_workout_detail()로 확인합니다.
      (볼 수 없는 기록에는 좋아요/댓글도 403)
    - like_count / comment_count는 게시물과 마찬가지로 DB에서 원자적으로 증감합니다.
    """

    def __init__(self, db: Session):
        self.db = db
        self.workouts = WorkoutService(db)
        self.notifications = NotificationService(db)

    def _is_liked(self, workout_id: str, user_id: Optional[str]) -> bool:
        if not user_id:
            return False
        return self.db.query(WorkoutLike.id).filter(
            WorkoutLike.workout_id == workout_id,
            WorkoutLike.user_id == user_id
        ).first() is not None

    # ============================================
    # 좋아요
    # ============================================

    def like_workout(self, workout_id: str, user: User) -> LikeStatusSchema:
        """
        운동 기록 좋아요

        Raises:
            WorkoutNotFoundException: 없거나 삭제됨 (404)
            ForbiddenException: 볼 수 없는 기록 (403)
            AlreadyLikedException: 이미 좋아요함 (409)
        """
        workout = self.workouts.get_workout_detail(workout_id, user.id)
        if self._is_liked(workout.id, user.id):
            raise AlreadyLikedException()

        try:
            self.db.add(WorkoutLike(workout_id=workout.id, user_id=user.id))
            self.db.query(Workout).filter(Workout.id == workout.id).update(
                {Workout.like_count: Workout.like_count + 1}, synchronize_session=False
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise AlreadyLikedException()

        self.db.refresh(workout)
        self.notifications.notify(
            user_id=workout.user_id,
            type=NOTIFICATION_LIKE,
            message=f"{user.name}님이 회원님의 운동 기록을 좋아합니다",
            actor_id=user.id,
            reference_type="WORKOUT",
            reference_id=workout.id
        )
        return LikeStatusSchema(liked=True, like_count=workout.like_count)

    def unlike_workout(self, workout_id: str, user: User) -> LikeStatusSchema:
        """
        좋아요 취소

        Raises:
            NotFoundException: 좋아요하지 않은 기록 (404)
        """
        workout = self.db.query(Workout).filter(
            Workout.id == workout_id,
            Workout.deleted_at.is_(None)
        ).first()
        if not workout:
            raise WorkoutNotFoundException()

        deleted = self.db.query(WorkoutLike).filter(
            WorkoutLike.workout_id == workout.id,
            WorkoutLike.user_id == user.id
        ).delete(synchronize_session=False)
        if not deleted:
            raise NotFoundException(resource="좋아요 기록", error_code="LIKE_NOT_FOUND")

        self.db.query(Workout).filter(Workout.id == workout.id, Workout.like_count > 0).update(
            {Workout.like_count: Workout.like_count - 1}, synchronize_session=False
        )
        self.db.commit()
        self.db.refresh(workout)
        return LikeStatusSchema(liked=False, like_count=workout.like_count)

    def like_status(self, workout_id: str, viewer_id: Optional[str]) -> LikeStatusSchema:
        workout = self.workouts.get_workout_detail(workout_id, viewer_id)
        return LikeStatusSchema(liked=self._is_liked(workout.id, viewer_id), like_count=workout.like_count)

    # ============================================
    # 댓글
    # ============================================

    def add_comment(self, workout_id: str, user: User, content: str) -> WorkoutComment:
        """댓글 작성 (기록 주인에게 COMMENT 알림)"""
        workout = self.workouts.get_workout_detail(workout_id, user.id)

        comment = WorkoutComment(workout_id=workout.id, user_id=user.id, content=content)
        self.db.add(comment)
        self.db.query(Workout).filter(Workout.id == workout.id).update(
            {Workout.comment_count: Workout.comment_count + 1}, synchronize_session=False
        )
        self.db.commit()
        self.db.refresh(comment)

        self.notifications.notify(
            user_id=workout.user_id,
            type=NOTIFICATION_COMMENT,
            message=f"{user.name}님이 운동 기록에 댓글을 남겼습니다: {content[:30]}",
            actor_id=user.id,
            reference_type="WORKOUT",
            reference_id=workout.id
        )
        return comment

    def list_comments(
        self,
        workout_id: str,
        viewer_id: Optional[str],
        cursor: Optional[str],
        limit: int
    ) -> Tuple[List[WorkoutComment], Optional[str]]:
        """댓글 목록 (작성순, 차단 관계 사용자의 댓글 제외)"""
        workout = self.workouts.get_workout_detail(workout_id, viewer_id)
        query = self.db.query(WorkoutComment).filter(
            WorkoutComment.workout_id == workout.id,
            WorkoutComment.deleted_at.is_(None)
        )
        if viewer_id:
            hidden = blocked_user_ids(self.db, viewer_id)
            if hidden:
                query = query.filter(WorkoutComment.user_id.notin_(hidden))
        return paginate(query, WorkoutComment, cursor, limit, descending=False)

    def delete_comment(self, workout_id: str, comment_id: str, user: User) -> None:
        """
        댓글 삭제 (Soft Delete, 작성자만)

        Raises:
            CommentNotFoundException: 없음 (404)
            ForbiddenException: 본인 댓글이 아님 (403)
            ConflictException: 이미 삭제됨 (409)
        """
        comment = self.db.query(WorkoutComment).filter(
            WorkoutComment.id == comment_id,
            WorkoutComment.workout_id == workout_id
        ).first()
        if not comment:
            raise CommentNotFoundException()
        if comment.user_id != user.id:
            raise ForbiddenException("본인의 댓글만 삭제할 수 있습니다")
        if comment.deleted_at is not None:
            raise ConflictException(message="이미 삭제된 댓글입니다", error_code="COMMENT_ALREADY_DELETED")

        comment.deleted_at = datetime.utcnow()
        self.db.query(Workout).filter(Workout.id == workout_id, Workout.comment_count > 0).update(
            {Workout.comment_count: Workout.comment_count - 1}, synchronize_session=False
        )
        self.db.commit()
        logger.info(f"Workout comment soft-deleted: id={comment_id}")
