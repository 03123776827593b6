# ============================================
# app/services/follow_service.py - 팔로우 서비스
# ============================================
# 팔로우 / 언팔로우, 팔로우 요청 수락/거절, 팔로워 목록을 처리합니다.
# ============================================

import logging
from typing import List, Optional, Set
from sqlalchemy.orm import Session

from app.models.user import User
from app.models.social import Follow, FOLLOW_PENDING, FOLLOW_ACCEPTED
from app.models.notification import NOTIFICATION_FOLLOW, NOTIFICATION_FOLLOW_REQUEST
from app.services.block_service import is_blocked, blocked_user_ids
from app.services.notification_service import NotificationService
from app.core.exceptions import (
    ConflictException, AlreadyFollowingException, ForbiddenException,
    UserNotFoundException, NotFoundException
)

logger = logging.getLogger(__name__)


def get_follow(db: Session, follower_id: str, following_id: str) -> Optional[Follow]:
    return db.query(Follow).filter(
        Follow.follower_id == follower_id,
        Follow.following_id == following_id
    ).first()


def is_accepted_follower(db: Session, follower_id: str, following_id: str) -> bool:
    """follower가 following을 ACCEPTED 상태로 팔로우 중인지 확인합니다."""
    follow = get_follow(db, follower_id, following_id)
    return follow is not None and follow.status == FOLLOW_ACCEPTED


def accepted_following_ids(db: Session, user_id: str) -> Set[str]:
    """user_id가 ACCEPTED 상태로 팔로우하는 사용자 ID 집합"""
    rows = db.query(Follow.following_id).filter(
        Follow.follower_id == user_id,
        Follow.status == FOLLOW_ACCEPTED
    ).all()
    return {row[0] for row in rows}


class FollowService:
    """
    팔로우 서비스 클래스

    [신입 개발자를 위한 팁]
    - 비공개 계정(is_private)을 팔로우하면 PENDING으로 생성되고,
      상대가 수락해야 ACCEPTED가 됩니다.
    - 목록 조회 시 차단 관계(양방향)인 사용자는 빠집니다.
    """

    def __init__(self, db: Session):
        self.db = db
        self.notifications = NotificationService(db)

    def _get_active_user(self, user_id: str) -> User:
        user = self.db.query(User).filter(User.id == user_id, User.deleted_at.is_(None)).first()
        if not user:
            raise UserNotFoundException()
        return user

    # ============================================
    # 팔로우 / 언팔로우
    # ============================================

    def follow(self, follower: User, target_id: str) -> Follow:
        """
        사용자를 팔로우합니다.

        Raises:
            ConflictException: 자기 자신 (409)
            UserNotFoundException: 대상이 없음 (404)
            ForbiddenException: 차단 관계 (403)
            AlreadyFollowingException: 이미 팔로우 중이거나 요청함 (409)
        """
        if follower.id == target_id:
            raise ConflictException(message="자기 자신은 팔로우할 수 없습니다", error_code="CANNOT_FOLLOW_SELF")

        target = self._get_active_user(target_id)

        if is_blocked(self.db, follower.id, target_id):
            raise ForbiddenException("차단된 사용자입니다")

        if get_follow(self.db, follower.id, target_id):
            raise AlreadyFollowingException()

        status = FOLLOW_PENDING if target.is_private else FOLLOW_ACCEPTED
        follow = Follow(follower_id=follower.id, following_id=target_id, status=status)
        self.db.add(follow)
        self.db.commit()
        self.db.refresh(follow)
        logger.info(f"Follow {follower.id} -> {target_id} ({status})")

        if status == FOLLOW_PENDING:
            self.notifications.notify(
                user_id=target_id,
                type=NOTIFICATION_FOLLOW_REQUEST,
                message=f"{follower.name}님이 팔로우를 요청했습니다",
                actor_id=follower.id,
                reference_type="USER",
                reference_id=follower.id
            )
        else:
            self.notifications.notify(
                user_id=target_id,
                type=NOTIFICATION_FOLLOW,
                message=f"{follower.name}님이 회원님을 팔로우합니다",
                actor_id=follower.id,
                reference_type="USER",
                reference_id=follower.id
            )
        return follow

    def unfollow(self, follower: User, target_id: str) -> None:
        """
        언팔로우 (PENDING 요청 취소 포함)

        Raises:
            NotFoundException: 팔로우하지 않은 사용자 (404)
        """
        deleted = self.db.query(Follow).filter(
            Follow.follower_id == follower.id,
            Follow.following_id == target_id
        ).delete(synchronize_session=False)
        if not deleted:
            raise NotFoundException(resource="팔로우 정보", error_code="FOLLOW_NOT_FOUND")
        self.db.commit()

    # ============================================
    # 팔로우 요청 수락 / 거절
    # ============================================

    def _get_pending(self, user: User, follower_id: str) -> Follow:
        follow = self.db.query(Follow).filter(
            Follow.follower_id == follower_id,
            Follow.following_id == user.id,
            Follow.status == FOLLOW_PENDING
        ).first()
        if not follow:
            raise NotFoundException(resource="팔로우 요청", error_code="FOLLOW_REQUEST_NOT_FOUND")
        return follow

    def accept(self, user: User, follower_id: str) -> Follow:
        follow = self._get_pending(user, follower_id)
        follow.status = FOLLOW_ACCEPTED
        self.db.commit()
        self.db.refresh(follow)
        return follow

    def reject(self, user: User, follower_id: str) -> None:
        follow = self._get_pending(user, follower_id)
        self.db.delete(follow)
        self.db.commit()

    # ============================================
    # 목록 조회
    # ============================================

    def _exclude_blocked(self, query, viewer_id: Optional[str]):
        if viewer_id:
            hidden = blocked_user_ids(self.db, viewer_id)
            if hidden:
                query = query.filter(User.id.notin_(hidden))
        return query

    def followers(self, user_id: str, viewer_id: Optional[str] = None) -> List[User]:
        """user_id를 ACCEPTED 상태로 팔로우하는 사용자 목록"""
        query = self.db.query(User).join(Follow, Follow.follower_id == User.id).filter(
            Follow.following_id == user_id,
            Follow.status == FOLLOW_ACCEPTED,
            User.deleted_at.is_(None)
        )
        query = self._exclude_blocked(query, viewer_id)
        return query.order_by(Follow.created_at.desc()).all()

    def following(self, user_id: str, viewer_id: Optional[str] = None) -> List[User]:
        """user_id가 ACCEPTED 상태로 팔로우하는 사용자 목록"""
        query = self.db.query(User).join(Follow, Follow.following_id == User.id).filter(
            Follow.follower_id == user_id,
            Follow.status == FOLLOW_ACCEPTED,
            User.deleted_at.is_(None)
        )
        query = self._exclude_blocked(query, viewer_id)
        return query.order_by(Follow.created_at.desc()).all()

    def pending_requests(self, user: User) -> List[User]:
        """나에게 온 팔로우 요청 목록"""
        query = self.db.query(User).join(Follow, Follow.follower_id == User.id).filter(
            Follow.following_id == user.id,
            Follow.status == FOLLOW_PENDING,
            User.deleted_at.is_(None)
        )
        query = self._exclude_blocked(query, user.id)
        return query.order_by(Follow.created_at.desc()).all()

    def public_list(self, user_id: str, viewer_id: Optional[str], direction: str) -> List[User]:
        """
        다른 사용자의 팔로워/팔로잉 목록 (공개 API)

        Raises:
            UserNotFoundException: 사용자가 없음 (404)
            ForbiddenException: 조회자와 차단 관계 (403)
        """
        self._get_active_user(user_id)
        if viewer_id and is_blocked(self.db, viewer_id, user_id):
            raise ForbiddenException("차단된 사용자입니다")
        if direction == "followers":
            return self.followers(user_id, viewer_id)
        return self.following(user_id, viewer_id)
