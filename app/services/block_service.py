# ============================================
# app/services/block_service.py - 차단 서비스
# ============================================

import logging
from typing import List, Set
from sqlalchemy import or_, and_
from sqlalchemy.orm import Session

from app.models.user import User
from app.models.social import Block, Follow
from app.core.exceptions import (
    ConflictException, AlreadyBlockedException, UserNotFoundException, NotFoundException
)

logger = logging.getLogger(__name__)


def is_blocked(db: Session, user_a: str, user_b: str) -> bool:
    """
    두 사용자 사이에 차단이 있는지 확인합니다 (방향 무관).

    a가 b를 차단했거나 b가 a를 차단했으면 True
    """
    return db.query(Block.id).filter(or_(
        and_(Block.blocker_id == user_a, Block.blocked_id == user_b),
        and_(Block.blocker_id == user_b, Block.blocked_id == user_a)
    )).first() is not None


def blocked_user_ids(db: Session, user_id: str) -> Set[str]:
    """
    user_id와 차단 관계인 모든 사용자 ID

    내가 차단한 사용자 + 나를 차단한 사용자 (합집합)
    """
    rows = db.query(Block.blocker_id, Block.blocked_id).filter(or_(
        Block.blocker_id == user_id,
        Block.blocked_id == user_id
    )).all()
    result = set()
    for blocker_id, blocked_id in rows:
        result.add(blocked_id if blocker_id == user_id else blocker_id)
    return result


class BlockService:
    """
    차단 서비스 클래스

    [신입 개발자를 위한 팁]
    - 차단하면 양방향 팔로우 관계가 함께 삭제됩니다 (한 트랜잭션).
    - 차단은 한 방향으로 저장되지만, 효과(피드, 프로필, 대화 등)는 양방향입니다.
    """

    def __init__(self, db: Session):
        self.db = db

    def block(self, blocker: User, target_id: str) -> Block:
        """
        사용자를 차단합니다.

        Raises:
            ConflictException: 자기 자신 차단 (409)
            UserNotFoundException: 대상이 없음 (404)
            AlreadyBlockedException: 이미 차단함 (409)
        """
        if blocker.id == target_id:
            raise ConflictException(message="자기 자신은 차단할 수 없습니다", error_code="CANNOT_BLOCK_SELF")

        target = self.db.query(User).filter(User.id == target_id, User.deleted_at.is_(None)).first()
        if not target:
            raise UserNotFoundException()

        existing = self.db.query(Block).filter(
            Block.blocker_id == blocker.id,
            Block.blocked_id == target_id
        ).first()
        if existing:
            raise AlreadyBlockedException()

        block = Block(blocker_id=blocker.id, blocked_id=target_id)
        self.db.add(block)

        # 양방향 팔로우 삭제
        removed = self.db.query(Follow).filter(or_(
            and_(Follow.follower_id == blocker.id, Follow.following_id == target_id),
            and_(Follow.follower_id == target_id, Follow.following_id == blocker.id)
        )).delete(synchronize_session=False)

        self.db.commit()
        self.db.refresh(block)
        logger.info(f"User {blocker.id} blocked {target_id} (follows removed: {removed})")
        return block

    def unblock(self, blocker: User, target_id: str) -> None:
        """
        차단을 해제합니다.

        Raises:
            NotFoundException: 차단하지 않은 사용자 (404)
        """
        deleted = self.db.query(Block).filter(
            Block.blocker_id == blocker.id,
            Block.blocked_id == target_id
        ).delete(synchronize_session=False)
        if not deleted:
            raise NotFoundException(resource="차단 정보", error_code="BLOCK_NOT_FOUND")
        self.db.commit()
        logger.info(f"User {blocker.id} unblocked {target_id}")

    def list_blocked(self, blocker: User) -> List[User]:
        """내가 차단한 사용자 목록 (최근 차단 순)"""
        return self.db.query(User).join(Block, Block.blocked_id == User.id).filter(
            Block.blocker_id == blocker.id
        ).order_by(Block.created_at.desc()).all()
