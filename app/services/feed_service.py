# ============================================
# app/services/feed_service.py - 피드 서비스
# ============================================
# 조회자에게 보이는 운동 기록을 최신순으로 커서 페이지네이션합니다.
# ============================================

import logging
from typing import Optional, List, Tuple
from sqlalchemy import or_, and_
from sqlalchemy.orm import Session

from app.models.user import User, VISIBILITY_PUBLIC, VISIBILITY_FOLLOWERS
from app.models.workout import Workout
from app.services.block_service import blocked_user_ids
from app.services.follow_service import accepted_following_ids
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


class FeedService:
    """
    피드 서비스 클래스

    [노출 규칙]
    - 비로그인: PUBLIC 운동 기록만
    - 로그인: PUBLIC + 내 기록 전체 + ACCEPTED로 팔로우한 사용자의 FOLLOWERS 기록
    - 차단 관계(양방향) 사용자, 삭제된 기록, 탈퇴한 사용자의 기록은 제외

    [정렬]
    (created_at DESC, id DESC) - 같은 시각에 만들어진 기록도 순서가 고정됩니다.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_feed(
        self,
        viewer: Optional[User],
        cursor: Optional[str],
        limit: int
    ) -> Tuple[List[Workout], Optional[str]]:
        query = self.db.query(Workout).join(User, User.id == Workout.user_id).filter(
            Workout.deleted_at.is_(None),
            User.deleted_at.is_(None)
        )

        if viewer is None:
            query = query.filter(Workout.visibility == VISIBILITY_PUBLIC)
        else:
            conditions = [
                Workout.visibility == VISIBILITY_PUBLIC,
                Workout.user_id == viewer.id,
            ]
            following = accepted_following_ids(self.db, viewer.id)
            if following:
                conditions.append(and_(
                    Workout.visibility == VISIBILITY_FOLLOWERS,
                    Workout.user_id.in_(following)
                ))
            query = query.filter(or_(*conditions))

            hidden = blocked_user_ids(self.db, viewer.id)
            if hidden:
                query = query.filter(Workout.user_id.notin_(hidden))

        items, next_cursor = paginate(query, Workout, cursor, limit)
        logger.debug(
            f"Feed viewer={viewer.id if viewer else 'anonymous'} "
            f"items={len(items)} has_next={next_cursor is not None}"
        )
        return items, next_cursor
