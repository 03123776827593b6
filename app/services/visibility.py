# ============================================
# app/services/visibility.py - 공개 범위 판단
# ============================================
# 게시물 / 운동 기록의 공개 범위(PRIVATE, FOLLOWERS, PUBLIC)를
# 조회자 기준으로 판단하는 공통 함수입니다.
# ============================================

from typing import Optional
from sqlalchemy.orm import Session

from app.models.user import VISIBILITY_PUBLIC, VISIBILITY_FOLLOWERS
from app.services.follow_service import is_accepted_follower


def can_view(db: Session, viewer_id: Optional[str], owner_id: str, visibility: str) -> bool:
    """
    조회자가 콘텐츠를 볼 수 있는지 판단합니다.

    - 본인: 항상 가능
    - PUBLIC: 누구나
    - FOLLOWERS: ACCEPTED 팔로워만
    - PRIVATE: 본인만

    차단 여부는 호출하는 쪽에서 따로 확인합니다.
    """
    if viewer_id is not None and viewer_id == owner_id:
        return True
    if visibility == VISIBILITY_PUBLIC:
        return True
    if visibility == VISIBILITY_FOLLOWERS and viewer_id is not None:
        return is_accepted_follower(db, viewer_id, owner_id)
    return False
