# ============================================
# app/api/v1/feed.py - 피드 API 라우터
# ============================================

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.api.deps import get_current_user_optional
from app.models.user import User
from app.services.feed_service import FeedService
from app.schemas.workout import WorkoutSchema
from app.schemas.common import success_response, cursor_page
from app.utils.pagination import clamp_limit


router = APIRouter(prefix="/feed", tags=["Feed"])


@router.get(
    "",
    summary="피드 조회",
    description="""
    운동 기록 피드를 최신순으로 조회합니다.

    **노출 범위:**
    - 비로그인: PUBLIC 기록
    - 로그인: PUBLIC + 내 기록 + 팔로우(ACCEPTED)한 사용자의 FOLLOWERS 기록
    - 차단 관계 사용자의 기록은 제외

    **페이지네이션:**
    - limit: 1~50 (기본 10, 범위 밖은 보정)
    - cursor: 이전 응답의 nextCursor (마지막 페이지면 null)
    - 잘못된 cursor: 400
    """
)
def get_feed(
    cursor: Optional[str] = Query(None, description="이전 응답의 nextCursor"),
    limit: Optional[str] = Query(None, description="페이지 크기"),
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    workouts, next_cursor = FeedService(db).get_feed(current_user, cursor, clamp_limit(limit))
    items = [WorkoutSchema.model_validate(w) for w in workouts]
    return success_response(cursor_page(items, next_cursor))
