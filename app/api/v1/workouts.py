# ============================================
# app/api/v1/workouts.py - 운동 기록 API 라우터
# ============================================
# 운동 기록 등록, 목록/상세 조회, 수정, 삭제와 좋아요, 댓글 API를 제공합니다.
# GPX 파일로 기록을 만드는 API는 uploads.py에 있습니다.
# ============================================

from typing import Optional
from fastapi import APIRouter, Depends, Query, Path, status
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.api.deps import get_current_user, get_current_user_optional
from app.models.user import User
from app.services.workout_service import WorkoutService
from app.services.workout_social_service import WorkoutSocialService
from app.schemas.workout import (
    WorkoutCreateRequest, WorkoutUpdateRequest, WorkoutSchema,
    WorkoutCommentCreateRequest, WorkoutCommentSchema
)
from app.schemas.common import success_response, cursor_page
from app.utils.pagination import clamp_limit


router = APIRouter(prefix="/workouts", tags=["Workouts"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="운동 기록 등록",
    description="""
    운동 기록을 직접 입력합니다.

    **필수 파라미터:**
    - distance: 거리 (m, 1 ~ 500000)
    - duration: 시간 (초, 1 ~ 86400)
    - date: 운동 날짜

    **자동 계산:**
    - pace = duration / (distance / 1000) 초/km
    - visibility를 생략하면 프로필의 기본 공개 범위 사용
    """
)
def create_workout(
    request: WorkoutCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    workout = WorkoutService(db).create_workout(current_user, request)
    return success_response(WorkoutSchema.model_validate(workout), "운동 기록이 등록되었습니다")


@router.get("", summary="내 운동 기록 목록")
def list_workouts(
    cursor: Optional[str] = Query(None, description="이전 응답의 nextCursor"),
    limit: Optional[str] = Query(None, description="페이지 크기 (1~50, 기본 10)"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    workouts, next_cursor = WorkoutService(db).get_workout_list(current_user, cursor, clamp_limit(limit))
    items = [WorkoutSchema.model_validate(w) for w in workouts]
    return success_response(cursor_page(items, next_cursor))


@router.get(
    "/{workout_id}",
    summary="운동 기록 상세 조회",
    description="공개 범위 밖이거나 차단 관계면 403입니다."
)
def get_workout(
    workout_id: str = Path(..., description="운동 기록 ID"),
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    viewer_id = current_user.id if current_user else None
    workout = WorkoutService(db).get_workout_detail(workout_id, viewer_id)
    return success_response(WorkoutSchema.model_validate(workout))


@router.patch("/{workout_id}", summary="운동 기록 수정")
def update_workout(
    workout_id: str,
    request: WorkoutUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    workout = WorkoutService(db).update_workout(workout_id, current_user, request)
    return success_response(WorkoutSchema.model_validate(workout), "운동 기록이 수정되었습니다")


@router.delete("/{workout_id}", summary="운동 기록 삭제")
def delete_workout(
    workout_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    WorkoutService(db).delete_workout(workout_id, current_user)
    return success_response(message="운동 기록이 삭제되었습니다")


# ============================================
# 좋아요
# ============================================

@router.post(
    "/{workout_id}/like",
    summary="운동 기록 좋아요",
    description="이미 좋아요했으면 409, 볼 수 없는 기록이면 403입니다."
)
def like_workout(
    workout_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return success_response(WorkoutSocialService(db).like_workout(workout_id, current_user))


@router.delete("/{workout_id}/like", summary="운동 기록 좋아요 취소")
def unlike_workout(
    workout_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return success_response(WorkoutSocialService(db).unlike_workout(workout_id, current_user))


@router.get("/{workout_id}/like", summary="운동 기록 좋아요 상태 조회")
def workout_like_status(
    workout_id: str,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    viewer_id = current_user.id if current_user else None
    return success_response(WorkoutSocialService(db).like_status(workout_id, viewer_id))


# ============================================
# 댓글
# ============================================

@router.post("/{workout_id}/comments", status_code=status.HTTP_201_CREATED, summary="운동 기록 댓글 작성")
def add_workout_comment(
    workout_id: str,
    request: WorkoutCommentCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    comment = WorkoutSocialService(db).add_comment(workout_id, current_user, request.content)
    return success_response(WorkoutCommentSchema.model_validate(comment), "댓글이 작성되었습니다")


@router.get("/{workout_id}/comments", summary="운동 기록 댓글 목록 (작성순)")
def list_workout_comments(
    workout_id: str,
    cursor: Optional[str] = Query(None),
    limit: Optional[str] = Query(None, description="페이지 크기 (기본 20)"),
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    viewer_id = current_user.id if current_user else None
    comments, next_cursor = WorkoutSocialService(db).list_comments(
        workout_id, viewer_id, cursor, clamp_limit(limit, default=20)
    )
    items = [WorkoutCommentSchema.model_validate(c) for c in comments]
    return success_response(cursor_page(items, next_cursor))


@router.delete("/{workout_id}/comments/{comment_id}", summary="운동 기록 댓글 삭제")
def delete_workout_comment(
    workout_id: str,
    comment_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    WorkoutSocialService(db).delete_comment(workout_id, comment_id, current_user)
    return success_response(message="댓글이 삭제되었습니다")
