# ============================================
# app/api/v1/profile.py - 프로필 API 라우터
# ============================================
# 내 프로필 조회/수정/탈퇴, 다른 사용자 프로필 조회 API를 제공합니다.
# ============================================

from typing import Optional
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.api.deps import get_current_user, get_current_user_optional
from app.models.user import User
from app.services.profile_service import ProfileService
from app.schemas.user import ProfileUpdateRequest
from app.schemas.common import success_response


router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get(
    "",
    summary="내 프로필 조회",
    description="""
    내 프로필과 통계를 조회합니다.

    **통계 항목:**
    - total_workouts / total_distance(m) / total_duration(초)
    - average_pace: 초/km (기록이 없으면 null)
    - follower_count / following_count (ACCEPTED만)
    """
)
def get_my_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return success_response(ProfileService(db).get_my_profile(current_user))


@router.patch("", summary="내 프로필 수정")
def update_my_profile(
    request: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    profile = ProfileService(db).update_profile(current_user, request)
    return success_response(profile, "프로필이 수정되었습니다")


@router.delete(
    "",
    summary="회원 탈퇴",
    description="계정을 탈퇴 처리합니다. 발급된 토큰은 다음 요청부터 401 ACCOUNT_DELETED가 됩니다."
)
def delete_my_account(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ProfileService(db).delete_account(current_user)
    return success_response(message="탈퇴가 완료되었습니다")


@router.get(
    "/{user_id}",
    summary="사용자 프로필 조회",
    description="탈퇴했거나 없는 사용자는 404, 차단 관계면 403입니다."
)
def get_user_profile(
    user_id: str = Path(..., description="사용자 ID"),
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    viewer_id = current_user.id if current_user else None
    return success_response(ProfileService(db).get_profile(user_id, viewer_id))
