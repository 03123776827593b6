# ============================================
# app/api/v1/follow.py - 팔로우 API 라우터
# ============================================

from typing import Optional, List
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.api.deps import get_current_user, get_current_user_optional
from app.models.user import User
from app.models.social import Follow
from app.services.follow_service import FollowService
from app.schemas.user import UserSummarySchema
from app.schemas.common import success_response


router = APIRouter(prefix="/follow", tags=["Follow"])


def _follow_data(follow: Follow) -> dict:
    return {
        "follower_id": follow.follower_id,
        "following_id": follow.following_id,
        "status": follow.status,
        "created_at": follow.created_at,
    }


def _users(users: List[User]) -> list:
    return [UserSummarySchema.model_validate(u) for u in users]


# ============================================
# 내 목록
# ============================================

@router.get("/followers", summary="내 팔로워 목록")
def my_followers(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return success_response(_users(FollowService(db).followers(current_user.id, current_user.id)))


@router.get("/following", summary="내 팔로잉 목록")
def my_following(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return success_response(_users(FollowService(db).following(current_user.id, current_user.id)))


@router.get("/requests", summary="받은 팔로우 요청 목록")
def pending_requests(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return success_response(_users(FollowService(db).pending_requests(current_user)))


# ============================================
# 팔로우 / 언팔로우
# ============================================

@router.post(
    "/{target_id}",
    status_code=status.HTTP_201_CREATED,
    summary="팔로우",
    description="""
    사용자를 팔로우합니다.

    - 비공개 계정: PENDING (상대가 수락해야 ACCEPTED)
    - 공개 계정: 바로 ACCEPTED
    - 자기 자신 / 이미 팔로우: 409, 차단 관계: 403
    """
)
def follow_user(
    target_id: str = Path(..., description="팔로우할 사용자 ID"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    follow = FollowService(db).follow(current_user, target_id)
    message = "팔로우 요청을 보냈습니다" if follow.status == "PENDING" else "팔로우했습니다"
    return success_response(_follow_data(follow), message)


@router.delete("/{target_id}", summary="언팔로우 (요청 취소 포함)")
def unfollow_user(
    target_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    FollowService(db).unfollow(current_user, target_id)
    return success_response(message="언팔로우했습니다")


@router.post("/{follower_id}/accept", summary="팔로우 요청 수락")
def accept_request(
    follower_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    follow = FollowService(db).accept(current_user, follower_id)
    return success_response(_follow_data(follow), "팔로우 요청을 수락했습니다")


@router.post("/{follower_id}/reject", summary="팔로우 요청 거절")
def reject_request(
    follower_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    FollowService(db).reject(current_user, follower_id)
    return success_response(message="팔로우 요청을 거절했습니다")


# ============================================
# 다른 사용자의 목록 (공개)
# ============================================

@router.get("/{user_id}/followers", summary="사용자의 팔로워 목록")
def user_followers(
    user_id: str,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    viewer_id = current_user.id if current_user else None
    return success_response(_users(FollowService(db).public_list(user_id, viewer_id, "followers")))


@router.get("/{user_id}/following", summary="사용자의 팔로잉 목록")
def user_following(
    user_id: str,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    viewer_id = current_user.id if current_user else None
    return success_response(_users(FollowService(db).public_list(user_id, viewer_id, "following")))
