# ============================================
# app/api/v1/block.py - 차단 API 라우터
# ============================================

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.api.deps import get_current_user
from app.models.user import User
from app.services.block_service import BlockService
from app.schemas.user import UserSummarySchema
from app.schemas.common import success_response


router = APIRouter(prefix="/block", tags=["Block"])


@router.get("", summary="차단한 사용자 목록")
def list_blocked(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    users = BlockService(db).list_blocked(current_user)
    return success_response([UserSummarySchema.model_validate(u) for u in users])


@router.post(
    "/{target_id}",
    status_code=status.HTTP_201_CREATED,
    summary="사용자 차단",
    description="""
    사용자를 차단합니다. 서로의 팔로우 관계도 함께 삭제됩니다.

    - 자기 자신 / 이미 차단: 409
    - 없는 사용자: 404
    """
)
def block_user(
    target_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    block = BlockService(db).block(current_user, target_id)
    return success_response(
        {"blocked_id": block.blocked_id, "created_at": block.created_at},
        "차단했습니다"
    )


@router.delete("/{target_id}", summary="차단 해제")
def unblock_user(
    target_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    BlockService(db).unblock(current_user, target_id)
    return success_response(message="차단을 해제했습니다")
