# ============================================
# app/api/v1/challenges.py - 챌린지 API 라우터
# ============================================

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.api.deps import get_current_user, get_current_user_optional
from app.models.user import User
from app.models.challenge import ChallengeParticipant
from app.services.challenge_service import ChallengeService
from app.schemas.challenge import (
    ChallengeCreateRequest, ChallengeUpdateRequest, ProgressUpdateRequest, ParticipantSchema
)
from app.schemas.user import UserSummarySchema
from app.schemas.common import success_response, cursor_page
from app.utils.pagination import clamp_limit


router = APIRouter(prefix="/challenges", tags=["Challenges"])


def _participant_schema(participant: ChallengeParticipant) -> ParticipantSchema:
    return ParticipantSchema(
        user=UserSummarySchema.model_validate(participant.user),
        current_value=participant.current_value,
        is_completed=participant.is_completed,
        completed_at=participant.completed_at
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="챌린지 생성",
    description="""
    챌린지를 만듭니다. 만든 사람은 자동으로 참가합니다.

    **type / target_unit:**
    - DISTANCE / KM, FREQUENCY / COUNT, STREAK / DAYS, PACE / SEC_PER_KM
    - PACE는 목표 이하(더 빠름)일 때 달성
    """
)
def create_challenge(
    request: ChallengeCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ChallengeService(db)
    challenge = service.create_challenge(current_user, request)
    return success_response(service.to_schema(challenge, current_user.id), "챌린지가 생성되었습니다")


@router.get("", summary="챌린지 목록")
def list_challenges(
    is_public: Optional[bool] = Query(None),
    crew_id: Optional[str] = Query(None, description="크루 챌린지 필터"),
    cursor: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    service = ChallengeService(db)
    challenges, next_cursor = service.list_challenges(is_public, crew_id, cursor, clamp_limit(limit))
    viewer_id = current_user.id if current_user else None
    items = [service.to_schema(c, viewer_id) for c in challenges]
    return success_response(cursor_page(items, next_cursor))


@router.get("/my", summary="내가 참가한 챌린지")
def my_challenges(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ChallengeService(db)
    return success_response([service.to_schema(c, current_user.id) for c in service.my_challenges(current_user)])


@router.get("/{challenge_id}", summary="챌린지 상세 조회")
def get_challenge(
    challenge_id: str,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    service = ChallengeService(db)
    challenge = service.get_challenge(challenge_id)
    return success_response(service.to_schema(challenge, current_user.id if current_user else None))


@router.patch("/{challenge_id}", summary="챌린지 수정 (만든 사람)")
def update_challenge(
    challenge_id: str,
    request: ChallengeUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ChallengeService(db)
    challenge = service.update_challenge(challenge_id, current_user, request)
    return success_response(service.to_schema(challenge, current_user.id), "챌린지가 수정되었습니다")


@router.delete("/{challenge_id}", summary="챌린지 삭제 (만든 사람)")
def delete_challenge(
    challenge_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ChallengeService(db).delete_challenge(challenge_id, current_user)
    return success_response(message="챌린지가 삭제되었습니다")


@router.post(
    "/{challenge_id}/join",
    status_code=status.HTTP_201_CREATED,
    summary="챌린지 참가",
    description="이미 참가했거나 종료된 챌린지는 400입니다."
)
def join_challenge(
    challenge_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    participant = ChallengeService(db).join(challenge_id, current_user)
    return success_response(_participant_schema(participant), "챌린지에 참가했습니다")


@router.delete("/{challenge_id}/leave", summary="챌린지 탈퇴")
def leave_challenge(
    challenge_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ChallengeService(db).leave(challenge_id, current_user)
    return success_response(message="챌린지에서 나왔습니다")


@router.patch("/{challenge_id}/progress", summary="진행 상황 갱신")
def update_progress(
    challenge_id: str,
    request: ProgressUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    participant = ChallengeService(db).update_progress(challenge_id, current_user, request.current_value)
    return success_response(_participant_schema(participant))


@router.get(
    "/{challenge_id}/leaderboard",
    summary="리더보드",
    description="값이 큰 순 (PACE는 작은 순)"
)
def leaderboard(
    challenge_id: str,
    limit: Optional[str] = Query(None, description="최대 인원 (기본 20, 최대 100)"),
    db: Session = Depends(get_db)
):
    return success_response(ChallengeService(db).leaderboard(challenge_id, limit))
