# ============================================
# app/api/v1/events.py - 이벤트(대회) API 라우터
# ============================================

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.api.deps import get_current_user, get_current_user_optional
from app.models.user import User
from app.services.event_service import EventService
from app.schemas.event import (
    EventCreateRequest, EventUpdateRequest, EventResultRequest, EventRegistrationSchema
)
from app.schemas.common import success_response, cursor_page
from app.utils.pagination import clamp_limit


router = APIRouter(prefix="/events", tags=["Events"])


# ============================================
# 이벤트
# ============================================

@router.post("", status_code=status.HTTP_201_CREATED, summary="이벤트 등록")
def create_event(
    request: EventCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = EventService(db)
    event = service.create_event(current_user, request)
    return success_response(service.to_schema(event, current_user.id), "이벤트가 등록되었습니다")


@router.get(
    "",
    summary="이벤트 목록",
    description="upcoming=true: 다가오는 대회만, upcoming=false: 지난 대회만"
)
def list_events(
    upcoming: Optional[bool] = Query(None),
    cursor: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    service = EventService(db)
    events, next_cursor = service.list_events(upcoming, cursor, clamp_limit(limit))
    viewer_id = current_user.id if current_user else None
    items = [service.to_schema(e, viewer_id) for e in events]
    return success_response(cursor_page(items, next_cursor))


@router.get("/my", summary="내가 참가 신청한 이벤트")
def my_events(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = EventService(db)
    return success_response([service.to_schema(e, current_user.id) for e in service.my_events(current_user)])


@router.get("/{event_id}", summary="이벤트 상세 조회")
def get_event(
    event_id: str,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    service = EventService(db)
    event = service.get_event(event_id)
    return success_response(service.to_schema(event, current_user.id if current_user else None))


@router.patch("/{event_id}", summary="이벤트 수정 (주최자)")
def update_event(
    event_id: str,
    request: EventUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = EventService(db)
    event = service.update_event(event_id, current_user, request)
    return success_response(service.to_schema(event, current_user.id), "이벤트가 수정되었습니다")


@router.delete("/{event_id}", summary="이벤트 삭제 (주최자)")
def delete_event(
    event_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    EventService(db).delete_event(event_id, current_user)
    return success_response(message="이벤트가 삭제되었습니다")


# ============================================
# 참가 신청 / 취소
# ============================================

@router.post(
    "/{event_id}/register",
    status_code=status.HTTP_201_CREATED,
    summary="참가 신청",
    description="이미 신청했거나 정원이 찼으면 400입니다. 취소했던 신청은 다시 활성화됩니다."
)
def register(
    event_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    registration = EventService(db).register(event_id, current_user)
    return success_response(EventRegistrationSchema.model_validate(registration), "참가 신청이 완료되었습니다")


@router.delete("/{event_id}/cancel", summary="참가 취소")
def cancel(
    event_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    registration = EventService(db).cancel(event_id, current_user)
    return success_response(EventRegistrationSchema.model_validate(registration), "참가를 취소했습니다")


# ============================================
# 대회 기록
# ============================================

@router.post("/{event_id}/results", summary="대회 기록 제출")
def submit_result(
    event_id: str,
    request: EventResultRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    registration = EventService(db).submit_result(event_id, current_user, request)
    return success_response(EventRegistrationSchema.model_validate(registration), "기록이 저장되었습니다")


@router.get("/{event_id}/results", summary="대회 기록 목록 (완주자)")
def list_results(
    event_id: str,
    sort: str = Query("time", pattern="^(time|rank)$", description="time: 기록순, rank: 순위순"),
    db: Session = Depends(get_db)
):
    results = EventService(db).list_results(event_id, sort)
    return success_response([EventRegistrationSchema.model_validate(r) for r in results])


@router.get("/{event_id}/results/me", summary="내 대회 기록")
def my_result(
    event_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    registration = EventService(db).my_result(event_id, current_user)
    return success_response(EventRegistrationSchema.model_validate(registration))
