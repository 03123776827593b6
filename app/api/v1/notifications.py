# ============================================
# app/api/v1/notifications.py - 알림 API 라우터
# ============================================
# 알림 목록, 안 읽은 개수, 읽음 처리, 실시간 알림(SSE) API를 제공합니다.
# ============================================

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.config import settings
from app.db.database import get_db
from app.api.deps import get_current_user, get_sse_user
from app.models.user import User
from app.services.notification_service import NotificationService
from app.services.sse_service import notification_registry
from app.schemas.notification import NotificationSchema, UnreadCountSchema
from app.schemas.common import success_response, cursor_page
from app.utils.pagination import clamp_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])

# 프록시(nginx 등)가 스트림을 버퍼링하지 않도록 하는 헤더
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("", summary="알림 목록")
def list_notifications(
    cursor: Optional[str] = Query(None),
    limit: Optional[str] = Query(None, description="페이지 크기 (기본 20)"),
    unread_only: bool = Query(False, description="안 읽은 알림만"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    notifications, next_cursor = NotificationService(db).list_notifications(
        current_user, cursor, clamp_limit(limit, default=20), unread_only
    )
    items = [NotificationSchema.model_validate(n) for n in notifications]
    return success_response(cursor_page(items, next_cursor))


@router.get("/unread-count", summary="안 읽은 알림 개수")
def unread_count(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    count = NotificationService(db).unread_count(current_user)
    return success_response(UnreadCountSchema(count=count))


@router.patch("/read-all", summary="모든 알림 읽음 처리")
def mark_all_read(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    updated = NotificationService(db).mark_all_read(current_user)
    return success_response({"updated": updated}, "모든 알림을 읽음 처리했습니다")


@router.get(
    "/sse",
    summary="실시간 알림 (SSE)",
    description="""
    text/event-stream으로 새 알림을 받습니다.

    - EventSource는 헤더를 보낼 수 없으므로 ?token=<accessToken> 으로 인증합니다.
    - 이벤트 이름: notification
    - 주기적으로 heartbeat 주석(: heartbeat)이 전송됩니다.
    """
)
async def notification_stream(
    request: Request,
    current_user: User = Depends(get_sse_user)
):
    connection = notification_registry.add(current_user.id)
    return StreamingResponse(
        notification_registry.event_stream(request, connection, settings.SSE_HEARTBEAT_SECONDS),
        media_type="text/event-stream",
        headers=SSE_HEADERS
    )


@router.patch("/{notification_id}/read", summary="알림 읽음 처리")
def mark_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    NotificationService(db).mark_read(current_user, notification_id)
    return success_response(message="읽음 처리했습니다")
