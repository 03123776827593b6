# ============================================
# app/api/v1/conversations.py - 1:1 대화 API 라우터
# ============================================

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.config import settings
from app.db.database import get_db
from app.api.deps import get_current_user, get_sse_user
from app.api.v1.notifications import SSE_HEADERS
from app.models.user import User
from app.services.conversation_service import ConversationService, message_to_schema
from app.services.sse_service import message_registry
from app.schemas.conversation import ConversationCreateRequest, MessageCreateRequest
from app.schemas.common import success_response, cursor_page
from app.utils.pagination import clamp_limit


router = APIRouter(prefix="/conversations", tags=["Conversations"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="대화방 열기",
    description="""
    상대와의 대화방을 찾거나 새로 만듭니다.

    - 자기 자신: 400, 차단 관계: 403, 없는 사용자: 404
    """
)
def open_conversation(
    request: ConversationCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ConversationService(db)
    conversation = service.get_or_create(current_user, request.participant_id)
    return success_response(service.to_schema(conversation, current_user.id))


@router.get("", summary="내 대화방 목록")
def list_conversations(
    cursor: Optional[str] = Query(None),
    limit: Optional[str] = Query(None, description="페이지 크기 (기본 20)"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    items, next_cursor = ConversationService(db).list_conversations(
        current_user, cursor, clamp_limit(limit, default=20)
    )
    return success_response(cursor_page(items, next_cursor))


@router.get(
    "/sse",
    summary="실시간 메시지 (SSE)",
    description="?token=<accessToken> 으로 인증합니다. 이벤트 이름: new-message"
)
async def message_stream(
    request: Request,
    current_user: User = Depends(get_sse_user)
):
    connection = message_registry.add(current_user.id)
    return StreamingResponse(
        message_registry.event_stream(request, connection, settings.SSE_HEARTBEAT_SECONDS),
        media_type="text/event-stream",
        headers=SSE_HEADERS
    )


@router.delete("/messages/{message_id}", summary="메시지 삭제")
def delete_message(
    message_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ConversationService(db).delete_message(message_id, current_user)
    return success_response(message="메시지가 삭제되었습니다")


@router.get("/{conversation_id}", summary="대화 메시지 목록")
def list_messages(
    conversation_id: str,
    cursor: Optional[str] = Query(None),
    limit: Optional[str] = Query(None, description="페이지 크기 (기본 50)"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    messages, next_cursor = ConversationService(db).list_messages(
        conversation_id, current_user, cursor, clamp_limit(limit, default=50, maximum=100)
    )
    items = [message_to_schema(m) for m in messages]
    return success_response(cursor_page(items, next_cursor))


@router.post(
    "/{conversation_id}/messages",
    status_code=status.HTTP_201_CREATED,
    summary="메시지 보내기"
)
def send_message(
    conversation_id: str,
    request: MessageCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    message = ConversationService(db).send_message(conversation_id, current_user, request.content)
    return success_response(message_to_schema(message))


@router.patch("/{conversation_id}/read", summary="대화 읽음 처리")
def mark_read(
    conversation_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ConversationService(db).mark_read(conversation_id, current_user)
    return success_response(message="읽음 처리했습니다")
