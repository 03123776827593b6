# ============================================
# app/schemas/conversation.py - 1:1 대화 스키마
# ============================================

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from app.schemas.user import UserSummarySchema


class ConversationCreateRequest(BaseModel):
    """대화 시작 요청 (이미 있으면 기존 대화를 반환)"""
    participant_id: str = Field(..., description="대화 상대 사용자 ID")


class MessageCreateRequest(BaseModel):
    """메시지 전송 요청"""
    content: str = Field(..., min_length=1, max_length=2000, description="메시지 (2000자 이하)")


class MessageSchema(BaseModel):
    """메시지 스키마 (삭제된 메시지는 content가 None)"""
    id: str
    conversation_id: str
    sender_id: str
    content: Optional[str] = None
    is_deleted: bool = False
    created_at: datetime


class ConversationSchema(BaseModel):
    """
    대화 목록 항목 스키마

    [필드 설명]
    - other_user: 대화 상대
    - last_message: 마지막 메시지 (없으면 None)
    - unread_count: last_read_at 이후 상대가 보낸 메시지 수
    """
    id: str
    other_user: Optional[UserSummarySchema] = None
    last_message: Optional[MessageSchema] = None
    unread_count: int = 0
    updated_at: datetime
