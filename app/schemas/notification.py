# ============================================
# app/schemas/notification.py - 알림 스키마
# ============================================

from typing import Optional
from datetime import datetime
from pydantic import BaseModel


class NotificationSchema(BaseModel):
    """
    알림 스키마

    SSE로 전송하는 payload도 이 형태입니다.
    """
    id: str
    type: str
    actor_id: Optional[str] = None
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    message: str
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class UnreadCountSchema(BaseModel):
    """안 읽은 알림 개수"""
    count: int
