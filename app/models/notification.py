# ============================================
# app/models/notification.py - 알림 모델
# ============================================

from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey

from app.db.database import Base
from app.models.user import generate_uuid


# 알림 종류
NOTIFICATION_FOLLOW = "FOLLOW"
NOTIFICATION_FOLLOW_REQUEST = "FOLLOW_REQUEST"
NOTIFICATION_LIKE = "LIKE"
NOTIFICATION_COMMENT = "COMMENT"
NOTIFICATION_CREW_JOIN = "CREW_JOIN"
NOTIFICATION_EVENT_REGISTER = "EVENT_REGISTER"
NOTIFICATION_MESSAGE = "MESSAGE"


class Notification(Base):
    """
    알림 테이블 (notifications)

    저장과 동시에 SSE로 실시간 전송됩니다.
    연결이 끊긴 동안의 알림은 재전송하지 않으므로,
    클라이언트는 재연결 시 목록 API로 다시 조회해야 합니다.
    """
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)   # 받는 사람
    actor_id = Column(String(36), ForeignKey("users.id"), nullable=True)               # 행동한 사람

    type = Column(String(30), nullable=False)
    reference_type = Column(String(30), nullable=True)    # POST / WORKOUT / USER / CREW / EVENT / CONVERSATION
    reference_id = Column(String(36), nullable=True)
    message = Column(String(255), nullable=False)

    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<Notification(id={self.id}, type={self.type}, user_id={self.user_id})>"
