# ============================================
# app/services/notification_service.py - 알림 서비스
# ============================================
# 알림 저장, 실시간 전송(SSE), 목록/읽음 처리를 담당합니다.
# ============================================

import logging
from typing import Optional, List, Tuple
from sqlalchemy.orm import Session

from app.models.user import User
from app.models.notification import Notification
from app.schemas.notification import NotificationSchema
from app.services.sse_service import notification_registry
from app.core.exceptions import NotificationNotFoundException
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


class NotificationService:
    """
    알림 서비스 클래스

    [신입 개발자를 위한 팁]
    - notify()는 DB에 먼저 저장(commit)한 뒤 SSE로 전송합니다.
      접속 중이 아니면 전송은 생략되고, 나중에 목록 API로 확인할 수 있습니다.
    - 자기 자신에게는 알림을 보내지 않습니다 (내 글에 내가 좋아요 등).
    """

    def __init__(self, db: Session):
        self.db = db

    def notify(
        self,
        user_id: str,
        type: str,
        message: str,
        actor_id: Optional[str] = None,
        reference_type: Optional[str] = None,
        reference_id: Optional[str] = None
    ) -> Optional[Notification]:
        """
        알림을 저장하고 받는 사람에게 실시간으로 전송합니다.

        Returns:
            Notification 또는 None (자기 자신에게 보내는 경우)
        """
        if actor_id is not None and actor_id == user_id:
            return None

        notification = Notification(
            user_id=user_id,
            actor_id=actor_id,
            type=type,
            message=message,
            reference_type=reference_type,
            reference_id=reference_id
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)

        payload = NotificationSchema.model_validate(notification)
        delivered = notification_registry.broadcast(user_id, payload)
        logger.debug(f"Notification {notification.type} -> {user_id} (live connections: {delivered})")
        return notification

    def list_notifications(
        self,
        user: User,
        cursor: Optional[str],
        limit: int,
        unread_only: bool = False
    ) -> Tuple[List[Notification], Optional[str]]:
        """내 알림 목록 (최신순, 커서 페이지네이션)"""
        query = self.db.query(Notification).filter(Notification.user_id == user.id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))
        return paginate(query, Notification, cursor, limit)

    def unread_count(self, user: User) -> int:
        return self.db.query(Notification).filter(
            Notification.user_id == user.id,
            Notification.is_read.is_(False)
        ).count()

    def mark_read(self, user: User, notification_id: str) -> None:
        """
        알림 하나를 읽음 처리합니다.

        Raises:
            NotificationNotFoundException: 내 알림이 아니거나 없음 (404)
        """
        updated = self.db.query(Notification).filter(
            Notification.id == notification_id,
            Notification.user_id == user.id
        ).update({Notification.is_read: True}, synchronize_session=False)
        if not updated:
            raise NotificationNotFoundException()
        self.db.commit()

    def mark_all_read(self, user: User) -> int:
        """안 읽은 알림을 모두 읽음 처리하고 처리한 개수를 반환합니다."""
        updated = self.db.query(Notification).filter(
            Notification.user_id == user.id,
            Notification.is_read.is_(False)
        ).update({Notification.is_read: True}, synchronize_session=False)
        self.db.commit()
        return updated
