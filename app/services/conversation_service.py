# ============================================
# app/services/conversation_service.py - 1:1 대화 서비스
# ============================================
# 대화방 생성/조회, 메시지 전송/삭제, 읽음 처리를 담당합니다.
# 새 메시지는 상대방의 SSE 연결(new-message)로 실시간 전송됩니다.
# ============================================

import logging
from datetime import datetime
from typing import Optional, List, Tuple
from sqlalchemy.orm import Session

from app.models.user import User
from app.models.conversation import Conversation, ConversationParticipant, Message
from app.models.notification import NOTIFICATION_MESSAGE
from app.schemas.conversation import ConversationSchema, MessageSchema
from app.schemas.user import UserSummarySchema
from app.services.block_service import is_blocked
from app.services.notification_service import NotificationService
from app.services.sse_service import message_registry
from app.core.exceptions import (
    ValidationException, ForbiddenException, UserNotFoundException,
    ConversationNotFoundException, NotFoundException
)
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


def message_to_schema(message: Message) -> MessageSchema:
    deleted = message.deleted_at is not None
    return MessageSchema(
        id=message.id,
        conversation_id=message.conversation_id,
        sender_id=message.sender_id,
        content=None if deleted else message.content,
        is_deleted=deleted,
        created_at=message.created_at
    )


class ConversationService:
    """
    대화 서비스 클래스

    [신입 개발자를 위한 팁]
    - 두 사용자 사이의 대화방은 하나만 만들어집니다 (있으면 기존 방 반환).
    - 안 읽은 메시지 = 내 last_read_at 이후에 상대가 보낸 메시지
    """

    def __init__(self, db: Session):
        self.db = db
        self.notifications = NotificationService(db)

    # ============================================
    # 대화방
    # ============================================

    def _find_direct(self, user_a: str, user_b: str) -> Optional[Conversation]:
        mine = self.db.query(ConversationParticipant.conversation_id).filter(
            ConversationParticipant.user_id == user_a
        )
        participant = self.db.query(ConversationParticipant).filter(
            ConversationParticipant.user_id == user_b,
            ConversationParticipant.conversation_id.in_(mine)
        ).first()
        return participant.conversation if participant else None

    def get_or_create(self, user: User, participant_id: str) -> Conversation:
        """
        대화방을 찾거나 만듭니다.

        Raises:
            ValidationException: 자기 자신과의 대화 (400)
            UserNotFoundException: 상대가 없음 (404)
            ForbiddenException: 차단 관계 (403)
        """
        if participant_id == user.id:
            raise ValidationException(message="자기 자신과는 대화할 수 없습니다", field="participant_id")

        other = self.db.query(User).filter(User.id == participant_id, User.deleted_at.is_(None)).first()
        if not other:
            raise UserNotFoundException()
        if is_blocked(self.db, user.id, participant_id):
            raise ForbiddenException("차단된 사용자와는 대화할 수 없습니다")

        existing = self._find_direct(user.id, participant_id)
        if existing:
            return existing

        conversation = Conversation()
        self.db.add(conversation)
        self.db.flush()
        self.db.add_all([
            ConversationParticipant(conversation_id=conversation.id, user_id=user.id),
            ConversationParticipant(conversation_id=conversation.id, user_id=participant_id),
        ])
        self.db.commit()
        self.db.refresh(conversation)
        logger.info(f"Conversation created: id={conversation.id}")
        return conversation

    def _get_participant(self, conversation_id: str, user_id: str) -> ConversationParticipant:
        conversation = self.db.query(Conversation).filter(Conversation.id == conversation_id).first()
        if not conversation:
            raise ConversationNotFoundException()
        for participant in conversation.participants:
            if participant.user_id == user_id:
                return participant
        raise ForbiddenException("대화 참여자가 아닙니다")

    def _other_participant(self, conversation: Conversation, user_id: str) -> Optional[ConversationParticipant]:
        for participant in conversation.participants:
            if participant.user_id != user_id:
                return participant
        return None

    def _unread_count(self, conversation_id: str, me: ConversationParticipant) -> int:
        query = self.db.query(Message).filter(
            Message.conversation_id == conversation_id,
            Message.sender_id != me.user_id,
            Message.deleted_at.is_(None)
        )
        if me.last_read_at is not None:
            query = query.filter(Message.created_at > me.last_read_at)
        return query.count()

    def to_schema(self, conversation: Conversation, user_id: str) -> ConversationSchema:
        me = next(p for p in conversation.participants if p.user_id == user_id)
        other = self._other_participant(conversation, user_id)
        last = self.db.query(Message).filter(
            Message.conversation_id == conversation.id
        ).order_by(Message.created_at.desc(), Message.id.desc()).first()
        return ConversationSchema(
            id=conversation.id,
            other_user=UserSummarySchema.model_validate(other.user) if other else None,
            last_message=message_to_schema(last) if last else None,
            unread_count=self._unread_count(conversation.id, me),
            updated_at=conversation.updated_at
        )

    def list_conversations(
        self,
        user: User,
        cursor: Optional[str],
        limit: int
    ) -> Tuple[List[ConversationSchema], Optional[str]]:
        """내 대화방 목록 (최근 메시지 순)"""
        mine = self.db.query(ConversationParticipant.conversation_id).filter(
            ConversationParticipant.user_id == user.id
        )
        query = self.db.query(Conversation).filter(Conversation.id.in_(mine))
        conversations, next_cursor = paginate(query, Conversation, cursor, limit, time_attr="updated_at")
        return [self.to_schema(c, user.id) for c in conversations], next_cursor

    # ============================================
    # 메시지
    # ============================================

    def list_messages(
        self,
        conversation_id: str,
        user: User,
        cursor: Optional[str],
        limit: int
    ) -> Tuple[List[Message], Optional[str]]:
        """
        메시지 목록 (최신순)

        Raises:
            ConversationNotFoundException: 대화방 없음 (404)
            ForbiddenException: 참여자가 아님 (403)
        """
        self._get_participant(conversation_id, user.id)
        query = self.db.query(Message).filter(Message.conversation_id == conversation_id)
        return paginate(query, Message, cursor, limit)

    def send_message(self, conversation_id: str, user: User, content: str) -> Message:
        """
        메시지 전송

        저장 후 상대에게 new-message 이벤트와 MESSAGE 알림을 보냅니다.

        Raises:
            ForbiddenException: 참여자가 아니거나 차단 관계 (403)
        """
        me = self._get_participant(conversation_id, user.id)
        conversation = me.conversation
        other = self._other_participant(conversation, user.id)
        if other and is_blocked(self.db, user.id, other.user_id):
            raise ForbiddenException("차단된 사용자와는 대화할 수 없습니다")

        now = datetime.utcnow()
        message = Message(
            conversation_id=conversation_id,
            sender_id=user.id,
            content=content,
            created_at=now
        )
        self.db.add(message)
        conversation.updated_at = now
        me.last_read_at = now
        self.db.commit()
        self.db.refresh(message)

        if other:
            message_registry.broadcast(other.user_id, message_to_schema(message))
            self.notifications.notify(
                user_id=other.user_id,
                type=NOTIFICATION_MESSAGE,
                message=f"{user.name}님이 메시지를 보냈습니다",
                actor_id=user.id,
                reference_type="CONVERSATION",
                reference_id=conversation_id
            )
        return message

    def mark_read(self, conversation_id: str, user: User) -> None:
        me = self._get_participant(conversation_id, user.id)
        me.last_read_at = datetime.utcnow()
        self.db.commit()

    def delete_message(self, message_id: str, user: User) -> None:
        """
        메시지 삭제 (Soft Delete, 보낸 사람만)

        Raises:
            NotFoundException: 없음 (404)
            ForbiddenException: 보낸 사람이 아님 (403)
        """
        message = self.db.query(Message).filter(
            Message.id == message_id,
            Message.deleted_at.is_(None)
        ).first()
        if not message:
            raise NotFoundException(resource="메시지", error_code="MESSAGE_NOT_FOUND")
        if message.sender_id != user.id:
            raise ForbiddenException("본인이 보낸 메시지만 삭제할 수 있습니다")
        message.deleted_at = datetime.utcnow()
        self.db.commit()
