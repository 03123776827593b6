# ============================================
# app/models/conversation.py - 1:1 대화(DM) 모델
# ============================================

from datetime import datetime
from sqlalchemy import (
    Column, String, Text, DateTime, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship

from app.db.database import Base
from app.models.user import generate_uuid


CONVERSATION_DIRECT = "DIRECT"


class Conversation(Base):
    """
    대화방 테이블 (conversations)

    updated_at은 마지막 메시지 시각으로 갱신되며, 목록 정렬에 사용됩니다.
    """
    __tablename__ = "conversations"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    type = Column(String(10), nullable=False, default=CONVERSATION_DIRECT)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    participants = relationship("ConversationParticipant", back_populates="conversation", lazy="selectin")


class ConversationParticipant(Base):
    """대화 참여자 (conversation_participants) - last_read_at 이후 메시지가 안 읽은 메시지"""
    __tablename__ = "conversation_participants"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    conversation_id = Column(String(36), ForeignKey("conversations.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    last_read_at = Column(DateTime, nullable=True)

    joined_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('conversation_id', 'user_id', name='unique_conversation_participant'),
    )

    conversation = relationship("Conversation", back_populates="participants")
    user = relationship("User", lazy="joined")


class Message(Base):
    """메시지 테이블 (messages)"""
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    conversation_id = Column(String(36), ForeignKey("conversations.id"), nullable=False, index=True)
    sender_id = Column(String(36), ForeignKey("users.id"), nullable=False)

    content = Column(Text, nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    deleted_at = Column(DateTime, nullable=True)
