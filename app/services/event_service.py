# ============================================
# app/services/event_service.py - 이벤트(대회) 서비스
# ============================================
# 대회 등록/조회/수정/삭제, 참가 신청/취소, 기록 제출을 처리합니다.
# ============================================

import logging
from datetime import datetime
from typing import Optional, List, Tuple
from sqlalchemy.orm import Session

from app.models.user import User
from app.models.event import (
    Event, EventRegistration,
    REGISTRATION_REGISTERED, REGISTRATION_CANCELLED, REGISTRATION_COMPLETED, RESULT_STATUSES
)
from app.models.notification import NOTIFICATION_EVENT_REGISTER
from app.schemas.event import (
    EventCreateRequest, EventUpdateRequest, EventSchema, EventResultRequest
)
from app.services.notification_service import NotificationService
from app.core.exceptions import (
    EventNotFoundException, ForbiddenException, ValidationException, NotFoundException
)
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)

# 참가 인원으로 세는 상태 (취소는 제외)
ACTIVE_STATUSES = (REGISTRATION_REGISTERED,) + RESULT_STATUSES


class EventService:
    """
    이벤트 서비스 클래스

    [신입 개발자를 위한 팁]
    - 참가 취소는 행을 지우지 않고 status를 CANCELLED로 바꿉니다.
    - 취소 후 다시 신청하면 같은 행이 REGISTERED로 되살아납니다.
    """

    def __init__(self, db: Session):
        self.db = db
        self.notifications = NotificationService(db)

    # ============================================
    # 헬퍼
    # ============================================

    def get_event(self, event_id: str) -> Event:
        event = self.db.query(Event).filter(Event.id == event_id, Event.deleted_at.is_(None)).first()
        if not event:
            raise EventNotFoundException()
        return event

    def _get_registration(self, event_id: str, user_id: str) -> Optional[EventRegistration]:
        return self.db.query(EventRegistration).filter(
            EventRegistration.event_id == event_id,
            EventRegistration.user_id == user_id
        ).first()

    def participant_count(self, event_id: str) -> int:
        return self.db.query(EventRegistration).filter(
            EventRegistration.event_id == event_id,
            EventRegistration.status.in_(ACTIVE_STATUSES)
        ).count()

    def _get_own_event(self, event_id: str, user: User) -> Event:
        event = self.get_event(event_id)
        if event.organizer_id != user.id:
            raise ForbiddenException("주최자만 수정/삭제할 수 있습니다")
        return event

    def to_schema(self, event: Event, viewer_id: Optional[str]) -> EventSchema:
        my_status = None
        if viewer_id:
            registration = self._get_registration(event.id, viewer_id)
            my_status = registration.status if registration else None
        return EventSchema(
            id=event.id,
            organizer_id=event.organizer_id,
            title=event.title,
            description=event.description,
            event_type=event.event_type,
            event_date=event.event_date,
            location=event.location,
            latitude=event.latitude,
            longitude=event.longitude,
            image_url=event.image_url,
            max_participants=event.max_participants,
            participant_count=self.participant_count(event.id),
            my_status=my_status,
            created_at=event.created_at
        )

    # ============================================
    # 이벤트 CRUD
    # ============================================

    def create_event(self, user: User, request: EventCreateRequest) -> Event:
        event = Event(organizer_id=user.id, **request.model_dump())
        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)
        logger.info(f"Event created: id={event.id} type={event.event_type}")
        return event

    def list_events(
        self,
        upcoming: Optional[bool],
        cursor: Optional[str],
        limit: int
    ) -> Tuple[List[Event], Optional[str]]:
        """
        이벤트 목록 (등록 최신순)

        upcoming=True면 아직 열리지 않은 대회만, False면 지난 대회만 반환합니다.
        """
        query = self.db.query(Event).filter(Event.deleted_at.is_(None))
        now = datetime.utcnow()
        if upcoming is True:
            query = query.filter(Event.event_date >= now)
        elif upcoming is False:
            query = query.filter(Event.event_date < now)
        return paginate(query, Event, cursor, limit)

    def my_events(self, user: User) -> List[Event]:
        """내가 참가 신청한 이벤트 (취소 제외, 대회일 순)"""
        return self.db.query(Event).join(
            EventRegistration, EventRegistration.event_id == Event.id
        ).filter(
            EventRegistration.user_id == user.id,
            EventRegistration.status.in_(ACTIVE_STATUSES),
            Event.deleted_at.is_(None)
        ).order_by(Event.event_date.asc()).all()

    def update_event(self, event_id: str, user: User, request: EventUpdateRequest) -> Event:
        event = self._get_own_event(event_id, user)
        changes = request.model_dump(exclude_unset=True)
        if changes.get("max_participants") is not None:
            if changes["max_participants"] < self.participant_count(event_id):
                raise ValidationException(
                    message="현재 참가 인원보다 적게 설정할 수 없습니다",
                    field="max_participants"
                )
        for field, value in changes.items():
            if value is None and field in ("title", "event_type", "event_date"):
                continue
            setattr(event, field, value)
        self.db.commit()
        self.db.refresh(event)
        return event

    def delete_event(self, event_id: str, user: User) -> None:
        event = self._get_own_event(event_id, user)
        event.deleted_at = datetime.utcnow()
        self.db.commit()
        logger.info(f"Event soft-deleted: id={event_id}")

    # ============================================
    # 참가 신청 / 취소
    # ============================================

    def register(self, event_id: str, user: User) -> EventRegistration:
        """
        참가 신청

        Raises:
            ValidationException: 이미 신청함, 정원 초과 (400)
        """
        event = self.get_event(event_id)
        registration = self._get_registration(event_id, user.id)

        if registration and registration.status != REGISTRATION_CANCELLED:
            raise ValidationException(message="이미 참가 신청한 이벤트입니다", reason="already_registered")

        if event.max_participants is not None and self.participant_count(event_id) >= event.max_participants:
            raise ValidationException(message="참가 인원이 가득 찼습니다", reason="full")

        if registration:
            # 취소했던 신청을 다시 살림
            registration.status = REGISTRATION_REGISTERED
            registration.registered_at = datetime.utcnow()
            registration.result_time = None
            registration.result_rank = None
        else:
            registration = EventRegistration(event_id=event_id, user_id=user.id)
            self.db.add(registration)
        self.db.commit()
        self.db.refresh(registration)

        self.notifications.notify(
            user_id=event.organizer_id,
            type=NOTIFICATION_EVENT_REGISTER,
            message=f"{user.name}님이 {event.title}에 참가 신청했습니다",
            actor_id=user.id,
            reference_type="EVENT",
            reference_id=event.id
        )
        return registration

    def cancel(self, event_id: str, user: User) -> EventRegistration:
        """
        참가 취소 (status → CANCELLED)

        Raises:
            NotFoundException: 신청 내역 없음 (404)
            ValidationException: 이미 취소함 (400)
        """
        self.get_event(event_id)
        registration = self._get_registration(event_id, user.id)
        if not registration:
            raise NotFoundException(resource="참가 신청", error_code="REGISTRATION_NOT_FOUND")
        if registration.status == REGISTRATION_CANCELLED:
            raise ValidationException(message="이미 취소된 신청입니다", reason="already_cancelled")

        registration.status = REGISTRATION_CANCELLED
        self.db.commit()
        self.db.refresh(registration)
        return registration

    # ============================================
    # 대회 기록
    # ============================================

    def submit_result(self, event_id: str, user: User, request: EventResultRequest) -> EventRegistration:
        """
        대회 기록 제출

        Raises:
            NotFoundException: 신청 내역 없음 (404)
            ValidationException: 취소한 신청, 완주인데 기록 없음 (400)
        """
        self.get_event(event_id)
        registration = self._get_registration(event_id, user.id)
        if not registration:
            raise NotFoundException(resource="참가 신청", error_code="REGISTRATION_NOT_FOUND")
        if registration.status == REGISTRATION_CANCELLED:
            raise ValidationException(message="취소한 이벤트에는 기록을 제출할 수 없습니다", reason="cancelled")
        if request.status == REGISTRATION_COMPLETED and request.result_time is None:
            raise ValidationException(message="완주 기록(result_time)이 필요합니다", field="result_time")

        registration.status = request.status
        registration.result_time = request.result_time if request.status == REGISTRATION_COMPLETED else None
        registration.result_rank = request.result_rank if request.status == REGISTRATION_COMPLETED else None
        if request.bib_number is not None:
            registration.bib_number = request.bib_number
        self.db.commit()
        self.db.refresh(registration)
        return registration

    def list_results(self, event_id: str, sort: str = "time") -> List[EventRegistration]:
        """완주(COMPLETED) 기록 목록 (sort=time: 기록순, sort=rank: 순위순)"""
        self.get_event(event_id)
        query = self.db.query(EventRegistration).filter(
            EventRegistration.event_id == event_id,
            EventRegistration.status == REGISTRATION_COMPLETED
        )
        if sort == "rank":
            # 순위가 없는 기록은 뒤로
            query = query.order_by(
                EventRegistration.result_rank.is_(None),
                EventRegistration.result_rank.asc(),
                EventRegistration.result_time.asc()
            )
        else:
            query = query.order_by(EventRegistration.result_time.asc(), EventRegistration.id.asc())
        return query.all()

    def my_result(self, event_id: str, user: User) -> EventRegistration:
        self.get_event(event_id)
        registration = self._get_registration(event_id, user.id)
        if not registration:
            raise NotFoundException(resource="참가 신청", error_code="REGISTRATION_NOT_FOUND")
        return registration
