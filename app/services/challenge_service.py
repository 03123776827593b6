# ============================================
# app/services/challenge_service.py - 챌린지 서비스
# ============================================
# 챌린지 생성/조회/수정/삭제, 참가/탈퇴, 진행 상황 갱신, 리더보드를 처리합니다.
# ============================================

import logging
from datetime import datetime
from typing import Optional, List, Tuple, Union
from sqlalchemy.orm import Session

from app.models.user import User
from app.models.challenge import Challenge, ChallengeParticipant
from app.schemas.challenge import (
    ChallengeCreateRequest, ChallengeUpdateRequest, ChallengeSchema, ParticipantSchema
)
from app.schemas.user import UserSummarySchema
from app.services.crew_service import CrewService
from app.core.exceptions import (
    ChallengeNotFoundException, ForbiddenException, ValidationException, NotFoundException
)
from app.utils.pagination import paginate, clamp_limit

logger = logging.getLogger(__name__)


def is_goal_reached(challenge: Challenge, value: float) -> bool:
    """
    목표 달성 여부

    PACE 챌린지는 목표 페이스 이하(더 빠름)일 때 달성입니다.
    값이 0이면 아직 기록이 없는 것으로 봅니다.
    """
    if challenge.lower_is_better:
        return 0 < value <= challenge.target_value
    return value >= challenge.target_value


class ChallengeService:
    """챌린지 서비스 클래스"""

    def __init__(self, db: Session):
        self.db = db

    # ============================================
    # 헬퍼
    # ============================================

    def get_challenge(self, challenge_id: str) -> Challenge:
        challenge = self.db.query(Challenge).filter(
            Challenge.id == challenge_id,
            Challenge.deleted_at.is_(None)
        ).first()
        if not challenge:
            raise ChallengeNotFoundException()
        return challenge

    def _get_participant(self, challenge_id: str, user_id: str) -> Optional[ChallengeParticipant]:
        return self.db.query(ChallengeParticipant).filter(
            ChallengeParticipant.challenge_id == challenge_id,
            ChallengeParticipant.user_id == user_id
        ).first()

    def _get_own_challenge(self, challenge_id: str, user: User) -> Challenge:
        challenge = self.get_challenge(challenge_id)
        if challenge.creator_id != user.id:
            raise ForbiddenException("챌린지를 만든 사람만 수정/삭제할 수 있습니다")
        return challenge

    def participant_count(self, challenge_id: str) -> int:
        return self.db.query(ChallengeParticipant).filter(
            ChallengeParticipant.challenge_id == challenge_id
        ).count()

    def to_schema(self, challenge: Challenge, viewer_id: Optional[str]) -> ChallengeSchema:
        joined = bool(viewer_id) and self._get_participant(challenge.id, viewer_id) is not None
        return ChallengeSchema(
            id=challenge.id,
            creator_id=challenge.creator_id,
            crew_id=challenge.crew_id,
            title=challenge.title,
            description=challenge.description,
            type=challenge.type,
            target_value=challenge.target_value,
            target_unit=challenge.target_unit,
            start_date=challenge.start_date,
            end_date=challenge.end_date,
            is_public=challenge.is_public,
            image_url=challenge.image_url,
            participant_count=self.participant_count(challenge.id),
            joined=joined,
            created_at=challenge.created_at
        )

    # ============================================
    # 챌린지 CRUD
    # ============================================

    def create_challenge(self, user: User, request: ChallengeCreateRequest) -> Challenge:
        """
        챌린지 생성 (만든 사람은 자동 참가)

        Raises:
            ForbiddenException: 크루 챌린지인데 크루 멤버가 아님 (403)
        """
        if request.crew_id:
            crews = CrewService(self.db)
            crews.get_crew(request.crew_id)
            crews.require_member(request.crew_id, user.id)

        challenge = Challenge(creator_id=user.id, **request.model_dump())
        self.db.add(challenge)
        self.db.flush()
        self.db.add(ChallengeParticipant(challenge_id=challenge.id, user_id=user.id))
        self.db.commit()
        self.db.refresh(challenge)
        logger.info(f"Challenge created: id={challenge.id} type={challenge.type}")
        return challenge

    def list_challenges(
        self,
        is_public: Optional[bool],
        crew_id: Optional[str],
        cursor: Optional[str],
        limit: int
    ) -> Tuple[List[Challenge], Optional[str]]:
        query = self.db.query(Challenge).filter(Challenge.deleted_at.is_(None))
        if is_public is not None:
            query = query.filter(Challenge.is_public.is_(is_public))
        if crew_id:
            query = query.filter(Challenge.crew_id == crew_id)
        return paginate(query, Challenge, cursor, limit)

    def my_challenges(self, user: User) -> List[Challenge]:
        return self.db.query(Challenge).join(
            ChallengeParticipant, ChallengeParticipant.challenge_id == Challenge.id
        ).filter(
            ChallengeParticipant.user_id == user.id,
            Challenge.deleted_at.is_(None)
        ).order_by(Challenge.end_date.asc()).all()

    def update_challenge(self, challenge_id: str, user: User, request: ChallengeUpdateRequest) -> Challenge:
        challenge = self._get_own_challenge(challenge_id, user)
        for field, value in request.model_dump(exclude_unset=True).items():
            if value is None and field in ("title", "target_value", "start_date", "end_date", "is_public"):
                continue
            setattr(challenge, field, value)
        if challenge.end_date <= challenge.start_date:
            self.db.rollback()
            raise ValidationException(message="종료일은 시작일 이후여야 합니다", field="end_date")
        self.db.commit()
        self.db.refresh(challenge)
        return challenge

    def delete_challenge(self, challenge_id: str, user: User) -> None:
        challenge = self._get_own_challenge(challenge_id, user)
        challenge.deleted_at = datetime.utcnow()
        self.db.commit()

    # ============================================
    # 참가 / 탈퇴
    # ============================================

    def join(self, challenge_id: str, user: User) -> ChallengeParticipant:
        """
        챌린지 참가

        Raises:
            ValidationException: 이미 참가함, 종료된 챌린지 (400)
            ForbiddenException: 크루 챌린지인데 크루 멤버가 아님 (403)
        """
        challenge = self.get_challenge(challenge_id)
        if self._get_participant(challenge_id, user.id):
            raise ValidationException(message="이미 참가한 챌린지입니다", reason="already_joined")
        if challenge.end_date < datetime.utcnow():
            raise ValidationException(message="종료된 챌린지입니다", reason="ended")
        if challenge.crew_id:
            CrewService(self.db).require_member(challenge.crew_id, user.id)

        participant = ChallengeParticipant(challenge_id=challenge_id, user_id=user.id)
        self.db.add(participant)
        self.db.commit()
        self.db.refresh(participant)
        return participant

    def leave(self, challenge_id: str, user: User) -> None:
        self.get_challenge(challenge_id)
        participant = self._get_participant(challenge_id, user.id)
        if not participant:
            raise NotFoundException(resource="챌린지 참가 정보", error_code="PARTICIPANT_NOT_FOUND")
        self.db.delete(participant)
        self.db.commit()

    # ============================================
    # 진행 상황 / 리더보드
    # ============================================

    def update_progress(self, challenge_id: str, user: User, current_value: float) -> ChallengeParticipant:
        """
        진행 상황 갱신

        목표에 처음 도달한 시점을 completed_at으로 남기고,
        이후 값이 목표 밖으로 바뀌면 완료 상태를 해제합니다.
        """
        challenge = self.get_challenge(challenge_id)
        participant = self._get_participant(challenge_id, user.id)
        if not participant:
            raise NotFoundException(resource="챌린지 참가 정보", error_code="PARTICIPANT_NOT_FOUND")

        participant.current_value = current_value
        if is_goal_reached(challenge, current_value):
            if not participant.is_completed:
                participant.is_completed = True
                participant.completed_at = datetime.utcnow()
                logger.info(f"Challenge {challenge_id} completed by {user.id}")
        else:
            participant.is_completed = False
            participant.completed_at = None
        self.db.commit()
        self.db.refresh(participant)
        return participant

    def leaderboard(self, challenge_id: str, limit: Optional[Union[int, str]]) -> List[ParticipantSchema]:
        """
        리더보드

        DISTANCE/FREQUENCY/STREAK은 값이 큰 순, PACE는 값이 작은 순입니다.
        PACE에서 아직 기록이 없는(0) 참가자는 맨 뒤로 보냅니다.
        """
        challenge = self.get_challenge(challenge_id)
        limit = clamp_limit(limit, default=20, maximum=100)

        query = self.db.query(ChallengeParticipant).filter(
            ChallengeParticipant.challenge_id == challenge_id
        )
        if challenge.lower_is_better:
            query = query.order_by(
                (ChallengeParticipant.current_value <= 0),
                ChallengeParticipant.current_value.asc(),
                ChallengeParticipant.joined_at.asc()
            )
        else:
            query = query.order_by(
                ChallengeParticipant.current_value.desc(),
                ChallengeParticipant.joined_at.asc()
            )

        return [
            ParticipantSchema(
                user=UserSummarySchema.model_validate(p.user),
                current_value=p.current_value,
                is_completed=p.is_completed,
                completed_at=p.completed_at,
                rank=rank
            )
            for rank, p in enumerate(query.limit(limit).all(), start=1)
        ]
