# ============================================
# app/services/crew_service.py - 크루 서비스
# ============================================
# 크루 생성/조회/수정/삭제, 가입/탈퇴, 강퇴, 역할 변경을 처리합니다.
# ============================================

import logging
from datetime import datetime
from typing import Optional, List, Tuple
from sqlalchemy.orm import Session

from app.models.user import User
from app.models.crew import (
    Crew, CrewMember, CrewBan, CrewBoard,
    ROLE_OWNER, ROLE_ADMIN, ROLE_MEMBER, ADMIN_ROLES, MEMBER_ACTIVE,
    BOARD_ANNOUNCEMENT, WRITE_ADMIN_ONLY
)
from app.models.notification import NOTIFICATION_CREW_JOIN
from app.schemas.crew import CrewCreateRequest, CrewUpdateRequest, CrewSchema
from app.services.notification_service import NotificationService
from app.core.exceptions import (
    CrewNotFoundException, ForbiddenException, ValidationException
)
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)

DEFAULT_ANNOUNCEMENT_BOARD = "공지"


class CrewService:
    """
    크루 서비스 클래스

    [권한 정리]
    - OWNER: 크루 삭제, 역할 변경, 수정, 강퇴
    - ADMIN: 수정, 강퇴 (OWNER는 강퇴 불가)
    - MEMBER: 조회, 탈퇴
    """

    def __init__(self, db: Session):
        self.db = db
        self.notifications = NotificationService(db)

    # ============================================
    # 헬퍼
    # ============================================

    def get_crew(self, crew_id: str) -> Crew:
        crew = self.db.query(Crew).filter(Crew.id == crew_id, Crew.deleted_at.is_(None)).first()
        if not crew:
            raise CrewNotFoundException()
        return crew

    def get_membership(self, crew_id: str, user_id: str) -> Optional[CrewMember]:
        return self.db.query(CrewMember).filter(
            CrewMember.crew_id == crew_id,
            CrewMember.user_id == user_id,
            CrewMember.status == MEMBER_ACTIVE
        ).first()

    def require_member(self, crew_id: str, user_id: str) -> CrewMember:
        member = self.get_membership(crew_id, user_id)
        if not member:
            raise ForbiddenException("크루 멤버만 이용할 수 있습니다")
        return member

    def require_admin(self, crew_id: str, user_id: str) -> CrewMember:
        member = self.get_membership(crew_id, user_id)
        if not member or member.role not in ADMIN_ROLES:
            raise ForbiddenException("크루 관리자만 이용할 수 있습니다")
        return member

    def member_count(self, crew_id: str) -> int:
        return self.db.query(CrewMember).filter(
            CrewMember.crew_id == crew_id,
            CrewMember.status == MEMBER_ACTIVE
        ).count()

    def to_schema(self, crew: Crew, viewer_id: Optional[str]) -> CrewSchema:
        my_role = None
        if viewer_id:
            member = self.get_membership(crew.id, viewer_id)
            my_role = member.role if member else None
        return CrewSchema(
            id=crew.id,
            name=crew.name,
            description=crew.description,
            image_url=crew.image_url,
            creator_id=crew.creator_id,
            is_public=crew.is_public,
            max_members=crew.max_members,
            member_count=self.member_count(crew.id),
            my_role=my_role,
            created_at=crew.created_at
        )

    # ============================================
    # 크루 CRUD
    # ============================================

    def create_crew(self, user: User, request: CrewCreateRequest) -> Crew:
        """
        크루 생성

        생성자를 OWNER로 등록하고, 관리자 전용 공지 채널을 함께 만듭니다.
        """
        crew = Crew(
            name=request.name,
            description=request.description,
            image_url=request.image_url,
            creator_id=user.id,
            is_public=request.is_public,
            max_members=request.max_members
        )
        self.db.add(crew)
        self.db.flush()

        self.db.add(CrewMember(crew_id=crew.id, user_id=user.id, role=ROLE_OWNER))
        self.db.add(CrewBoard(
            crew_id=crew.id,
            name=DEFAULT_ANNOUNCEMENT_BOARD,
            type=BOARD_ANNOUNCEMENT,
            write_permission=WRITE_ADMIN_ONLY,
            sort_order=0
        ))
        self.db.commit()
        self.db.refresh(crew)
        logger.info(f"Crew created: id={crew.id} owner={user.id}")
        return crew

    def list_crews(
        self,
        is_public: Optional[bool],
        cursor: Optional[str],
        limit: int
    ) -> Tuple[List[Crew], Optional[str]]:
        query = self.db.query(Crew).filter(Crew.deleted_at.is_(None))
        if is_public is not None:
            query = query.filter(Crew.is_public.is_(is_public))
        return paginate(query, Crew, cursor, limit)

    def my_crews(self, user: User) -> List[Crew]:
        return self.db.query(Crew).join(CrewMember, CrewMember.crew_id == Crew.id).filter(
            CrewMember.user_id == user.id,
            CrewMember.status == MEMBER_ACTIVE,
            Crew.deleted_at.is_(None)
        ).order_by(CrewMember.joined_at.desc()).all()

    def update_crew(self, crew_id: str, user: User, request: CrewUpdateRequest) -> Crew:
        crew = self.get_crew(crew_id)
        self.require_admin(crew_id, user.id)

        changes = request.model_dump(exclude_unset=True)
        if "max_members" in changes and changes["max_members"] is not None:
            if changes["max_members"] < self.member_count(crew_id):
                raise ValidationException(
                    message="현재 인원보다 적게 설정할 수 없습니다",
                    field="max_members"
                )
        for field, value in changes.items():
            if value is None and field in ("name", "is_public"):
                continue
            setattr(crew, field, value)
        self.db.commit()
        self.db.refresh(crew)
        return crew

    def delete_crew(self, crew_id: str, user: User) -> None:
        crew = self.get_crew(crew_id)
        member = self.get_membership(crew_id, user.id)
        if not member or member.role != ROLE_OWNER:
            raise ForbiddenException("크루장만 삭제할 수 있습니다")
        crew.deleted_at = datetime.utcnow()
        self.db.commit()
        logger.info(f"Crew soft-deleted: id={crew_id}")

    # ============================================
    # 가입 / 탈퇴
    # ============================================

    def join(self, crew_id: str, user: User) -> CrewMember:
        """
        크루 가입

        Raises:
            ValidationException: 강퇴된 사용자, 이미 멤버, 정원 초과 (400)
        """
        crew = self.get_crew(crew_id)

        banned = self.db.query(CrewBan).filter(
            CrewBan.crew_id == crew_id,
            CrewBan.user_id == user.id
        ).first()
        if banned:
            raise ValidationException(message="강퇴된 크루에는 다시 가입할 수 없습니다", reason="banned")

        if self.get_membership(crew_id, user.id):
            raise ValidationException(message="이미 가입한 크루입니다", reason="already_member")

        if crew.max_members is not None and self.member_count(crew_id) >= crew.max_members:
            raise ValidationException(message="크루 정원이 가득 찼습니다", reason="full")

        member = CrewMember(crew_id=crew_id, user_id=user.id, role=ROLE_MEMBER)
        self.db.add(member)
        self.db.commit()
        self.db.refresh(member)

        self.notifications.notify(
            user_id=crew.creator_id,
            type=NOTIFICATION_CREW_JOIN,
            message=f"{user.name}님이 {crew.name} 크루에 가입했습니다",
            actor_id=user.id,
            reference_type="CREW",
            reference_id=crew.id
        )
        return member

    def leave(self, crew_id: str, user: User) -> None:
        """
        크루 탈퇴

        Raises:
            ValidationException: 멤버가 아님 (400)
            ForbiddenException: 크루장은 탈퇴 불가 (403)
        """
        self.get_crew(crew_id)
        member = self.get_membership(crew_id, user.id)
        if not member:
            raise ValidationException(message="가입하지 않은 크루입니다", reason="not_member")
        if member.role == ROLE_OWNER:
            raise ForbiddenException("크루장은 탈퇴할 수 없습니다")
        self.db.delete(member)
        self.db.commit()

    # ============================================
    # 멤버 관리
    # ============================================

    def list_members(self, crew_id: str) -> List[CrewMember]:
        self.get_crew(crew_id)
        return self.db.query(CrewMember).filter(
            CrewMember.crew_id == crew_id,
            CrewMember.status == MEMBER_ACTIVE
        ).order_by(CrewMember.joined_at.asc()).all()

    def kick(self, crew_id: str, user: User, target_id: str) -> None:
        """
        멤버 강퇴 (강퇴된 사용자는 다시 가입할 수 없음)

        Raises:
            ForbiddenException: 관리자가 아니거나 크루장을 강퇴하려는 경우 (403)
            ValidationException: 대상이 멤버가 아님 (400)
        """
        self.get_crew(crew_id)
        self.require_admin(crew_id, user.id)

        target = self.get_membership(crew_id, target_id)
        if not target:
            raise ValidationException(message="대상 사용자가 크루 멤버가 아닙니다", field="user_id", reason="not_member")
        if target.role == ROLE_OWNER:
            raise ForbiddenException("크루장은 강퇴할 수 없습니다")

        self.db.delete(target)
        self.db.add(CrewBan(crew_id=crew_id, user_id=target_id, banned_by=user.id))
        self.db.commit()
        logger.info(f"Crew {crew_id}: {target_id} kicked by {user.id}")

    def update_role(self, crew_id: str, user: User, target_id: str, role: str) -> CrewMember:
        """
        멤버 역할 변경 (크루장만, ADMIN ↔ MEMBER)

        Raises:
            ForbiddenException: 크루장이 아니거나 크루장 역할을 바꾸려는 경우 (403)
            ValidationException: 대상이 멤버가 아님 (400)
        """
        self.get_crew(crew_id)
        me = self.get_membership(crew_id, user.id)
        if not me or me.role != ROLE_OWNER:
            raise ForbiddenException("크루장만 역할을 변경할 수 있습니다")

        target = self.get_membership(crew_id, target_id)
        if not target:
            raise ValidationException(message="대상 사용자가 크루 멤버가 아닙니다", field="user_id", reason="not_member")
        if target.role == ROLE_OWNER:
            raise ForbiddenException("크루장의 역할은 변경할 수 없습니다")
        if role not in (ROLE_ADMIN, ROLE_MEMBER):
            raise ValidationException(message="변경할 수 없는 역할입니다", field="role")

        target.role = role
        self.db.commit()
        self.db.refresh(target)
        return target
