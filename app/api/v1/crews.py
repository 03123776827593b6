# ============================================
# app/api/v1/crews.py - 크루 API 라우터
# ============================================
# 크루 생성/조회/수정/삭제, 가입/탈퇴, 멤버 관리 API를 제공합니다.
# ============================================

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.api.deps import get_current_user, get_current_user_optional
from app.models.user import User
from app.models.crew import CrewMember
from app.services.crew_service import CrewService
from app.schemas.crew import (
    CrewCreateRequest, CrewUpdateRequest, CrewMemberSchema, RoleUpdateRequest
)
from app.schemas.user import UserSummarySchema
from app.schemas.common import success_response, cursor_page
from app.utils.pagination import clamp_limit


router = APIRouter(prefix="/crews", tags=["Crews"])


def _member_schema(member: CrewMember) -> CrewMemberSchema:
    return CrewMemberSchema(
        user=UserSummarySchema.model_validate(member.user),
        role=member.role,
        joined_at=member.joined_at
    )


# ============================================
# 크루
# ============================================

@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="크루 생성",
    description="""
    크루를 만듭니다.

    - 만든 사람은 OWNER로 자동 가입
    - 관리자만 글을 쓸 수 있는 "공지" 채널이 함께 생성됨
    """
)
def create_crew(
    request: CrewCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = CrewService(db)
    crew = service.create_crew(current_user, request)
    return success_response(service.to_schema(crew, current_user.id), "크루가 생성되었습니다")


@router.get("", summary="크루 목록")
def list_crews(
    is_public: Optional[bool] = Query(None, description="공개 여부 필터"),
    cursor: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    service = CrewService(db)
    crews, next_cursor = service.list_crews(is_public, cursor, clamp_limit(limit))
    viewer_id = current_user.id if current_user else None
    items = [service.to_schema(c, viewer_id) for c in crews]
    return success_response(cursor_page(items, next_cursor))


@router.get("/my", summary="내가 가입한 크루")
def my_crews(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = CrewService(db)
    return success_response([service.to_schema(c, current_user.id) for c in service.my_crews(current_user)])


@router.get("/{crew_id}", summary="크루 상세 조회")
def get_crew(
    crew_id: str,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    service = CrewService(db)
    crew = service.get_crew(crew_id)
    return success_response(service.to_schema(crew, current_user.id if current_user else None))


@router.patch("/{crew_id}", summary="크루 수정 (OWNER/ADMIN)")
def update_crew(
    crew_id: str,
    request: CrewUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = CrewService(db)
    crew = service.update_crew(crew_id, current_user, request)
    return success_response(service.to_schema(crew, current_user.id), "크루 정보가 수정되었습니다")


@router.delete("/{crew_id}", summary="크루 삭제 (OWNER)")
def delete_crew(
    crew_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    CrewService(db).delete_crew(crew_id, current_user)
    return success_response(message="크루가 삭제되었습니다")


# ============================================
# 가입 / 탈퇴
# ============================================

@router.post(
    "/{crew_id}/join",
    status_code=status.HTTP_201_CREATED,
    summary="크루 가입",
    description="강퇴된 사용자, 이미 가입한 사용자, 정원 초과는 400입니다."
)
def join_crew(
    crew_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    member = CrewService(db).join(crew_id, current_user)
    return success_response(_member_schema(member), "크루에 가입했습니다")


@router.delete("/{crew_id}/leave", summary="크루 탈퇴")
def leave_crew(
    crew_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    CrewService(db).leave(crew_id, current_user)
    return success_response(message="크루에서 탈퇴했습니다")


# ============================================
# 멤버 관리
# ============================================

@router.get("/{crew_id}/members", summary="크루 멤버 목록")
def list_members(
    crew_id: str,
    db: Session = Depends(get_db)
):
    members = CrewService(db).list_members(crew_id)
    return success_response([_member_schema(m) for m in members])


@router.delete("/{crew_id}/members/{user_id}", summary="멤버 강퇴 (OWNER/ADMIN)")
def kick_member(
    crew_id: str,
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    CrewService(db).kick(crew_id, current_user, user_id)
    return success_response(message="멤버를 강퇴했습니다")


@router.patch("/{crew_id}/members/{user_id}/role", summary="멤버 역할 변경 (OWNER)")
def update_member_role(
    crew_id: str,
    user_id: str,
    request: RoleUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    member = CrewService(db).update_role(crew_id, current_user, user_id, request.role)
    return success_response(_member_schema(member), "역할이 변경되었습니다")
