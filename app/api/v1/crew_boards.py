# ============================================
# app/api/v1/crew_boards.py - 크루 게시판 API 라우터
# ============================================
# 크루 채널, 채널 게시글, 댓글, 좋아요 API를 제공합니다.
# 모든 API는 크루 멤버만 호출할 수 있습니다.
# ============================================

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.api.deps import get_current_user
from app.models.user import User
from app.services.crew_board_service import CrewBoardService
from app.schemas.crew import (
    BoardCreateRequest, BoardUpdateRequest, BoardSchema,
    BoardPostCreateRequest, BoardPostUpdateRequest,
    BoardCommentCreateRequest, BoardCommentSchema
)
from app.schemas.common import success_response, cursor_page
from app.utils.pagination import clamp_limit


router = APIRouter(prefix="/crews/{crew_id}", tags=["Crew Boards"])


# ============================================
# 채널
# ============================================

@router.get("/boards", summary="채널 목록 (sort_order 순)")
def list_boards(
    crew_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    boards = CrewBoardService(db).list_boards(crew_id, current_user)
    return success_response([BoardSchema.model_validate(b) for b in boards])


@router.post("/boards", status_code=status.HTTP_201_CREATED, summary="채널 생성 (OWNER/ADMIN)")
def create_board(
    crew_id: str,
    request: BoardCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    board = CrewBoardService(db).create_board(crew_id, current_user, request)
    return success_response(BoardSchema.model_validate(board), "채널이 생성되었습니다")


@router.patch("/boards/{board_id}", summary="채널 수정 (OWNER/ADMIN)")
def update_board(
    crew_id: str,
    board_id: str,
    request: BoardUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    board = CrewBoardService(db).update_board(crew_id, board_id, current_user, request)
    return success_response(BoardSchema.model_validate(board), "채널이 수정되었습니다")


@router.delete(
    "/boards/{board_id}",
    summary="채널 삭제 (OWNER/ADMIN)",
    description="공지(ANNOUNCEMENT) 채널은 삭제할 수 없습니다 (400)."
)
def delete_board(
    crew_id: str,
    board_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    CrewBoardService(db).delete_board(crew_id, board_id, current_user)
    return success_response(message="채널이 삭제되었습니다")


# ============================================
# 채널 게시글
# ============================================

@router.get(
    "/boards/{board_id}/posts",
    summary="채널 게시글 목록",
    description="고정글이 먼저 오고, 그 다음 최신순입니다."
)
def list_board_posts(
    crew_id: str,
    board_id: str,
    cursor: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = CrewBoardService(db)
    posts, next_cursor = service.list_posts(crew_id, board_id, current_user, cursor, clamp_limit(limit))
    items = [service.to_schema(p, current_user.id) for p in posts]
    return success_response(cursor_page(items, next_cursor))


@router.post(
    "/boards/{board_id}/posts",
    status_code=status.HTTP_201_CREATED,
    summary="채널 게시글 작성",
    description="ADMIN_ONLY 채널은 OWNER/ADMIN만 작성할 수 있습니다."
)
def create_board_post(
    crew_id: str,
    board_id: str,
    request: BoardPostCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = CrewBoardService(db)
    post = service.create_post(crew_id, board_id, current_user, request)
    return success_response(service.to_schema(post, current_user.id), "게시글이 작성되었습니다")


@router.get("/posts/{post_id}", summary="채널 게시글 상세")
def get_board_post(
    crew_id: str,
    post_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = CrewBoardService(db)
    post = service.get_post(crew_id, post_id, current_user)
    return success_response(service.to_schema(post, current_user.id))


@router.patch("/posts/{post_id}", summary="채널 게시글 수정 (작성자/관리자)")
def update_board_post(
    crew_id: str,
    post_id: str,
    request: BoardPostUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = CrewBoardService(db)
    post = service.update_post(crew_id, post_id, current_user, request)
    return success_response(service.to_schema(post, current_user.id), "게시글이 수정되었습니다")


@router.delete("/posts/{post_id}", summary="채널 게시글 삭제 (작성자/관리자)")
def delete_board_post(
    crew_id: str,
    post_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    CrewBoardService(db).delete_post(crew_id, post_id, current_user)
    return success_response(message="게시글이 삭제되었습니다")


@router.patch("/posts/{post_id}/pin", summary="게시글 고정/해제 (OWNER/ADMIN)")
def toggle_pin(
    crew_id: str,
    post_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = CrewBoardService(db)
    post = service.toggle_pin(crew_id, post_id, current_user)
    return success_response(service.to_schema(post, current_user.id))


# ============================================
# 좋아요
# ============================================

@router.post("/posts/{post_id}/like", summary="채널 게시글 좋아요")
def like_board_post(
    crew_id: str,
    post_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    CrewBoardService(db).like_post(crew_id, post_id, current_user)
    return success_response(message="좋아요를 눌렀습니다")


@router.delete("/posts/{post_id}/like", summary="채널 게시글 좋아요 취소")
def unlike_board_post(
    crew_id: str,
    post_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    CrewBoardService(db).unlike_post(crew_id, post_id, current_user)
    return success_response(message="좋아요를 취소했습니다")


# ============================================
# 댓글
# ============================================

@router.get("/posts/{post_id}/comments", summary="채널 댓글 목록")
def list_board_comments(
    crew_id: str,
    post_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    comments = CrewBoardService(db).list_comments(crew_id, post_id, current_user)
    return success_response([BoardCommentSchema.model_validate(c) for c in comments])


@router.post(
    "/posts/{post_id}/comments",
    status_code=status.HTTP_201_CREATED,
    summary="채널 댓글 작성",
    description="답글은 같은 게시글의 최상위 댓글에만 달 수 있습니다 (아니면 400)."
)
def create_board_comment(
    crew_id: str,
    post_id: str,
    request: BoardCommentCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    comment = CrewBoardService(db).create_comment(crew_id, post_id, current_user, request)
    return success_response(BoardCommentSchema.model_validate(comment), "댓글이 작성되었습니다")


@router.delete("/comments/{comment_id}", summary="채널 댓글 삭제 (작성자/관리자)")
def delete_board_comment(
    crew_id: str,
    comment_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    CrewBoardService(db).delete_comment(crew_id, comment_id, current_user)
    return success_response(message="댓글이 삭제되었습니다")
