# ============================================
# app/api/v1/posts.py - 게시물 API 라우터
# ============================================
# 게시물 CRUD, 좋아요, 댓글 API를 제공합니다.
# ============================================

from typing import Optional
from fastapi import APIRouter, Depends, Query, Path, status
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.api.deps import get_current_user, get_current_user_optional
from app.models.user import User
from app.services.post_service import PostService
from app.schemas.community import (
    PostCreateRequest, PostUpdateRequest,
    CommentCreateRequest, CommentSchema
)
from app.schemas.common import success_response, cursor_page
from app.utils.pagination import clamp_limit


router = APIRouter(prefix="/posts", tags=["Posts"])


def _viewer_id(user: Optional[User]) -> Optional[str]:
    return user.id if user else None


# ============================================
# 게시물
# ============================================

@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="게시물 작성",
    description="""
    게시물을 작성합니다.

    **제한:**
    - 본문 2000자, 해시태그 30개(각 50자), 이미지 10장
    - workout_ids: 본인 운동 기록만 첨부 가능 (아니면 400)
    """
)
def create_post(
    request: PostCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = PostService(db)
    post = service.create_post(current_user, request)
    return success_response(service.to_schema(post, current_user.id), "게시물이 작성되었습니다")


@router.get(
    "",
    summary="사용자 게시물 목록",
    description="""
    한 사용자의 게시물을 최신순으로 조회합니다 (커서 페이지네이션).

    - user_id를 생략하면 내 게시물
    - 조회자가 볼 수 있는 공개 범위만 포함
    """
)
def list_posts(
    user_id: Optional[str] = Query(None, description="작성자 ID"),
    cursor: Optional[str] = Query(None, description="이전 응답의 nextCursor"),
    limit: Optional[str] = Query(None, description="페이지 크기 (1~50, 기본 10)"),
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    service = PostService(db)
    viewer_id = _viewer_id(current_user)
    posts, next_cursor = service.list_user_posts(user_id, viewer_id, cursor, clamp_limit(limit))
    items = [service.to_schema(p, viewer_id) for p in posts]
    return success_response(cursor_page(items, next_cursor))


@router.get("/{post_id}", summary="게시물 상세 조회")
def get_post(
    post_id: str = Path(..., description="게시물 ID"),
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    service = PostService(db)
    viewer_id = _viewer_id(current_user)
    post = service.get_post(post_id, viewer_id)
    return success_response(service.to_schema(post, viewer_id))


@router.patch("/{post_id}", summary="게시물 수정")
def update_post(
    post_id: str,
    request: PostUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = PostService(db)
    post = service.update_post(post_id, current_user, request)
    return success_response(service.to_schema(post, current_user.id), "게시물이 수정되었습니다")


@router.delete("/{post_id}", summary="게시물 삭제")
def delete_post(
    post_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    PostService(db).delete_post(post_id, current_user)
    return success_response(message="게시물이 삭제되었습니다")


# ============================================
# 좋아요
# ============================================

@router.post("/{post_id}/like", summary="좋아요")
def like_post(
    post_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return success_response(PostService(db).like_post(post_id, current_user))


@router.delete("/{post_id}/like", summary="좋아요 취소")
def unlike_post(
    post_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return success_response(PostService(db).unlike_post(post_id, current_user))


@router.get("/{post_id}/like", summary="좋아요 상태 조회")
def like_status(
    post_id: str,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    return success_response(PostService(db).like_status(post_id, _viewer_id(current_user)))


# ============================================
# 댓글
# ============================================

@router.post("/{post_id}/comments", status_code=status.HTTP_201_CREATED, summary="댓글 작성")
def create_comment(
    post_id: str,
    request: CommentCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    comment = PostService(db).create_comment(post_id, current_user, request)
    return success_response(CommentSchema.model_validate(comment), "댓글이 작성되었습니다")


@router.get("/{post_id}/comments", summary="댓글 목록")
def list_comments(
    post_id: str,
    cursor: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    comments, next_cursor = PostService(db).list_comments(
        post_id, _viewer_id(current_user), cursor, clamp_limit(limit, default=20)
    )
    items = [CommentSchema.model_validate(c) for c in comments]
    return success_response(cursor_page(items, next_cursor))


@router.delete("/{post_id}/comments/{comment_id}", summary="댓글 삭제")
def delete_comment(
    post_id: str,
    comment_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    PostService(db).delete_comment(post_id, comment_id, current_user)
    return success_response(message="댓글이 삭제되었습니다")
