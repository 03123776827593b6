# ============================================
# app/services/crew_board_service.py - 크루 게시판 서비스
# ============================================
# 크루 채널(게시판), 채널 게시글, 댓글, 좋아요를 처리합니다.
# 모든 기능은 크루 멤버만 이용할 수 있습니다.
# ============================================

import logging
from datetime import datetime
from typing import Optional, List, Tuple
from sqlalchemy import or_, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.user import User
from app.models.crew import (
    CrewBoard, CrewBoardPost, CrewBoardComment, CrewBoardLike,
    ADMIN_ROLES, BOARD_GENERAL, BOARD_ANNOUNCEMENT, WRITE_ADMIN_ONLY
)
from app.schemas.crew import (
    BoardCreateRequest, BoardUpdateRequest,
    BoardPostCreateRequest, BoardPostUpdateRequest, BoardPostSchema,
    BoardCommentCreateRequest
)
from app.schemas.user import UserSummarySchema
from app.services.crew_service import CrewService
from app.core.exceptions import (
    BoardNotFoundException, PostNotFoundException, CommentNotFoundException,
    ForbiddenException, ValidationException, AlreadyLikedException, NotFoundException
)
from app.utils.pagination import decode_cursor, encode_cursor, clamp_limit

logger = logging.getLogger(__name__)


class CrewBoardService:
    """
    크루 게시판 서비스 클래스

    [권한 정리]
    - 채널 생성/수정/삭제, 게시글 고정: OWNER/ADMIN
    - ADMIN_ONLY 채널 글쓰기: OWNER/ADMIN
    - 게시글/댓글 수정·삭제: 작성자 또는 OWNER/ADMIN
    """

    def __init__(self, db: Session):
        self.db = db
        self.crews = CrewService(db)

    # ============================================
    # 조회 헬퍼
    # ============================================

    def _get_board(self, crew_id: str, board_id: str) -> CrewBoard:
        board = self.db.query(CrewBoard).filter(
            CrewBoard.id == board_id,
            CrewBoard.crew_id == crew_id
        ).first()
        if not board:
            raise BoardNotFoundException()
        return board

    def _get_post(self, crew_id: str, post_id: str) -> CrewBoardPost:
        post = self.db.query(CrewBoardPost).join(
            CrewBoard, CrewBoard.id == CrewBoardPost.board_id
        ).filter(
            CrewBoardPost.id == post_id,
            CrewBoardPost.deleted_at.is_(None),
            CrewBoard.crew_id == crew_id
        ).first()
        if not post:
            raise PostNotFoundException()
        return post

    def _is_admin(self, member) -> bool:
        return member.role in ADMIN_ROLES

    def to_schema(self, post: CrewBoardPost, viewer_id: str) -> BoardPostSchema:
        liked = self.db.query(CrewBoardLike).filter(
            CrewBoardLike.post_id == post.id,
            CrewBoardLike.user_id == viewer_id
        ).first() is not None
        return BoardPostSchema(
            id=post.id,
            board_id=post.board_id,
            author=UserSummarySchema.model_validate(post.author),
            title=post.title,
            content=post.content,
            image_urls=post.image_urls or [],
            is_pinned=post.is_pinned,
            like_count=post.like_count,
            comment_count=post.comment_count,
            liked=liked,
            created_at=post.created_at,
            updated_at=post.updated_at
        )

    # ============================================
    # 채널
    # ============================================

    def list_boards(self, crew_id: str, user: User) -> List[CrewBoard]:
        self.crews.get_crew(crew_id)
        self.crews.require_member(crew_id, user.id)
        return self.db.query(CrewBoard).filter(
            CrewBoard.crew_id == crew_id
        ).order_by(CrewBoard.sort_order.asc(), CrewBoard.created_at.asc()).all()

    def create_board(self, crew_id: str, user: User, request: BoardCreateRequest) -> CrewBoard:
        self.crews.get_crew(crew_id)
        self.crews.require_admin(crew_id, user.id)
        board = CrewBoard(
            crew_id=crew_id,
            name=request.name,
            type=BOARD_GENERAL,
            write_permission=request.write_permission,
            sort_order=request.sort_order
        )
        self.db.add(board)
        self.db.commit()
        self.db.refresh(board)
        return board

    def update_board(self, crew_id: str, board_id: str, user: User, request: BoardUpdateRequest) -> CrewBoard:
        self.crews.get_crew(crew_id)
        self.crews.require_admin(crew_id, user.id)
        board = self._get_board(crew_id, board_id)
        for field, value in request.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(board, field, value)
        self.db.commit()
        self.db.refresh(board)
        return board

    def delete_board(self, crew_id: str, board_id: str, user: User) -> None:
        """
        채널 삭제

        Raises:
            ValidationException: 공지 채널은 삭제 불가 (400)
        """
        self.crews.get_crew(crew_id)
        self.crews.require_admin(crew_id, user.id)
        board = self._get_board(crew_id, board_id)
        if board.type == BOARD_ANNOUNCEMENT:
            raise ValidationException(message="공지 채널은 삭제할 수 없습니다", reason="announcement_board")

        post_ids = self.db.query(CrewBoardPost.id).filter(CrewBoardPost.board_id == board_id)
        self.db.query(CrewBoardPost).filter(
            CrewBoardPost.id.in_(post_ids),
            CrewBoardPost.deleted_at.is_(None)
        ).update({CrewBoardPost.deleted_at: datetime.utcnow()}, synchronize_session=False)
        self.db.delete(board)
        self.db.commit()

    # ============================================
    # 채널 게시글
    # ============================================

    def create_post(
        self,
        crew_id: str,
        board_id: str,
        user: User,
        request: BoardPostCreateRequest
    ) -> CrewBoardPost:
        self.crews.get_crew(crew_id)
        member = self.crews.require_member(crew_id, user.id)
        board = self._get_board(crew_id, board_id)
        if board.write_permission == WRITE_ADMIN_ONLY and not self._is_admin(member):
            raise ForbiddenException("관리자만 글을 쓸 수 있는 채널입니다")

        post = CrewBoardPost(
            board_id=board_id,
            author_id=user.id,
            title=request.title,
            content=request.content,
            image_urls=request.image_urls
        )
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        return post

    def list_posts(
        self,
        crew_id: str,
        board_id: str,
        user: User,
        cursor: Optional[str],
        limit: int
    ) -> Tuple[List[CrewBoardPost], Optional[str]]:
        """
        채널 게시글 목록

        고정글이 먼저 오고, 그 안에서 최신순입니다.
        커서가 가리키는 게시글의 고정 여부로 다음 페이지 범위를 정합니다.
        """
        self.crews.get_crew(crew_id)
        self.crews.require_member(crew_id, user.id)
        self._get_board(crew_id, board_id)
        limit = clamp_limit(limit)

        query = self.db.query(CrewBoardPost).filter(
            CrewBoardPost.board_id == board_id,
            CrewBoardPost.deleted_at.is_(None)
        )

        if cursor:
            last_time, last_id = decode_cursor(cursor)
            last = self.db.query(CrewBoardPost).filter(CrewBoardPost.id == last_id).first()
            if last is None:
                raise ValidationException(message="유효하지 않은 커서입니다", field="cursor", reason="unknown_item")
            older = or_(
                CrewBoardPost.created_at < last_time,
                and_(CrewBoardPost.created_at == last_time, CrewBoardPost.id < last_id)
            )
            if last.is_pinned:
                query = query.filter(or_(CrewBoardPost.is_pinned.is_(False), older))
            else:
                query = query.filter(CrewBoardPost.is_pinned.is_(False), older)

        rows = query.order_by(
            CrewBoardPost.is_pinned.desc(),
            CrewBoardPost.created_at.desc(),
            CrewBoardPost.id.desc()
        ).limit(limit + 1).all()

        next_cursor = None
        if len(rows) > limit:
            rows = rows[:limit]
            tail = rows[-1]
            next_cursor = encode_cursor(tail.created_at, tail.id)
        return rows, next_cursor

    def get_post(self, crew_id: str, post_id: str, user: User) -> CrewBoardPost:
        self.crews.get_crew(crew_id)
        self.crews.require_member(crew_id, user.id)
        return self._get_post(crew_id, post_id)

    def _require_author_or_admin(self, crew_id: str, author_id: str, user: User) -> None:
        member = self.crews.require_member(crew_id, user.id)
        if author_id != user.id and not self._is_admin(member):
            raise ForbiddenException("작성자 또는 관리자만 가능합니다")

    def update_post(
        self,
        crew_id: str,
        post_id: str,
        user: User,
        request: BoardPostUpdateRequest
    ) -> CrewBoardPost:
        self.crews.get_crew(crew_id)
        post = self._get_post(crew_id, post_id)
        self._require_author_or_admin(crew_id, post.author_id, user)
        for field, value in request.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(post, field, value)
        self.db.commit()
        self.db.refresh(post)
        return post

    def delete_post(self, crew_id: str, post_id: str, user: User) -> None:
        self.crews.get_crew(crew_id)
        post = self._get_post(crew_id, post_id)
        self._require_author_or_admin(crew_id, post.author_id, user)
        post.deleted_at = datetime.utcnow()
        self.db.commit()

    def toggle_pin(self, crew_id: str, post_id: str, user: User) -> CrewBoardPost:
        self.crews.get_crew(crew_id)
        self.crews.require_admin(crew_id, user.id)
        post = self._get_post(crew_id, post_id)
        post.is_pinned = not post.is_pinned
        self.db.commit()
        self.db.refresh(post)
        return post

    # ============================================
    # 좋아요
    # ============================================

    def like_post(self, crew_id: str, post_id: str, user: User) -> None:
        self.crews.get_crew(crew_id)
        self.crews.require_member(crew_id, user.id)
        post = self._get_post(crew_id, post_id)

        self.db.add(CrewBoardLike(post_id=post.id, user_id=user.id))
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            raise AlreadyLikedException()

        self.db.query(CrewBoardPost).filter(CrewBoardPost.id == post.id).update(
            {CrewBoardPost.like_count: CrewBoardPost.like_count + 1},
            synchronize_session=False
        )
        self.db.commit()

    def unlike_post(self, crew_id: str, post_id: str, user: User) -> None:
        self.crews.get_crew(crew_id)
        self.crews.require_member(crew_id, user.id)
        post = self._get_post(crew_id, post_id)

        like = self.db.query(CrewBoardLike).filter(
            CrewBoardLike.post_id == post.id,
            CrewBoardLike.user_id == user.id
        ).first()
        if not like:
            raise NotFoundException(resource="좋아요", error_code="LIKE_NOT_FOUND")

        self.db.delete(like)
        self.db.query(CrewBoardPost).filter(
            CrewBoardPost.id == post.id,
            CrewBoardPost.like_count > 0
        ).update(
            {CrewBoardPost.like_count: CrewBoardPost.like_count - 1},
            synchronize_session=False
        )
        self.db.commit()

    # ============================================
    # 댓글
    # ============================================

    def list_comments(self, crew_id: str, post_id: str, user: User) -> List[CrewBoardComment]:
        self.crews.get_crew(crew_id)
        self.crews.require_member(crew_id, user.id)
        self._get_post(crew_id, post_id)
        return self.db.query(CrewBoardComment).filter(
            CrewBoardComment.post_id == post_id,
            CrewBoardComment.deleted_at.is_(None)
        ).order_by(CrewBoardComment.created_at.asc(), CrewBoardComment.id.asc()).all()

    def create_comment(
        self,
        crew_id: str,
        post_id: str,
        user: User,
        request: BoardCommentCreateRequest
    ) -> CrewBoardComment:
        """
        댓글 작성 (답글은 한 단계까지)

        Raises:
            ValidationException: 부모 댓글이 다른 게시글이거나 답글인 경우 (400)
        """
        self.crews.get_crew(crew_id)
        self.crews.require_member(crew_id, user.id)
        post = self._get_post(crew_id, post_id)

        if request.parent_id:
            parent = self.db.query(CrewBoardComment).filter(
                CrewBoardComment.id == request.parent_id,
                CrewBoardComment.deleted_at.is_(None)
            ).first()
            if not parent or parent.post_id != post.id:
                raise ValidationException(message="같은 게시글의 댓글에만 답글을 달 수 있습니다", field="parent_id")
            if parent.parent_id is not None:
                raise ValidationException(message="답글에는 답글을 달 수 없습니다", field="parent_id")

        comment = CrewBoardComment(
            post_id=post.id,
            author_id=user.id,
            parent_id=request.parent_id,
            content=request.content
        )
        self.db.add(comment)
        self.db.query(CrewBoardPost).filter(CrewBoardPost.id == post.id).update(
            {CrewBoardPost.comment_count: CrewBoardPost.comment_count + 1},
            synchronize_session=False
        )
        self.db.commit()
        self.db.refresh(comment)
        return comment

    def delete_comment(self, crew_id: str, comment_id: str, user: User) -> None:
        self.crews.get_crew(crew_id)
        comment = self.db.query(CrewBoardComment).filter(
            CrewBoardComment.id == comment_id,
            CrewBoardComment.deleted_at.is_(None)
        ).first()
        if not comment:
            raise CommentNotFoundException()
        # 다른 크루의 댓글이면 404
        post = self._get_post(crew_id, comment.post_id)
        self._require_author_or_admin(crew_id, comment.author_id, user)

        comment.deleted_at = datetime.utcnow()
        self.db.query(CrewBoardPost).filter(
            CrewBoardPost.id == post.id,
            CrewBoardPost.comment_count > 0
        ).update(
            {CrewBoardPost.comment_count: CrewBoardPost.comment_count - 1},
            synchronize_session=False
        )
        self.db.commit()
        logger.debug(f"Crew board comment deleted: {comment_id}")
