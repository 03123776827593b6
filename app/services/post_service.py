# ============================================
# app/services/post_service.py - 게시물 서비스
# ============================================
# 게시물 작성/조회/수정/삭제와 좋아요, 댓글을 처리합니다.
# ============================================

import logging
from datetime import datetime
from typing import Optional, List, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.user import User, VISIBILITY_PUBLIC, VISIBILITY_FOLLOWERS
from app.models.community import Post, PostWorkout, PostLike, Comment
from app.models.workout import Workout
from app.models.notification import NOTIFICATION_LIKE, NOTIFICATION_COMMENT
from app.schemas.community import (
    PostCreateRequest, PostUpdateRequest, PostSchema, CommentCreateRequest, LikeStatusSchema
)
from app.services.block_service import is_blocked, blocked_user_ids
from app.services.follow_service import is_accepted_follower
from app.services.notification_service import NotificationService
from app.services.visibility import can_view
from app.core.exceptions import (
    PostNotFoundException, CommentNotFoundException, ForbiddenException,
    ValidationException, AlreadyLikedException, ConflictException,
    NotFoundException, UserNotFoundException
)
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


class PostService:
    """
    게시물 서비스 클래스

    [신입 개발자를 위한 팁]
    - 볼 수 없는 게시물(공개 범위 밖, 차단 관계)은 존재 자체를 숨기기 위해 404로 응답합니다.
    - like_count / comment_count는 UPDATE ... SET x = x + 1 로 DB에서 원자적으로 증감합니다.
      (파이썬에서 읽고 더해서 저장하면 동시 요청 시 값이 유실됨)
    """

    def __init__(self, db: Session):
        self.db = db
        self.notifications = NotificationService(db)

    # ============================================
    # 직렬화
    # ============================================

    def to_schema(self, post: Post, viewer_id: Optional[str]) -> PostSchema:
        liked = False
        if viewer_id:
            liked = self.db.query(PostLike.id).filter(
                PostLike.post_id == post.id,
                PostLike.user_id == viewer_id
            ).first() is not None
        schema = PostSchema.model_validate(post)
        return schema.model_copy(update={"liked": liked})

    # ============================================
    # 게시물 CRUD
    # ============================================

    def create_post(self, user: User, request: PostCreateRequest) -> Post:
        """
        게시물 작성

        Raises:
            ValidationException: 본인 것이 아닌 운동 기록 첨부 (400)
        """
        workout_ids = list(dict.fromkeys(request.workout_ids))
        if workout_ids:
            owned = self.db.query(Workout.id).filter(
                Workout.id.in_(workout_ids),
                Workout.user_id == user.id,
                Workout.deleted_at.is_(None)
            ).all()
            if len(owned) != len(workout_ids):
                raise ValidationException(
                    message="본인의 운동 기록만 첨부할 수 있습니다",
                    field="workout_ids",
                    reason="not_owned"
                )

        post = Post(
            user_id=user.id,
            content=request.content,
            visibility=request.visibility,
            hashtags=request.hashtags,
            image_urls=request.image_urls
        )
        for workout_id in workout_ids:
            post.workout_links.append(PostWorkout(workout_id=workout_id))

        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        logger.info(f"Post created: id={post.id} user_id={user.id}")
        return post

    def get_post(self, post_id: str, viewer_id: Optional[str]) -> Post:
        """
        게시물 조회 (공개 범위 / 차단 확인)

        Raises:
            PostNotFoundException: 없거나, 삭제됐거나, 볼 수 없는 게시물 (404)
        """
        post = self.db.query(Post).filter(Post.id == post_id, Post.deleted_at.is_(None)).first()
        if not post or post.author.is_deleted:
            raise PostNotFoundException()
        if viewer_id and viewer_id != post.user_id and is_blocked(self.db, viewer_id, post.user_id):
            raise PostNotFoundException()
        if not can_view(self.db, viewer_id, post.user_id, post.visibility):
            raise PostNotFoundException()
        return post

    def list_user_posts(
        self,
        user_id: Optional[str],
        viewer_id: Optional[str],
        cursor: Optional[str],
        limit: int
    ) -> Tuple[List[Post], Optional[str]]:
        """
        한 사용자의 게시물 목록 (최신순)

        user_id를 생략하면 조회자 본인의 게시물입니다.
        """
        target_id = user_id or viewer_id
        if not target_id:
            raise ValidationException(message="user_id가 필요합니다", field="user_id", reason="required")

        target = self.db.query(User).filter(User.id == target_id, User.deleted_at.is_(None)).first()
        if not target:
            raise UserNotFoundException()

        if viewer_id and viewer_id != target_id and is_blocked(self.db, viewer_id, target_id):
            return [], None

        query = self.db.query(Post).filter(Post.user_id == target_id, Post.deleted_at.is_(None))
        if viewer_id != target_id:
            allowed = [VISIBILITY_PUBLIC]
            if viewer_id and is_accepted_follower(self.db, viewer_id, target_id):
                allowed.append(VISIBILITY_FOLLOWERS)
            query = query.filter(Post.visibility.in_(allowed))

        return paginate(query, Post, cursor, limit)

    def update_post(self, post_id: str, user: User, request: PostUpdateRequest) -> Post:
        post = self._get_own_post(post_id, user.id)
        changes = request.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None and field in ("visibility", "hashtags", "image_urls"):
                continue
            setattr(post, field, value)
        self.db.commit()
        self.db.refresh(post)
        return post

    def delete_post(self, post_id: str, user: User) -> None:
        post = self._get_own_post(post_id, user.id)
        post.deleted_at = datetime.utcnow()
        self.db.commit()
        logger.info(f"Post soft-deleted: id={post_id}")

    def _get_own_post(self, post_id: str, user_id: str) -> Post:
        post = self.db.query(Post).filter(Post.id == post_id, Post.deleted_at.is_(None)).first()
        if not post:
            raise PostNotFoundException()
        if post.user_id != user_id:
            raise ForbiddenException("본인의 게시물만 수정/삭제할 수 있습니다")
        return post

    # ============================================
    # 좋아요
    # ============================================

    def like_post(self, post_id: str, user: User) -> LikeStatusSchema:
        """
        좋아요

        Raises:
            AlreadyLikedException: 이미 좋아요함 (409)
        """
        post = self.get_post(post_id, user.id)

        exists = self.db.query(PostLike.id).filter(
            PostLike.post_id == post.id,
            PostLike.user_id == user.id
        ).first()
        if exists:
            raise AlreadyLikedException()

        try:
            self.db.add(PostLike(post_id=post.id, user_id=user.id))
            self.db.query(Post).filter(Post.id == post.id).update(
                {Post.like_count: Post.like_count + 1}, synchronize_session=False
            )
            self.db.commit()
        except IntegrityError:
            # 동시에 들어온 중복 요청 (unique 제약)
            self.db.rollback()
            raise AlreadyLikedException()

        self.db.refresh(post)
        self.notifications.notify(
            user_id=post.user_id,
            type=NOTIFICATION_LIKE,
            message=f"{user.name}님이 회원님의 게시물을 좋아합니다",
            actor_id=user.id,
            reference_type="POST",
            reference_id=post.id
        )
        return LikeStatusSchema(liked=True, like_count=post.like_count)

    def unlike_post(self, post_id: str, user: User) -> LikeStatusSchema:
        """
        좋아요 취소

        Raises:
            NotFoundException: 좋아요하지 않은 게시물 (404)
        """
        post = self.db.query(Post).filter(Post.id == post_id, Post.deleted_at.is_(None)).first()
        if not post:
            raise PostNotFoundException()

        deleted = self.db.query(PostLike).filter(
            PostLike.post_id == post.id,
            PostLike.user_id == user.id
        ).delete(synchronize_session=False)
        if not deleted:
            raise NotFoundException(resource="좋아요 기록", error_code="LIKE_NOT_FOUND")

        self.db.query(Post).filter(Post.id == post.id, Post.like_count > 0).update(
            {Post.like_count: Post.like_count - 1}, synchronize_session=False
        )
        self.db.commit()
        self.db.refresh(post)
        return LikeStatusSchema(liked=False, like_count=post.like_count)

    def like_status(self, post_id: str, viewer_id: Optional[str]) -> LikeStatusSchema:
        post = self.get_post(post_id, viewer_id)
        liked = False
        if viewer_id:
            liked = self.db.query(PostLike.id).filter(
                PostLike.post_id == post.id,
                PostLike.user_id == viewer_id
            ).first() is not None
        return LikeStatusSchema(liked=liked, like_count=post.like_count)

    # ============================================
    # 댓글
    # ============================================

    def create_comment(self, post_id: str, user: User, request: CommentCreateRequest) -> Comment:
        """
        댓글 작성

        Raises:
            ValidationException: 부모 댓글이 다른 게시물이거나 이미 답글인 경우 (400)
        """
        post = self.get_post(post_id, user.id)

        if request.parent_id:
            parent = self.db.query(Comment).filter(
                Comment.id == request.parent_id,
                Comment.deleted_at.is_(None)
            ).first()
            if not parent or parent.post_id != post.id:
                raise ValidationException(
                    message="같은 게시물의 댓글에만 답글을 달 수 있습니다",
                    field="parent_id",
                    reason="invalid_parent"
                )
            if parent.parent_id is not None:
                raise ValidationException(
                    message="답글에는 답글을 달 수 없습니다",
                    field="parent_id",
                    reason="nested_reply"
                )

        comment = Comment(
            post_id=post.id,
            user_id=user.id,
            parent_id=request.parent_id,
            mentioned_user_id=request.mentioned_user_id,
            content=request.content
        )
        self.db.add(comment)
        self.db.query(Post).filter(Post.id == post.id).update(
            {Post.comment_count: Post.comment_count + 1}, synchronize_session=False
        )
        self.db.commit()
        self.db.refresh(comment)

        self.notifications.notify(
            user_id=post.user_id,
            type=NOTIFICATION_COMMENT,
            message=f"{user.name}님이 댓글을 남겼습니다: {request.content[:30]}",
            actor_id=user.id,
            reference_type="POST",
            reference_id=post.id
        )
        return comment

    def list_comments(
        self,
        post_id: str,
        viewer_id: Optional[str],
        cursor: Optional[str],
        limit: int
    ) -> Tuple[List[Comment], Optional[str]]:
        """댓글 목록 (작성순, 차단 관계 사용자의 댓글 제외)"""
        post = self.get_post(post_id, viewer_id)
        query = self.db.query(Comment).filter(
            Comment.post_id == post.id,
            Comment.deleted_at.is_(None)
        )
        if viewer_id:
            hidden = blocked_user_ids(self.db, viewer_id)
            if hidden:
                query = query.filter(Comment.user_id.notin_(hidden))
        return paginate(query, Comment, cursor, limit, descending=False)

    def delete_comment(self, post_id: str, comment_id: str, user: User) -> None:
        """
        댓글 삭제 (Soft Delete)

        Raises:
            CommentNotFoundException: 없음 (404)
            ForbiddenException: 본인 댓글이 아님 (403)
            ConflictException: 이미 삭제됨 (409)
        """
        comment = self.db.query(Comment).filter(
            Comment.id == comment_id,
            Comment.post_id == post_id
        ).first()
        if not comment:
            raise CommentNotFoundException()
        if comment.user_id != user.id:
            raise ForbiddenException("본인의 댓글만 삭제할 수 있습니다")
        if comment.deleted_at is not None:
            raise ConflictException(message="이미 삭제된 댓글입니다", error_code="COMMENT_ALREADY_DELETED")

        comment.deleted_at = datetime.utcnow()
        self.db.query(Post).filter(Post.id == post_id, Post.comment_count > 0).update(
            {Post.comment_count: Post.comment_count - 1}, synchronize_session=False
        )
        self.db.commit()
