# ============================================
# app/core/exceptions.py - 커스텀 예외 클래스
# ============================================
# 애플리케이션 전체에서 사용하는 커스텀 예외들을 정의합니다.
# FastAPI의 HTTPException을 상속받아 일관된 에러 응답을 제공합니다.
# ============================================

from fastapi import HTTPException, status
from typing import Optional, Any


class RunnersClubException(HTTPException):
    """
    기본 예외 클래스

    모든 커스텀 예외의 부모 클래스입니다.

    [에러 응답 형식]
    {
        "detail": {
            "success": false,
            "error": {"code": "ERROR_CODE", "message": "...", "details": {...}}
        }
    }
    """
    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Any] = None
    ):
        detail = {
            "success": False,
            "error": {
                "code": error_code,
                "message": message
            }
        }

        if details:
            detail["error"]["details"] = details

        self.error_code = error_code
        self.message = message
        super().__init__(status_code=status_code, detail=detail)


# ============================================
# 검증 관련 예외 (400)
# ============================================

class ValidationException(RunnersClubException):
    """입력값 검증 실패 예외 (400)"""
    def __init__(
        self,
        message: str = "입력값이 유효하지 않습니다",
        field: Optional[str] = None,
        reason: Optional[str] = None
    ):
        details = None
        if field or reason:
            details = {"field": field, "reason": reason}

        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="VALIDATION_ERROR",
            message=message,
            details=details
        )


# ============================================
# 인증 관련 예외 (401)
# ============================================

class UnauthorizedException(RunnersClubException):
    """
    인증 실패 예외 (401)

    - 토큰이 없거나 유효하지 않을 때
    - 탈퇴한 계정의 토큰일 때
    """
    def __init__(
        self,
        message: str = "인증이 필요합니다",
        error_code: str = "UNAUTHORIZED"
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code=error_code,
            message=message
        )


class InvalidTokenException(UnauthorizedException):
    """유효하지 않은 토큰 예외 (401)"""
    def __init__(self):
        super().__init__(
            message="유효하지 않은 토큰입니다",
            error_code="INVALID_TOKEN"
        )


class SocialAuthFailedException(RunnersClubException):
    """소셜 로그인 실패 예외 (401)"""
    def __init__(self, provider: str = "소셜"):
        self.provider = provider
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="SOCIAL_AUTH_FAILED",
            message=f"{provider} 로그인에 실패했습니다"
        )


# ============================================
# 권한 관련 예외 (403)
# ============================================

class ForbiddenException(RunnersClubException):
    """권한 없음 예외 (403)"""
    def __init__(self, message: str = "권한이 없습니다"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="FORBIDDEN",
            message=message
        )


# ============================================
# 리소스 관련 예외 (404)
# ============================================

class NotFoundException(RunnersClubException):
    """리소스를 찾을 수 없음 예외 (404)"""
    def __init__(
        self,
        resource: str = "리소스",
        error_code: str = "NOT_FOUND"
    ):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code=error_code,
            message=f"{resource}를 찾을 수 없습니다"
        )


class UserNotFoundException(NotFoundException):
    """사용자를 찾을 수 없음"""
    def __init__(self):
        super().__init__(resource="사용자", error_code="USER_NOT_FOUND")


class WorkoutNotFoundException(NotFoundException):
    """운동 기록을 찾을 수 없음"""
    def __init__(self):
        super().__init__(resource="운동 기록", error_code="WORKOUT_NOT_FOUND")


class PostNotFoundException(NotFoundException):
    """게시물을 찾을 수 없음"""
    def __init__(self):
        super().__init__(resource="게시물", error_code="POST_NOT_FOUND")


class CommentNotFoundException(NotFoundException):
    """댓글을 찾을 수 없음"""
    def __init__(self):
        super().__init__(resource="댓글", error_code="COMMENT_NOT_FOUND")


class CrewNotFoundException(NotFoundException):
    def __init__(self):
        super().__init__(resource="크루", error_code="CREW_NOT_FOUND")


class BoardNotFoundException(NotFoundException):
    def __init__(self):
        super().__init__(resource="채널", error_code="BOARD_NOT_FOUND")


class EventNotFoundException(NotFoundException):
    def __init__(self):
        super().__init__(resource="이벤트", error_code="EVENT_NOT_FOUND")


class ChallengeNotFoundException(NotFoundException):
    def __init__(self):
        super().__init__(resource="챌린지", error_code="CHALLENGE_NOT_FOUND")


class NotificationNotFoundException(NotFoundException):
    def __init__(self):
        super().__init__(resource="알림", error_code="NOTIFICATION_NOT_FOUND")


class ConversationNotFoundException(NotFoundException):
    def __init__(self):
        super().__init__(resource="대화", error_code="CONVERSATION_NOT_FOUND")


class FileNotFoundInStorageException(NotFoundException):
    def __init__(self):
        super().__init__(resource="파일", error_code="FILE_NOT_FOUND")


# ============================================
# 충돌 관련 예외 (409)
# ============================================

class ConflictException(RunnersClubException):
    """
    이미 존재하거나 현재 상태와 충돌하는 요청 (409)
    """
    def __init__(
        self,
        message: str = "요청이 현재 상태와 충돌합니다",
        error_code: str = "CONFLICT"
    ):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code=error_code,
            message=message
        )


class AlreadyLikedException(ConflictException):
    """이미 좋아요를 누름"""
    def __init__(self):
        super().__init__(
            message="이미 좋아요를 눌렀습니다",
            error_code="ALREADY_LIKED"
        )


class AlreadyFollowingException(ConflictException):
    def __init__(self):
        super().__init__(
            message="이미 팔로우 중이거나 요청한 사용자입니다",
            error_code="ALREADY_FOLLOWING"
        )


class AlreadyBlockedException(ConflictException):
    def __init__(self):
        super().__init__(
            message="이미 차단한 사용자입니다",
            error_code="ALREADY_BLOCKED"
        )


# ============================================
# 업로드/서버 관련 예외
# ============================================

class PayloadTooLargeException(RunnersClubException):
    """업로드 파일 크기 초과 (413)"""
    def __init__(self, max_size_mb: int):
        super().__init__(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            error_code="PAYLOAD_TOO_LARGE",
            message=f"파일 크기는 {max_size_mb}MB를 넘을 수 없습니다"
        )


class StorageException(RunnersClubException):
    """파일 저장소 오류 (500)"""
    def __init__(self, message: str = "파일 저장소 처리 중 오류가 발생했습니다"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="STORAGE_ERROR",
            message=message
        )


class NotImplementedFeatureException(RunnersClubException):
    """
    아직 구현되지 않은 기능 (501)

    조용히 실패하지 않고 즉시 명시적으로 에러를 반환합니다.
    """
    def __init__(self, feature: str):
        super().__init__(
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            error_code="NOT_IMPLEMENTED",
            message=f"{feature} 기능은 아직 지원하지 않습니다"
        )

