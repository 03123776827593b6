# ============================================
# app/services/__init__.py
# ============================================
# 비즈니스 로직 서비스 패키지 초기화
# ============================================

"""
서비스 모듈

비즈니스 로직을 담당하는 서비스들을 제공합니다.

[신입 개발자를 위한 팁]
- 서비스 레이어는 API 엔드포인트(라우터)와 데이터베이스(모델) 사이에서
  실제 비즈니스 로직을 처리합니다.
- 라우터는 요청/응답만 처리하고, 실제 로직은 서비스에서 처리합니다.
- 서비스는 HTTP를 모릅니다. 실패하면 app.core.exceptions의 예외를 던집니다.

[아키텍처 흐름]
요청 → 라우터(API) → 서비스(비즈니스 로직) → 모델(DB) → 응답
"""

from app.services.auth_service import AuthService
from app.services.oauth_service import get_provider
from app.services.profile_service import ProfileService
from app.services.follow_service import FollowService
from app.services.block_service import BlockService
from app.services.post_service import PostService
from app.services.workout_service import WorkoutService
from app.services.workout_social_service import WorkoutSocialService
from app.services.upload_service import UploadService
from app.services.feed_service import FeedService
from app.services.notification_service import NotificationService
from app.services.conversation_service import ConversationService
from app.services.crew_service import CrewService
from app.services.crew_board_service import CrewBoardService
from app.services.event_service import EventService
from app.services.challenge_service import ChallengeService


__all__ = [
    "AuthService",
    "get_provider",
    "ProfileService",
    "FollowService",
    "BlockService",
    "PostService",
    "WorkoutService",
    "WorkoutSocialService",
    "UploadService",
    "FeedService",
    "NotificationService",
    "ConversationService",
    "CrewService",
    "CrewBoardService",
    "EventService",
    "ChallengeService",
]
