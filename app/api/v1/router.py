# ============================================
# app/api/v1/router.py - API v1 메인 라우터
# ============================================
# 모든 API v1 라우터를 통합하는 메인 라우터입니다.
# 각 도메인별 라우터를 하나로 묶어서 main.py에서 사용합니다.
# ============================================

from fastapi import APIRouter

# 각 도메인별 라우터 import
from app.api.v1.auth import router as auth_router
from app.api.v1.profile import router as profile_router
from app.api.v1.follow import router as follow_router
from app.api.v1.block import router as block_router
from app.api.v1.posts import router as posts_router
from app.api.v1.workouts import router as workouts_router
from app.api.v1.uploads import router as uploads_router, files_router
from app.api.v1.feed import router as feed_router
from app.api.v1.notifications import router as notifications_router
from app.api.v1.conversations import router as conversations_router
from app.api.v1.crews import router as crews_router
from app.api.v1.crew_boards import router as crew_boards_router
from app.api.v1.events import router as events_router
from app.api.v1.challenges import router as challenges_router


# ============================================
# 메인 라우터 생성
# ============================================
# 최종 URL은 /api/v1/{도메인}/{엔드포인트} 형태가 됩니다.
# ============================================
api_router = APIRouter()


# ============================================
# 라우터 등록
# ============================================
# 예시:
# - /api/v1/auth/...          -> 소셜 로그인, 토큰 갱신
# - /api/v1/profile/...       -> 프로필
# - /api/v1/follow/...        -> 팔로우
# - /api/v1/block/...         -> 차단
# - /api/v1/posts/...         -> 게시물, 좋아요, 댓글
# - /api/v1/workouts/...      -> 운동 기록
# - /api/v1/uploads/...       -> 업로드, 운동 파일 파싱
# - /api/v1/disk-files/...    -> 업로드한 파일 제공
# - /api/v1/feed              -> 피드
# - /api/v1/notifications/... -> 알림 (SSE 포함)
# - /api/v1/conversations/... -> 1:1 대화 (SSE 포함)
# - /api/v1/crews/...         -> 크루, 크루 게시판
# - /api/v1/events/...        -> 대회
# - /api/v1/challenges/...    -> 챌린지
# ============================================

# 인증 / 사용자
api_router.include_router(auth_router)
api_router.include_router(profile_router)
api_router.include_router(follow_router)
api_router.include_router(block_router)

# 기록 / 커뮤니티
api_router.include_router(posts_router)
api_router.include_router(workouts_router)
api_router.include_router(uploads_router)
api_router.include_router(files_router)
api_router.include_router(feed_router)

# 실시간
api_router.include_router(notifications_router)
api_router.include_router(conversations_router)

# 크루 / 대회 / 챌린지
api_router.include_router(crews_router)
api_router.include_router(crew_boards_router)
api_router.include_router(events_router)
api_router.include_router(challenges_router)
