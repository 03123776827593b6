# ============================================
# app/models/__init__.py
# ============================================
# 데이터베이스 모델 패키지 초기화
#
# 모든 모델을 한 곳에서 import할 수 있도록 합니다.
# ============================================

"""
데이터베이스 모델 모듈

이 모듈에서 모든 데이터베이스 테이블 모델을 관리합니다.
SQLAlchemy ORM을 사용하여 Python 클래스로 테이블을 정의합니다.

[신입 개발자를 위한 팁]
- 각 파일은 관련된 테이블들을 묶어놓았습니다.
- user.py: 사용자 / 소셜 계정
- social.py: 팔로우 / 차단
- workout.py: 운동 기록 / 운동 파일 / 운동 좋아요, 댓글
- community.py: 게시물 / 좋아요 / 댓글
- crew.py: 크루 / 크루 게시판
- event.py, challenge.py, notification.py, conversation.py
"""

# 모든 모델을 import하여 Base.metadata에 등록
from app.models.user import (
    User,
    Account
)
from app.models.social import (
    Follow,
    Block
)
from app.models.workout import (
    Workout,
    WorkoutFile,
    WorkoutLike,
    WorkoutComment
)
from app.models.community import (
    Post,
    PostWorkout,
    PostLike,
    Comment
)
from app.models.crew import (
    Crew,
    CrewMember,
    CrewBan,
    CrewBoard,
    CrewBoardPost,
    CrewBoardComment,
    CrewBoardLike
)
from app.models.event import (
    Event,
    EventRegistration
)
from app.models.challenge import (
    Challenge,
    ChallengeParticipant
)
from app.models.notification import Notification
from app.models.conversation import (
    Conversation,
    ConversationParticipant,
    Message
)

# 외부에서 import할 수 있는 모델 목록
__all__ = [
    # User 관련
    "User",
    "Account",
    # 관계
    "Follow",
    "Block",
    # Workout 관련
    "Workout",
    "WorkoutFile",
    "WorkoutLike",
    "WorkoutComment",
    # Community 관련
    "Post",
    "PostWorkout",
    "PostLike",
    "Comment",
    # Crew 관련
    "Crew",
    "CrewMember",
    "CrewBan",
    "CrewBoard",
    "CrewBoardPost",
    "CrewBoardComment",
    "CrewBoardLike",
    # Event / Challenge
    "Event",
    "EventRegistration",
    "Challenge",
    "ChallengeParticipant",
    # 알림 / 대화
    "Notification",
    "Conversation",
    "ConversationParticipant",
    "Message"
]
