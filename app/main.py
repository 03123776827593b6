# ============================================
# app/main.py - FastAPI 애플리케이션 시작점
# ============================================
# 이 파일은 FastAPI 서버의 진입점(Entry Point)입니다.
# 서버를 시작하면 이 파일이 가장 먼저 실행됩니다.
# ============================================

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

# 설정 불러오기
from app.config import settings
from app.db.database import Base, engine, get_db
# 모든 모델을 등록해야 create_all이 테이블을 만듭니다
from app import models  # noqa: F401
# API 라우터 불러오기
from app.api.v1.router import api_router
from app.services.sse_service import notification_registry, message_registry


# ============================================
# 로깅 설정
# ============================================
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    애플리케이션 생명주기 관리

    [신입 개발자를 위한 팁]
    - yield 전: 서버 시작 시 실행되는 코드 (테이블 생성)
    - yield 후: 서버 종료 시 실행되는 코드 (SSE 연결 정리)
    """
    # ========== 서버 시작 시 실행 ==========
    logger.info(f"러너스 클럽 서버를 시작합니다 (환경: {settings.ENVIRONMENT}, 디버그: {settings.DEBUG})")
    Base.metadata.create_all(bind=engine)

    yield  # 여기서 서버가 실행됩니다

    # ========== 서버 종료 시 실행 ==========
    notification_registry.close_all()
    message_registry.close_all()
    logger.info("러너스 클럽 서버를 종료합니다")


# ============================================
# FastAPI 애플리케이션 인스턴스 생성
# ============================================
app = FastAPI(
    title="러너스 클럽 API",
    description="""
    ## 러너스 클럽 - 함께 달리는 러닝 커뮤니티

    ### 주요 기능
    - **인증**: Google / Kakao / Naver 소셜 로그인, JWT
    - **프로필**: 프로필 관리, 팔로우, 차단
    - **운동**: 운동 기록, GPX 파일 업로드
    - **커뮤니티**: 게시물, 댓글, 좋아요, 피드
    - **크루**: 크루, 크루 게시판
    - **대회 / 챌린지**: 참가 신청, 기록, 리더보드
    - **실시간**: 알림, 1:1 메시지 (SSE)
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json"
)


# ============================================
# CORS (Cross-Origin Resource Sharing) 설정
# ============================================
# [신입 개발자를 위한 팁]
# - allow_origins: 허용할 프론트엔드 도메인 목록 (CORS_ORIGINS, 없으면 FRONTEND_URL)
# - allow_credentials: 쿠키 전송 허용 여부
# ============================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================
# API 라우터 등록
# ============================================
# 모든 API 엔드포인트는 /api/v1 경로 아래에 위치합니다.
# ============================================
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.get("/", tags=["Health Check"])
async def root():
    """서버 상태 확인 엔드포인트"""
    return {
        "status": "ok",
        "message": "러너스 클럽 API 서버가 실행 중입니다!",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health", tags=["Health Check"])
def health_check(db: Session = Depends(get_db)):
    """
    상세 헬스체크 엔드포인트

    데이터베이스 연결까지 확인합니다. 로드밸런서나 모니터링 시스템에서 사용합니다.
    """
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Health check database error: {e}")
        database = "unavailable"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "environment": settings.ENVIRONMENT,
        "database": database
    }


# ============================================
# 직접 실행 시 (python -m app.main)
# ============================================
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.API_PORT,
        reload=settings.ENVIRONMENT == "development",
        reload_excludes=["venv/*"]
    )
