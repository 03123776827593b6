# ============================================
# app/db/database.py - 데이터베이스 연결 설정
# ============================================
# DATABASE_URL로 지정된 데이터베이스 연결을 관리합니다.
# SQLAlchemy ORM을 사용합니다.
# ============================================

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from app.config import settings


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    DATABASE_URL에 맞는 엔진을 생성합니다.

    [신입 개발자를 위한 팁]
    - pool_pre_ping: 끊어진 연결을 사용 전에 감지
    - pool_recycle: MySQL/MariaDB는 오래된 연결을 끊으므로 1시간마다 갱신
    - SQLite는 스레드 간 연결 공유를 위해 check_same_thread=False 필요
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=echo,
        )

    return create_engine(
        database_url,
        pool_pre_ping=True,      # 연결 상태 확인
        pool_recycle=3600,       # 1시간마다 연결 갱신
        echo=echo,               # 디버그 모드에서만 SQL 출력
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)


# ============================================
# 세션 팩토리
# ============================================
# autocommit=False: commit()을 명시적으로 호출해야 반영됩니다.
# autoflush=False: 쿼리 전에 자동으로 flush하지 않습니다.
# ============================================
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


# 모든 ORM 모델의 부모 클래스
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    요청마다 데이터베이스 세션을 열고, 응답 후 닫는 의존성 함수

    사용 예시:
        @router.get("/users")
        def get_users(db: Session = Depends(get_db)):
            return db.query(User).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        # 예외가 발생해도 반드시 실행됩니다
        db.close()
