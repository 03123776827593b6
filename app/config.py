# ============================================
# app/config.py - 환경 설정 파일
# ============================================
# 애플리케이션의 모든 설정을 관리합니다.
# 환경 변수 또는 .env 파일에서 값을 읽어옵니다.
# ============================================

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    애플리케이션 설정 클래스

    Pydantic의 BaseSettings를 상속받아 환경 변수를 자동으로 로드합니다.
    - 환경 변수가 설정되어 있으면 .env 파일보다 우선합니다.
    - 변수명은 대소문자를 구분하지 않습니다 (JWT_SECRET = jwt_secret)
    """

    # --------------------------------------------
    # 서버 설정
    # --------------------------------------------
    # 현재 환경 (development, production, testing)
    ENVIRONMENT: str = "development"

    # 디버그 모드 (SQL 로그 출력)
    DEBUG: bool = False

    # API 서버 포트
    API_PORT: int = 4000

    # API 버전 프리픽스
    API_V1_PREFIX: str = "/api/v1"

    # 프론트엔드 주소 (OAuth 콜백 리다이렉트 대상)
    FRONTEND_URL: str = "http://localhost:3000"

    # CORS 허용 도메인 (비어 있으면 FRONTEND_URL만 허용)
    CORS_ORIGINS: str = ""

    # --------------------------------------------
    # 데이터베이스 설정
    # --------------------------------------------
    DATABASE_URL: str = "mysql+pymysql://root:@localhost:3306/runners_club?charset=utf8mb4"

    # --------------------------------------------
    # JWT 토큰 설정
    # --------------------------------------------
    # 서명 키 (운영 환경에서는 반드시 변경!)
    JWT_SECRET: str = "change-this-jwt-secret-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # --------------------------------------------
    # OAuth 설정 (제공자별 client id / secret / callback)
    # --------------------------------------------
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_CALLBACK_URL: str = "http://localhost:4000/api/v1/auth/google/callback"

    KAKAO_CLIENT_ID: str = ""
    KAKAO_CLIENT_SECRET: str = ""
    KAKAO_CALLBACK_URL: str = "http://localhost:4000/api/v1/auth/kakao/callback"

    NAVER_CLIENT_ID: str = ""
    NAVER_CLIENT_SECRET: str = ""
    NAVER_CALLBACK_URL: str = "http://localhost:4000/api/v1/auth/naver/callback"

    # --------------------------------------------
    # 파일 업로드 설정
    # --------------------------------------------
    # 디스크 저장소 루트 디렉토리
    DISK_STORAGE_DIR: str = "uploads"

    # PUT 업로드 최대 크기 (MB)
    MAX_UPLOAD_SIZE_MB: int = 20

    # --------------------------------------------
    # 기타 설정
    # --------------------------------------------
    # SSE keep-alive 주기 (초)
    SSE_HEARTBEAT_SECONDS: float = 15.0

    # 로그 레벨
    LOG_LEVEL: str = "INFO"

    @property
    def cors_origins_list(self) -> List[str]:
        """
        CORS 허용 도메인을 리스트로 반환합니다.

        환경 변수에서는 쉼표로 구분된 문자열로 저장하고,
        실제 사용할 때는 리스트로 변환합니다.
        """
        if not self.CORS_ORIGINS.strip():
            return [self.FRONTEND_URL]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def api_base_url(self) -> str:
        """디스크 저장소 URL 생성에 사용하는 API 기본 주소"""
        return f"http://localhost:{self.API_PORT}{self.API_V1_PREFIX}"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """
    설정 객체를 반환합니다.

    @lru_cache() 덕분에 프로세스당 한 번만 생성됩니다.

    사용 예시:
        from app.config import get_settings
        settings = get_settings()
        print(settings.JWT_SECRET)
    """
    return Settings()


# 전역 설정 객체
settings = get_settings()
