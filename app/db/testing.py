# ============================================
# app/db/testing.py - API 테스트 공용 베이스
# ============================================
# 각 테스트는 메모리 SQLite DB와 임시 디스크 저장소를 사용합니다.
# MySQL 없이도 라우터부터 DB까지 그대로 실행됩니다.
# ============================================

import shutil
import tempfile
import unittest
from typing import Dict

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.database import Base, get_db
from app.core.security import create_access_token
from app.models.user import User
from app.services.storage_service import DiskStorage, get_storage
from app.main import app


class ApiTestCase(unittest.TestCase):
    """
    API 통합 테스트 베이스 클래스

    [신입 개발자를 위한 팁]
    - StaticPool: 메모리 SQLite는 연결마다 DB가 새로 생기므로 연결 하나를 공유합니다.
    - dependency_overrides로 get_db / get_storage를 테스트용으로 바꿉니다.
    - TestClient를 with 없이 쓰면 lifespan(운영 DB 테이블 생성)이 실행되지 않습니다.
    """

    def setUp(self):
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(bind=self.engine)
        self.SessionTesting = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self.db = self.SessionTesting()

        self.storage_dir = tempfile.mkdtemp(prefix="runners-club-test-")
        self.storage = DiskStorage(self.storage_dir, "http://testserver/api/v1")

        def override_get_db():
            db = self.SessionTesting()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_storage] = lambda: self.storage
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        self.db.close()
        Base.metadata.drop_all(bind=self.engine)
        self.engine.dispose()
        shutil.rmtree(self.storage_dir, ignore_errors=True)

    # ============================================
    # 헬퍼
    # ============================================

    def create_user(self, name: str, is_private: bool = False, **kwargs) -> User:
        user = User(
            email=kwargs.pop("email", f"{name}@example.com"),
            name=name,
            is_private=is_private,
            **kwargs
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def auth_headers(self, user: User) -> Dict[str, str]:
        token = create_access_token({"sub": user.id, "email": user.email})
        return {"Authorization": f"Bearer {token}"}

    def error_code(self, response) -> str:
        return response.json()["detail"]["error"]["code"]

    def data(self, response):
        return response.json()["data"]

    def api(self, path: str) -> str:
        return f"/api/v1{path}"
