# ============================================
# app/services/storage_service.py - 파일 저장소 (디스크)
# ============================================
# 업로드 파일을 로컬 디스크에 저장하고 읽습니다.
# 키 형식: {folder}/{user_id}/{밀리초}-{정리된 파일명}
# ============================================

import logging
import mimetypes
import os
import re
import time
from pathlib import Path
from typing import Optional

from app.config import settings
from app.core.exceptions import (
    ValidationException, FileNotFoundInStorageException, StorageException
)

logger = logging.getLogger(__name__)

IMAGE_FOLDER = "images"
IMAGE_CONTENT_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")
BINARY_CONTENT_TYPE = "application/octet-stream"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def sanitize_filename(filename: str) -> str:
    """
    파일명에서 안전하지 않은 문자를 '_'로 바꿉니다.

    Examples:
        >>> sanitize_filename("아침 러닝.gpx")
        '_____.gpx'
    """
    name = os.path.basename(filename.replace("\\", "/"))
    return _UNSAFE_CHARS.sub("_", name) or "file"


def allowed_content_types(folder: str) -> tuple:
    """폴더별 허용 MIME 타입 (이미지 폴더는 이미지만, 그 외는 바이너리도 허용)"""
    if folder == IMAGE_FOLDER:
        return IMAGE_CONTENT_TYPES
    return IMAGE_CONTENT_TYPES + (BINARY_CONTENT_TYPE,)


def key_owner(key: str) -> Optional[str]:
    """키의 두 번째 구간(user_id)을 반환합니다. 형식이 다르면 None"""
    parts = key.split("/")
    if len(parts) < 3:
        return None
    return parts[1]


class DiskStorage:
    """
    로컬 디스크 저장소

    [신입 개발자를 위한 팁]
    - 업로드 URL은 우리 API 서버의 PUT /uploads/disk/{key} 입니다.
    - 공개 URL은 GET /disk-files/{key} 입니다.
    - 키에 ../ 같은 경로가 섞여 저장소 밖으로 나가면 없는 파일로 처리합니다.
    """

    def __init__(self, root_dir: str, base_url: str):
        self.root = Path(root_dir).resolve()
        self.base_url = base_url.rstrip("/")

    def generate_key(self, folder: str, user_id: str, filename: str) -> str:
        millis = int(time.time() * 1000)
        return f"{folder}/{user_id}/{millis}-{sanitize_filename(filename)}"

    def upload_url(self, key: str) -> str:
        return f"{self.base_url}/uploads/disk/{key}"

    def public_url(self, key: str) -> str:
        return f"{self.base_url}/disk-files/{key}"

    def resolve(self, key: str) -> Path:
        """
        키를 저장소 내부의 실제 경로로 변환합니다.

        Raises:
            FileNotFoundInStorageException: 저장소 밖을 가리키는 키 (404)
        """
        path = (self.root / key).resolve()
        if path == self.root or self.root not in path.parents:
            logger.warning(f"Storage key outside root rejected: {key!r}")
            raise FileNotFoundInStorageException()
        return path

    def save(self, key: str, data: bytes) -> Path:
        if not data:
            raise ValidationException(message="빈 파일은 업로드할 수 없습니다", field="body", reason="empty")
        path = self.resolve(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to write {key}: {e}")
            raise StorageException()
        logger.info(f"Stored {key} ({len(data)} bytes)")
        return path

    def exists(self, key: str) -> bool:
        return self.resolve(key).is_file()

    def read(self, key: str) -> bytes:
        path = self.resolve(key)
        if not path.is_file():
            raise FileNotFoundInStorageException()
        return path.read_bytes()

    def delete(self, key: str) -> None:
        path = self.resolve(key)
        if not path.is_file():
            raise FileNotFoundInStorageException()
        try:
            path.unlink()
        except OSError as e:
            logger.error(f"Failed to delete {key}: {e}")
            raise StorageException()
        logger.info(f"Deleted {key}")

    def guess_content_type(self, key: str) -> str:
        content_type, _ = mimetypes.guess_type(key)
        return content_type or BINARY_CONTENT_TYPE


def get_storage() -> DiskStorage:
    """저장소 의존성 (테스트에서 dependency_overrides로 교체)"""
    return DiskStorage(settings.DISK_STORAGE_DIR, settings.api_base_url)
