# ============================================
# app/services/upload_service.py - 업로드 / 파일 파싱 서비스
# ============================================

import logging
from sqlalchemy.orm import Session

from app.models.user import User
from app.models.workout import Workout, WorkoutFile
from app.schemas.upload import PresignRequest, PresignResponse, ParseFileRequest
from app.services.storage_service import DiskStorage, allowed_content_types, key_owner
from app.services.file_parsers import parse_workout_file, ParsedWorkout
from app.core.exceptions import (
    ValidationException, ForbiddenException, FileNotFoundInStorageException
)

logger = logging.getLogger(__name__)


class UploadService:
    """
    업로드 서비스 클래스

    [업로드 흐름]
    1. POST /uploads/presign → 업로드 URL과 키 발급
    2. PUT {upload_url} → 파일 본문 저장
    3. (운동 파일이면) POST /uploads/parse → 운동 기록 생성
    """

    def __init__(self, db: Session, storage: DiskStorage):
        self.db = db
        self.storage = storage

    def presign(self, user: User, request: PresignRequest) -> PresignResponse:
        """
        업로드 URL 발급

        Raises:
            ValidationException: 폴더에서 허용하지 않는 MIME 타입 (400)
        """
        if request.content_type not in allowed_content_types(request.folder):
            raise ValidationException(
                message="허용되지 않는 파일 형식입니다",
                field="content_type",
                reason="unsupported_content_type"
            )
        key = self.storage.generate_key(request.folder, user.id, request.filename)
        return PresignResponse(
            upload_url=self.storage.upload_url(key),
            key=key,
            public_url=self.storage.public_url(key)
        )

    def check_owner(self, user: User, key: str) -> None:
        """키의 user_id 구간이 요청자와 같은지 확인합니다 (다르면 403)."""
        if key_owner(key) != user.id:
            raise ForbiddenException("본인이 업로드한 파일만 사용할 수 있습니다")

    def delete_file(self, user: User, key: str) -> None:
        self.check_owner(user, key)
        self.storage.delete(key)

    def parse_file(self, user: User, request: ParseFileRequest) -> tuple:
        """
        업로드한 운동 파일을 파싱하여 운동 기록을 만듭니다.

        Returns:
            (Workout, ParsedWorkout)

        Raises:
            ForbiddenException: 다른 사용자의 파일 (403)
            FileNotFoundInStorageException: 파일 없음 (404)
            ValidationException: 파싱 불가 (400)
            NotImplementedFeatureException: FIT 파일 (501)
        """
        self.check_owner(user, request.file_key)
        if not self.storage.exists(request.file_key):
            raise FileNotFoundInStorageException()

        content = self.storage.read(request.file_key)
        parsed: ParsedWorkout = parse_workout_file(request.file_type, content)

        if parsed.duration <= 0:
            raise ValidationException(message="운동 시간이 0초입니다", field="file", reason="zero_duration")

        workout = Workout(
            user_id=user.id,
            title=request.original_file_name.rsplit(".", 1)[0][:100] or None,
            visibility=user.workout_sharing_default,
            source=request.file_type,
            distance=parsed.distance,
            duration=parsed.duration,
            pace=parsed.pace,
            elevation_gain=parsed.elevation_gain,
            date=parsed.start_time,
            start_time=parsed.start_time,
            end_time=parsed.end_time,
            route_polyline=parsed.polyline
        )
        self.db.add(workout)
        self.db.flush()

        self.db.add(WorkoutFile(
            user_id=user.id,
            workout_id=workout.id,
            file_key=request.file_key,
            file_type=request.file_type,
            original_file_name=request.original_file_name
        ))
        self.db.commit()
        self.db.refresh(workout)
        logger.info(f"Workout created from {request.file_type}: id={workout.id} key={request.file_key}")
        return workout, parsed
