# ============================================
# app/api/v1/uploads.py - 파일 업로드 API 라우터
# ============================================
# 업로드 URL 발급, 디스크 저장소 업로드/다운로드,
# 운동 파일(GPX/FIT) 파싱 API를 제공합니다.
# ============================================

import logging
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.config import settings
from app.db.database import get_db
from app.api.deps import get_current_user
from app.models.user import User
from app.services.storage_service import DiskStorage, get_storage
from app.services.upload_service import UploadService
from app.schemas.upload import PresignRequest, ParseFileRequest, ParseFileResponse
from app.schemas.workout import WorkoutSchema
from app.schemas.common import success_response
from app.core.exceptions import PayloadTooLargeException

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads", tags=["Uploads"])

# 저장된 파일 제공 (GET /disk-files/{key})
files_router = APIRouter(prefix="/disk-files", tags=["Uploads"])


@router.post(
    "/presign",
    summary="업로드 URL 발급",
    description="""
    파일을 올릴 URL과 저장소 키를 발급합니다.

    - images 폴더: image/jpeg, image/png, image/webp, image/gif
    - 그 외 폴더: 위 형식 + application/octet-stream
    - 키 형식: {folder}/{user_id}/{밀리초}-{파일명}
    """
)
def presign(
    request: PresignRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: DiskStorage = Depends(get_storage)
):
    return success_response(UploadService(db, storage).presign(current_user, request))


@router.post(
    "/parse",
    status_code=status.HTTP_201_CREATED,
    summary="운동 파일 파싱",
    description="""
    업로드한 운동 파일로 운동 기록을 만듭니다.

    - GPX: 거리, 시간, 평균 페이스, 상승 고도, 경로(polyline) 추출
    - FIT: 아직 지원하지 않음 (501 NOT_IMPLEMENTED)
    - 다른 사용자의 키: 403, 파일 없음: 404
    """
)
def parse_file(
    request: ParseFileRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: DiskStorage = Depends(get_storage)
):
    workout, parsed = UploadService(db, storage).parse_file(current_user, request)
    data = ParseFileResponse(
        workout=WorkoutSchema.model_validate(workout),
        point_count=parsed.point_count,
        simplified_point_count=len(parsed.simplified)
    )
    return success_response(data, "운동 기록이 생성되었습니다")


@router.put(
    "/disk/{key:path}",
    summary="디스크 저장소 업로드",
    description="요청 본문을 그대로 키 위치에 저장합니다. 발급받은 upload_url로 호출합니다."
)
async def upload_to_disk(
    key: str,
    request: Request,
    storage: DiskStorage = Depends(get_storage)
):
    max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > max_bytes:
        raise PayloadTooLargeException(settings.MAX_UPLOAD_SIZE_MB)

    body = await request.body()
    if len(body) > max_bytes:
        raise PayloadTooLargeException(settings.MAX_UPLOAD_SIZE_MB)

    storage.save(key, body)
    return success_response({"key": key})


@router.delete("/{key:path}", summary="업로드 파일 삭제")
def delete_file(
    key: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: DiskStorage = Depends(get_storage)
):
    UploadService(db, storage).delete_file(current_user, key)
    return success_response(message="파일이 삭제되었습니다")


@files_router.get("/{key:path}", summary="저장된 파일 조회")
def serve_file(
    key: str,
    storage: DiskStorage = Depends(get_storage)
):
    content = storage.read(key)
    return Response(content=content, media_type=storage.guess_content_type(key))
