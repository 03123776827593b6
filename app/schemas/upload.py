# ============================================
# app/schemas/upload.py - 파일 업로드 스키마
# ============================================

from typing import Literal
from pydantic import BaseModel, Field

from app.schemas.workout import WorkoutSchema


class PresignRequest(BaseModel):
    """
    업로드 URL 발급 요청 스키마

    [신입 개발자를 위한 팁]
    - 클라이언트는 응답의 upload_url로 파일을 PUT 한 뒤,
      key를 다른 API(게시물 이미지, 파일 파싱 등)에 넘깁니다.
    """
    filename: str = Field(..., min_length=1, max_length=255, description="원본 파일명")
    content_type: str = Field(..., description="MIME 타입 (예: image/jpeg)")
    folder: str = Field("images", pattern=r"^[a-z0-9_-]{1,30}$", description="저장 폴더")

    class Config:
        json_schema_extra = {
            "example": {
                "filename": "morning run.gpx",
                "content_type": "application/octet-stream",
                "folder": "workouts"
            }
        }


class PresignResponse(BaseModel):
    """업로드 URL 발급 응답"""
    upload_url: str
    key: str
    public_url: str


class ParseFileRequest(BaseModel):
    """운동 파일 파싱 요청 스키마"""
    file_key: str = Field(..., description="업로드한 파일의 저장소 키")
    file_type: Literal["GPX", "FIT"] = Field(..., description="파일 형식")
    original_file_name: str = Field(..., max_length=255, description="원본 파일명")


class ParseFileResponse(BaseModel):
    """파싱 결과 (생성된 운동 기록 포함)"""
    workout: WorkoutSchema
    point_count: int
    simplified_point_count: int
