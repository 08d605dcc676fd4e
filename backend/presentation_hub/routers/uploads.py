"""Uploads 기능 API 라우터입니다. 요청을 검증하고 업로드 파이프라인으로 위임합니다."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from sqlalchemy.orm import Session

from presentation_hub.database import get_db
from presentation_hub.schemas.upload import ValidatedFileInfo
from presentation_hub.services import upload_service
from presentation_hub.utils.errors import ApiError
from presentation_hub.utils.helpers import client_info, remove_file_quietly, save_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["uploads"])


@router.post("", status_code=201)
async def upload_presentation(
    request: Request,
    files: Optional[List[UploadFile]] = File(None),
    title: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    date_presented: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    tags: Optional[List[str]] = Form(None),
    is_public: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    form = {
        "title": title,
        "author": author,
        "description": description,
        "date_presented": date_presented,
        "category": category,
        "tags": tags,
        "is_public": is_public,
    }
    try:
        data = await upload_service.handle_upload(db, files or [], form, client_info(request))
    except ApiError:
        raise
    except Exception:
        raise ApiError(500, "UPLOAD_FAILED", "An error occurred while processing the upload")
    return {"success": True, "message": "Files uploaded successfully", "data": data}


@router.post("/validate")
async def validate_upload(file: Optional[UploadFile] = File(None)):
    if file is None:
        raise ApiError(400, "NO_FILE", "No file provided", valid=False)
    try:
        stored = await save_upload(file, prefix="file")
    except ApiError as exc:
        raise ApiError(exc.status_code, exc.error_code, exc.message, valid=False)

    # 검증용으로 저장한 파일은 즉시 삭제한다.
    remove_file_quietly(stored["file_path"])
    info = ValidatedFileInfo(
        originalName=stored["original_name"],
        mimeType=stored["mime_type"],
        size=stored["file_size"],
    )
    return {"success": True, "valid": True, "fileInfo": info.model_dump()}


@router.get("/progress/{upload_id}")
def upload_progress(upload_id: str):
    # TODO: 청크 업로드가 도입되면 실제 진행률을 추적한다. 현재 업로드는 단일 요청으로 완료된다.
    return {"uploadId": upload_id, "progress": 100, "status": "completed"}
