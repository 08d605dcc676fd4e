"""개별 파일 다운로드와 썸네일 정적 제공 라우터입니다."""

import os

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from presentation_hub.config import settings
from presentation_hub.database import get_db
from presentation_hub.services import content_service
from presentation_hub.utils.errors import ApiError

router = APIRouter(prefix="/api", tags=["files"])


@router.get("/files/{file_id}/download")
def download_file(file_id: str, db: Session = Depends(get_db)):
    path, original_name = content_service.locate_file(db, file_id)
    return FileResponse(path, media_type="application/octet-stream", filename=original_name)


@router.get("/thumbnails/{filename}")
def get_thumbnail(filename: str):
    missing = ApiError(404, "THUMBNAIL_NOT_FOUND", "The requested thumbnail does not exist")
    if os.path.basename(filename) != filename or filename.startswith("."):
        raise missing
    path = os.path.join(settings.thumbnail_dir, filename)
    if not os.path.isfile(path):
        raise missing
    return FileResponse(
        path,
        media_type="image/jpeg",
        headers={"Cache-Control": f"public, max-age={settings.THUMBNAIL_CACHE_SECONDS}"},
    )
