"""업로드 저장, JSON 직렬화, 공개 URL 생성 등 공용 유틸리티 헬퍼입니다."""

import json
import logging
import os
import random
import time
from datetime import datetime, timezone
from typing import Any, Iterable

from fastapi import UploadFile

from presentation_hub.config import settings
from presentation_hub.utils.errors import ApiError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def dump_json(value: Any, default: Any) -> str:
    return json.dumps(value if value is not None else default, ensure_ascii=False)


def load_json(raw: str | None, default: Any) -> Any:
    if not raw:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("[db] invalid JSON blob ignored: %.80s", raw)
        return default


def file_extension(filename: str | None) -> str:
    return os.path.splitext(filename or "")[1].lower()


def unique_filename(prefix: str, original_name: str | None) -> str:
    # multer 방식과 동일: <field>-<epoch ms>-<random 9 digits><ext>
    ext = os.path.splitext(os.path.basename(original_name or ""))[1]
    suffix = f"{int(time.time() * 1000)}-{random.randint(0, 999_999_999)}"
    return f"{prefix}-{suffix}{ext}"


def ensure_upload_dirs() -> None:
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    os.makedirs(settings.thumbnail_dir, exist_ok=True)


def validate_mime_type(file: UploadFile) -> None:
    if file.content_type not in settings.ALLOWED_MIME_TYPES:
        raise ApiError(
            400,
            "FILE_TYPE_NOT_ALLOWED",
            f"File type {file.content_type} is not allowed",
        )


async def save_upload(file: UploadFile, prefix: str = "files") -> dict:
    validate_mime_type(file)
    ensure_upload_dirs()

    filename = unique_filename(prefix, file.filename)
    path = os.path.join(settings.UPLOAD_DIR, filename)

    size = 0
    with open(path, "wb") as out:
        while True:
            chunk = await file.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > settings.MAX_UPLOAD_SIZE:
                break
            out.write(chunk)

    if size > settings.MAX_UPLOAD_SIZE:
        remove_file_quietly(path)
        limit_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
        raise ApiError(400, "FILE_TOO_LARGE", f"File {file.filename} exceeds {limit_mb} MB limit")

    return {
        "original_name": file.filename,
        "file_path": path,
        "file_type": file_extension(file.filename),
        "file_size": size,
        "mime_type": file.content_type,
    }


def remove_file_quietly(path: str | None) -> bool:
    """파일 삭제를 시도하고 실패는 로그만 남긴다. 삭제 여부를 반환한다."""
    if not path:
        return False
    try:
        os.remove(path)
        return True
    except OSError as exc:
        logger.warning("[cleanup] could not delete file %s: %s", path, exc)
        return False


def remove_files_quietly(paths: Iterable[str | None]) -> int:
    return sum(1 for path in paths if remove_file_quietly(path))


def resolve_upload_path(relative_path: str) -> str:
    return os.path.join(settings.UPLOAD_DIR, relative_path)


def thumbnail_url(thumbnail_path: str | None) -> str | None:
    if not thumbnail_path:
        return None
    return f"/api/thumbnails/{os.path.basename(thumbnail_path)}"


def presentation_download_url(presentation_id: str) -> str:
    return f"/api/presentations/{presentation_id}/download"


def presentation_view_url(presentation_id: str) -> str:
    return f"/api/presentations/{presentation_id}"


def file_download_url(file_id: str) -> str:
    return f"/api/files/{file_id}/download"


def client_info(request) -> dict:
    return {
        "user_agent": request.headers.get("user-agent"),
        "ip_address": request.client.host if request.client else None,
    }
