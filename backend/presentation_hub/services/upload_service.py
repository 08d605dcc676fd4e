"""업로드 파이프라인: 검증 → 디스크 저장 → 썸네일 → DB 기록 → analytics.

전체 요청의 MIME 타입은 디스크에 쓰기 전에 검사합니다. 디스크에 기록한 뒤의 실패
(필수 메타데이터 누락, DB 오류 등)는 이번 요청에서 쓴 파일을 모두 지우고 오류를
전달합니다. 파일 삭제 실패는 로그로만 남깁니다.
"""

import logging
import uuid
from typing import Any, Dict, List, Mapping, Sequence

from fastapi import UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from presentation_hub.config import settings
from presentation_hub.schemas.upload import UploadCommand, UploadedFileOut
from presentation_hub.services import analytics_service, presentation_service, text_extraction
from presentation_hub.services.thumbnail_service import generate_thumbnail
from presentation_hub.utils.errors import ApiError
from presentation_hub.utils.helpers import (
    file_download_url,
    remove_files_quietly,
    resolve_upload_path,
    save_upload,
    thumbnail_url,
    utcnow,
    validate_mime_type,
)

logger = logging.getLogger(__name__)


def check_upload_batch(files: Sequence[UploadFile]) -> None:
    if not files:
        raise ApiError(400, "NO_FILES", "Please select at least one file to upload")
    if len(files) > settings.MAX_FILES_PER_UPLOAD:
        raise ApiError(
            400,
            "TOO_MANY_FILES",
            f"At most {settings.MAX_FILES_PER_UPLOAD} files can be uploaded at once",
        )
    for file in files:
        validate_mime_type(file)


async def store_files(files: Sequence[UploadFile]) -> List[Dict[str, Any]]:
    stored: List[Dict[str, Any]] = []
    try:
        for file in files:
            stored.append(await save_upload(file, prefix="files"))
    except Exception:
        remove_files_quietly(item["file_path"] for item in stored)
        raise
    return stored


def parse_upload_command(form: Mapping[str, Any]) -> UploadCommand:
    try:
        return UploadCommand.model_validate(dict(form))
    except ValidationError:
        raise ApiError(400, "MISSING_REQUIRED_FIELDS", "Title and author are required")


def register_upload(
    db: Session,
    command: UploadCommand,
    stored: Sequence[Dict[str, Any]],
    client: Mapping[str, Any],
) -> Dict[str, Any]:
    """저장된 파일 묶음을 하나의 Presentation과 File 행들로 기록한다.

    첫 번째 파일이 항상 대표 파일이다. 실패하면 트랜잭션을 롤백하고 기록된 파일과
    썸네일을 정리한 뒤 예외를 다시 던진다.
    """
    presentation_id = str(uuid.uuid4())
    primary = stored[0]
    thumbnail_path = None

    try:
        thumbnail_path = generate_thumbnail(primary["file_path"], primary["mime_type"], presentation_id)
        extracted = text_extraction.extract_text(primary["file_path"], primary["mime_type"])

        presentation = presentation_service.create_presentation(
            db,
            {
                "id": presentation_id,
                "title": command.title,
                "description": command.description,
                "author": command.author,
                "date_presented": command.date_presented,
                "category": command.category,
                "tags": command.tags,
                "file_path": primary["file_path"],
                "file_type": primary["file_type"],
                "file_size": primary["file_size"],
                "thumbnail_path": thumbnail_path,
                "metadata": {
                    "original_filename": primary["original_name"],
                    "mime_type": primary["mime_type"],
                    "extracted_text": extracted[: settings.EXTRACTED_TEXT_LIMIT],
                    "upload_timestamp": utcnow().isoformat() + "Z",
                    "files_count": len(stored),
                },
                "is_public": command.is_public,
            },
            commit=False,
        )

        file_rows = []
        for index, item in enumerate(stored):
            row = presentation_service.create_file(
                db,
                {**item, "presentation_id": presentation_id, "is_primary": index == 0},
                commit=False,
            )
            file_rows.append(row)

        analytics_service.record_event(
            db,
            {
                "presentation_id": presentation_id,
                "event_type": "upload",
                "user_agent": client.get("user_agent"),
                "ip_address": client.get("ip_address"),
                "metadata": {
                    "files_count": len(stored),
                    "total_size": sum(item["file_size"] for item in stored),
                },
            },
            commit=False,
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("[upload] failed to register presentation %s", presentation_id)
        leftovers = [item["file_path"] for item in stored]
        if thumbnail_path:
            leftovers.append(resolve_upload_path(thumbnail_path))
        remove_files_quietly(leftovers)
        raise

    logger.info(
        "[upload] presentation %s created with %d file(s), thumbnail=%s",
        presentation_id, len(file_rows), bool(thumbnail_path),
    )
    return {
        "presentation": {
            "id": presentation_id,
            "title": presentation["title"],
            "description": presentation["description"],
            "author": presentation["author"],
            "category": presentation["category"],
            "tags": presentation["tags"],
            "is_public": presentation["is_public"],
            "thumbnail": thumbnail_url(thumbnail_path),
            "created_at": presentation["date_created"],
        },
        "files": [
            UploadedFileOut(**row, url=file_download_url(row["id"])).model_dump()
            for row in file_rows
        ],
    }


async def handle_upload(
    db: Session,
    files: Sequence[UploadFile],
    form: Mapping[str, Any],
    client: Mapping[str, Any],
) -> Dict[str, Any]:
    check_upload_batch(files)
    stored = await store_files(files)
    try:
        command = parse_upload_command(form)
    except ApiError:
        remove_files_quietly(item["file_path"] for item in stored)
        raise
    return register_upload(db, command, stored, client)
