"""Upload 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, field_validator
from typing import Any, List, Optional

from presentation_hub.schemas.presentation import normalize_tags


class UploadCommand(BaseModel):
    """multipart 메타데이터 필드를 검증한 결과. 저장 레이어에는 이 객체만 전달된다."""

    title: str
    author: str
    description: str = ""
    date_presented: Optional[str] = None
    category: str = "general"
    tags: List[str] = []
    is_public: bool = True

    @field_validator("title", "author", mode="before")
    @classmethod
    def _required(cls, value: Any) -> str:
        text = str(value).strip() if value is not None else ""
        if not text:
            raise ValueError("field required")
        return text

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, value: Any) -> str:
        return value or ""

    @field_validator("date_presented", mode="before")
    @classmethod
    def _date_presented(cls, value: Any) -> Optional[str]:
        return value or None

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, value: Any) -> str:
        return value or "general"

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> List[str]:
        return normalize_tags(value)

    @field_validator("is_public", mode="before")
    @classmethod
    def _is_public(cls, value: Any) -> bool:
        # 문자열 "false" 또는 False 만 비공개로 처리한다.
        return value is not False and value != "false"


class UploadedFileOut(BaseModel):
    id: str
    presentation_id: str
    original_name: str
    file_type: str
    file_size: int
    mime_type: str
    is_primary: bool
    url: str


class ValidatedFileInfo(BaseModel):
    originalName: str
    mimeType: str
    size: int
