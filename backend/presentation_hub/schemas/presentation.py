"""Presentation 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, field_validator
from typing import Any, Dict, List, Optional

# PUT / bulk update에서 수정 가능한 필드. 파일 관련 필드는 생성 후 변경 불가.
UPDATABLE_FIELDS = (
    "title", "description", "author", "date_presented",
    "category", "tags", "is_public",
)
REQUIRED_FIELDS = ("title", "author", "is_public")


def normalize_tags(value: Any) -> List[str]:
    if value is None or value == "":
        return []
    if isinstance(value, str):
        value = [value]
    # multipart의 반복 필드와 "a, b" 형태 문자열을 모두 허용한다.
    parts = [part for item in value for part in str(item).split(",")]
    return [tag.strip() for tag in parts if tag.strip()]


class PresentationUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    date_presented: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    is_public: Optional[bool] = None

    model_config = {"extra": "ignore"}

    @field_validator("title", "author")
    @classmethod
    def _not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("must not be empty")
        return value.strip() if value is not None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> Optional[List[str]]:
        if value is None:
            return None
        return normalize_tags(value)

    def changes(self) -> Dict[str, Any]:
        # NOT NULL 컬럼에 대한 명시적 null은 수정 요청으로 보지 않는다.
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None or key not in REQUIRED_FIELDS
        }


class BulkRequest(BaseModel):
    action: Optional[str] = None
    presentation_ids: Optional[List[str]] = None
    updates: Optional[Dict[str, Any]] = None


class BulkItemResult(BaseModel):
    id: str
    success: bool
    error: Optional[str] = None
