"""Presentation / File / Comment 조회·저장 레이어입니다.

모든 함수는 요청 단위 ``Session``을 첫 인자로 받습니다. ``tags``와 ``metadata``는
이 경계에서 JSON 문자열로 저장되고, 호출자에게는 항상 list/dict로 반환됩니다.
반환값은 ORM 객체가 아닌 일반 dict입니다.
"""

import uuid
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from presentation_hub.models.presentation import Comment, Presentation, PresentationFile
from presentation_hub.utils.helpers import dump_json, load_json

# 필드 이름 -> ORM 속성 (metadata 컬럼은 예약어 충돌로 속성명이 다르다)
_PRESENTATION_COLUMNS = {
    "title": "title",
    "description": "description",
    "author": "author",
    "date_presented": "date_presented",
    "category": "category",
    "tags": "tags",
    "file_path": "file_path",
    "file_type": "file_type",
    "file_size": "file_size",
    "thumbnail_path": "thumbnail_path",
    "metadata": "metadata_json",
    "is_public": "is_public",
}


_NOT_NULL_FIELDS = {"title", "author", "file_path", "file_type", "is_public"}


def _coerce_public(value: Any) -> bool:
    return value is not False and value != "false"


def presentation_to_dict(row: Presentation) -> Dict[str, Any]:
    return {
        "id": row.id,
        "title": row.title,
        "description": row.description,
        "author": row.author,
        "date_created": row.date_created,
        "date_presented": row.date_presented,
        "category": row.category,
        "tags": load_json(row.tags, []),
        "file_path": row.file_path,
        "file_type": row.file_type,
        "file_size": row.file_size,
        "thumbnail_path": row.thumbnail_path,
        "metadata": load_json(row.metadata_json, {}),
        "is_public": bool(row.is_public),
        "view_count": row.view_count or 0,
        "download_count": row.download_count or 0,
    }


def file_to_dict(row: PresentationFile) -> Dict[str, Any]:
    return {
        "id": row.id,
        "presentation_id": row.presentation_id,
        "original_name": row.original_name,
        "file_path": row.file_path,
        "file_type": row.file_type,
        "file_size": row.file_size,
        "mime_type": row.mime_type,
        "upload_date": row.upload_date,
        "is_primary": bool(row.is_primary),
    }


def comment_to_dict(row: Comment) -> Dict[str, Any]:
    return {
        "id": row.id,
        "presentation_id": row.presentation_id,
        "author_name": row.author_name,
        "author_email": row.author_email,
        "content": row.content,
        "date_created": row.date_created,
        "is_approved": bool(row.is_approved),
    }


# ---------------------------------------------------------------------------
# Presentations
# ---------------------------------------------------------------------------

def create_presentation(db: Session, fields: Mapping[str, Any], *, commit: bool = True) -> Dict[str, Any]:
    row = Presentation(
        id=fields.get("id") or str(uuid.uuid4()),
        title=fields.get("title"),
        description=fields.get("description"),
        author=fields.get("author"),
        date_presented=fields.get("date_presented"),
        category=fields.get("category"),
        tags=dump_json(fields.get("tags"), []),
        file_path=fields.get("file_path"),
        file_type=fields.get("file_type"),
        file_size=fields.get("file_size"),
        thumbnail_path=fields.get("thumbnail_path"),
        metadata_json=dump_json(fields.get("metadata"), {}),
        is_public=_coerce_public(fields.get("is_public", True)),
    )
    db.add(row)
    if commit:
        db.commit()
        db.refresh(row)
    else:
        db.flush()
    return presentation_to_dict(row)


def list_presentations(
    db: Session,
    filters: Optional[Mapping[str, Any]] = None,
    *,
    include_private: bool = False,
) -> List[Dict[str, Any]]:
    filters = filters or {}
    q = db.query(Presentation)
    if not include_private:
        q = q.filter(Presentation.is_public == True)  # noqa: E712

    category = filters.get("category")
    if category:
        q = q.filter(Presentation.category == category)

    author = filters.get("author")
    if author:
        q = q.filter(Presentation.author.like(f"%{author}%"))

    search = filters.get("search")
    if search:
        pattern = f"%{search}%"
        q = q.filter(
            or_(
                Presentation.title.like(pattern),
                Presentation.description.like(pattern),
                Presentation.tags.like(pattern),
            )
        )

    q = q.order_by(Presentation.date_created.desc())

    limit = filters.get("limit")
    if limit:
        q = q.limit(int(limit))

    return [presentation_to_dict(row) for row in q.all()]


def get_presentation(db: Session, presentation_id: str) -> Optional[Dict[str, Any]]:
    row = db.query(Presentation).filter(Presentation.id == presentation_id).first()
    return presentation_to_dict(row) if row else None


def update_presentation(db: Session, presentation_id: str, fields: Mapping[str, Any], *, commit: bool = True) -> int:
    values: Dict[str, Any] = {}
    for key, value in fields.items():
        if value is None and key in _NOT_NULL_FIELDS:
            continue
        column = _PRESENTATION_COLUMNS.get(key)
        if column is None:
            raise ValueError(f"Unknown presentation field: {key}")
        if key == "tags":
            value = dump_json(value, [])
        elif key == "metadata":
            value = dump_json(value, {})
        elif key == "is_public":
            value = _coerce_public(value)
        values[column] = value

    if not values:
        raise ValueError("No fields to update")

    matched = (
        db.query(Presentation)
        .filter(Presentation.id == presentation_id)
        .update(values, synchronize_session=False)
    )
    if commit:
        db.commit()
    return matched


def delete_presentation(db: Session, presentation_id: str, *, commit: bool = True) -> int:
    # files/comments는 FK CASCADE, analytics는 SET NULL 규칙을 DB가 처리한다.
    deleted = (
        db.query(Presentation)
        .filter(Presentation.id == presentation_id)
        .delete(synchronize_session=False)
    )
    if commit:
        db.commit()
    return deleted


def _increment(db: Session, presentation_id: str, column, commit: bool) -> int:
    result = db.execute(
        update(Presentation)
        .where(Presentation.id == presentation_id)
        .values({column: column + 1})
    )
    if commit:
        db.commit()
    return result.rowcount


def increment_view_count(db: Session, presentation_id: str, *, commit: bool = True) -> int:
    return _increment(db, presentation_id, Presentation.view_count, commit)


def increment_download_count(db: Session, presentation_id: str, *, commit: bool = True) -> int:
    return _increment(db, presentation_id, Presentation.download_count, commit)


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

def create_file(db: Session, fields: Mapping[str, Any], *, commit: bool = True) -> Dict[str, Any]:
    row = PresentationFile(
        id=fields.get("id") or str(uuid.uuid4()),
        presentation_id=fields.get("presentation_id"),
        original_name=fields.get("original_name"),
        file_path=fields.get("file_path"),
        file_type=fields.get("file_type"),
        file_size=fields.get("file_size"),
        mime_type=fields.get("mime_type"),
        is_primary=bool(fields.get("is_primary")),
    )
    db.add(row)
    if commit:
        db.commit()
        db.refresh(row)
    else:
        db.flush()
    return file_to_dict(row)


def list_files(db: Session, presentation_id: str) -> List[Dict[str, Any]]:
    rows = (
        db.query(PresentationFile)
        .filter(PresentationFile.presentation_id == presentation_id)
        .order_by(PresentationFile.is_primary.desc(), PresentationFile.upload_date.asc())
        .all()
    )
    return [file_to_dict(row) for row in rows]


def get_file(db: Session, file_id: str) -> Optional[Dict[str, Any]]:
    row = db.query(PresentationFile).filter(PresentationFile.id == file_id).first()
    return file_to_dict(row) if row else None


def delete_file(db: Session, file_id: str, *, commit: bool = True) -> int:
    deleted = (
        db.query(PresentationFile)
        .filter(PresentationFile.id == file_id)
        .delete(synchronize_session=False)
    )
    if commit:
        db.commit()
    return deleted


# ---------------------------------------------------------------------------
# Comments (HTTP로 노출되지 않음)
# ---------------------------------------------------------------------------

def create_comment(db: Session, fields: Mapping[str, Any]) -> Dict[str, Any]:
    row = Comment(
        id=fields.get("id") or str(uuid.uuid4()),
        presentation_id=fields.get("presentation_id"),
        author_name=fields.get("author_name"),
        author_email=fields.get("author_email"),
        content=fields.get("content"),
        is_approved=bool(fields.get("is_approved", False)),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return comment_to_dict(row)


def list_comments(db: Session, presentation_id: str) -> List[Dict[str, Any]]:
    rows = (
        db.query(Comment)
        .filter(Comment.presentation_id == presentation_id)
        .order_by(Comment.date_created.asc())
        .all()
    )
    return [comment_to_dict(row) for row in rows]
