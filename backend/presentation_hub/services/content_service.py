"""Content API 도메인 서비스 레이어입니다. 응답 가공, 조회/다운로드 부수효과, 통계와 관리자 일괄 작업을 담당합니다."""

import logging
import os
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.orm import Session

from presentation_hub.schemas.presentation import BulkItemResult, BulkRequest, PresentationUpdate
from presentation_hub.services import analytics_service, presentation_service
from presentation_hub.utils.errors import ApiError, not_found
from presentation_hub.utils.helpers import (
    file_download_url,
    presentation_download_url,
    presentation_view_url,
    remove_files_quietly,
    resolve_upload_path,
    thumbnail_url,
)

logger = logging.getLogger(__name__)

SERVER_ONLY_FIELDS = ("file_path", "thumbnail_path")


def present_presentation(presentation: Mapping[str, Any], *, admin: bool = False) -> Dict[str, Any]:
    """서버 로컬 경로를 제거하고 공개 URL을 붙인다."""
    data = {k: v for k, v in presentation.items() if k not in SERVER_ONLY_FIELDS}
    data["thumbnail"] = thumbnail_url(presentation.get("thumbnail_path"))
    data["download_url"] = presentation_download_url(presentation["id"])
    data["view_url"] = presentation_view_url(presentation["id"])
    if admin:
        data["file_url"] = presentation_download_url(presentation["id"])
    return data


def present_file(file: Mapping[str, Any]) -> Dict[str, Any]:
    data = {k: v for k, v in file.items() if k != "file_path"}
    data["download_url"] = file_download_url(file["id"])
    return data


def _require_presentation(db: Session, presentation_id: str) -> Dict[str, Any]:
    presentation = presentation_service.get_presentation(db, presentation_id)
    if not presentation:
        raise not_found()
    return presentation


# ---------------------------------------------------------------------------
# 단건 조회 / 다운로드 / 수정 / 삭제
# ---------------------------------------------------------------------------

def view_presentation(db: Session, presentation_id: str, client: Mapping[str, Any]) -> Dict[str, Any]:
    _require_presentation(db, presentation_id)
    files = presentation_service.list_files(db, presentation_id)

    # 조회수 증가와 view 이벤트 기록은 한 트랜잭션으로 커밋한다.
    presentation_service.increment_view_count(db, presentation_id, commit=False)
    analytics_service.record_event(
        db,
        {
            "presentation_id": presentation_id,
            "event_type": "view",
            "user_agent": client.get("user_agent"),
            "ip_address": client.get("ip_address"),
            "metadata": {},
        },
        commit=False,
    )
    db.commit()

    presentation = _require_presentation(db, presentation_id)
    data = present_presentation(presentation)
    data["files"] = [present_file(f) for f in files]
    return data


def prepare_download(db: Session, presentation_id: str, client: Mapping[str, Any]) -> Tuple[str, str]:
    """다운로드할 실제 경로와 첨부 파일명을 반환한다. 파일이 없으면 카운트하지 않는다."""
    presentation = _require_presentation(db, presentation_id)
    file_path = presentation["file_path"]
    if not file_path or not os.path.isfile(file_path):
        raise ApiError(404, "FILE_NOT_FOUND", "The presentation file is no longer available")

    presentation_service.increment_download_count(db, presentation_id, commit=False)
    analytics_service.record_event(
        db,
        {
            "presentation_id": presentation_id,
            "event_type": "download",
            "user_agent": client.get("user_agent"),
            "ip_address": client.get("ip_address"),
            "metadata": {
                "file_type": presentation["file_type"],
                "file_size": presentation["file_size"],
            },
        },
        commit=False,
    )
    db.commit()
    return file_path, f"{presentation['title']}{presentation['file_type']}"


def locate_file(db: Session, file_id: str) -> Tuple[str, str]:
    file = presentation_service.get_file(db, file_id)
    if not file:
        raise ApiError(404, "FILE_NOT_FOUND", "The requested file does not exist")
    if not os.path.isfile(file["file_path"]):
        raise ApiError(404, "FILE_NOT_FOUND", "The requested file is no longer available")
    return file["file_path"], file["original_name"]


def update_presentation(db: Session, presentation_id: str, changes: Mapping[str, Any]) -> Dict[str, Any]:
    _require_presentation(db, presentation_id)
    if not changes:
        raise ApiError(400, "NO_VALID_FIELDS", "Please provide at least one valid field to update")
    presentation_service.update_presentation(db, presentation_id, changes)
    return present_presentation(_require_presentation(db, presentation_id))


def _physical_paths(db: Session, presentation: Mapping[str, Any]) -> List[str]:
    paths = [presentation["file_path"]]
    if presentation.get("thumbnail_path"):
        paths.append(resolve_upload_path(presentation["thumbnail_path"]))
    paths.extend(f["file_path"] for f in presentation_service.list_files(db, presentation["id"]))
    # 대표 파일은 presentations와 files 양쪽에 기록되어 있으므로 중복을 제거한다.
    return list(dict.fromkeys(p for p in paths if p))


def remove_presentation(db: Session, presentation_id: str) -> None:
    presentation = _require_presentation(db, presentation_id)
    paths = _physical_paths(db, presentation)
    removed = remove_files_quietly(paths)
    presentation_service.delete_presentation(db, presentation_id)
    logger.info("[delete] presentation %s deleted (%d/%d files removed)", presentation_id, removed, len(paths))


def presentation_analytics(db: Session, presentation_id: str, timeframe: str) -> Dict[str, Any]:
    presentation = _require_presentation(db, presentation_id)
    stats = analytics_service.get_stats(db, presentation_id, timeframe)
    return {
        "presentation_id": presentation_id,
        "timeframe": timeframe,
        "stats": analytics_service.aggregate_by_event_type(stats),
        "summary": {
            "total_views": presentation["view_count"],
            "total_downloads": presentation["download_count"],
        },
    }


# ---------------------------------------------------------------------------
# 목록 / 검색 / 통계
# ---------------------------------------------------------------------------

def list_public(db: Session, filters: Mapping[str, Any]) -> List[Dict[str, Any]]:
    return [present_presentation(p) for p in presentation_service.list_presentations(db, filters)]


def search(
    db: Session,
    query: str,
    *,
    category: Optional[str],
    limit: int,
    client: Mapping[str, Any],
) -> List[Dict[str, Any]]:
    presentations = presentation_service.list_presentations(
        db, {"search": query, "category": category, "limit": limit}
    )
    analytics_service.record_event(
        db,
        {
            "presentation_id": None,
            "event_type": "search",
            "user_agent": client.get("user_agent"),
            "ip_address": client.get("ip_address"),
            "metadata": {
                "query": query,
                "results_count": len(presentations),
                "category": category,
            },
        },
    )
    return [present_presentation(p) for p in presentations]


def _popularity(presentation: Mapping[str, Any]) -> int:
    return (presentation.get("view_count") or 0) + (presentation.get("download_count") or 0) * 2


def content_stats(db: Session, timeframe: str) -> Dict[str, Any]:
    presentations = presentation_service.list_presentations(db)
    activity = analytics_service.get_stats(db, None, timeframe)

    categories: Dict[str, int] = {}
    for p in presentations:
        name = p.get("category") or "uncategorized"
        categories[name] = categories.get(name, 0) + 1

    most_viewed = sorted(presentations, key=lambda p: p.get("view_count") or 0, reverse=True)[:5]
    return {
        "total_presentations": len(presentations),
        "total_views": sum(p.get("view_count") or 0 for p in presentations),
        "total_downloads": sum(p.get("download_count") or 0 for p in presentations),
        "categories": categories,
        "recent_activity": activity[:10],
        "popular_presentations": [
            {
                "id": p["id"],
                "title": p["title"],
                "author": p["author"],
                "view_count": p["view_count"],
                "download_count": p["download_count"],
            }
            for p in most_viewed
        ],
    }


def list_categories(db: Session) -> List[Dict[str, Any]]:
    buckets: Dict[str, Dict[str, Any]] = {}
    for p in presentation_service.list_presentations(db):
        name = p.get("category") or "uncategorized"
        bucket = buckets.setdefault(name, {"name": name, "count": 0, "latest": None})
        bucket["count"] += 1
        if bucket["latest"] is None or p["date_created"] > bucket["latest"]:
            bucket["latest"] = p["date_created"]
    return sorted(buckets.values(), key=lambda b: b["count"], reverse=True)


def list_recent(db: Session, limit: int) -> List[Dict[str, Any]]:
    return list_public(db, {"limit": limit})


def list_popular(db: Session, limit: int) -> List[Dict[str, Any]]:
    presentations = presentation_service.list_presentations(db)
    ranked = sorted(presentations, key=_popularity, reverse=True)[:limit]
    return [present_presentation(p) for p in ranked]


# ---------------------------------------------------------------------------
# 관리자
# ---------------------------------------------------------------------------

def admin_list(db: Session, filters: Mapping[str, Any]) -> List[Dict[str, Any]]:
    presentations = presentation_service.list_presentations(db, filters, include_private=True)
    return [present_presentation(p, admin=True) for p in presentations]


def _bulk_update_one(db: Session, presentation_id: str, changes: Mapping[str, Any]) -> BulkItemResult:
    try:
        matched = presentation_service.update_presentation(db, presentation_id, changes)
    except Exception as exc:
        db.rollback()
        logger.warning("[bulk] update failed for %s: %s", presentation_id, exc)
        return BulkItemResult(id=presentation_id, success=False, error=str(exc))
    if not matched:
        return BulkItemResult(id=presentation_id, success=False, error="Presentation not found")
    return BulkItemResult(id=presentation_id, success=True)


def _bulk_delete_one(db: Session, presentation_id: str) -> BulkItemResult:
    try:
        remove_presentation(db, presentation_id)
    except ApiError as exc:
        if exc.error_code == "PRESENTATION_NOT_FOUND":
            return BulkItemResult(id=presentation_id, success=False, error="Presentation not found")
        return BulkItemResult(id=presentation_id, success=False, error=exc.message)
    except Exception as exc:
        db.rollback()
        logger.warning("[bulk] delete failed for %s: %s", presentation_id, exc)
        return BulkItemResult(id=presentation_id, success=False, error=str(exc))
    return BulkItemResult(id=presentation_id, success=True)


def run_bulk(db: Session, request: BulkRequest) -> List[Dict[str, Any]]:
    """id마다 독립적으로 처리하고, 실패해도 나머지를 계속 진행한다."""
    if not request.action or request.presentation_ids is None:
        raise ApiError(400, "INVALID_REQUEST", "Action and presentation_ids array are required")

    if request.action == "update":
        if request.updates is None:
            raise ApiError(400, "UPDATES_REQUIRED", "Updates object is required for update action")
        try:
            changes = PresentationUpdate.model_validate(request.updates).changes()
        except ValidationError as exc:
            raise ApiError(400, "VALIDATION_ERROR", str(exc))
        results = [_bulk_update_one(db, pid, changes) for pid in request.presentation_ids]
    elif request.action == "delete":
        results = [_bulk_delete_one(db, pid) for pid in request.presentation_ids]
    else:
        raise ApiError(400, "INVALID_ACTION", "Supported actions: update, delete")

    return [r.model_dump(exclude_none=True) for r in results]
