"""Content 통계/목록 및 관리자 API 라우터입니다."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from presentation_hub.database import get_db
from presentation_hub.middleware.auth_middleware import get_current_admin
from presentation_hub.schemas.auth import AdminOut
from presentation_hub.schemas.presentation import BulkRequest
from presentation_hub.services import content_service

router = APIRouter(prefix="/api/content", tags=["content"])


@router.get("/stats")
def content_stats(timeframe: str = "30d", db: Session = Depends(get_db)):
    return {"success": True, "data": content_service.content_stats(db, timeframe), "timeframe": timeframe}


@router.get("/categories")
def list_categories(db: Session = Depends(get_db)):
    return {"success": True, "data": content_service.list_categories(db)}


@router.get("/recent")
def list_recent(limit: int = Query(10, ge=1), db: Session = Depends(get_db)):
    return {"success": True, "data": content_service.list_recent(db, limit)}


@router.get("/popular")
def list_popular(limit: int = Query(10, ge=1), timeframe: str = "30d", db: Session = Depends(get_db)):
    return {"success": True, "data": content_service.list_popular(db, limit), "timeframe": timeframe}


@router.get("/admin/all")
def admin_list(
    category: Optional[str] = None,
    author: Optional[str] = None,
    search: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    _admin: AdminOut = Depends(get_current_admin),
):
    data = content_service.admin_list(
        db, {"category": category, "author": author, "search": search, "limit": limit}
    )
    return {"success": True, "data": data}


@router.post("/admin/bulk")
def admin_bulk(
    request: BulkRequest,
    db: Session = Depends(get_db),
    _admin: AdminOut = Depends(get_current_admin),
):
    results = content_service.run_bulk(db, request)
    return {"success": True, "message": f"Bulk {request.action} completed", "results": results}
