"""Presentations 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from presentation_hub.database import get_db
from presentation_hub.schemas.presentation import PresentationUpdate
from presentation_hub.services import content_service
from presentation_hub.utils.helpers import client_info

router = APIRouter(prefix="/api/presentations", tags=["presentations"])


@router.get("")
def list_presentations(
    category: Optional[str] = None,
    author: Optional[str] = None,
    search: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
    page: int = Query(1, ge=1),
    sort: str = "date_created",
    order: str = "desc",
    db: Session = Depends(get_db),
):
    # sort/order는 호환을 위해 받기만 하고 정렬은 항상 최신순이다.
    data = content_service.list_public(
        db, {"category": category, "author": author, "search": search, "limit": limit}
    )
    return {
        "success": True,
        "data": data,
        "pagination": {"page": page, "limit": limit or len(data), "total": len(data)},
    }


@router.get("/search/{query}")
def search_presentations(
    query: str,
    request: Request,
    limit: int = Query(20, ge=1),
    category: Optional[str] = None,
    db: Session = Depends(get_db),
):
    data = content_service.search(db, query, category=category, limit=limit, client=client_info(request))
    return {"success": True, "data": data, "query": query, "total_results": len(data)}


@router.get("/{presentation_id}")
def get_presentation(presentation_id: str, request: Request, db: Session = Depends(get_db)):
    data = content_service.view_presentation(db, presentation_id, client_info(request))
    return {"success": True, "data": data}


@router.get("/{presentation_id}/download")
def download_presentation(presentation_id: str, request: Request, db: Session = Depends(get_db)):
    path, filename = content_service.prepare_download(db, presentation_id, client_info(request))
    return FileResponse(path, media_type="application/octet-stream", filename=filename)


@router.put("/{presentation_id}")
def update_presentation(presentation_id: str, data: PresentationUpdate, db: Session = Depends(get_db)):
    updated = content_service.update_presentation(db, presentation_id, data.changes())
    return {"success": True, "message": "Presentation updated successfully", "data": updated}


@router.delete("/{presentation_id}")
def delete_presentation(presentation_id: str, db: Session = Depends(get_db)):
    content_service.remove_presentation(db, presentation_id)
    return {"success": True, "message": "Presentation deleted successfully"}


@router.get("/{presentation_id}/analytics")
def presentation_analytics(presentation_id: str, timeframe: str = "30d", db: Session = Depends(get_db)):
    data = content_service.presentation_analytics(db, presentation_id, timeframe)
    return {"success": True, "data": data}
