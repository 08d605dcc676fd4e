"""Auth 기능 API 라우터입니다. 관리자 로그인과 현재 주체 조회를 제공합니다."""

from fastapi import APIRouter, Depends
from presentation_hub.config import settings
from presentation_hub.schemas.auth import AdminOut, LoginRequest, TokenResponse
from presentation_hub.services.auth_service import ADMIN_ROLE, authenticate_admin, create_access_token
from presentation_hub.middleware.auth_middleware import get_current_admin

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest):
    username = authenticate_admin(request.username, request.password)
    token = create_access_token(username)
    return TokenResponse(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=AdminOut(username=username, role=ADMIN_ROLE),
    )


@router.post("/logout")
def logout(current_admin: AdminOut = Depends(get_current_admin)):
    return {"success": True, "message": "Logged out"}


@router.get("/me", response_model=AdminOut)
def me(current_admin: AdminOut = Depends(get_current_admin)):
    return current_admin
