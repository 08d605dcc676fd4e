"""관리자 bearer 토큰 검증 의존성입니다."""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from presentation_hub.config import settings
from presentation_hub.schemas.auth import AdminOut
from presentation_hub.services.auth_service import ADMIN_ROLE, ALGORITHM
from presentation_hub.utils.errors import ApiError

security = HTTPBearer()


def decode_admin_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise ApiError(401, "INVALID_TOKEN", "Invalid or expired token")


def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> AdminOut:
    claims = decode_admin_token(credentials.credentials)
    username = claims.get("sub")
    if not username:
        raise ApiError(401, "INVALID_TOKEN", "Token has no subject")
    # 설정된 관리자 계정이 바뀌면 이전 토큰은 더 이상 통과하지 못한다.
    if claims.get("role") != ADMIN_ROLE or username != settings.ADMIN_USERNAME:
        raise ApiError(403, "FORBIDDEN", f"Requires role: {ADMIN_ROLE}")
    return AdminOut(username=username, role=ADMIN_ROLE)
