"""Auth Service 도메인 서비스 레이어입니다. 관리자 자격 증명 확인과 토큰 발급을 담당합니다."""

import hmac
from datetime import datetime, timedelta, timezone
from jose import jwt
from fastapi import HTTPException, status
from presentation_hub.config import settings

ALGORITHM = "HS256"
ADMIN_ROLE = "admin"


def create_access_token(username: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": username, "role": ADMIN_ROLE, "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def authenticate_admin(username: str, password: str) -> str:
    valid_user = hmac.compare_digest(username.encode(), settings.ADMIN_USERNAME.encode())
    valid_password = hmac.compare_digest(password.encode(), settings.ADMIN_PASSWORD.encode())
    if not (valid_user and valid_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )
    return settings.ADMIN_USERNAME
