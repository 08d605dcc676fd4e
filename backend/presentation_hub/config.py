"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List, Tuple
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./data/presentations.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:4173",
    ]

    # Admin login (single principal)
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "change-me"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 24 * 60

    # File upload
    UPLOAD_DIR: str = "uploads"
    THUMBNAIL_SUBDIR: str = "thumbnails"
    MAX_UPLOAD_SIZE: int = 50 * 1024 * 1024  # 50 MB
    MAX_FILES_PER_UPLOAD: int = 5
    ALLOWED_MIME_TYPES: List[str] = [
        # Documents
        "application/pdf",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "application/vnd.oasis.opendocument.presentation",
        # Images
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "image/svg+xml",
        # Archives
        "application/zip",
        "application/x-rar-compressed",
        "application/x-7z-compressed",
        # Code/Text
        "text/plain",
        "application/json",
        "text/markdown",
        # LaTeX
        "application/x-tex",
        "text/x-tex",
    ]

    # Thumbnails
    THUMBNAIL_SIZE: Tuple[int, int] = (200, 150)
    THUMBNAIL_QUALITY: int = 80
    THUMBNAIL_CACHE_SECONDS: int = 86400

    # 추출 텍스트는 메타데이터에 앞부분만 저장한다.
    EXTRACTED_TEXT_LIMIT: int = 5000

    @property
    def thumbnail_dir(self) -> str:
        return str(Path(self.UPLOAD_DIR) / self.THUMBNAIL_SUBDIR)

    class Config:
        # 실행 cwd와 무관하게 backend/.env를 로드한다.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
