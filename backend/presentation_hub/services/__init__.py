"""서비스 레이어 패키지 초기화 모듈입니다."""

from presentation_hub.services import (
    auth_service,
    presentation_service,
    analytics_service,
    thumbnail_service,
    text_extraction,
    upload_service,
    content_service,
)
