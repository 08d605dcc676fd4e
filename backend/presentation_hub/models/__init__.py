"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from presentation_hub.models.presentation import Presentation, PresentationFile, Comment
from presentation_hub.models.analytics import AnalyticsEvent

__all__ = [
    "Presentation", "PresentationFile", "Comment",
    "AnalyticsEvent",
]
