"""Analytics 이벤트 로그 모델입니다. 행은 추가만 되고 수정/삭제되지 않습니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from presentation_hub.database import Base
from presentation_hub.utils.helpers import utcnow


class AnalyticsEvent(Base):
    __tablename__ = "analytics"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # 발표 자료 삭제 시 이력은 남기고 참조만 NULL 처리한다.
    presentation_id = Column(String(36), ForeignKey("presentations.id", ondelete="SET NULL"), nullable=True)
    event_type = Column(String(30), nullable=False)  # view/download/upload/search
    user_agent = Column(String(500))
    ip_address = Column(String(64))
    timestamp = Column(DateTime, default=utcnow, nullable=False)
    metadata_json = Column("metadata", Text)  # JSON object

    __table_args__ = (
        Index("idx_analytics_presentation", "presentation_id", "timestamp"),
        Index("idx_analytics_type_time", "event_type", "timestamp"),
    )
