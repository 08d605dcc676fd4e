"""Analytics 이벤트 기록과 일자별 집계를 담당하는 서비스입니다."""

from datetime import timedelta
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from presentation_hub.models.analytics import AnalyticsEvent
from presentation_hub.utils.helpers import dump_json, load_json, utcnow

TIMEFRAME_DAYS = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}
DEFAULT_TIMEFRAME_DAYS = 30


def timeframe_days(timeframe: Optional[str]) -> int:
    return TIMEFRAME_DAYS.get(timeframe or "", DEFAULT_TIMEFRAME_DAYS)


def record_event(db: Session, event: Mapping[str, Any], *, commit: bool = True) -> Dict[str, Any]:
    row = AnalyticsEvent(
        presentation_id=event.get("presentation_id"),
        event_type=event["event_type"],
        user_agent=event.get("user_agent"),
        ip_address=event.get("ip_address"),
        metadata_json=dump_json(event.get("metadata"), {}),
    )
    db.add(row)
    if commit:
        db.commit()
        db.refresh(row)
    else:
        db.flush()
    return event_to_dict(row)


def event_to_dict(row: AnalyticsEvent) -> Dict[str, Any]:
    return {
        "id": row.id,
        "presentation_id": row.presentation_id,
        "event_type": row.event_type,
        "user_agent": row.user_agent,
        "ip_address": row.ip_address,
        "timestamp": row.timestamp,
        "metadata": load_json(row.metadata_json, {}),
    }


def get_stats(db: Session, presentation_id: Optional[str] = None, timeframe: str = "30d") -> List[Dict[str, Any]]:
    since = utcnow() - timedelta(days=timeframe_days(timeframe))
    day = func.date(AnalyticsEvent.timestamp)

    q = db.query(
        AnalyticsEvent.event_type,
        func.count(AnalyticsEvent.id).label("count"),
        day.label("date"),
    )
    if presentation_id:
        q = q.filter(AnalyticsEvent.presentation_id == presentation_id)
    q = (
        q.filter(AnalyticsEvent.timestamp >= since)
        .group_by(AnalyticsEvent.event_type, day)
        .order_by(day.desc(), AnalyticsEvent.event_type.asc())
    )
    return [
        {"event_type": event_type, "count": int(count), "date": str(date)}
        for event_type, count, date in q.all()
    ]


def aggregate_by_event_type(stats: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """일자별 행을 ``{event_type: {total, daily: [{date, count}]}}`` 형태로 묶는다."""
    aggregated: Dict[str, Dict[str, Any]] = {}
    for stat in stats:
        bucket = aggregated.setdefault(stat["event_type"], {"total": 0, "daily": []})
        bucket["total"] += stat["count"]
        bucket["daily"].append({"date": stat["date"], "count": stat["count"]})
    return aggregated


def list_events(db: Session, *, presentation_id: Optional[str] = None, event_type: Optional[str] = None) -> List[Dict[str, Any]]:
    q = db.query(AnalyticsEvent)
    if presentation_id:
        q = q.filter(AnalyticsEvent.presentation_id == presentation_id)
    if event_type:
        q = q.filter(AnalyticsEvent.event_type == event_type)
    return [event_to_dict(row) for row in q.order_by(AnalyticsEvent.id.asc()).all()]
