from datetime import timedelta

from presentation_hub.models.analytics import AnalyticsEvent
from presentation_hub.services import analytics_service, presentation_service


def _presentation(db):
    return presentation_service.create_presentation(
        db,
        {
            "title": "Observability",
            "author": "Erin",
            "file_path": "uploads/files-1.pdf",
            "file_type": ".pdf",
            "file_size": 10,
        },
    )


def _backdate(db, event_id, days):
    row = db.query(AnalyticsEvent).filter(AnalyticsEvent.id == event_id).one()
    row.timestamp = row.timestamp - timedelta(days=days)
    db.commit()


def test_timeframe_tokens():
    assert analytics_service.timeframe_days("7d") == 7
    assert analytics_service.timeframe_days("90d") == 90
    assert analytics_service.timeframe_days("1y") == 365
    assert analytics_service.timeframe_days("2w") == 30
    assert analytics_service.timeframe_days(None) == 30


def test_stats_group_by_type_and_day(db):
    presentation = _presentation(db)
    for event_type in ("view", "view", "download"):
        analytics_service.record_event(db, {"presentation_id": presentation["id"], "event_type": event_type})
    analytics_service.record_event(db, {"presentation_id": None, "event_type": "search", "metadata": {"query": "x"}})

    stats = analytics_service.get_stats(db, presentation["id"])
    counts = {row["event_type"]: row["count"] for row in stats}
    assert counts == {"view": 2, "download": 1}
    assert len({row["date"] for row in stats}) == 1

    everything = analytics_service.get_stats(db)
    assert {row["event_type"] for row in everything} == {"view", "download", "search"}


def test_stats_respect_timeframe_window(db):
    presentation = _presentation(db)
    recent = analytics_service.record_event(db, {"presentation_id": presentation["id"], "event_type": "view"})
    old = analytics_service.record_event(db, {"presentation_id": presentation["id"], "event_type": "view"})
    _backdate(db, old["id"], 10)

    week = analytics_service.get_stats(db, presentation["id"], "7d")
    assert sum(row["count"] for row in week) == 1

    month = analytics_service.get_stats(db, presentation["id"], "30d")
    assert sum(row["count"] for row in month) == 2
    # 최신 날짜가 먼저 온다
    assert month[0]["date"] > month[-1]["date"]
    assert recent["event_type"] == "view"


def test_unknown_timeframe_falls_back_to_thirty_days(db):
    presentation = _presentation(db)
    event = analytics_service.record_event(db, {"presentation_id": presentation["id"], "event_type": "view"})
    _backdate(db, event["id"], 45)

    assert analytics_service.get_stats(db, presentation["id"], "bogus") == []
    assert len(analytics_service.get_stats(db, presentation["id"], "90d")) == 1


def test_aggregate_by_event_type():
    stats = [
        {"event_type": "view", "count": 3, "date": "2026-10-02"},
        {"event_type": "download", "count": 1, "date": "2026-10-02"},
        {"event_type": "view", "count": 2, "date": "2026-10-01"},
    ]

    aggregated = analytics_service.aggregate_by_event_type(stats)

    assert aggregated["view"]["total"] == 5
    assert aggregated["view"]["daily"] == [
        {"date": "2026-10-02", "count": 3},
        {"date": "2026-10-01", "count": 2},
    ]
    assert aggregated["download"] == {"total": 1, "daily": [{"date": "2026-10-02", "count": 1}]}


def test_event_metadata_round_trips(db):
    event = analytics_service.record_event(
        db,
        {"event_type": "search", "metadata": {"query": "raft", "results_count": 0}, "user_agent": "pytest"},
    )
    assert event["presentation_id"] is None
    assert event["metadata"] == {"query": "raft", "results_count": 0}
    assert analytics_service.list_events(db, event_type="search")[0]["user_agent"] == "pytest"
