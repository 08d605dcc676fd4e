"""업로드 파이프라인(검증, 저장, 썸네일, 기록, 정리) 동작을 검증하는 테스트입니다."""

import os

from PIL import Image

from presentation_hub.config import settings
from presentation_hub.models.presentation import Presentation, PresentationFile
from presentation_hub.services import analytics_service, presentation_service


def _stored_files(upload_dir):
    return sorted(p.name for p in upload_dir.iterdir() if p.is_file())


def _thumbnails(upload_dir):
    thumbs = upload_dir / settings.THUMBNAIL_SUBDIR
    if not thumbs.exists():
        return []
    return sorted(p.name for p in thumbs.iterdir())


def test_pdf_upload_creates_presentation_with_placeholder_thumbnail(upload, db, upload_dir, pdf_bytes):
    resp = upload(description="Consensus basics", category="talks")
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    data = body["data"]

    presentation = data["presentation"]
    assert presentation["title"] == "Intro"
    assert presentation["author"] == "Alice"
    assert presentation["category"] == "talks"
    assert presentation["is_public"] is True
    assert presentation["thumbnail"] == f"/api/thumbnails/thumb-{presentation['id']}.jpg"

    assert len(data["files"]) == 1
    assert data["files"][0]["is_primary"] is True
    assert data["files"][0]["original_name"] == "slides.pdf"
    assert data["files"][0]["url"] == f"/api/files/{data['files'][0]['id']}/download"

    row = db.query(Presentation).filter(Presentation.id == presentation["id"]).one()
    assert row.file_type == ".pdf"
    assert row.file_size == len(pdf_bytes)
    assert os.path.isfile(row.file_path)
    assert _thumbnails(upload_dir) == [f"thumb-{presentation['id']}.jpg"]


def test_multi_file_upload_marks_first_file_primary(upload, db, make_png, pdf_bytes):
    files = [
        ("deck.pdf", pdf_bytes, "application/pdf"),
        ("cover.png", make_png(), "image/png"),
        ("notes.md", b"# notes", "text/markdown"),
    ]
    resp = upload(files=files)
    assert resp.status_code == 201
    data = resp.json()["data"]

    assert [f["original_name"] for f in data["files"]] == ["deck.pdf", "cover.png", "notes.md"]
    assert [f["is_primary"] for f in data["files"]] == [True, False, False]

    presentation_id = data["presentation"]["id"]
    rows = db.query(PresentationFile).filter(PresentationFile.presentation_id == presentation_id).all()
    assert len(rows) == 3
    primary = [r for r in rows if r.is_primary]
    assert len(primary) == 1

    presentation = presentation_service.get_presentation(db, presentation_id)
    assert presentation["file_path"] == primary[0].file_path
    assert presentation["metadata"]["files_count"] == 3
    assert presentation["metadata"]["original_filename"] == "deck.pdf"


def test_image_thumbnail_fits_bounds_and_keeps_aspect_ratio(upload, make_png):
    resp = upload(files=[("wide.png", make_png(size=(800, 300)), "image/png")])
    assert resp.status_code == 201
    presentation_id = resp.json()["data"]["presentation"]["id"]

    with Image.open(os.path.join(settings.thumbnail_dir, f"thumb-{presentation_id}.jpg")) as thumb:
        assert thumb.format == "JPEG"
        assert thumb.size == (200, 75)


def test_small_image_is_not_upscaled(upload, make_png):
    resp = upload(files=[("tiny.png", make_png(size=(120, 40)), "image/png")])
    assert resp.status_code == 201
    presentation_id = resp.json()["data"]["presentation"]["id"]

    with Image.open(os.path.join(settings.thumbnail_dir, f"thumb-{presentation_id}.jpg")) as thumb:
        assert thumb.size == (120, 40)


def test_non_previewable_upload_has_no_thumbnail(upload, upload_dir):
    resp = upload(files=[("notes.txt", b"hello", "text/plain")])
    assert resp.status_code == 201
    assert resp.json()["data"]["presentation"]["thumbnail"] is None
    assert _thumbnails(upload_dir) == []


def test_disallowed_type_rejects_whole_batch_before_writing(upload, db, upload_dir, pdf_bytes):
    files = [
        ("deck.pdf", pdf_bytes, "application/pdf"),
        ("setup.exe", b"MZ\x90\x00", "application/x-msdownload"),
    ]
    resp = upload(files=files)
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["error"] == "FILE_TYPE_NOT_ALLOWED"

    assert db.query(Presentation).count() == 0
    assert _stored_files(upload_dir) == []


def test_missing_title_cleans_up_written_files(upload, db, upload_dir):
    resp = upload(title="")
    assert resp.status_code == 400
    assert resp.json()["error"] == "MISSING_REQUIRED_FIELDS"
    assert resp.json()["message"] == "Title and author are required"

    assert db.query(Presentation).count() == 0
    assert _stored_files(upload_dir) == []


def test_missing_author_is_rejected(upload, db):
    resp = upload(author="   ")
    assert resp.status_code == 400
    assert resp.json()["error"] == "MISSING_REQUIRED_FIELDS"
    assert db.query(Presentation).count() == 0


def test_no_files_is_rejected(client, db):
    resp = client.post("/api/upload", data={"title": "Intro", "author": "Alice"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "NO_FILES"
    assert db.query(Presentation).count() == 0


def test_too_many_files_is_rejected(upload, db, upload_dir, pdf_bytes):
    files = [(f"part-{i}.pdf", pdf_bytes, "application/pdf") for i in range(settings.MAX_FILES_PER_UPLOAD + 1)]
    resp = upload(files=files)
    assert resp.status_code == 400
    assert resp.json()["error"] == "TOO_MANY_FILES"
    assert db.query(Presentation).count() == 0
    assert _stored_files(upload_dir) == []


def test_oversized_file_is_rejected_and_removed(upload, db, upload_dir, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 16)
    resp = upload()
    assert resp.status_code == 400
    assert resp.json()["error"] == "FILE_TOO_LARGE"
    assert db.query(Presentation).count() == 0
    assert _stored_files(upload_dir) == []


def test_tags_and_visibility_are_parsed(upload, client):
    resp = upload(tags="ml, data , ,ops", is_public="false")
    assert resp.status_code == 201
    presentation = resp.json()["data"]["presentation"]
    assert presentation["tags"] == ["ml", "data", "ops"]
    assert presentation["is_public"] is False

    listed = client.get("/api/presentations").json()["data"]
    assert presentation["id"] not in {p["id"] for p in listed}


def test_repeated_tag_fields_are_accepted(client, pdf_bytes):
    resp = client.post(
        "/api/upload",
        files=[("files", ("slides.pdf", pdf_bytes, "application/pdf"))],
        data={"title": "Intro", "author": "Alice", "tags": ["raft", "paxos"]},
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["presentation"]["tags"] == ["raft", "paxos"]


def test_defaults_for_optional_fields(uploaded, db):
    presentation = presentation_service.get_presentation(db, uploaded["presentation"]["id"])
    assert presentation["description"] == ""
    assert presentation["category"] == "general"
    assert presentation["tags"] == []
    assert presentation["date_presented"] is None
    assert presentation["metadata"]["mime_type"] == "application/pdf"


def test_upload_records_analytics_event(upload, db, pdf_bytes, make_png):
    png = make_png()
    resp = upload(files=[("deck.pdf", pdf_bytes, "application/pdf"), ("cover.png", png, "image/png")])
    assert resp.status_code == 201
    presentation_id = resp.json()["data"]["presentation"]["id"]

    events = analytics_service.list_events(db, presentation_id=presentation_id, event_type="upload")
    assert len(events) == 1
    assert events[0]["metadata"] == {"files_count": 2, "total_size": len(pdf_bytes) + len(png)}


def test_registration_failure_rolls_back_and_removes_files(upload, db, upload_dir, monkeypatch):
    def broken_create_file(*args, **kwargs):
        raise RuntimeError("disk quota exceeded")

    monkeypatch.setattr(presentation_service, "create_file", broken_create_file)

    resp = upload()
    assert resp.status_code == 500
    assert resp.json()["error"] == "UPLOAD_FAILED"

    assert db.query(Presentation).count() == 0
    assert analytics_service.list_events(db, event_type="upload") == []
    assert _stored_files(upload_dir) == []
    assert _thumbnails(upload_dir) == []


def test_validate_probe_reports_file_info_and_keeps_nothing(client, upload_dir, pdf_bytes):
    resp = client.post("/api/upload/validate", files={"file": ("slides.pdf", pdf_bytes, "application/pdf")})
    assert resp.status_code == 200
    body = resp.json()
    assert body["valid"] is True
    assert body["fileInfo"] == {"originalName": "slides.pdf", "mimeType": "application/pdf", "size": len(pdf_bytes)}
    assert _stored_files(upload_dir) == []


def test_validate_probe_rejects_disallowed_type(client, upload_dir):
    resp = client.post("/api/upload/validate", files={"file": ("run.sh", b"#!/bin/sh", "application/x-sh")})
    assert resp.status_code == 400
    body = resp.json()
    assert body["valid"] is False
    assert body["error"] == "FILE_TYPE_NOT_ALLOWED"
    assert _stored_files(upload_dir) == []


def test_validate_probe_without_file(client):
    resp = client.post("/api/upload/validate")
    assert resp.status_code == 400
    assert resp.json()["error"] == "NO_FILE"
    assert resp.json()["valid"] is False


def test_progress_reports_completed(client):
    resp = client.get("/api/upload/progress/abc123")
    assert resp.status_code == 200
    assert resp.json() == {"uploadId": "abc123", "progress": 100, "status": "completed"}
