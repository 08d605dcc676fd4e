import io
import shutil
from pathlib import Path
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from presentation_hub.config import settings
from presentation_hub.database import Base, get_db
from presentation_hub.main import app

TEST_DB_URL = "sqlite:///./test_presentation_hub.db"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def upload_dir(monkeypatch):
    test_upload_dir = Path("test_uploads_runtime") / uuid4().hex / "uploads"
    test_upload_dir.mkdir(parents=True, exist_ok=True)
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(test_upload_dir))
    yield test_upload_dir
    shutil.rmtree(test_upload_dir.parent, ignore_errors=True)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def session_factory():
    return TestingSession


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def admin_headers(client, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_USERNAME", "admin")
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "s3cret!")
    resp = client.post("/api/auth/login", json={"username": "admin", "password": "s3cret!"})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def png_bytes(size=(640, 480), color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, "PNG")
    return buffer.getvalue()


PDF_BYTES = b"%PDF-1.4\n%test\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF"


@pytest.fixture
def make_png():
    return png_bytes


@pytest.fixture
def pdf_bytes():
    return PDF_BYTES


@pytest.fixture
def upload(client):
    """``/api/upload`` 호출 헬퍼. files는 (name, bytes, mime) 튜플 목록."""

    def _upload(files=None, **fields):
        if files is None:
            files = [("slides.pdf", PDF_BYTES, "application/pdf")]
        data = {"title": "Intro", "author": "Alice"}
        data.update({k: v for k, v in fields.items() if v is not None})
        multipart = [("files", item) for item in files]
        return client.post("/api/upload", files=multipart, data=data)

    return _upload


@pytest.fixture
def uploaded(upload):
    resp = upload()
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]
