"""Create the presentation tables and upload directories."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from presentation_hub.config import settings
from presentation_hub.database import engine, Base
from presentation_hub.utils.helpers import ensure_upload_dirs
import presentation_hub.models  # noqa: F401 - registers all models


def init_db():
    print(f"Creating tables in {settings.DATABASE_URL} ...")
    Base.metadata.create_all(bind=engine)
    ensure_upload_dirs()
    print(f"Upload directory ready: {os.path.abspath(settings.UPLOAD_DIR)}")
    print("Database initialized successfully.")


if __name__ == "__main__":
    init_db()
