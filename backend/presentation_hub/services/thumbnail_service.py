"""대표 파일의 미리보기 썸네일을 생성합니다.

이미지는 Pillow로 축소(비율 유지, 확대 없음)해 JPEG로 저장하고, PDF는 실제 페이지
렌더링 대신 단색 플레이스홀더를 저장합니다. 실패는 로그만 남기고 ``None``을
반환하므로 업로드 자체를 중단시키지 않습니다.
"""

import logging
import os
from typing import Optional

from PIL import Image, ImageOps

from presentation_hub.config import settings

logger = logging.getLogger(__name__)

PLACEHOLDER_BACKGROUND = (240, 240, 240)


def thumbnail_filename(presentation_id: str) -> str:
    return f"thumb-{presentation_id}.jpg"


def generate_image_thumbnail(source_path: str, target_path: str) -> Optional[str]:
    try:
        with Image.open(source_path) as image:
            image = ImageOps.exif_transpose(image)
            # thumbnail()은 비율을 유지하고 원본보다 크게 늘리지 않는다.
            image.thumbnail(settings.THUMBNAIL_SIZE)
            if image.mode != "RGB":
                image = image.convert("RGB")
            image.save(target_path, "JPEG", quality=settings.THUMBNAIL_QUALITY)
        return target_path
    except Exception as exc:
        logger.warning("[thumbnail] image thumbnail failed for %s: %s", source_path, exc)
        return None


def render_pdf_placeholder(source_path: str, target_path: str) -> Optional[str]:
    """PDF 첫 페이지 렌더링은 아직 구현되지 않았다. 단색 이미지로 대체한다."""
    logger.debug("[thumbnail] PDF page rendering not implemented; placeholder for %s", source_path)
    try:
        placeholder = Image.new("RGB", settings.THUMBNAIL_SIZE, PLACEHOLDER_BACKGROUND)
        placeholder.save(target_path, "JPEG", quality=settings.THUMBNAIL_QUALITY)
        return target_path
    except Exception as exc:
        logger.warning("[thumbnail] PDF placeholder failed for %s: %s", source_path, exc)
        return None


def generate_thumbnail(source_path: str, mime_type: str, presentation_id: str) -> Optional[str]:
    """썸네일을 만들고 업로드 루트 기준 상대 경로를 반환한다. 대상이 아니면 ``None``."""
    if mime_type.startswith("image/"):
        renderer = generate_image_thumbnail
    elif mime_type == "application/pdf":
        renderer = render_pdf_placeholder
    else:
        return None

    os.makedirs(settings.thumbnail_dir, exist_ok=True)
    filename = thumbnail_filename(presentation_id)
    target_path = os.path.join(settings.thumbnail_dir, filename)
    if renderer(source_path, target_path) is None:
        return None
    return os.path.join(settings.THUMBNAIL_SUBDIR, filename).replace("\\", "/")
