"""업로드 파일 본문 텍스트 추출 확장 지점입니다.

아직 구현되지 않았으며 항상 빈 문자열을 반환합니다. 메타데이터의
``extracted_text`` 필드는 이 함수의 결과 앞부분을 그대로 저장합니다.
"""

import logging

logger = logging.getLogger(__name__)


def extract_text(file_path: str, mime_type: str) -> str:
    logger.debug("[extract] text extraction not implemented for %s (%s)", file_path, mime_type)
    return ""
