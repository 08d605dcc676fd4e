"""API 오류 응답 규약(success/error/message)을 위한 예외 타입입니다."""

from fastapi import HTTPException


class ApiError(HTTPException):
    def __init__(self, status_code: int, error_code: str, message: str, **extra):
        super().__init__(status_code=status_code, detail=message)
        self.error_code = error_code
        self.message = message
        self.extra = extra


def not_found(error_code: str = "PRESENTATION_NOT_FOUND", message: str = "The requested presentation does not exist") -> ApiError:
    return ApiError(404, error_code, message)


def error_body(error_code: str, message: str, **extra) -> dict:
    return {"success": False, "error": error_code, "message": message, **extra}
