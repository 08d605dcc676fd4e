"""FastAPI 애플리케이션 진입점. 미들웨어, API 라우터, 오류 응답 규약을 등록합니다."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from presentation_hub.config import settings
from presentation_hub.database import Base, engine
import presentation_hub.models  # noqa: F401 - 모델 import로 metadata 등록
from presentation_hub.routers import auth, content, files, presentations, uploads
from presentation_hub.utils.errors import ApiError, error_body
from presentation_hub.utils.helpers import ensure_upload_dirs

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Presentation Hub API",
    description="포트폴리오 사이트의 발표 자료 업로드/조회/통계 백엔드",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "Content-Length"],
)

app.include_router(auth.router)
app.include_router(presentations.router)
app.include_router(uploads.router)
app.include_router(content.router)
app.include_router(files.router)


@app.exception_handler(ApiError)
async def handle_api_error(request: Request, exc: ApiError):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.error_code, exc.message, **exc.extra),
    )


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(f"HTTP_{exc.status_code}", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content=error_body("VALIDATION_ERROR", "Invalid request parameters", details=jsonable_errors(exc)),
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("[api] unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=error_body("INTERNAL_ERROR", "An unexpected error occurred"),
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg")}
        for err in exc.errors()
    ]


@app.on_event("startup")
def ensure_schema():
    # 누락된 테이블과 업로드 디렉터리를 생성합니다.
    Base.metadata.create_all(bind=engine)
    ensure_upload_dirs()
    logger.info("[startup] database and upload directories ready (%s)", settings.UPLOAD_DIR)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "Presentation Hub API"}
