from contextlib import asynccontextmanager
import logging
import time
import uuid
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import JSONResponse, PlainTextResponse

from assetstudio.api.v1.router import api_router
from assetstudio.core.exceptions import (
    AppError,
    EditRejected,
    EmptyCaptureSurface,
    EntityNotFoundError,
    InvalidLanguageSelection,
    NoTranslationsReady,
    NormalizationFailed,
    SessionBusyError,
    UnparseableUpstreamResponse,
    UpstreamRequestFailed,
)
from assetstudio.core.settings import settings
from assetstudio.core.logging import StudioContextFilter, JsonLineFormatter
from assetstudio.core.metrics import get_metrics_payload
from assetstudio.core.request_context import reset_request_id, set_request_id


logger = logging.getLogger("assetstudio")

_ERROR_STATUS: tuple[tuple[type[AppError], int], ...] = (
    (EntityNotFoundError, 404),
    (InvalidLanguageSelection, 400),
    (EditRejected, 400),
    (SessionBusyError, 409),
    (NoTranslationsReady, 409),
    (EmptyCaptureSurface, 409),
    (UpstreamRequestFailed, 502),
    (UnparseableUpstreamResponse, 502),
    (NormalizationFailed, 502),
)


def _status_for(exc: AppError) -> int:
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return 500


def _is_preview_request(method: str, path: str) -> bool:
    return method == "GET" and path.endswith("/preview.png")


@asynccontextmanager
async def lifespan(app: FastAPI):
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    formatter = JsonLineFormatter(datefmt="%Y-%m-%dT%H:%M:%S%z")

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    stream_handler.addFilter(StudioContextFilter())
    root_logger.addHandler(stream_handler)

    # request_complete below replaces uvicorn's access log.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(StudioContextFilter())
        root_logger.addHandler(file_handler)

    logger.info(
        "studio_started",
        extra={"translation_api_url": settings.translation_api_url, "media_root": settings.media_root},
    )
    yield


app = FastAPI(title="Store Asset Studio", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount(
    settings.media_url_prefix,
    StaticFiles(directory=settings.media_root, check_dir=False),
    name="media",
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    token = set_request_id(request_id)
    start = time.perf_counter()
    try:
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.exception(
                "request_failed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": duration_ms,
                },
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        request_logger = logger.debug if _is_preview_request(request.method, request.url.path) else logger.info
        request_logger(
            "request_complete",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        response.headers["x-request-id"] = request_id
        return response
    finally:
        reset_request_id(token)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    request_id = getattr(request.state, "request_id", None)
    status_code = _status_for(exc)
    content = {"detail": exc.detail, "request_id": request_id}
    if isinstance(exc, UpstreamRequestFailed):
        content["upstream_status"] = exc.status
    if isinstance(exc, (UpstreamRequestFailed, UnparseableUpstreamResponse)) and exc.body:
        content["upstream_body"] = exc.body
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    request_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "request_id": request_id},
    )


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/metrics")
def metrics_endpoint():
    return PlainTextResponse(get_metrics_payload(), media_type="text/plain; version=0.0.4; charset=utf-8")


app.include_router(api_router)
