from __future__ import annotations

import logging
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from copydesk.api.routes import router
from copydesk.core.config import get_settings
from copydesk.core.errors import AppError, ErrorCode
from copydesk.core.logging import setup_logging
from copydesk.core.response import error_response
from copydesk.middleware.request_id import RequestIDMiddleware

settings = get_settings()
setup_logging(settings.runtime.log_level)
logger = logging.getLogger(__name__)

if not settings.llm.api_key:
    logger.warning("Missing AI_API_KEY environment variable; set it in .env")
if not settings.publish.api_key:
    logger.warning("Missing XHS_API_KEY environment variable; set it in .env")

app = FastAPI(title="Copydesk Server", version="0.1.0")
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.allow_origins,
    allow_methods=settings.cors.allow_methods,
    allow_headers=settings.cors.allow_headers,
    expose_headers=["X-Request-ID"],
)
app.include_router(router)

_static_dir = settings.runtime.static_dir.strip()
if _static_dir:
    static_path = Path(_static_dir).expanduser().resolve()
    if static_path.is_dir():
        app.mount("/", StaticFiles(directory=static_path, html=True), name="static")
    else:
        logger.warning("Static dir not found, skip mounting: %s", static_path)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "")


@app.exception_handler(AppError)
async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    logger.warning("AppError: %s - %s", exc.code.value, exc.message)
    payload = error_response(
        code=exc.code,
        message=exc.message,
        request_id=_request_id(request),
        data=exc.details or None,
    )
    return JSONResponse(status_code=exc.status_code, content=payload)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("ValidationError: %s", exc.errors())
    payload = error_response(
        code=ErrorCode.INVALID_INPUT,
        message="请求参数不合法。",
        request_id=_request_id(request),
        data={"errors": jsonable_errors(exc)},
    )
    return JSONResponse(status_code=422, content=payload)


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    payload = error_response(
        code=ErrorCode.INTERNAL_ERROR,
        message="服务端发生未预期错误。",
        request_id=_request_id(request),
    )
    return JSONResponse(status_code=500, content=payload)


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # pydantic may carry the raw exception object in ``ctx``.
    errors: list[dict] = []
    for item in exc.errors():
        entry = dict(item)
        if "ctx" in entry:
            entry["ctx"] = {key: str(value) for key, value in entry["ctx"].items()}
        errors.append(entry)
    return errors


def run() -> None:
    uvicorn.run(
        "copydesk.main:app",
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.runtime.log_level.lower(),
    )
