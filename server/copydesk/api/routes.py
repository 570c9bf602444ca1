from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import APIRouter, Request, Response

from copydesk.core.config import get_settings
from copydesk.core.response import success_response
from copydesk.models.schemas import (
    HealthData,
    NoteGenerateRequest,
    PublishRequest,
    ReviewGenerateRequest,
)
from copydesk.services.copywriter import CopywriterService
from copydesk.services.publisher import PublishService

router = APIRouter()
logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _get_copywriter_service() -> CopywriterService:
    settings = get_settings()
    return CopywriterService(settings)


@lru_cache(maxsize=1)
def _get_publish_service() -> PublishService:
    settings = get_settings()
    return PublishService(settings)


def reload_runtime_services() -> None:
    get_settings.cache_clear()
    _get_copywriter_service.cache_clear()
    _get_publish_service.cache_clear()


# CORS preflights are answered by the middleware; bare OPTIONS probes land here.
@router.options("/{path:path}", include_in_schema=False)
async def options_ok(path: str) -> Response:
    return Response(status_code=200)


@router.get("/health")
async def health(request: Request) -> dict:
    data = HealthData().model_dump()
    return success_response(data=data, request_id=request.state.request_id)


@router.post("/api/generate")
async def generate_note(request: Request, payload: NoteGenerateRequest | None = None) -> dict:
    payload = payload or NoteGenerateRequest()
    logger.info("Receive note generate request: scene=%s", payload.scene)
    service = _get_copywriter_service()
    result = await service.generate_note(scene=payload.scene, tags=payload.tags)
    return success_response(
        data=result.model_dump(by_alias=True),
        request_id=request.state.request_id,
    )


@router.post("/api/reviews/generate")
async def generate_reviews(
    request: Request,
    payload: ReviewGenerateRequest | None = None,
) -> dict:
    payload = payload or ReviewGenerateRequest()
    logger.info(
        "Receive review generate request: category=%s tone=%s length=%s",
        payload.category,
        payload.tone,
        payload.length_option,
    )
    service = _get_copywriter_service()
    result = await service.generate_reviews(
        category=payload.category,
        tone=payload.tone,
        length_option=payload.length_option,
    )
    return success_response(data=result.model_dump(), request_id=request.state.request_id)


@router.post("/api/xhs/publish", status_code=201)
async def publish_note(request: Request, payload: PublishRequest | None = None) -> dict:
    payload = payload or PublishRequest()
    service = _get_publish_service()
    data = await service.publish(payload)
    return success_response(data=data, request_id=request.state.request_id)
