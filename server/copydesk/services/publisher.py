from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from copydesk.core.config import Settings
from copydesk.core.errors import AppError, ErrorCode
from copydesk.models.schemas import PublishRequest

logger = logging.getLogger(__name__)


def _clean_text(value: object) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def _clean_list(values: object) -> list[str]:
    if not isinstance(values, list):
        return []
    return [item.strip() for item in values if isinstance(item, str) and item.strip()]


def build_publish_payload(request: PublishRequest) -> dict[str, Any]:
    title = _clean_text(request.title)
    content = _clean_text(request.content)
    cover_image = _clean_text(request.cover_image)
    if not title and not content:
        raise AppError(
            code=ErrorCode.INVALID_INPUT,
            message="title or content is required",
            status_code=400,
        )
    if not cover_image:
        raise AppError(
            code=ErrorCode.INVALID_INPUT,
            message="coverImage is required",
            status_code=400,
        )

    payload: dict[str, Any] = {
        "coverImage": cover_image,
        "images": _clean_list(request.images),
        "tags": _clean_list(request.tags),
    }
    if title:
        payload["title"] = title
    if content:
        payload["content"] = content
    note_id = _clean_text(request.note_id)
    if note_id:
        payload["noteId"] = note_id
    return payload


class PublishService:
    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def _require_api_key(self) -> str:
        api_key = self._settings.publish.api_key
        if api_key:
            return api_key
        raise AppError(
            code=ErrorCode.DEPENDENCY_MISSING,
            message="服务端缺少 XHS_API_KEY 配置。",
            status_code=500,
        )

    async def publish(self, request: PublishRequest) -> dict[str, Any]:
        api_key = self._require_api_key()
        payload = build_publish_payload(request)

        headers = {
            "Content-Type": "application/json",
            "X-API-Key": api_key,
        }
        logger.info(
            "Relay publish request, images=%d tags=%d",
            len(payload["images"]),
            len(payload["tags"]),
        )
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.publish.timeout_seconds,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    self._settings.publish.endpoint,
                    headers=headers,
                    json=payload,
                )
        except httpx.HTTPError as exc:
            logger.warning("Publish request failed: %s", exc)
            raise AppError(
                code=ErrorCode.UPSTREAM_ERROR,
                message="发布服务连接失败。",
                status_code=502,
            ) from exc

        text = resp.text
        if resp.status_code >= 400:
            self._raise_upstream_error(resp.status_code, text)

        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise AppError(
                code=ErrorCode.UPSTREAM_ERROR,
                message="发布服务响应不是 JSON。",
                status_code=502,
            ) from exc
        if not isinstance(data, dict):
            return {"result": data}
        return data

    def _raise_upstream_error(self, status_code: int, text: str) -> None:
        if status_code in {401, 403}:
            code = ErrorCode.AUTH_EXPIRED
        elif status_code == 429:
            code = ErrorCode.RATE_LIMITED
        else:
            code = ErrorCode.UPSTREAM_ERROR
        raise AppError(
            code=code,
            message=text.strip() or "xhs publish api error",
            status_code=status_code,
            details={"upstream_status": status_code},
        )
