from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from copydesk.core.config import Settings
from copydesk.core.errors import AppError, ErrorCode
from copydesk.services.normalizer import REVIEW_DELIMITER
from copydesk.services.prompts import (
    NOTE_SYSTEM_PROMPT,
    REVIEW_SYSTEM_PROMPT,
    build_note_prompt,
    build_review_prompt,
    resolve_length_hint,
)

logger = logging.getLogger(__name__)

_UPSTREAM_BODY_PREVIEW_CHARS = 500


class LLMService:
    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def _require_api_key(self) -> str:
        api_key = self._settings.llm.api_key
        if api_key:
            return api_key
        raise AppError(
            code=ErrorCode.DEPENDENCY_MISSING,
            message="服务端缺少 AI_API_KEY 配置。",
            status_code=500,
        )

    def _build_auth_headers(self, api_key: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def _build_payload(self, system_prompt: str, user_prompt: str, max_tokens: int) -> dict[str, Any]:
        llm = self._settings.llm
        return {
            "model": llm.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": llm.temperature,
            "max_tokens": max_tokens,
            "presence_penalty": llm.presence_penalty,
        }

    async def _request_chat_completion(self, payload: dict[str, Any], *, api_key: str) -> str:
        url = self._settings.llm.endpoint
        headers = self._build_auth_headers(api_key)
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.llm.timeout_seconds,
                transport=self._transport,
            ) as client:
                resp = await client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("LLM request failed: %s", exc)
            raise AppError(
                code=ErrorCode.UPSTREAM_ERROR,
                message="AI 服务连接失败。",
                status_code=502,
            ) from exc

        if resp.status_code in {401, 403}:
            raise AppError(
                code=ErrorCode.AUTH_EXPIRED,
                message="AI 服务鉴权失败，请检查 AI_API_KEY。",
                status_code=401,
            )
        if resp.status_code == 429:
            raise AppError(
                code=ErrorCode.RATE_LIMITED,
                message="AI 服务请求触发限流，请稍后重试。",
                status_code=429,
            )
        if resp.status_code >= 400:
            raise AppError(
                code=ErrorCode.UPSTREAM_ERROR,
                message=f"AI 服务请求失败（HTTP {resp.status_code}）。",
                status_code=502,
                details={
                    "upstream_status": resp.status_code,
                    "upstream_body": resp.text[:_UPSTREAM_BODY_PREVIEW_CHARS],
                },
            )

        try:
            raw = resp.json()
        except ValueError as exc:
            raise AppError(
                code=ErrorCode.UPSTREAM_ERROR,
                message="AI 服务响应不是 JSON。",
                status_code=502,
            ) from exc

        result = self._extract_response_text(raw)
        if not result:
            raise AppError(
                code=ErrorCode.UPSTREAM_ERROR,
                message="AI 未返回有效内容。",
                status_code=502,
            )
        return result

    async def draft_note(self, *, scene: str, tags_line: str) -> str:
        if not self._settings.llm.enabled:
            logger.info("LLM disabled, return deterministic local note draft")
            return json.dumps(
                {
                    "title": f"{scene}打卡记录",
                    "body": (
                        f"今天去体验了{scene}，当前为本地降级输出（未启用 AI）。\n"
                        f"{tags_line}"
                    ).strip(),
                },
                ensure_ascii=False,
            )

        api_key = self._require_api_key()
        payload = self._build_payload(
            NOTE_SYSTEM_PROMPT,
            build_note_prompt(scene, tags_line),
            self._settings.llm.note_max_tokens,
        )
        logger.info("Request LLM note draft, model=%s", self._settings.llm.model)
        return await self._request_chat_completion(payload, api_key=api_key)

    async def draft_reviews(self, *, category: str, tone: str, length_option: str | None) -> str:
        if not self._settings.llm.enabled:
            logger.info("LLM disabled, return deterministic local review drafts")
            length_hint = resolve_length_hint(length_option)
            return REVIEW_DELIMITER.join(
                f"{category}体验{index}：{tone}感受，本地降级输出（{length_hint}）。"
                for index in range(1, 4)
            )

        api_key = self._require_api_key()
        payload = self._build_payload(
            REVIEW_SYSTEM_PROMPT,
            build_review_prompt(category, tone, length_option),
            self._settings.llm.review_max_tokens,
        )
        logger.info("Request LLM review drafts, model=%s", self._settings.llm.model)
        return await self._request_chat_completion(payload, api_key=api_key)

    def _extract_response_text(self, payload: Any) -> str:
        try:
            content = payload["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise AppError(
                code=ErrorCode.UPSTREAM_ERROR,
                message="AI 服务响应结构异常。",
                status_code=502,
            ) from exc

        if isinstance(content, str):
            return content.strip()

        if isinstance(content, list):
            chunks: list[str] = []
            for item in content:
                if not isinstance(item, dict):
                    continue
                if item.get("type") == "text" and isinstance(item.get("text"), str):
                    text = item["text"].strip()
                    if text:
                        chunks.append(text)
            return "\n".join(chunks).strip()

        return ""
