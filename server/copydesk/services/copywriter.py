from __future__ import annotations

import logging

from copydesk.core.config import Settings
from copydesk.core.errors import AppError, ErrorCode
from copydesk.models.schemas import NoteData, ReviewsData
from copydesk.services.llm import LLMService
from copydesk.services.normalizer import (
    assemble_note,
    normalize_tags,
    parse_note,
    split_reviews,
)

logger = logging.getLogger(__name__)


class CopywriterService:
    def __init__(self, settings: Settings, llm: LLMService | None = None) -> None:
        self._settings = settings
        self._llm = llm or LLMService(settings)

    async def generate_note(self, *, scene: str, tags: str) -> NoteData:
        tags_line = normalize_tags(tags)
        raw = await self._llm.draft_note(scene=scene, tags_line=tags_line)

        parsed = parse_note(raw)
        assembled = assemble_note(
            title=parsed.title,
            body=parsed.body or raw,
            tags_line=tags_line,
            max_length=self._settings.llm.note_max_length,
        )
        logger.info(
            "Note assembled, scene=%s title_chars=%d body_chars=%d",
            scene,
            len(assembled.title),
            len(assembled.body),
        )
        return NoteData(
            title=assembled.title,
            body=assembled.body,
            tags_line=assembled.tags_line,
            content=assembled.content,
        )

    async def generate_reviews(
        self,
        *,
        category: str,
        tone: str,
        length_option: str | None,
    ) -> ReviewsData:
        raw = await self._llm.draft_reviews(
            category=category,
            tone=tone,
            length_option=length_option,
        )
        reviews = split_reviews(raw)
        if not reviews:
            raise AppError(
                code=ErrorCode.EMPTY_RESULT,
                message="AI 未返回可用的评价文案，请重试。",
                status_code=502,
            )
        return ReviewsData(reviews=reviews)
