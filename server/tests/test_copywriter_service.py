from __future__ import annotations

import pytest

from copydesk.core.config import LLMConfig, Settings
from copydesk.core.errors import AppError, ErrorCode
from copydesk.services.copywriter import CopywriterService


class FixedLLM:
    def __init__(self, raw: str) -> None:
        self._raw = raw
        self.last_kwargs: dict | None = None

    async def draft_note(self, **kwargs) -> str:
        self.last_kwargs = kwargs
        return self._raw

    async def draft_reviews(self, **kwargs) -> str:
        self.last_kwargs = kwargs
        return self._raw


@pytest.mark.asyncio
async def test_generate_note_from_json_output() -> None:
    llm = FixedLLM('{"title":"好店 打卡","body":"环境很棒☕"}')
    service = CopywriterService(Settings(), llm=llm)

    note = await service.generate_note(scene="coffee shop", tags="咖啡 探店")

    assert llm.last_kwargs == {"scene": "coffee shop", "tags_line": "#咖啡 #探店"}
    assert note.title == "好店 打卡"
    assert note.body == "环境很棒☕"
    assert note.tags_line == "#咖啡 #探店"
    assert note.content == "## 好店 打卡\n\n环境很棒☕\n\n#咖啡 #探店"
    assert note.model_dump(by_alias=True)["tagsLine"] == "#咖啡 #探店"


@pytest.mark.asyncio
async def test_generate_note_from_freeform_output() -> None:
    llm = FixedLLM("标题：周末去哪儿\n\n小店很安静\n适合看书")
    service = CopywriterService(Settings(), llm=llm)

    note = await service.generate_note(scene="书店", tags="#阅读")

    assert note.title == "周末去哪儿"
    assert note.content == "## 周末去哪儿\n\n小店很安静\n适合看书\n\n#阅读"


@pytest.mark.asyncio
async def test_generate_note_json_without_body_uses_raw() -> None:
    raw = '{"title":"只有标题"}'
    service = CopywriterService(Settings(), llm=FixedLLM(raw))

    note = await service.generate_note(scene="s", tags="")

    assert note.title == "只有标题"
    assert note.body == raw
    assert note.tags_line == ""


@pytest.mark.asyncio
async def test_generate_note_respects_configured_max_length() -> None:
    settings = Settings(llm=LLMConfig(note_max_length=200))
    service = CopywriterService(settings, llm=FixedLLM('{"body":"' + "字" * 400 + '"}'))

    note = await service.generate_note(scene="s", tags="")

    assert len(note.body) == 200


@pytest.mark.asyncio
async def test_generate_reviews_splits_output() -> None:
    llm = FixedLLM("第一条|||第二条|||第三条|||第四条")
    service = CopywriterService(Settings(), llm=llm)

    result = await service.generate_reviews(category="头疗", tone="真实", length_option="80-100")

    assert result.reviews == ["第一条", "第二条", "第三条"]
    assert llm.last_kwargs == {"category": "头疗", "tone": "真实", "length_option": "80-100"}


@pytest.mark.asyncio
async def test_generate_reviews_empty_result_raises() -> None:
    service = CopywriterService(Settings(), llm=FixedLLM("  \n \n "))

    with pytest.raises(AppError) as exc_info:
        await service.generate_reviews(category="c", tone="t", length_option=None)

    assert exc_info.value.code == ErrorCode.EMPTY_RESULT
    assert exc_info.value.status_code == 502
