from __future__ import annotations

from copydesk.services.normalizer import REVIEW_DELIMITER

NOTE_SYSTEM_PROMPT = (
    "You are a Xiaohongshu copywriter. "
    "Always reply in concise Chinese with emojis and keep the original tags at the end."
)

REVIEW_SYSTEM_PROMPT = (
    "You are a Chinese copywriter for lifestyle content. "
    "Keep outputs concise and natural."
)

DEFAULT_LENGTH_OPTION = "80-100"

REVIEW_LENGTH_HINTS: dict[str, str] = {
    "50-80": "字数要求50-80字",
    "80-100": "字数要求80-100字",
    "100+": "字数在100字以上，建议控制120字以内",
}


def build_note_prompt(scene: str, tags: str) -> str:
    return (
        "你是小红书的种草博主，请生成1篇小红书风格的探店/体验笔记。\n"
        f"- 场景：{scene}，文案必须围绕该场景展开，语气轻松种草+好店推荐，口语化但不夸张营销。\n"
        "- 结构：先给一个吸睛标题（≤20字），换行后正文。整体不超过500字。\n"
        "- 正文包含体验细节、环境/服务/功效等描写，加入2-5个自然融入的emoji。\n"
        "- 不要编号、不要“以下”“口播”“广告”语气。\n"
        f"- 末尾单独一行追加原样标签串：{tags}\n"
        '- 输出严格为 JSON 对象，字段：{"title":"...","body":"..."}，'
        "不要输出其它多余字符或 Markdown 符号。"
    )


def resolve_length_hint(length_option: str | None) -> str:
    return REVIEW_LENGTH_HINTS.get(
        length_option or "", REVIEW_LENGTH_HINTS[DEFAULT_LENGTH_OPTION]
    )


def build_review_prompt(category: str, tone: str, length_option: str | None) -> str:
    length_hint = resolve_length_hint(length_option)
    return (
        "请用中文生成美团评价文案，按照用户选择的3条不同的文案输出，"
        f"品类={category}，语气={tone}，格式不要编号，"
        f"用{REVIEW_DELIMITER}分隔每条文案，{length_hint}，避免营销腔。"
    )
