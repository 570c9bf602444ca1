from __future__ import annotations

import json
import re
from dataclasses import dataclass

TITLE_MAX_CHARS = 32
BODY_MIN_CHARS = 120
DEFAULT_NOTE_MAX_LENGTH = 500
REVIEW_DELIMITER = "|||"
MAX_REVIEWS = 3

_TITLE_LABELS = ("标题", "title")
_TITLE_LABEL_PATTERN = re.compile(
    r"^(?:" + "|".join(re.escape(label) for label in _TITLE_LABELS) + r")?\s*[:：#-]?\s*",
    re.IGNORECASE,
)
_NEWLINES_PATTERN = re.compile(r"\n+")


@dataclass(frozen=True)
class ParsedNote:
    title: str | None = None
    body: str | None = None


@dataclass(frozen=True)
class AssembledNote:
    title: str
    body: str
    tags_line: str
    content: str


def normalize_tags(tags: str | None) -> str:
    seen: dict[str, None] = {}
    for token in str(tags or "").split():
        token = token.strip()
        if not token:
            continue
        if not token.startswith("#"):
            token = f"#{token}"
        seen.setdefault(token, None)
    return " ".join(seen)


def strip_label(text: str | None = "") -> str:
    return _TITLE_LABEL_PATTERN.sub("", text or "", count=1).strip()


def _split_lines(content: str) -> list[str]:
    return [line.strip() for line in _NEWLINES_PATTERN.split(content) if line.strip()]


def _coerce_field(value: object) -> str | None:
    if not value:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _reject_constant(name: str) -> float:
    raise ValueError(f"non-standard JSON constant: {name}")


def try_structured_note(content: str) -> ParsedNote | None:
    """Decode ``content`` as a JSON object carrying a title or body.

    Returns None for anything else, including undecodable text.
    """
    try:
        payload = json.loads(content, parse_constant=_reject_constant)
    except (TypeError, ValueError, RecursionError):
        return None
    if not isinstance(payload, dict):
        return None

    title = _coerce_field(payload.get("title"))
    body = _coerce_field(payload.get("body"))
    if not title and not body:
        return None
    return ParsedNote(title=title, body=body)


def parse_heuristic_note(content: str) -> ParsedNote:
    lines = _split_lines(content)
    if not lines:
        return ParsedNote()
    title = strip_label(lines[0])
    body = "\n".join(lines[1:]).strip()
    return ParsedNote(title=title, body=body or content)


def parse_note(content: str | None) -> ParsedNote:
    if not content:
        return ParsedNote()
    structured = try_structured_note(content)
    if structured is not None:
        return structured
    return parse_heuristic_note(content)


def limit_body(body: str | None, limit: int) -> str:
    safe_body = (body or "").strip()
    if len(safe_body) > limit:
        return safe_body[:limit]
    return safe_body


def assemble_note(
    *,
    title: str | None,
    body: str | None,
    tags_line: str | None,
    max_length: int = DEFAULT_NOTE_MAX_LENGTH,
) -> AssembledNote:
    """Combine title, body and tags into the final note.

    The body is cut to whatever ``max_length`` leaves after the title and tag
    lines (each plus a blank-line separator), but never below
    ``BODY_MIN_CHARS``. Long titles or tag lines can therefore push the
    content past ``max_length``; title and tags are never dropped.
    """
    normalized_tags = normalize_tags(tags_line)
    title_line = strip_label(title)[:TITLE_MAX_CHARS] if title else ""

    reserved = 0
    if normalized_tags:
        reserved += len(normalized_tags) + 2
    if title_line:
        reserved += len(title_line) + 2
    body_budget = max(BODY_MIN_CHARS, max_length - reserved)
    trimmed_body = limit_body(body, body_budget)

    parts: list[str] = []
    if title_line:
        parts.append(f"## {title_line}")
    if trimmed_body:
        parts.append(trimmed_body)
    if normalized_tags:
        parts.append(normalized_tags)

    return AssembledNote(
        title=title_line,
        body=trimmed_body,
        tags_line=normalized_tags,
        content="\n\n".join(parts).strip(),
    )


def split_reviews(content: str) -> list[str]:
    """Split generator output into at most three reviews.

    An empty list means nothing usable came back; callers decide how to
    report it.
    """
    reviews = [item.strip() for item in content.split(REVIEW_DELIMITER) if item.strip()]
    if len(reviews) <= 1:
        # Generator ignored the delimiter; fall back to one review per line.
        reviews = _split_lines(content)
    return reviews[:MAX_REVIEWS]
