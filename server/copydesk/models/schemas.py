from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class HealthData(BaseModel):
    status: str = "ok"


class NoteGenerateRequest(BaseModel):
    scene: str = "通用"
    tags: str = "#示例 #标签"


class NoteData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    body: str
    tags_line: str = Field(alias="tagsLine")
    content: str


class ReviewGenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    category: str = "头疗"
    tone: str = "真实"
    length_option: str = Field(default="80-100", alias="lengthOption")


class ReviewsData(BaseModel):
    reviews: list[str]


class PublishRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    content: str | None = None
    cover_image: str | None = Field(default=None, alias="coverImage")
    # Non-list values are tolerated and dropped when the outbound payload is built.
    images: Any = Field(default_factory=list)
    tags: Any = Field(default_factory=list)
    note_id: str | None = Field(default=None, alias="noteId")
