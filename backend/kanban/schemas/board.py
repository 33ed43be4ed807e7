from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from kanban.models.enums import Disposition


def blank_to_none(value):
    if isinstance(value, str) and value == "":
        return None
    return value


class BoardOut(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None = None
    color: str | None = None
    task_count: int = 0
    created_at: datetime
    updated_at: datetime


class BoardCreate(BaseModel):
    name: str = Field(max_length=100)
    description: str | None = None
    color: str | None = Field(default=None, max_length=32)

    @field_validator("name", mode="before")
    @classmethod
    def _name_required(cls, value):
        if value is None or value == "":
            raise ValueError("Board name is required")
        return value

    @field_validator("description", "color", mode="before")
    @classmethod
    def _blank_is_absent(cls, value):
        return blank_to_none(value)


class BoardUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    color: str | None = Field(default=None, max_length=32)

    @field_validator("name", "description", "color", mode="before")
    @classmethod
    def _blank_is_absent(cls, value):
        return blank_to_none(value)


class BoardDelete(BaseModel):
    disposition: Disposition = Disposition.orphan
    target_board_id: uuid.UUID | None = None

    @field_validator("target_board_id", mode="before")
    @classmethod
    def _blank_is_absent(cls, value):
        return blank_to_none(value)


class BoardPage(BaseModel):
    boards: list[BoardOut]
    page: int
    per_page: int
    total_count: int
    total_pages: int
    orphaned_tasks_count: int
