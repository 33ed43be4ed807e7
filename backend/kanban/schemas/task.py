from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, Field, PlainSerializer, field_validator

from kanban.models.enums import TaskPriority, TaskStatus
from kanban.schemas.board import blank_to_none


def _parse_status(value):
    if isinstance(value, str) and not isinstance(value, TaskStatus):
        try:
            return TaskStatus.from_token(value)
        except ValueError:
            raise ValueError(f"Status must be one of: {', '.join(TaskStatus.tokens())}") from None
    return value


def _parse_priority(value):
    if isinstance(value, str) and not isinstance(value, TaskPriority):
        if value == "":
            return None
        try:
            return TaskPriority.from_token(value)
        except ValueError:
            raise ValueError(f"Priority must be one of: {', '.join(TaskPriority.tokens())}") from None
    return value


StatusToken = Annotated[
    TaskStatus,
    BeforeValidator(_parse_status),
    PlainSerializer(lambda status: status.token, return_type=str),
]
PriorityToken = Annotated[
    TaskPriority,
    BeforeValidator(_parse_priority),
    PlainSerializer(lambda priority: priority.token, return_type=str),
]


class TaskOut(BaseModel):
    id: uuid.UUID
    board_id: uuid.UUID | None = None
    title: str
    description: str | None = None
    status: StatusToken
    priority: PriorityToken | None = None
    assigned_to: str | None = None
    due_date: datetime | None = None
    created_at: datetime
    updated_at: datetime


class TaskCreate(BaseModel):
    board_id: uuid.UUID
    title: str = Field(max_length=200)
    description: str | None = None
    status: StatusToken = TaskStatus.TODO
    priority: PriorityToken | None = None
    assigned_to: str | None = None
    due_date: datetime | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _title_required(cls, value):
        if value is None or value == "":
            raise ValueError("Task title is required")
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value):
        return TaskStatus.TODO if value in (None, "") else value

    @field_validator("description", "assigned_to", "due_date", mode="before")
    @classmethod
    def _blank_is_absent(cls, value):
        return blank_to_none(value)


class TaskUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    status: StatusToken | None = None
    priority: PriorityToken | None = None
    assigned_to: str | None = None
    due_date: datetime | None = None

    @field_validator("title", "description", "status", "assigned_to", "due_date", mode="before")
    @classmethod
    def _blank_is_absent(cls, value):
        return blank_to_none(value)


class TaskStatusUpdate(BaseModel):
    status: StatusToken


class TaskAssign(BaseModel):
    board_id: uuid.UUID
