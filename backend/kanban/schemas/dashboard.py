from __future__ import annotations

from pydantic import BaseModel

from kanban.schemas.board import BoardOut
from kanban.schemas.task import TaskOut


class DashboardStats(BaseModel):
    total_boards: int = 0
    total_tasks: int = 0
    in_progress_tasks: int = 0
    completion_rate: int = 0


class TaskGroup(BaseModel):
    board: BoardOut | None = None
    tasks: list[TaskOut]
