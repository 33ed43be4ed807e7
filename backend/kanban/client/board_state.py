from __future__ import annotations

import enum
import itertools
import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal, Protocol

from pydantic import BaseModel


logger = logging.getLogger(__name__)

StatusToken = Literal["todo", "in_progress", "done"]
COLUMNS: tuple[str, ...] = ("todo", "in_progress", "done")


class BoardTask(BaseModel):
    id: str
    board_id: str | None = None
    title: str
    description: str | None = None
    status: StatusToken = "todo"
    priority: Literal["low", "medium", "high"] | None = None
    assigned_to: str | None = None
    due_date: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @property
    def is_placeholder(self) -> bool:
        return self.id.startswith("temp-")


class TaskAPI(Protocol):
    async def create_task(self, data: dict[str, Any]) -> dict: ...

    async def update_task_status(self, task_id: str, status: str) -> dict: ...

    async def delete_task(self, task_id: str) -> dict: ...


class OperationState(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    rolled_back = "rolled_back"


class InvalidTransition(RuntimeError):
    pass


@dataclass
class PendingOperation:
    """One optimistic change: pending until the server confirms or it is rolled back."""

    kind: Literal["create", "move"]
    task_id: str
    previous_status: str | None = None
    state: OperationState = OperationState.pending
    error: Exception | None = None

    def _leave_pending(self, state: OperationState) -> None:
        if self.state is not OperationState.pending:
            raise InvalidTransition(f"{self.kind} operation on {self.task_id} is already {self.state.value}")
        self.state = state

    def confirm(self, task_id: str | None = None) -> None:
        self._leave_pending(OperationState.confirmed)
        if task_id is not None:
            self.task_id = task_id

    def roll_back(self, error: Exception | None = None) -> None:
        self._leave_pending(OperationState.rolled_back)
        self.error = error


class BoardState:
    """Client-side task list of one board with optimistic create and move."""

    def __init__(self, board_id: str, api: TaskAPI, tasks: Iterable[BoardTask | Mapping[str, Any]] = ()) -> None:
        self.board_id = str(board_id)
        self._api = api
        self._tasks: list[BoardTask] = [
            t if isinstance(t, BoardTask) else BoardTask.model_validate(t) for t in tasks
        ]
        self._seq = itertools.count(1)
        self.operations: list[PendingOperation] = []

    @property
    def tasks(self) -> list[BoardTask]:
        return list(self._tasks)

    def columns(self) -> dict[str, list[BoardTask]]:
        return {status: [t for t in self._tasks if t.status == status] for status in COLUMNS}

    def get(self, task_id: str) -> BoardTask | None:
        return next((t for t in self._tasks if t.id == task_id), None)

    def _replace(self, task_id: str, task: BoardTask) -> None:
        self._tasks = [task if t.id == task_id else t for t in self._tasks]

    def _remove(self, task_id: str) -> None:
        self._tasks = [t for t in self._tasks if t.id != task_id]

    def _temporary_id(self) -> str:
        return f"temp-{int(time.time() * 1000)}-{next(self._seq)}"

    async def create_task(self, draft: Mapping[str, Any]) -> PendingOperation:
        now = datetime.now(timezone.utc)
        placeholder = BoardTask(
            id=self._temporary_id(),
            board_id=self.board_id,
            title=draft.get("title") or "",
            description=draft.get("description") or None,
            status=draft.get("status") or "todo",
            priority=draft.get("priority") or "medium",
            assigned_to=draft.get("assigned_to") or None,
            due_date=draft.get("due_date") or None,
            created_at=now,
            updated_at=now,
        )
        self._tasks.insert(0, placeholder)
        op = PendingOperation(kind="create", task_id=placeholder.id)
        self.operations.append(op)

        try:
            created = await self._api.create_task({**draft, "board_id": self.board_id})
            task = BoardTask.model_validate(created)
        except Exception as exc:
            self._remove(placeholder.id)
            op.roll_back(exc)
            logger.warning("Create of %r rolled back: %s", placeholder.title, exc)
            return op

        self._replace(placeholder.id, task)
        op.confirm(task.id)
        return op

    async def move_task(self, task_id: str, status: str) -> PendingOperation:
        if status not in COLUMNS:
            raise ValueError(f"Unknown column {status!r}")
        task = self.get(task_id)
        if task is None:
            raise KeyError(task_id)

        previous_status = task.status
        self._replace(task_id, task.model_copy(update={"status": status}))
        op = PendingOperation(kind="move", task_id=task_id, previous_status=previous_status)
        self.operations.append(op)

        try:
            updated = BoardTask.model_validate(await self._api.update_task_status(task_id, status))
        except Exception as exc:
            # A later move of the same card owns it now.
            current = self.get(task_id)
            if current is not None and current.status == status:
                self._replace(task_id, current.model_copy(update={"status": previous_status}))
            op.roll_back(exc)
            logger.warning("Move of task %s to %s rolled back: %s", task_id, status, exc)
            return op

        current = self.get(task_id)
        if current is not None and current.status == status:
            self._replace(task_id, updated)
        op.confirm()
        return op

    async def delete_task(self, task_id: str) -> None:
        await self._api.delete_task(task_id)
        self._remove(task_id)

    @property
    def pending(self) -> list[PendingOperation]:
        return [op for op in self.operations if op.state is OperationState.pending]
