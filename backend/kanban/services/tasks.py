from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from kanban.models.board import Board
from kanban.models.enums import TaskStatus
from kanban.models.task import Task
from kanban.schemas.result import ActionResult, field_errors
from kanban.schemas.task import TaskAssign, TaskCreate, TaskStatusUpdate, TaskUpdate
from kanban.services.queries import as_uuid, task_to_out
from kanban.services.views import (
    DASHBOARD_VIEW,
    ORPHANED_TASKS_VIEW,
    ViewPublisher,
    board_view,
    invalidate,
)


logger = logging.getLogger(__name__)


def _task_view(board_id: uuid.UUID | None) -> str:
    return board_view(board_id) if board_id is not None else ORPHANED_TASKS_VIEW


async def create_task(
    db: AsyncSession,
    data: Mapping[str, Any],
    *,
    publisher: ViewPublisher | None = None,
) -> ActionResult:
    try:
        payload = TaskCreate.model_validate(data)
    except ValidationError as exc:
        return ActionResult.invalid("Failed to create task.", field_errors(exc))

    try:
        if await db.get(Board, payload.board_id) is None:
            return ActionResult.invalid("Failed to create task.", {"board_id": ["Board not found."]})

        task = Task(
            board_id=payload.board_id,
            title=payload.title,
            description=payload.description,
            status=payload.status,
            priority=payload.priority,
            assigned_to=payload.assigned_to,
            due_date=payload.due_date,
        )
        db.add(task)
        await db.commit()
        await db.refresh(task)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Database error while creating task")
        return ActionResult.failed("Database Error: Failed to create task.")

    logger.info("Created task %s on board %s", task.id, task.board_id)
    await invalidate(publisher, DASHBOARD_VIEW, board_view(task.board_id))
    return ActionResult.ok(task_to_out(task), status_code=201)


async def update_task(
    db: AsyncSession,
    task_id: uuid.UUID | str,
    data: Mapping[str, Any],
    *,
    publisher: ViewPublisher | None = None,
) -> ActionResult:
    try:
        payload = TaskUpdate.model_validate(data)
    except ValidationError as exc:
        return ActionResult.invalid("Failed to update task.", field_errors(exc))

    task_id = as_uuid(task_id)
    if task_id is None:
        return ActionResult.not_found("Task not found.")

    try:
        task = await db.get(Task, task_id)
        if task is None:
            return ActionResult.not_found("Task not found.")

        for field in payload.model_fields_set:
            value = getattr(payload, field)
            if value is not None:
                setattr(task, field, value)

        await db.commit()
        await db.refresh(task)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Database error while updating task %s", task_id)
        return ActionResult.failed("Database Error: Failed to update task.")

    await invalidate(publisher, DASHBOARD_VIEW, _task_view(task.board_id))
    return ActionResult.ok(task_to_out(task))


async def update_task_status(
    db: AsyncSession,
    task_id: uuid.UUID | str,
    status: TaskStatus | str,
    *,
    publisher: ViewPublisher | None = None,
) -> ActionResult:
    """Move a task to another column.

    Any status may follow any other; concurrent moves of the same task are
    resolved by the last write.
    """
    try:
        payload = TaskStatusUpdate.model_validate({"status": status})
    except ValidationError as exc:
        return ActionResult.invalid("Failed to update task status.", field_errors(exc))

    task_id = as_uuid(task_id)
    if task_id is None:
        return ActionResult.not_found("Task not found.")

    try:
        task = await db.get(Task, task_id)
        if task is None:
            return ActionResult.not_found("Task not found.")

        task.status = payload.status
        await db.commit()
        await db.refresh(task)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Database error while updating status of task %s", task_id)
        return ActionResult.failed("Database Error: Failed to update task status.")

    await invalidate(publisher, DASHBOARD_VIEW, _task_view(task.board_id))
    return ActionResult.ok(task_to_out(task))


async def assign_task_to_board(
    db: AsyncSession,
    task_id: uuid.UUID | str,
    board_id: uuid.UUID | str,
    *,
    publisher: ViewPublisher | None = None,
) -> ActionResult:
    try:
        payload = TaskAssign.model_validate({"board_id": board_id})
    except ValidationError as exc:
        return ActionResult.invalid("Failed to assign task to board.", field_errors(exc))

    task_id = as_uuid(task_id)
    if task_id is None:
        return ActionResult.not_found("Task not found.")

    try:
        task = await db.get(Task, task_id)
        if task is None:
            return ActionResult.not_found("Task not found.")
        if await db.get(Board, payload.board_id) is None:
            return ActionResult.invalid("Failed to assign task to board.", {"board_id": ["Board not found."]})

        previous_board_id = task.board_id
        task.board_id = payload.board_id
        await db.commit()
        await db.refresh(task)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Database error while assigning task %s to board %s", task_id, board_id)
        return ActionResult.failed("Database Error: Failed to assign task to board.")

    views = [DASHBOARD_VIEW, ORPHANED_TASKS_VIEW, board_view(payload.board_id)]
    if previous_board_id is not None and previous_board_id != payload.board_id:
        views.append(board_view(previous_board_id))
    await invalidate(publisher, *views)
    return ActionResult.ok(task_to_out(task))


async def delete_task(
    db: AsyncSession,
    task_id: uuid.UUID | str,
    *,
    publisher: ViewPublisher | None = None,
) -> ActionResult:
    task_id = as_uuid(task_id)
    if task_id is None:
        return ActionResult.not_found("Task not found.")

    try:
        task = await db.get(Task, task_id)
        if task is None:
            return ActionResult.not_found("Task not found.")

        board_id = task.board_id
        await db.delete(task)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Database error while deleting task %s", task_id)
        return ActionResult.failed("Database Error: Failed to delete task.")

    logger.info("Deleted task %s", task_id)
    await invalidate(publisher, DASHBOARD_VIEW, _task_view(board_id))
    return ActionResult.ok({"task_id": task_id}, message="Task deleted.")
