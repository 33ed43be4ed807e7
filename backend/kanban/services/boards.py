from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from kanban.models.board import Board
from kanban.models.enums import Disposition
from kanban.models.task import Task
from kanban.schemas.board import BoardCreate, BoardDelete, BoardUpdate
from kanban.schemas.result import ActionResult, field_errors
from kanban.services.queries import as_uuid, board_to_out
from kanban.services.views import (
    DASHBOARD_VIEW,
    ORPHANED_TASKS_VIEW,
    ViewPublisher,
    board_view,
    invalidate,
)


logger = logging.getLogger(__name__)


async def _task_count(db: AsyncSession, board_id: uuid.UUID) -> int:
    return (await db.execute(select(func.count(Task.id)).where(Task.board_id == board_id))).scalar_one()


async def create_board(
    db: AsyncSession,
    data: Mapping[str, Any],
    *,
    publisher: ViewPublisher | None = None,
) -> ActionResult:
    try:
        payload = BoardCreate.model_validate(data)
    except ValidationError as exc:
        return ActionResult.invalid("Failed to create board.", field_errors(exc))

    board = Board(name=payload.name, description=payload.description, color=payload.color)
    db.add(board)
    try:
        await db.commit()
        await db.refresh(board)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Database error while creating board")
        return ActionResult.failed("Database Error: Failed to create board.")

    logger.info("Created board %s", board.id)
    await invalidate(publisher, DASHBOARD_VIEW)
    return ActionResult.ok(board_to_out(board, 0), status_code=201)


async def update_board(
    db: AsyncSession,
    board_id: uuid.UUID | str,
    data: Mapping[str, Any],
    *,
    publisher: ViewPublisher | None = None,
) -> ActionResult:
    try:
        payload = BoardUpdate.model_validate(data)
    except ValidationError as exc:
        return ActionResult.invalid("Failed to update board.", field_errors(exc))

    board_id = as_uuid(board_id)
    if board_id is None:
        return ActionResult.not_found("Board not found.")

    try:
        board = await db.get(Board, board_id)
        if board is None:
            return ActionResult.not_found("Board not found.")

        for field in payload.model_fields_set:
            value = getattr(payload, field)
            if value is not None:
                setattr(board, field, value)

        await db.commit()
        await db.refresh(board)
        task_count = await _task_count(db, board.id)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Database error while updating board %s", board_id)
        return ActionResult.failed("Database Error: Failed to update board.")

    await invalidate(publisher, DASHBOARD_VIEW, board_view(board.id))
    return ActionResult.ok(board_to_out(board, task_count))


async def delete_board(
    db: AsyncSession,
    board_id: uuid.UUID | str,
    disposition: Disposition | str = Disposition.orphan,
    target_board_id: uuid.UUID | str | None = None,
    *,
    publisher: ViewPublisher | None = None,
) -> ActionResult:
    """Delete a board after deciding what happens to its tasks.

    ``orphan`` clears the tasks' board reference, ``transfer`` moves them to
    ``target_board_id`` and ``delete`` removes them. Every check runs before
    the first write, and the disposition and the board delete share one
    transaction.
    """
    try:
        request = BoardDelete.model_validate({"disposition": disposition, "target_board_id": target_board_id})
    except ValidationError as exc:
        return ActionResult.invalid("Failed to delete board.", field_errors(exc))

    disposition = request.disposition
    target_id = request.target_board_id
    board_id = as_uuid(board_id)
    if board_id is None:
        return ActionResult.not_found("Board not found.")

    try:
        board = await db.get(Board, board_id)
        if board is None:
            return ActionResult.not_found("Board not found.")

        if disposition is Disposition.transfer:
            if target_id is None:
                return ActionResult.invalid(
                    "Failed to delete board.",
                    {"target_board_id": ["A target board is required to transfer tasks."]},
                )
            if target_id == board_id:
                return ActionResult.invalid(
                    "Failed to delete board.",
                    {"target_board_id": ["Tasks cannot be transferred to the board being deleted."]},
                )
            if await db.get(Board, target_id) is None:
                return ActionResult.invalid(
                    "Failed to delete board.",
                    {"target_board_id": ["Target board not found."]},
                )

        if disposition is Disposition.transfer:
            stmt = update(Task).where(Task.board_id == board_id).values(board_id=target_id)
        elif disposition is Disposition.delete:
            stmt = delete(Task).where(Task.board_id == board_id)
        else:
            stmt = update(Task).where(Task.board_id == board_id).values(board_id=None)
        affected = (await db.execute(stmt)).rowcount

        await db.delete(board)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Database error while deleting board %s", board_id)
        return ActionResult.failed("Database Error: Failed to delete board.")

    logger.info(
        "Deleted board %s (%s, %d task(s) affected)", board_id, disposition.value, affected
    )

    views = [DASHBOARD_VIEW, board_view(board_id)]
    if disposition is Disposition.orphan:
        views.append(ORPHANED_TASKS_VIEW)
    elif disposition is Disposition.transfer:
        views.append(board_view(target_id))
    await invalidate(publisher, *views)

    return ActionResult.ok(
        {
            "board_id": board_id,
            "disposition": disposition.value,
            "affected_tasks": affected,
            "target_board_id": target_id if disposition is Disposition.transfer else None,
        },
        message="Board deleted.",
    )
