from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import ORJSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from kanban.api.deps import get_view_publisher, result_response
from kanban.db import get_db
from kanban.schemas.dashboard import TaskGroup
from kanban.schemas.task import TaskOut
from kanban.services import tasks as task_service
from kanban.services.queries import fetch_orphaned_tasks, fetch_tasks_grouped_by_board


router = APIRouter()


@router.get("/orphaned", response_model=list[TaskOut])
async def list_orphaned_tasks(db: AsyncSession = Depends(get_db)) -> list[TaskOut]:
    return await fetch_orphaned_tasks(db)


@router.get("/grouped", response_model=list[TaskGroup])
async def list_tasks_grouped(db: AsyncSession = Depends(get_db)) -> list[TaskGroup]:
    return await fetch_tasks_grouped_by_board(db)


@router.post("")
async def create_task(
    payload: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    publisher=Depends(get_view_publisher),
) -> ORJSONResponse:
    return result_response(await task_service.create_task(db, payload, publisher=publisher))


@router.patch("/{task_id}")
async def update_task(
    task_id: uuid.UUID,
    payload: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    publisher=Depends(get_view_publisher),
) -> ORJSONResponse:
    return result_response(await task_service.update_task(db, task_id, payload, publisher=publisher))


@router.put("/{task_id}/status")
async def update_task_status(
    task_id: uuid.UUID,
    payload: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    publisher=Depends(get_view_publisher),
) -> ORJSONResponse:
    result = await task_service.update_task_status(db, task_id, payload.get("status"), publisher=publisher)
    return result_response(result)


@router.put("/{task_id}/board")
async def assign_task_to_board(
    task_id: uuid.UUID,
    payload: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    publisher=Depends(get_view_publisher),
) -> ORJSONResponse:
    result = await task_service.assign_task_to_board(db, task_id, payload.get("board_id"), publisher=publisher)
    return result_response(result)


@router.delete("/{task_id}")
async def delete_task(
    task_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    publisher=Depends(get_view_publisher),
) -> ORJSONResponse:
    return result_response(await task_service.delete_task(db, task_id, publisher=publisher))
