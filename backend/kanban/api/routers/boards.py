from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.responses import ORJSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from kanban.api.deps import get_view_publisher, result_response
from kanban.config import settings
from kanban.db import get_db
from kanban.models.enums import Disposition
from kanban.schemas.board import BoardOut, BoardPage
from kanban.schemas.task import TaskOut
from kanban.services import boards as board_service
from kanban.services.queries import (
    fetch_all_boards,
    fetch_board_by_id,
    fetch_filtered_boards,
    fetch_filtered_tasks,
)


router = APIRouter()


@router.get("", response_model=BoardPage)
async def list_boards(
    query: str = "",
    page: int = Query(1, ge=1),
    per_page: int | None = Query(None, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> BoardPage:
    per_page = per_page or settings.DEFAULT_PAGE_SIZE
    return await fetch_filtered_boards(db, query=query, page=page, per_page=per_page)


@router.get("/all", response_model=list[BoardOut])
async def list_all_boards(db: AsyncSession = Depends(get_db)) -> list[BoardOut]:
    return await fetch_all_boards(db)


@router.post("")
async def create_board(
    payload: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    publisher=Depends(get_view_publisher),
) -> ORJSONResponse:
    return result_response(await board_service.create_board(db, payload, publisher=publisher))


@router.get("/{board_id}", response_model=BoardOut)
async def get_board(board_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> BoardOut:
    board = await fetch_board_by_id(db, board_id)
    if board is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Board not found")
    return board


@router.patch("/{board_id}")
async def update_board(
    board_id: uuid.UUID,
    payload: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    publisher=Depends(get_view_publisher),
) -> ORJSONResponse:
    return result_response(await board_service.update_board(db, board_id, payload, publisher=publisher))


@router.delete("/{board_id}")
async def delete_board(
    board_id: uuid.UUID,
    disposition: str = Disposition.orphan.value,
    target_board_id: str | None = None,
    db: AsyncSession = Depends(get_db),
    publisher=Depends(get_view_publisher),
) -> ORJSONResponse:
    result = await board_service.delete_board(
        db, board_id, disposition, target_board_id, publisher=publisher
    )
    return result_response(result)


@router.get("/{board_id}/tasks", response_model=list[TaskOut])
async def list_board_tasks(
    board_id: uuid.UUID,
    query: str = "",
    db: AsyncSession = Depends(get_db),
) -> list[TaskOut]:
    return await fetch_filtered_tasks(db, board_id, query=query)
