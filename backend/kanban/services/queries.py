from __future__ import annotations

import logging
import math
import uuid

from sqlalchemy import case, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from kanban.models.board import Board
from kanban.models.enums import TaskPriority, TaskStatus
from kanban.models.task import Task
from kanban.schemas.board import BoardOut, BoardPage
from kanban.schemas.dashboard import DashboardStats, TaskGroup
from kanban.schemas.task import TaskOut


logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = 10


class QueryError(RuntimeError):
    """A read path could not be served because the database failed."""


STATUS_ORDER = case(
    {TaskStatus.TODO: 0, TaskStatus.IN_PROGRESS: 1, TaskStatus.DONE: 2},
    value=Task.status,
    else_=3,
)
# Unset priority sorts ahead of HIGH, matching PostgreSQL's NULLS FIRST for DESC.
PRIORITY_ORDER_DESC = case(
    {TaskPriority.HIGH: 1, TaskPriority.MEDIUM: 2, TaskPriority.LOW: 3},
    value=Task.priority,
    else_=0,
)


def as_uuid(value: uuid.UUID | str) -> uuid.UUID | None:
    """Identifier as a UUID, or None when it cannot be one."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def board_to_out(board: Board, task_count: int = 0) -> BoardOut:
    return BoardOut(
        id=board.id,
        name=board.name,
        description=board.description,
        color=board.color,
        task_count=task_count or 0,
        created_at=board.created_at,
        updated_at=board.updated_at,
    )


def task_to_out(task: Task) -> TaskOut:
    return TaskOut(
        id=task.id,
        board_id=task.board_id,
        title=task.title,
        description=task.description,
        status=task.status,
        priority=task.priority,
        assigned_to=task.assigned_to,
        due_date=task.due_date,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def completion_rate(done_tasks: int, total_tasks: int) -> int:
    """Percentage of done tasks, rounded half up; 0 for an empty board set."""
    if total_tasks <= 0:
        return 0
    return (200 * done_tasks + total_tasks) // (2 * total_tasks)


def _task_count_column():
    return (
        select(func.count(Task.id))
        .where(Task.board_id == Board.id)
        .correlate(Board)
        .scalar_subquery()
        .label("task_count")
    )


def _board_search(query: str):
    return or_(
        Board.name.icontains(query, autoescape=True),
        Board.description.icontains(query, autoescape=True),
    )


async def fetch_filtered_boards(
    db: AsyncSession,
    query: str = "",
    page: int = 1,
    per_page: int = DEFAULT_PER_PAGE,
) -> BoardPage:
    page = max(page, 1)
    per_page = max(per_page, 1)

    count_stmt = select(func.count(Board.id))
    stmt = select(Board, _task_count_column())
    if query:
        count_stmt = count_stmt.where(_board_search(query))
        stmt = stmt.where(_board_search(query))
    stmt = (
        stmt.order_by(Board.updated_at.desc(), Board.created_at.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )

    try:
        total_count = (await db.execute(count_stmt)).scalar_one()
        orphaned_count = (
            await db.execute(select(func.count(Task.id)).where(Task.board_id.is_(None)))
        ).scalar_one()
        rows = (await db.execute(stmt)).all()
    except SQLAlchemyError as exc:
        logger.exception("Failed to fetch boards")
        raise QueryError("Failed to fetch boards.") from exc

    return BoardPage(
        boards=[board_to_out(board, count) for board, count in rows],
        page=page,
        per_page=per_page,
        total_count=total_count,
        total_pages=math.ceil(total_count / per_page),
        orphaned_tasks_count=orphaned_count,
    )


async def fetch_board_by_id(db: AsyncSession, board_id: uuid.UUID) -> BoardOut | None:
    try:
        row = (
            await db.execute(select(Board, _task_count_column()).where(Board.id == board_id))
        ).one_or_none()
    except SQLAlchemyError as exc:
        logger.exception("Failed to fetch board %s", board_id)
        raise QueryError("Failed to fetch board.") from exc
    if row is None:
        return None
    board, count = row
    return board_to_out(board, count)


async def fetch_all_boards(db: AsyncSession) -> list[BoardOut]:
    try:
        rows = (await db.execute(select(Board, _task_count_column()).order_by(Board.name))).all()
    except SQLAlchemyError as exc:
        logger.exception("Failed to fetch boards")
        raise QueryError("Failed to fetch boards.") from exc
    return [board_to_out(board, count) for board, count in rows]


async def fetch_filtered_tasks(db: AsyncSession, board_id: uuid.UUID, query: str = "") -> list[TaskOut]:
    stmt = select(Task).where(Task.board_id == board_id)
    if query:
        stmt = stmt.where(
            or_(
                Task.title.icontains(query, autoescape=True),
                Task.description.icontains(query, autoescape=True),
                Task.assigned_to.icontains(query, autoescape=True),
            )
        )
    stmt = stmt.order_by(STATUS_ORDER, PRIORITY_ORDER_DESC, Task.created_at.desc())

    try:
        tasks = (await db.execute(stmt)).scalars().all()
    except SQLAlchemyError as exc:
        logger.exception("Failed to fetch tasks for board %s", board_id)
        raise QueryError("Failed to fetch tasks.") from exc
    return [task_to_out(t) for t in tasks]


async def fetch_orphaned_tasks(db: AsyncSession) -> list[TaskOut]:
    stmt = select(Task).where(Task.board_id.is_(None)).order_by(STATUS_ORDER, Task.created_at.desc())
    try:
        tasks = (await db.execute(stmt)).scalars().all()
    except SQLAlchemyError as exc:
        logger.exception("Failed to fetch orphaned tasks")
        raise QueryError("Failed to fetch orphaned tasks.") from exc
    return [task_to_out(t) for t in tasks]


async def fetch_dashboard_stats(db: AsyncSession) -> DashboardStats:
    try:
        total_boards = (await db.execute(select(func.count(Board.id)))).scalar_one()
        by_status = dict(
            (await db.execute(select(Task.status, func.count(Task.id)).group_by(Task.status))).all()
        )
    except SQLAlchemyError:
        logger.exception("Failed to fetch dashboard stats")
        return DashboardStats()

    total_tasks = sum(by_status.values())
    done_tasks = by_status.get(TaskStatus.DONE, 0)
    return DashboardStats(
        total_boards=total_boards,
        total_tasks=total_tasks,
        in_progress_tasks=by_status.get(TaskStatus.IN_PROGRESS, 0),
        completion_rate=completion_rate(done_tasks, total_tasks),
    )


async def fetch_tasks_grouped_by_board(db: AsyncSession) -> list[TaskGroup]:
    """Every task under its board, the no-board group first.

    Boards without tasks are left out; the no-board group is always present,
    even when empty.
    """
    try:
        boards = (await db.execute(select(Board))).scalars().all()
        tasks = (
            await db.execute(select(Task).order_by(STATUS_ORDER, Task.created_at.desc()))
        ).scalars().all()
    except SQLAlchemyError as exc:
        logger.exception("Failed to fetch tasks grouped by board")
        raise QueryError("Failed to fetch tasks grouped by board.") from exc

    by_board: dict[uuid.UUID | None, list[TaskOut]] = {None: []}
    for board in boards:
        by_board[board.id] = []
    for task in tasks:
        bucket = by_board.get(task.board_id)
        if bucket is not None:
            bucket.append(task_to_out(task))

    counts = {board_id: len(items) for board_id, items in by_board.items()}
    groups = [TaskGroup(board=None, tasks=by_board[None])]
    for board in sorted(boards, key=lambda b: b.name.casefold()):
        if by_board[board.id]:
            groups.append(TaskGroup(board=board_to_out(board, counts[board.id]), tasks=by_board[board.id]))
    return groups
