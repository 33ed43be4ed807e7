from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

import httpx
from sqlalchemy import func, select
from sqlalchemy.pool import StaticPool

from kanban.db import Database
from kanban.main import create_app
from kanban.models.board import Board
from kanban.models.enums import TaskPriority, TaskStatus
from kanban.models.task import Task


BASE_TIME = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


class RecordingPublisher:
    def __init__(self) -> None:
        self.published: list[list[str]] = []

    async def publish(self, views) -> None:
        self.published.append(sorted(set(views)))

    @property
    def views(self) -> set[str]:
        return {view for batch in self.published for view in batch}


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.database = Database(
            "sqlite+aiosqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        await self.database.create_all()
        self.db = self.database.session()
        self.publisher = RecordingPublisher()

    async def asyncTearDown(self) -> None:
        await self.db.close()
        await self.database.dispose()

    async def make_board(self, name: str, description: str | None = None, *, minutes: int = 0) -> Board:
        stamp = BASE_TIME + timedelta(minutes=minutes)
        board = Board(name=name, description=description, created_at=stamp, updated_at=stamp)
        self.db.add(board)
        await self.db.commit()
        return board

    async def make_task(
        self,
        board: Board | None,
        title: str,
        *,
        status: TaskStatus = TaskStatus.TODO,
        priority: TaskPriority | None = None,
        assigned_to: str | None = None,
        description: str | None = None,
        minutes: int = 0,
    ) -> Task:
        stamp = BASE_TIME + timedelta(minutes=minutes)
        task = Task(
            board_id=board.id if board is not None else None,
            title=title,
            description=description,
            status=status,
            priority=priority,
            assigned_to=assigned_to,
            created_at=stamp,
            updated_at=stamp,
        )
        self.db.add(task)
        await self.db.commit()
        return task

    async def count_tasks(self, *criteria) -> int:
        async with self.database.session() as check:
            stmt = select(func.count(Task.id))
            if criteria:
                stmt = stmt.where(*criteria)
            return (await check.execute(stmt)).scalar_one()

    async def load_task(self, task_id) -> Task | None:
        async with self.database.session() as check:
            return await check.get(Task, task_id)

    async def load_board(self, board_id) -> Board | None:
        async with self.database.session() as check:
            return await check.get(Board, board_id)


class ApiTestCase(DatabaseTestCase):
    async def asyncSetUp(self) -> None:
        await super().asyncSetUp()
        app = create_app(database=self.database, publisher=self.publisher)
        self.client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")

    async def asyncTearDown(self) -> None:
        await self.client.aclose()
        await super().asyncTearDown()
