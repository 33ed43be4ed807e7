from __future__ import annotations

import argparse
import asyncio
from datetime import datetime, timezone

from dotenv import load_dotenv
from sqlalchemy import delete, func, select

from kanban.config import settings
from kanban.db import Database
from kanban.models.board import Board
from kanban.models.enums import TaskPriority, TaskStatus
from kanban.models.task import Task

load_dotenv()


def _due(day: str) -> datetime:
    return datetime.fromisoformat(day).replace(tzinfo=timezone.utc)


# name, description, color, [(title, description, status, priority, assigned_to, due_date)]
SAMPLE_BOARDS = [
    (
        "Marketing Campaign",
        "Q1 2024 marketing initiatives and campaigns",
        "#3B82F6",
        [
            ("Design landing page mockups", "Create wireframes and high-fidelity mockups for the new landing page",
             TaskStatus.TODO, TaskPriority.HIGH, "Alice Smith", _due("2024-02-15")),
            ("Write blog post content", "Draft content for the Q1 product announcement blog post",
             TaskStatus.IN_PROGRESS, TaskPriority.MEDIUM, "Bob Johnson", None),
            ("Social media strategy", "Develop social media content calendar for March",
             TaskStatus.DONE, TaskPriority.LOW, "Carol Davis", None),
        ],
    ),
    (
        "Product Development",
        "New feature development and improvements",
        "#10B981",
        [
            ("Implement user authentication", "Add login/logout functionality with JWT tokens",
             TaskStatus.TODO, TaskPriority.HIGH, "David Wilson", _due("2024-02-20")),
            ("API documentation", "Document all REST API endpoints with examples",
             TaskStatus.IN_PROGRESS, TaskPriority.MEDIUM, "Eva Brown", None),
            ("Database optimization", "Optimize slow queries and add proper indexes",
             TaskStatus.TODO, TaskPriority.MEDIUM, None, None),
        ],
    ),
    (
        "Design System",
        "UI/UX design and component library",
        "#8B5CF6",
        [
            ("Create button components", "Design and implement reusable button components",
             TaskStatus.DONE, TaskPriority.HIGH, "Frank Miller", None),
            ("Color palette refinement", "Update brand colors and ensure accessibility compliance",
             TaskStatus.IN_PROGRESS, TaskPriority.LOW, "Grace Lee", None),
        ],
    ),
    (
        "QA & Testing",
        "Quality assurance and test automation",
        "#F59E0B",
        [
            ("Write unit tests for auth module", "Cover all authentication endpoints with tests",
             TaskStatus.TODO, TaskPriority.HIGH, "Tom Wilson", _due("2024-02-18")),
            ("Automated E2E test suite", "Set up Cypress for end-to-end testing",
             TaskStatus.IN_PROGRESS, TaskPriority.HIGH, "Sarah Connor", None),
            ("Security audit", None, TaskStatus.DONE, TaskPriority.HIGH, "Rachel Green", None),
        ],
    ),
    (
        "DevOps & Infrastructure",
        "CI/CD, deployment, and infrastructure management",
        "#EF4444",
        [
            ("Set up CI/CD pipeline", None, TaskStatus.DONE, TaskPriority.HIGH, "John DevOps", None),
            ("Kubernetes migration", None, TaskStatus.IN_PROGRESS, TaskPriority.HIGH, "Lisa Kumar", None),
            ("Database backup automation", None, TaskStatus.TODO, TaskPriority.MEDIUM, "Chris Evans", None),
        ],
    ),
    (
        "Customer Support",
        "Customer tickets and support requests",
        "#EC4899",
        [
            ("Critical bug - Login issue", None, TaskStatus.IN_PROGRESS, TaskPriority.HIGH, "Support Lead", None),
            ("Update knowledge base", None, TaskStatus.TODO, TaskPriority.MEDIUM, "Tech Writer", None),
            ("Customer feedback analysis", None, TaskStatus.DONE, TaskPriority.MEDIUM, "Support Analyst", None),
        ],
    ),
]


async def seed(database: Database, *, reset: bool = False) -> int:
    created = 0
    async with database.session() as db:
        if reset:
            await db.execute(delete(Task))
            await db.execute(delete(Board))
            await db.commit()

        existing = (await db.execute(select(func.count(Board.id)))).scalar_one()
        if existing:
            print(f"{existing} board(s) already present. Skipping seed (use --reset to replace them).")
            return 0

        for name, description, color, tasks in SAMPLE_BOARDS:
            board = Board(name=name, description=description, color=color)
            db.add(board)
            await db.flush()
            for title, task_description, status, priority, assigned_to, due_date in tasks:
                db.add(
                    Task(
                        board_id=board.id,
                        title=title,
                        description=task_description,
                        status=status,
                        priority=priority,
                        assigned_to=assigned_to,
                        due_date=due_date,
                    )
                )
            created += 1

        await db.commit()
    print(f"Seeded {created} board(s).")
    return created


async def main(reset: bool) -> None:
    database = Database(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    try:
        await seed(database, reset=reset)
    finally:
        await database.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed sample boards and tasks.")
    parser.add_argument("--reset", action="store_true", help="delete every board and task first")
    args = parser.parse_args()
    asyncio.run(main(args.reset))
