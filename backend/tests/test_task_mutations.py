import unittest
import uuid

from kanban.models.enums import TaskPriority, TaskStatus
from kanban.models.task import Task
from kanban.services.tasks import (
    assign_task_to_board,
    create_task,
    delete_task,
    update_task,
    update_task_status,
)
from kanban.services.views import DASHBOARD_VIEW, ORPHANED_TASKS_VIEW, board_view
from tests.support import DatabaseTestCase


class TestCreateTask(DatabaseTestCase):
    async def asyncSetUp(self) -> None:
        await super().asyncSetUp()
        self.board = await self.make_board("Ops")

    async def test_creates_task_with_defaults(self) -> None:
        result = await create_task(
            self.db,
            {"board_id": str(self.board.id), "title": "Fix CI", "priority": "high", "assigned_to": ""},
            publisher=self.publisher,
        )

        self.assertTrue(result.success)
        self.assertEqual(result.status_code, 201)
        self.assertEqual(result.data.status, TaskStatus.TODO)
        self.assertEqual(result.data.priority, TaskPriority.HIGH)
        self.assertIsNone(result.data.assigned_to)
        self.assertEqual(self.publisher.views, {DASHBOARD_VIEW, board_view(self.board.id)})

        stored = await self.load_task(result.data.id)
        self.assertEqual(stored.board_id, self.board.id)
        self.assertEqual(stored.title, "Fix CI")

    async def test_missing_title_is_a_field_error(self) -> None:
        result = await create_task(self.db, {"board_id": str(self.board.id), "title": ""})

        self.assertFalse(result.success)
        self.assertEqual(result.status_code, 400)
        self.assertEqual(result.errors["title"], ["Task title is required"])
        self.assertEqual(await self.count_tasks(), 0)

    async def test_title_longer_than_limit_is_rejected(self) -> None:
        result = await create_task(self.db, {"board_id": str(self.board.id), "title": "x" * 201})

        self.assertFalse(result.success)
        self.assertIn("title", result.errors)

    async def test_unknown_status_token_is_rejected(self) -> None:
        result = await create_task(self.db, {"board_id": str(self.board.id), "title": "Fix CI", "status": "blocked"})

        self.assertFalse(result.success)
        self.assertIn("status", result.errors)
        self.assertEqual(await self.count_tasks(), 0)

    async def test_board_must_exist(self) -> None:
        result = await create_task(self.db, {"board_id": str(uuid.uuid4()), "title": "Fix CI"})

        self.assertFalse(result.success)
        self.assertEqual(result.errors, {"board_id": ["Board not found."]})
        self.assertEqual(await self.count_tasks(), 0)

    async def test_board_is_required(self) -> None:
        result = await create_task(self.db, {"title": "Fix CI"})

        self.assertFalse(result.success)
        self.assertIn("board_id", result.errors)


class TestUpdateTaskStatus(DatabaseTestCase):
    async def asyncSetUp(self) -> None:
        await super().asyncSetUp()
        self.board = await self.make_board("Ops")
        self.task = await self.make_task(self.board, "Fix CI")

    async def test_any_status_may_follow_any_other(self) -> None:
        for status in ("done", "todo", "in_progress", "done", "in_progress", "todo"):
            result = await update_task_status(self.db, self.task.id, status)
            self.assertTrue(result.success, status)
            stored = await self.load_task(self.task.id)
            self.assertEqual(stored.status.token, status)

    async def test_move_invalidates_board_and_dashboard(self) -> None:
        await update_task_status(self.db, self.task.id, TaskStatus.IN_PROGRESS, publisher=self.publisher)

        self.assertEqual(self.publisher.views, {DASHBOARD_VIEW, board_view(self.board.id)})

    async def test_unknown_task_is_not_found_and_nothing_is_written(self) -> None:
        result = await update_task_status(self.db, uuid.uuid4(), "done", publisher=self.publisher)

        self.assertFalse(result.success)
        self.assertEqual(result.status_code, 404)
        self.assertEqual(result.message, "Task not found.")
        self.assertEqual(self.publisher.published, [])
        self.assertEqual(await self.count_tasks(Task.status == TaskStatus.DONE), 0)

    async def test_invalid_status_is_rejected(self) -> None:
        result = await update_task_status(self.db, self.task.id, "archived")

        self.assertFalse(result.success)
        self.assertEqual(result.status_code, 400)
        self.assertIn("status", result.errors)
        stored = await self.load_task(self.task.id)
        self.assertEqual(stored.status, TaskStatus.TODO)


class TestUpdateTask(DatabaseTestCase):
    async def test_only_supplied_fields_change(self) -> None:
        board = await self.make_board("Ops")
        task = await self.make_task(board, "Fix CI", priority=TaskPriority.LOW, assigned_to="dana")

        result = await update_task(self.db, task.id, {"title": "Fix CI pipeline", "priority": "medium"})

        self.assertTrue(result.success)
        stored = await self.load_task(task.id)
        self.assertEqual(stored.title, "Fix CI pipeline")
        self.assertEqual(stored.priority, TaskPriority.MEDIUM)
        self.assertEqual(stored.assigned_to, "dana")
        self.assertEqual(stored.status, TaskStatus.TODO)

    async def test_unknown_task(self) -> None:
        result = await update_task(self.db, uuid.uuid4(), {"title": "Anything"})

        self.assertEqual(result.status_code, 404)


class TestAssignTaskToBoard(DatabaseTestCase):
    async def asyncSetUp(self) -> None:
        await super().asyncSetUp()
        self.ops = await self.make_board("Ops")
        self.platform = await self.make_board("Platform")

    async def test_orphaned_task_is_adopted(self) -> None:
        task = await self.make_task(None, "Loose end")

        result = await assign_task_to_board(self.db, task.id, str(self.platform.id), publisher=self.publisher)

        self.assertTrue(result.success)
        self.assertEqual((await self.load_task(task.id)).board_id, self.platform.id)
        self.assertEqual(
            self.publisher.views,
            {DASHBOARD_VIEW, ORPHANED_TASKS_VIEW, board_view(self.platform.id)},
        )

    async def test_move_between_boards_invalidates_both(self) -> None:
        task = await self.make_task(self.ops, "Fix CI")

        await assign_task_to_board(self.db, task.id, self.platform.id, publisher=self.publisher)

        self.assertIn(board_view(self.ops.id), self.publisher.views)
        self.assertIn(board_view(self.platform.id), self.publisher.views)

    async def test_target_board_must_exist(self) -> None:
        task = await self.make_task(self.ops, "Fix CI")

        result = await assign_task_to_board(self.db, task.id, uuid.uuid4())

        self.assertFalse(result.success)
        self.assertEqual(result.errors, {"board_id": ["Board not found."]})
        self.assertEqual((await self.load_task(task.id)).board_id, self.ops.id)

    async def test_accepts_string_ids(self) -> None:
        task = await self.make_task(None, "Loose end")

        result = await assign_task_to_board(self.db, str(task.id), str(self.ops.id))

        self.assertTrue(result.success)
        self.assertEqual((await self.load_task(task.id)).board_id, self.ops.id)

    async def test_malformed_task_id_is_not_found(self) -> None:
        result = await assign_task_to_board(self.db, "not-a-task", self.ops.id)

        self.assertEqual(result.status_code, 404)
        self.assertEqual(result.message, "Task not found.")

    async def test_task_must_exist(self) -> None:
        result = await assign_task_to_board(self.db, uuid.uuid4(), self.ops.id)

        self.assertEqual(result.status_code, 404)


class TestDeleteTask(DatabaseTestCase):
    async def test_deletes_the_task(self) -> None:
        board = await self.make_board("Ops")
        task = await self.make_task(board, "Fix CI")
        keep = await self.make_task(board, "Ship release")

        result = await delete_task(self.db, task.id, publisher=self.publisher)

        self.assertTrue(result.success)
        self.assertEqual(result.data, {"task_id": task.id})
        self.assertIsNone(await self.load_task(task.id))
        self.assertIsNotNone(await self.load_task(keep.id))
        self.assertEqual(self.publisher.views, {DASHBOARD_VIEW, board_view(board.id)})

    async def test_unknown_task(self) -> None:
        result = await delete_task(self.db, uuid.uuid4())

        self.assertFalse(result.success)
        self.assertEqual(result.message, "Task not found.")


if __name__ == "__main__":
    unittest.main()
