import unittest
import uuid

from kanban.models.enums import TaskStatus
from tests.support import ApiTestCase


class TestBoardEndpoints(ApiTestCase):
    async def test_create_board(self) -> None:
        res = await self.client.post("/api/boards", json={"name": "Ops", "description": ""})

        self.assertEqual(res.status_code, 201)
        body = res.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["data"]["name"], "Ops")
        self.assertIsNone(body["data"]["description"])
        self.assertEqual(body["data"]["task_count"], 0)
        self.assertNotIn("errors", body)

    async def test_create_board_without_name(self) -> None:
        res = await self.client.post("/api/boards", json={"name": ""})

        self.assertEqual(res.status_code, 400)
        body = res.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["errors"], {"name": ["Board name is required"]})

    async def test_list_and_get(self) -> None:
        board = await self.make_board("Ops")
        await self.make_task(None, "loose")

        listing = (await self.client.get("/api/boards", params={"query": "op"})).json()
        self.assertEqual([b["name"] for b in listing["boards"]], ["Ops"])
        self.assertEqual(listing["orphaned_tasks_count"], 1)

        res = await self.client.get(f"/api/boards/{board.id}")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["id"], str(board.id))

        missing = await self.client.get(f"/api/boards/{uuid.uuid4()}")
        self.assertEqual(missing.status_code, 404)

    async def test_transfer_to_itself_is_a_bad_request(self) -> None:
        board = await self.make_board("Ops")
        await self.make_task(board, "Fix CI")

        res = await self.client.delete(
            f"/api/boards/{board.id}",
            params={"disposition": "transfer", "target_board_id": str(board.id)},
        )

        self.assertEqual(res.status_code, 400)
        self.assertIn("target_board_id", res.json()["errors"])
        self.assertIsNotNone(await self.load_board(board.id))

    async def test_delete_with_orphan_disposition(self) -> None:
        board = await self.make_board("Ops")
        await self.make_task(board, "Fix CI")

        res = await self.client.delete(f"/api/boards/{board.id}")

        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["message"], "Board deleted.")
        self.assertEqual(body["data"]["affected_tasks"], 1)
        orphaned = (await self.client.get("/api/tasks/orphaned")).json()
        self.assertEqual([t["title"] for t in orphaned], ["Fix CI"])


class TestTaskEndpoints(ApiTestCase):
    async def test_status_is_exchanged_as_lower_case_token(self) -> None:
        board = await self.make_board("Ops")
        task = await self.make_task(board, "Fix CI")

        res = await self.client.put(f"/api/tasks/{task.id}/status", json={"status": "in_progress"})

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["data"]["status"], "in_progress")
        self.assertEqual((await self.load_task(task.id)).status, TaskStatus.IN_PROGRESS)

        tasks = (await self.client.get(f"/api/boards/{board.id}/tasks")).json()
        self.assertEqual(tasks[0]["status"], "in_progress")

    async def test_status_of_unknown_task(self) -> None:
        res = await self.client.put(f"/api/tasks/{uuid.uuid4()}/status", json={"status": "done"})

        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json(), {"success": False, "message": "Task not found."})

    async def test_create_task_field_errors(self) -> None:
        board = await self.make_board("Ops")

        res = await self.client.post("/api/tasks", json={"board_id": str(board.id), "title": "", "priority": "urgent"})

        self.assertEqual(res.status_code, 400)
        errors = res.json()["errors"]
        self.assertEqual(errors["title"], ["Task title is required"])
        self.assertIn("priority", errors)

    async def test_grouped_and_stats(self) -> None:
        board = await self.make_board("Ops")
        await self.make_task(board, "a", status=TaskStatus.DONE)
        await self.make_task(board, "b")

        groups = (await self.client.get("/api/tasks/grouped")).json()
        self.assertIsNone(groups[0]["board"])
        self.assertEqual(groups[1]["board"]["name"], "Ops")

        stats = (await self.client.get("/api/dashboard/stats")).json()
        self.assertEqual(stats, {"total_boards": 1, "total_tasks": 2, "in_progress_tasks": 0, "completion_rate": 50})

    async def test_health(self) -> None:
        res = await self.client.get("/health")

        self.assertEqual(res.json(), {"status": "ok"})


if __name__ == "__main__":
    unittest.main()
