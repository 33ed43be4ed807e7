from __future__ import annotations

import uuid
from typing import Any

import httpx


class KanbanAPIError(Exception):
    def __init__(self, status_code: int, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload

    @property
    def errors(self) -> dict[str, list[str]]:
        if isinstance(self.payload, dict):
            return self.payload.get("errors") or {}
        return {}


class KanbanClient:
    """Thin async client for the board API; mutations return the result's ``data``."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> KanbanClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        res = await self._client.request(method, f"/api{path}", **kwargs)
        try:
            payload = res.json()
        except ValueError:
            payload = None
        if res.is_error:
            message = res.reason_phrase
            if isinstance(payload, dict):
                message = payload.get("message") or payload.get("detail") or message
            raise KanbanAPIError(res.status_code, str(message), payload)
        return payload

    async def _mutate(self, method: str, path: str, **kwargs: Any) -> Any:
        payload = await self._request(method, path, **kwargs)
        return payload.get("data") if isinstance(payload, dict) else payload

    # boards

    async def list_boards(self, query: str = "", page: int = 1, per_page: int = 10) -> dict:
        return await self._request("GET", "/boards", params={"query": query, "page": page, "per_page": per_page})

    async def list_all_boards(self) -> list[dict]:
        return await self._request("GET", "/boards/all")

    async def get_board(self, board_id: uuid.UUID | str) -> dict:
        return await self._request("GET", f"/boards/{board_id}")

    async def create_board(self, data: dict[str, Any]) -> dict:
        return await self._mutate("POST", "/boards", json=data)

    async def update_board(self, board_id: uuid.UUID | str, data: dict[str, Any]) -> dict:
        return await self._mutate("PATCH", f"/boards/{board_id}", json=data)

    async def delete_board(
        self,
        board_id: uuid.UUID | str,
        disposition: str = "orphan",
        target_board_id: uuid.UUID | str | None = None,
    ) -> dict:
        params = {"disposition": disposition}
        if target_board_id is not None:
            params["target_board_id"] = str(target_board_id)
        return await self._mutate("DELETE", f"/boards/{board_id}", params=params)

    async def list_board_tasks(self, board_id: uuid.UUID | str, query: str = "") -> list[dict]:
        return await self._request("GET", f"/boards/{board_id}/tasks", params={"query": query})

    # tasks

    async def list_orphaned_tasks(self) -> list[dict]:
        return await self._request("GET", "/tasks/orphaned")

    async def create_task(self, data: dict[str, Any]) -> dict:
        return await self._mutate("POST", "/tasks", json=data)

    async def update_task(self, task_id: uuid.UUID | str, data: dict[str, Any]) -> dict:
        return await self._mutate("PATCH", f"/tasks/{task_id}", json=data)

    async def update_task_status(self, task_id: uuid.UUID | str, status: str) -> dict:
        return await self._mutate("PUT", f"/tasks/{task_id}/status", json={"status": status})

    async def assign_task_to_board(self, task_id: uuid.UUID | str, board_id: uuid.UUID | str) -> dict:
        return await self._mutate("PUT", f"/tasks/{task_id}/board", json={"board_id": str(board_id)})

    async def delete_task(self, task_id: uuid.UUID | str) -> dict:
        return await self._mutate("DELETE", f"/tasks/{task_id}")

    async def dashboard_stats(self) -> dict:
        return await self._request("GET", "/dashboard/stats")
