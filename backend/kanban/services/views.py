from __future__ import annotations

import asyncio
import json
import logging
import uuid
from collections.abc import Callable, Iterable
from typing import Protocol

from kanban.integrations.redis import get_publisher_client
from kanban.websocket.manager import ConnectionManager, manager as default_manager


logger = logging.getLogger(__name__)

CHANNEL = "kanban_view_invalidations"

DASHBOARD_VIEW = "dashboard"
ORPHANED_TASKS_VIEW = "orphaned-tasks"


def board_view(board_id: uuid.UUID | str) -> str:
    return f"board:{board_id}"


def invalidation_message(views: Iterable[str]) -> dict:
    return {"type": "invalidate", "views": sorted(set(views))}


class ViewPublisher(Protocol):
    async def publish(self, views: Iterable[str]) -> None: ...


class LocalViewPublisher:
    """Pushes invalidations straight to this process's websocket clients."""

    def __init__(self, connections: ConnectionManager = default_manager) -> None:
        self._connections = connections

    async def publish(self, views: Iterable[str]) -> None:
        await self._connections.broadcast(invalidation_message(views))


class RedisViewPublisher:
    """Publishes invalidations on a Redis channel shared by every API worker."""

    def __init__(self, client_factory: Callable = get_publisher_client, channel: str = CHANNEL) -> None:
        self._client_factory = client_factory
        self._channel = channel

    async def publish(self, views: Iterable[str]) -> None:
        client = self._client_factory()
        payload = json.dumps(invalidation_message(views))
        await asyncio.to_thread(client.publish, self._channel, payload)


async def invalidate(publisher: ViewPublisher | None, *views: str) -> None:
    """Announce stale views after a commit; a publishing failure is only logged."""
    keys = [v for v in views if v]
    if publisher is None or not keys:
        return
    try:
        await publisher.publish(keys)
    except Exception:
        logger.exception("Failed to publish view invalidation for %s", sorted(set(keys)))
