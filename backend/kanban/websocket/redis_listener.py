from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable

from kanban.integrations.redis import create_subscriber_client
from kanban.services.views import CHANNEL
from kanban.websocket.manager import ConnectionManager, manager


logger = logging.getLogger(__name__)


async def start_invalidation_listener(
    *,
    client_factory: Callable = create_subscriber_client,
    connections: ConnectionManager = manager,
    retry_delay: float = 2.0,
) -> None:
    while True:
        pubsub = None
        client = None
        try:
            client = client_factory()
            pubsub = client.pubsub()
            await pubsub.subscribe(CHANNEL)
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                raw = message.get("data")
                if not raw:
                    continue
                try:
                    await connections.broadcast(json.loads(raw))
                except Exception:
                    logger.exception("Failed to process invalidation message")
        except asyncio.CancelledError:
            break
        except Exception:
            logger.exception("Redis listener failed; retrying soon")
        finally:
            try:
                if pubsub is not None:
                    await pubsub.unsubscribe(CHANNEL)
                    await pubsub.aclose()
            except Exception:
                logger.debug("Ignoring error while closing pubsub", exc_info=True)
            try:
                if client is not None:
                    await client.aclose()
            except Exception:
                logger.debug("Ignoring error while closing redis client", exc_info=True)
        await asyncio.sleep(retry_delay)
