from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from kanban.api.routers import api_router
from kanban.config import settings
from kanban.db import Database
from kanban.logging_config import configure_logging
from kanban.services.queries import QueryError
from kanban.services.views import LocalViewPublisher, RedisViewPublisher, ViewPublisher
from kanban.websocket.manager import manager
from kanban.websocket.redis_listener import start_invalidation_listener


logger = logging.getLogger(__name__)


def _default_publisher() -> ViewPublisher:
    if settings.REDIS_ENABLED:
        return RedisViewPublisher()
    return LocalViewPublisher(manager)


@asynccontextmanager
async def lifespan(app: FastAPI):
    listener = None
    if settings.REDIS_ENABLED:
        listener = asyncio.create_task(start_invalidation_listener())
    logger.info("Kanban API started")
    try:
        yield
    finally:
        if listener is not None:
            listener.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await listener
        await app.state.db.dispose()


def create_app(
    database: Database | None = None,
    publisher: ViewPublisher | None = None,
) -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Kanban Boards", default_response_class=ORJSONResponse, lifespan=lifespan)
    app.state.db = database or Database(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    app.state.view_publisher = publisher or _default_publisher()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api")

    @app.exception_handler(QueryError)
    async def _query_error(_: Request, exc: QueryError) -> ORJSONResponse:
        return ORJSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": str(exc)})

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.websocket("/ws/views")
    async def ws_views(websocket: WebSocket) -> None:
        await websocket.accept()
        await manager.connect(websocket)
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            await manager.disconnect(websocket)

    return app


app = create_app()
