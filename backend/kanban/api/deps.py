from __future__ import annotations

from fastapi import Request
from fastapi.responses import ORJSONResponse

from kanban.schemas.result import ActionResult
from kanban.services.views import ViewPublisher


def get_view_publisher(request: Request) -> ViewPublisher | None:
    return getattr(request.app.state, "view_publisher", None)


def result_response(result: ActionResult) -> ORJSONResponse:
    return ORJSONResponse(status_code=result.status_code, content=result.to_payload())
