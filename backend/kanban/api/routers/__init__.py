from fastapi import APIRouter

from kanban.api.routers.boards import router as boards_router
from kanban.api.routers.dashboard import router as dashboard_router
from kanban.api.routers.tasks import router as tasks_router


api_router = APIRouter()
api_router.include_router(boards_router, prefix="/boards", tags=["boards"])
api_router.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(tasks_router, prefix="/tasks", tags=["tasks"])
