from kanban.models.board import Board
from kanban.models.task import Task

__all__ = [
    "Board",
    "Task",
]
