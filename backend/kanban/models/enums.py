from __future__ import annotations

import enum


class _TokenEnum(str, enum.Enum):
    """Stored as upper-case names; exposed to callers as lower-case tokens."""

    @property
    def token(self) -> str:
        return self.value.lower()

    @classmethod
    def from_token(cls, token: str):
        for member in cls:
            if member.token == token:
                return member
        raise ValueError(f"Invalid {cls.__name__} token: {token!r}")

    @classmethod
    def tokens(cls) -> list[str]:
        return [member.token for member in cls]


class TaskStatus(_TokenEnum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class TaskPriority(_TokenEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Disposition(str, enum.Enum):
    orphan = "orphan"
    transfer = "transfer"
    delete = "delete"

