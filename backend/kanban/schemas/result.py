from __future__ import annotations

from typing import Any

from pydantic import BaseModel, PrivateAttr, ValidationError


class ActionResult(BaseModel):
    """Uniform outcome of every mutation."""

    success: bool
    message: str | None = None
    errors: dict[str, list[str]] | None = None
    data: Any | None = None

    _status_code: int = PrivateAttr(default=200)

    @property
    def status_code(self) -> int:
        return self._status_code

    @classmethod
    def _build(cls, status_code: int, **fields: Any) -> ActionResult:
        result = cls(**fields)
        result._status_code = status_code
        return result

    @classmethod
    def ok(cls, data: Any | None = None, *, message: str | None = None, status_code: int = 200) -> ActionResult:
        return cls._build(status_code, success=True, message=message, data=data)

    @classmethod
    def invalid(cls, message: str, errors: dict[str, list[str]] | None = None) -> ActionResult:
        return cls._build(400, success=False, message=message, errors=errors)

    @classmethod
    def not_found(cls, message: str) -> ActionResult:
        return cls._build(404, success=False, message=message)

    @classmethod
    def failed(cls, message: str) -> ActionResult:
        return cls._build(500, success=False, message=message)

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(mode="json")
        return {key: value for key, value in payload.items() if value is not None}


def field_errors(exc: ValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "__root__"
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        errors.setdefault(field, []).append(message)
    return errors
