# stockbridge/core/request_context.py
from __future__ import annotations

import contextvars
from typing import Any, Dict

request_id_ctx = contextvars.ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    return request_id_ctx.get()


def set_request_id(value: str | None) -> None:
    request_id_ctx.set(value)


def log_extra(**fields: Any) -> Dict[str, Any]:
    # `extra=` payload for service loggers, tagged with the current request
    return {"request_id": get_request_id(), **fields}
