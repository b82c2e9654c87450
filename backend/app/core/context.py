"""Per-request context utilities."""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator
from uuid import UUID

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
user_id_ctx_var: ContextVar[str | None] = ContextVar("user_id", default=None)


def get_request_id() -> str | None:
    """Return the current request id if available."""
    return request_id_ctx_var.get()


def get_user_id() -> str | None:
    """Return the user id bound to the current unit of work, if any."""
    return user_id_ctx_var.get()


@contextmanager
def bind_user_id(user_id: UUID | str | None) -> Iterator[None]:
    """Attach a user id to log records emitted inside the block."""
    token = user_id_ctx_var.set(str(user_id) if user_id is not None else None)
    try:
        yield
    finally:
        user_id_ctx_var.reset(token)
