from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

event_id_ctx: ContextVar[Optional[str]] = ContextVar("event_id", default=None)


def set_event_id(event_id: Optional[str]) -> None:
    event_id_ctx.set(event_id)


def get_event_id() -> Optional[str]:
    return event_id_ctx.get()


@contextmanager
def event_context(event_id: Optional[str]) -> Iterator[None]:
    token = event_id_ctx.set(event_id)
    try:
        yield
    finally:
        event_id_ctx.reset(token)
