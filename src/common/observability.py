from __future__ import annotations

import contextvars
import uuid
from contextlib import contextmanager
from typing import Iterator, Mapping

CORRELATION_ID_HEADER = "X-Correlation-ID"

_CORRELATION_ID: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default="-"
)


def normalize_correlation_id(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        try:
            value = value.decode("utf-8")
        except UnicodeDecodeError:
            return None
    text = str(value).strip()
    return text or None


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def set_correlation_id(value: object | None) -> contextvars.Token[str]:
    normalized = normalize_correlation_id(value)
    return _CORRELATION_ID.set(normalized or generate_correlation_id())


def reset_correlation_id(token: contextvars.Token[str]) -> None:
    _CORRELATION_ID.reset(token)


def get_correlation_id() -> str:
    return _CORRELATION_ID.get()


@contextmanager
def correlation_context(value: object | None) -> Iterator[str]:
    token = set_correlation_id(value)
    try:
        yield get_correlation_id()
    finally:
        reset_correlation_id(token)


def extract_correlation_id_from_event(event: Mapping[str, object]) -> str | None:
    """Pick a correlation id out of an event payload.

    Auth events rarely carry one; the event id and then the session id are
    the closest stable identifiers.
    """
    for key in ("correlation_id", "correlationId", "id", "sessionId"):
        if key in event:
            found = normalize_correlation_id(event.get(key))
            if found:
                return found
    return None


def correlation_headers(correlation_id: str | None = None) -> list[tuple[str, bytes]]:
    value = correlation_id or get_correlation_id()
    return [(CORRELATION_ID_HEADER, value.encode("utf-8"))]
