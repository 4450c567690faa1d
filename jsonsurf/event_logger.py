from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator


MAX_PREVIEW_CHARS = 120
NO_CLIP_KEYS = {
    "stream_id",
    "event",
    "policy",
}

_stream_id_ctx: ContextVar[str] = ContextVar("event_stream_id", default="-")


def _clip_text(value: str, limit: int) -> str:
    if len(value) <= limit:
        return value
    return value[:limit]


def _sanitize(value: Any, *, key: str | None = None, limit: int = MAX_PREVIEW_CHARS) -> Any:
    if isinstance(value, str):
        if key in NO_CLIP_KEYS:
            return value
        return _clip_text(value, limit)
    if isinstance(value, dict):
        return {str(k): _sanitize(v, key=str(k), limit=limit) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_sanitize(item, key=key, limit=limit) for item in value]
    return value


def current_stream_id() -> str:
    return _stream_id_ctx.get()


@contextmanager
def bind_stream_context(*, stream_id: str | None = None) -> Iterator[None]:
    token = None
    try:
        if stream_id is not None:
            token = _stream_id_ctx.set(str(stream_id))
        yield
    finally:
        if token is not None:
            _stream_id_ctx.reset(token)


def emit_stream_event(
    logger: logging.Logger,
    *,
    event: str,
    level: int = logging.INFO,
    preview_chars: int = MAX_PREVIEW_CHARS,
    **fields: Any,
) -> None:
    if not logger.isEnabledFor(level):
        return
    stream_id = str(fields.pop("stream_id", _stream_id_ctx.get()) or "-")

    payload: dict[str, Any] = {
        "stream_id": stream_id,
        "event": event,
    }
    payload.update(fields)

    logger.log(
        level,
        "event_log %s",
        json.dumps(_sanitize(payload, limit=preview_chars), ensure_ascii=False, separators=(",", ":")),
    )
