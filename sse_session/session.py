"""Session — one open Server-Sent Events connection.

A session owns the encoding and lifecycle state of a single connection and
borrows the request/response pair it was built from:

- lifecycle: one loop tick after construction the response is switched into
  ``text/event-stream`` mode and ``connected`` fires; the response's close
  notification fires ``disconnected``.
- encoding: ``event``/``data``/``id``/``retry``/``comment`` write single
  ``name:value`` fields, ``dispatch`` ends the event with a blank line.
- adapting: ``push`` writes a complete event, ``stream`` turns every chunk of
  an async source into its own pushed event.

All encoder methods are synchronous and return the session for chaining::

    session.event("update").data({"n": 1}).dispatch()

Writes after the client went away are discarded by the transport; subscribe
to ``disconnected`` (or check ``state``) before doing expensive work.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
from collections.abc import AsyncIterable, Callable, Iterable, Mapping
from typing import Any, Protocol

from sse_session.lifecycle import LifecycleSignal
from sse_session.models import ConnectionState, SessionOptions

logger = logging.getLogger(__name__)

_MISSING: Any = object()


class RequestLike(Protocol):
    """Inbound request metadata; ``headers`` must be case-insensitive."""

    @property
    def headers(self) -> Mapping[str, str]: ...


class ResponseLike(Protocol):
    """Outgoing response the session streams into."""

    status_code: int

    def set_header(self, name: str, value: str) -> None: ...

    def flush_headers(self) -> None: ...

    def write(self, chunk: str) -> None: ...

    def on_close(self, callback: Callable[[], None]) -> None: ...


class Session:
    """Server side of one SSE connection.

    Must be created while an asyncio event loop is running. Attach
    listeners to ``connected``/``disconnected`` right after construction;
    initialization is deferred by one tick so none of them are missed.
    """

    def __init__(
        self,
        request: RequestLike,
        response: ResponseLike,
        options: SessionOptions | None = None,
    ):
        options = options or SessionOptions()

        self._request = request
        self._response = response
        self._serialize = options.serializer
        self._sanitize = options.sanitizer
        self._trust_client_event_id = options.trust_client_event_id
        self._initial_retry = options.retry
        self._status_code = options.status_code
        self._headers = dict(options.headers)

        self._last_event_id = ""
        self._state = ConnectionState.PENDING
        self.connected = LifecycleSignal("connected")
        self.disconnected = LifecycleSignal("disconnected")

        self._response.on_close(self._on_disconnected)
        asyncio.get_running_loop().call_soon(self._on_connected)

    @property
    def last_event_id(self) -> str:
        """Last ID sent to (or, if trusted, reported by) the client."""
        return self._last_event_id

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    def _on_connected(self) -> None:
        if self._state is ConnectionState.DISCONNECTED:
            logger.debug("Connection closed before initialization, skipping")
            return

        if self._trust_client_event_id:
            self._last_event_id = self._request.headers.get("last-event-id", "")

        for name, value in self._headers.items():
            self._response.set_header(name, value)

        self._response.status_code = self._status_code
        self._response.set_header("Content-Type", "text/event-stream")
        self._response.set_header("Cache-Control", "no-cache, no-transform")
        self._response.set_header("Connection", "keep-alive")
        self._response.flush_headers()
        self._state = ConnectionState.CONNECTED

        if self._initial_retry is not None:
            self.retry(self._initial_retry).dispatch()

        logger.debug("Session initialized (last_event_id=%r)", self._last_event_id)
        self.connected.fire()

    def _on_disconnected(self) -> None:
        if self._state is ConnectionState.DISCONNECTED:
            return
        self._state = ConnectionState.DISCONNECTED
        self.disconnected.fire()

    # -----------------------------------------------------------------------
    # Frame encoding
    # -----------------------------------------------------------------------

    def _write_field(self, name: str, value: str) -> Session:
        """Write one ``name:value`` line; an empty name makes a comment."""
        self._response.write(f"{name}:{self._sanitize(value)}\n")
        return self

    def dispatch(self) -> Session:
        """End the current event with a blank line.

        Without preceding fields this is a no-op for the client, which makes
        it usable as a keep-alive.
        """
        self._response.write("\n")
        return self

    def event(self, type: str) -> Session:
        """Set the event name (the "type" in the SSE specification)."""
        return self._write_field("event", type)

    def data(self, data: Any) -> Session:
        """Serialize ``data`` with the configured serializer and write it."""
        return self._write_field("data", self._serialize(data))

    def id(self, identifier: str | None) -> Session:
        """Write an event ID. ``None`` writes (and records) an empty ID."""
        value = "" if identifier is None else str(identifier)
        self._write_field("id", value)
        self._last_event_id = value
        return self

    def retry(self, time: int) -> Session:
        """Suggest a reconnection time in milliseconds."""
        return self._write_field("retry", str(int(time)))

    def comment(self, text: str | None = None) -> Session:
        """Write a comment line. Ignored by clients, keeps the connection busy."""
        return self._write_field("", text if text is not None else "")

    # -----------------------------------------------------------------------
    # Composite operations
    # -----------------------------------------------------------------------

    def push(self, event_or_data: Any, data: Any = _MISSING) -> Session:
        """Write and dispatch a whole event at once.

        ``push(data)`` sends a ``"message"`` event, ``push(name, data)`` a
        ``name`` event. Equivalent to ``event().id().data().dispatch()`` with a
        fresh random ID (eight hex characters), so ``last_event_id`` changes
        on every push.
        """
        if data is _MISSING:
            event_name = "message"
            payload = event_or_data
        else:
            event_name = str(event_or_data)
            payload = data

        next_id = secrets.token_hex(4)

        return self.event(event_name).id(next_id).data(payload).dispatch()

    async def stream(
        self,
        source: AsyncIterable[Any] | Iterable[Any],
        *,
        event: str = "stream",
    ) -> bool:
        """Push every chunk of ``source`` as its own ``event`` event.

        Bytes chunks are decoded as UTF-8. Returns ``True`` once the source
        is exhausted; an exception raised by the source propagates and stops
        the stream. There is no timeout, cancel the awaiting task to abort.
        """
        if isinstance(source, AsyncIterable):
            async for chunk in source:
                self.push(event, _chunk_text(chunk))
        else:
            for chunk in source:
                self.push(event, _chunk_text(chunk))
        return True

    def __repr__(self) -> str:
        return f"<Session state={self._state.value} last_event_id={self._last_event_id!r}>"


def _chunk_text(chunk: Any) -> Any:
    if isinstance(chunk, (bytes, bytearray, memoryview)):
        return bytes(chunk).decode("utf-8", errors="replace")
    return chunk
