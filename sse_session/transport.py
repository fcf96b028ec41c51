"""ASGI transport — the request/response half a ``Session`` writes through.

``Session`` methods are synchronous, so ``write()`` only queues ASGI
messages; ``drain()`` forwards them to the server in FIFO order. That keeps
the bytes on the wire in exactly the order the session wrote them.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from starlette.datastructures import MutableHeaders
from starlette.types import Message, Receive, Send

logger = logging.getLogger(__name__)

CloseCallback = Callable[[], None]


class StreamingTransport:
    """One streaming HTTP response over an ASGI ``receive``/``send`` pair."""

    def __init__(self, receive: Receive, send: Send):
        self._receive = receive
        self._send = send
        self._queue: asyncio.Queue[Message | None] = asyncio.Queue()
        self._close_callbacks: list[CloseCallback] = []
        self.status_code = 200
        self.headers = MutableHeaders()
        self.headers_sent = False
        self.closed = False

    # -----------------------------------------------------------------------
    # Response contract used by Session
    # -----------------------------------------------------------------------

    def set_header(self, name: str, value: str) -> None:
        if self.headers_sent:
            raise RuntimeError(f"Cannot set header {name!r} after headers were sent")
        self.headers[name] = value

    def flush_headers(self) -> None:
        """Queue ``http.response.start``. Later calls are no-ops."""
        if self.headers_sent or self.closed:
            return
        self.headers_sent = True
        self._queue.put_nowait({
            "type": "http.response.start",
            "status": self.status_code,
            "headers": self.headers.raw,
        })

    def write(self, chunk: str) -> None:
        if self.closed:
            logger.debug("Dropping %d chars written after close", len(chunk))
            return
        if not self.headers_sent:
            self.flush_headers()
        self._queue.put_nowait({
            "type": "http.response.body",
            "body": chunk.encode("utf-8"),
            "more_body": True,
        })

    def on_close(self, callback: CloseCallback) -> None:
        self._close_callbacks.append(callback)

    # -----------------------------------------------------------------------
    # Driving the ASGI channels
    # -----------------------------------------------------------------------

    async def drain(self) -> None:
        """Forward queued messages to the server until the body ends."""
        while True:
            message = await self._queue.get()
            if message is None:
                return
            try:
                await self._send(message)
            except OSError:
                logger.debug("Send failed, client connection is gone")
                self._close()
                return
            except Exception:
                logger.error("Send of %s failed, closing stream", message["type"])
                self._close()
                raise

    async def watch_disconnect(self) -> None:
        """Consume ``receive()`` until the client goes away."""
        while True:
            message = await self._receive()
            if message["type"] == "http.disconnect":
                logger.debug("Client disconnected")
                self._close()
                return

    async def end(self) -> None:
        """Finish the response body and close. Safe to call after a disconnect."""
        try:
            if not self.closed:
                self.flush_headers()
                self._queue.put_nowait({"type": "http.response.body", "body": b"", "more_body": False})
                self._close()
        finally:
            self._queue.put_nowait(None)

    def _close(self) -> None:
        if self.closed:
            return
        self.closed = True
        for callback in list(self._close_callbacks):
            try:
                callback()
            except Exception as exc:
                # Listener errors go to the loop handler; remaining callbacks still run.
                asyncio.get_running_loop().call_exception_handler({
                    "message": "Exception in transport close callback",
                    "exception": exc,
                    "callback": callback,
                })
