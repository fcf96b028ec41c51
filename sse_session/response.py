"""EventStreamResponse — host one ``Session`` inside an ASGI response.

Routes return an ``EventStreamResponse`` with an async handler; the handler
receives the connected session and writes to it for as long as it likes::

    @router.get("/events")
    async def events(request: Request) -> EventStreamResponse:
        async def handler(session: Session) -> None:
            session.push({"hello": "world"})

        return EventStreamResponse(request, handler)

The body ends when the handler returns. A client disconnect cancels it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from starlette.background import BackgroundTask
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from sse_session.models import SessionOptions
from sse_session.session import Session
from sse_session.transport import StreamingTransport

logger = logging.getLogger(__name__)

SessionHandler = Callable[[Session], Awaitable[None]]


class EventStreamResponse(Response):
    """Streaming ``text/event-stream`` response driven by a ``Session``."""

    media_type = "text/event-stream"

    def __init__(
        self,
        request: Request,
        handler: SessionHandler,
        options: SessionOptions | None = None,
        ping_interval: float | None = None,
        background: BackgroundTask | None = None,
    ):
        self.request = request
        self.handler = handler
        self.options = options or SessionOptions()
        self.ping_interval = ping_interval
        self.status_code = self.options.status_code
        self.background = background
        self.init_headers()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        transport = StreamingTransport(receive, send)
        # Headers added to this response (cookies, dependencies) ride along;
        # the session sets the protocol headers itself.
        for name, value in self.headers.items():
            if name != "content-type":
                transport.headers.append(name, value)
        session = Session(self.request, transport, self.options)
        session.connected.subscribe(lambda: logger.info("SSE session connected: %s", self.request.url.path))
        session.disconnected.subscribe(lambda: logger.info("SSE session disconnected: %s", self.request.url.path))

        sender = asyncio.create_task(transport.drain(), name="sse-drain")
        watcher = asyncio.create_task(transport.watch_disconnect(), name="sse-disconnect")
        worker = asyncio.create_task(self._run_handler(session), name="sse-handler")
        pinger = None
        if self.ping_interval:
            pinger = asyncio.create_task(self._ping(session), name="sse-ping")

        try:
            await asyncio.wait({watcher, worker, sender}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (watcher, worker, pinger):
                if task is not None and not task.done():
                    task.cancel()
            await asyncio.gather(watcher, worker, *([pinger] if pinger else []), return_exceptions=True)
            await transport.end()
            await sender

        if not worker.cancelled():
            error = worker.exception()
            if error is not None:
                logger.error("SSE handler failed for %s", self.request.url.path, exc_info=error)
                raise error

        if self.background is not None:
            await self.background()

    async def _run_handler(self, session: Session) -> None:
        await session.connected.wait()
        await self.handler(session)

    async def _ping(self, session: Session) -> None:
        await session.connected.wait()
        while session.is_connected:
            await asyncio.sleep(self.ping_interval)
            session.comment()
