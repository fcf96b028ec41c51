"""Demo event streams — GET /api/events/* → SSE stream."""

from __future__ import annotations

import asyncio
import math
from collections.abc import AsyncGenerator
from datetime import datetime, timezone

from fastapi import APIRouter, Query, Request

from sse_session.config import settings
from sse_session.models import DoneEventData, ResumeEventData, TickEventData
from sse_session.response import EventStreamResponse
from sse_session.session import Session

router = APIRouter()


def _response(request: Request, handler) -> EventStreamResponse:
    return EventStreamResponse(
        request,
        handler,
        options=settings.session_options(),
        ping_interval=settings.ping_interval,
    )


@router.get("/api/events/ticker")
async def ticker(
    request: Request,
    count: int = Query(default=5, ge=1, le=1000),
    interval: float | None = Query(default=None, ge=0),
) -> EventStreamResponse:
    """Push `count` tick events, then a done event.

    Events emitted: tick, done.
    """
    delay = settings.ticker_interval if interval is None else interval

    async def handler(session: Session) -> None:
        for seq in range(count):
            if seq:
                await asyncio.sleep(delay)
            session.push("tick", TickEventData(seq=seq, at=datetime.now(timezone.utc)))
        session.push("done", DoneEventData(events_sent=count))

    return _response(request, handler)


async def _chunks(text: str, size: int) -> AsyncGenerator[bytes, None]:
    for i in range(0, len(text), size):
        yield text[i : i + size].encode("utf-8")
        await asyncio.sleep(0)


@router.get("/api/events/echo")
async def echo(
    request: Request,
    text: str = Query(min_length=1),
    chunk_size: int = Query(default=8, ge=1),
) -> EventStreamResponse:
    """Stream `text` back in `chunk_size` pieces.

    Events emitted: echo (one per chunk), done.
    """

    async def handler(session: Session) -> None:
        await session.stream(_chunks(text, chunk_size), event="echo")
        session.push("done", DoneEventData(events_sent=math.ceil(len(text) / chunk_size)))

    return _response(request, handler)


@router.get("/api/events/resume")
async def resume(request: Request) -> EventStreamResponse:
    """Report the Last-Event-ID the client reconnected with.

    Events emitted: resume.
    """

    async def handler(session: Session) -> None:
        last_event_id = session.last_event_id
        session.event("resume").data(
            ResumeEventData(last_event_id=last_event_id, resumed=bool(last_event_id))
        ).dispatch()

    return _response(request, handler)
