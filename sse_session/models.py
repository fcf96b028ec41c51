"""Pydantic models — session configuration plus the demo app's shapes.

``SessionOptions`` is the configuration contract of a single ``Session``.
The remaining models define the request/response shapes and the SSE event
data structures emitted by the bundled FastAPI routes.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from sse_session.sanitize import SanitizerFunction, sanitize
from sse_session.serialize import SerializerFunction, serialize


# ---------------------------------------------------------------------------
# Session configuration
# ---------------------------------------------------------------------------

class SessionOptions(BaseModel):
    """Options fixed at ``Session`` construction.

    ``retry`` is the reconnection time (ms) sent as soon as the stream
    opens; ``None`` leaves the choice to the client. ``status_code`` may be
    301/307 (set ``Location`` in ``headers``) to redirect the stream, or
    204 to tell the client to stop reconnecting.
    """

    model_config = ConfigDict(frozen=True)

    serializer: SerializerFunction = serialize
    sanitizer: SanitizerFunction = sanitize
    trust_client_event_id: bool = True
    retry: int | None = Field(default=2000, ge=0)
    status_code: int = Field(default=200, ge=100, le=599)
    headers: dict[str, str] = Field(default_factory=dict)


class ConnectionState(str, Enum):
    PENDING = "pending"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class HealthResponse(BaseModel):
    """GET /api/health response."""
    status: Literal["ok"] = "ok"
    version: str = "0.1.0"


# ---------------------------------------------------------------------------
# SSE event data shapes (what goes in the `data` field of each SSE event)
# ---------------------------------------------------------------------------

class TickEventData(BaseModel):
    """data for event: tick"""
    seq: int
    at: datetime


class DoneEventData(BaseModel):
    """data for event: done"""
    events_sent: int = 0


class ResumeEventData(BaseModel):
    """data for event: resume"""
    last_event_id: str
    resumed: bool


# Note: `echo` event data is a bare JSON string, not a model.
# e.g. event: echo\ndata: "Hello"
