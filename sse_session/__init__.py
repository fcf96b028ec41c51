"""Server-Sent Events sessions for ASGI applications.

The critical interface is ``Session``: one per connection, writing
protocol-correct frames into a response. ``EventStreamResponse`` hosts a
session inside a Starlette/FastAPI route.
"""

from .lifecycle import LifecycleSignal
from .models import ConnectionState, SessionOptions
from .response import EventStreamResponse
from .sanitize import sanitize
from .serialize import serialize
from .session import Session
from .transport import StreamingTransport

__all__ = [
    "ConnectionState",
    "EventStreamResponse",
    "LifecycleSignal",
    "Session",
    "SessionOptions",
    "StreamingTransport",
    "sanitize",
    "serialize",
]
