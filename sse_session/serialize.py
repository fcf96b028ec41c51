"""Default data serializer — any value to a compact JSON string.

Only values written through ``Session.data()`` and ``Session.push()`` are
serialized; every other field is assumed to already be a string.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel
from pydantic_core import to_json

SerializerFunction = Callable[[Any], str]


def serialize(value: Any) -> str:
    """Encode ``value`` as JSON.

    Pydantic models go through their own ``model_dump_json`` so field
    aliases and custom serializers are honoured. Everything else (dicts,
    lists, strings, numbers, dataclasses, datetimes) is handled by
    ``pydantic_core.to_json``.
    """
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    return to_json(value).decode("utf-8")
