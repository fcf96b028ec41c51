"""Default field-value sanitizer.

An unescaped newline inside a field value would be read by the client as
the end of the field (or, doubled, as the end of the event), so every value
is normalized before it reaches the wire.
"""

from __future__ import annotations

import re
from collections.abc import Callable

SanitizerFunction = Callable[[str], str]

_NEWLINES = re.compile(r"\r\n|\r|\n")


def sanitize(text: str) -> str:
    """Collapse CR, LF and CRLF to a single LF, then strip trailing LFs."""
    return _NEWLINES.sub("\n", text).rstrip("\n")
