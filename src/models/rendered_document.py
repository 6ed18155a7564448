# src/models/rendered_document.py

"""Rendered XML document published by the refresh cache."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RenderedDocument:
    """A complete XML output for one refresh cycle (or an error stand-in)."""

    content: bytes
    generated_at: datetime
    is_error: bool = False
    record_count: int = 0
    schema: str = ""


def iso_utc(moment: datetime | None) -> str | None:
    """ISO-8601 with millisecond precision and a ``Z`` suffix."""
    if moment is None:
        return None
    text = moment.isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")
