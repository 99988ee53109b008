"""Raw mail/SMS record to core Message mapping adapter.

This keeps acquisition-specific field names out of the core pipeline.
Two shapes are accepted:
- email exports: {"sender" | "from", "subject", "body", "date"}
- Android SMS dumps: {"address", "body", "date"} with epoch milliseconds
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Union

from dateutil import parser as date_parser

from core.models import Message

LOGGER = logging.getLogger(__name__)


def _parse_received_at(raw_date: Any) -> datetime:
    if raw_date is None or raw_date == "":
        return datetime.now(timezone.utc)
    if isinstance(raw_date, (int, float)):
        return datetime.fromtimestamp(raw_date / 1000, tz=timezone.utc)
    text = str(raw_date).strip()
    if text.isdigit():
        # SMS providers report milliseconds since the epoch as a string.
        return datetime.fromtimestamp(int(text) / 1000, tz=timezone.utc)
    parsed = date_parser.parse(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _first_text(raw: dict, *keys: str) -> Optional[str]:
    for key in keys:
        value = raw.get(key)
        if value is not None and str(value).strip():
            return str(value)
    return None


def build_message(raw: dict) -> Message:
    """Build a core Message from a raw email or SMS record."""

    if not isinstance(raw, dict):
        raise ValueError(f"Message record is not an object: {raw!r}")
    sender = _first_text(raw, "sender", "from", "address")
    if sender is None:
        raise ValueError("Message record has no sender")
    body = raw.get("body")
    if body is None:
        raise ValueError(f"Message record from {sender} has no body")

    return Message(
        sender=sender.strip(),
        subject=_first_text(raw, "subject"),
        body=str(body),
        received_at=_parse_received_at(raw.get("date", raw.get("received_at"))),
    )


def load_messages(path: Union[str, Path]) -> List[Message]:
    """Read messages from a JSON array or a JSON-lines file.

    Records that cannot be decoded or mapped are logged and skipped so one
    bad record never drops the rest of the file.
    """

    text = Path(path).read_text(encoding="utf-8")
    stripped = text.lstrip()
    if stripped.startswith("["):
        records = list(enumerate(json.loads(stripped), start=1))
    else:
        records = []
        for line_number, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                records.append((line_number, json.loads(line)))
            except ValueError as exc:
                LOGGER.warning("Skipping line %s of %s: %s", line_number, path, exc)

    messages: List[Message] = []
    for position, record in records:
        try:
            messages.append(build_message(record))
        except (ValueError, OverflowError, OSError) as exc:
            LOGGER.warning("Skipping record %s of %s: %s", position, path, exc)
    return messages
