"""Deduplication helpers (core domain)."""

from __future__ import annotations

import hashlib
import re
from typing import Optional

from core.models import Message


def _collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def normalize_for_fingerprint(text: str) -> str:
    """Normalize text for deterministic fingerprinting."""

    return _collapse_whitespace(text).lower()


def compute_fingerprint(message: Message, mode: str) -> Optional[str]:
    """Return a fingerprint hash of the message based on dedup mode.

    The received timestamp is part of the payload, so identical texts
    received at different times keep distinct fingerprints.
    """

    if mode == "off":
        return None

    normalized = "\n".join(
        [
            normalize_for_fingerprint(message.subject or ""),
            normalize_for_fingerprint(message.body),
            message.received_at.isoformat(),
        ]
    )
    if mode == "global":
        payload = normalized
    elif mode == "per_sender":
        payload = f"{normalize_for_fingerprint(message.sender)}\n{normalized}"
    else:
        raise ValueError(f"Unsupported dedup mode: {mode}")

    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
