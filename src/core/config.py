"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ScanConfig:
    """Batch scan settings for the core processor."""

    dedup_mode: str = "per_sender"
    duplicate_window_seconds: int = 30
    scan_delay_seconds: float = 0.0
