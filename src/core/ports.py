"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for storage adapters so that the core
can be reused with different backends.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional, Protocol

from core.models import Extracted, MerchantNote, Message, Placeholder

MerchantNoteLookup = Callable[[str], Optional[MerchantNote]]


class TransactionStorePort(Protocol):
    """Storage operations required by the batch processor."""

    def is_seen(self, fingerprint: str) -> bool:
        ...

    def mark_seen(self, fingerprint: str) -> None:
        ...

    def has_similar_transaction(
        self,
        amount: Decimal,
        merchant_name: str,
        date: datetime,
        window_seconds: int,
    ) -> bool:
        ...

    def save_transaction(self, message: Message, outcome: Extracted) -> None:
        ...

    def save_placeholder(self, message: Message, outcome: Placeholder) -> None:
        ...

    def get_merchant_note(self, merchant_name: str) -> Optional[MerchantNote]:
        ...
