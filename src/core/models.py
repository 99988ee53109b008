"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any mail, SMS, or storage specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

UNKNOWN_MERCHANT = "Unknown Merchant"
DEFAULT_CATEGORY = "other"
DEFAULT_PAYMENT_LABEL = "Unknown"


@dataclass(frozen=True)
class Message:
    """A single email or SMS as handed over by the acquisition layer."""

    sender: str
    subject: Optional[str]
    body: str
    received_at: datetime


@dataclass(frozen=True)
class MerchantNote:
    """Saved category/notes for a known merchant."""

    merchant_name: str
    category: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class NoMatch:
    """No rule produced a decisive result."""


@dataclass(frozen=True)
class Skipped:
    """A rule matched the sender but its skip condition fired."""

    rule_id: str


@dataclass(frozen=True)
class Placeholder:
    """Priced message that a rule deliberately left unextracted."""

    merchant_name: str
    rule_label: str
    payment_label: Optional[str]
    date: datetime
    rule_id: str = ""


@dataclass(frozen=True)
class Extracted:
    """A fully extracted transaction record."""

    amount: Decimal
    merchant_name: str
    date: datetime
    category: str = DEFAULT_CATEGORY
    notes: str = ""
    payment_label: str = DEFAULT_PAYMENT_LABEL
    transaction_kind: str = "expense"
    rule_id: str = ""
    rule_name: str = ""


ExtractionOutcome = Union[NoMatch, Skipped, Placeholder, Extracted]

NO_MATCH = NoMatch()


def is_decisive(outcome: ExtractionOutcome) -> bool:
    """True for outcomes that stop rule evaluation."""

    return isinstance(outcome, (Placeholder, Extracted))
