"""Merchant-note enrichment for extracted transactions."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from core.models import Extracted, MerchantNote
from core.ports import MerchantNoteLookup


def apply_merchant_note(outcome: Extracted, note: Optional[MerchantNote]) -> Extracted:
    """Overlay a note's non-empty category/notes onto the outcome."""

    if note is None:
        return outcome
    changes: dict[str, str] = {}
    if note.category:
        changes["category"] = note.category
    if note.notes:
        changes["notes"] = note.notes
    if not changes:
        return outcome
    return replace(outcome, **changes)


def enrich(outcome: Extracted, lookup: Optional[MerchantNoteLookup]) -> Extracted:
    """Look up the extracted merchant by exact name and apply its note."""

    if lookup is None:
        return outcome
    return apply_merchant_note(outcome, lookup(outcome.merchant_name))
