from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from core.enrichment import apply_merchant_note, enrich
from core.models import Extracted, MerchantNote


def _extracted() -> Extracted:
    return Extracted(
        amount=Decimal("120"),
        merchant_name="Joe's Cafe",
        date=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def test_category_overlay_leaves_notes() -> None:
    outcome = apply_merchant_note(_extracted(), MerchantNote("Joe's Cafe", category="dining"))
    assert outcome.category == "dining"
    assert outcome.notes == ""


def test_notes_overlay_leaves_category() -> None:
    outcome = apply_merchant_note(_extracted(), MerchantNote("Joe's Cafe", notes="Friday lunch"))
    assert outcome.category == "other"
    assert outcome.notes == "Friday lunch"


def test_empty_note_fields_do_not_overlay() -> None:
    original = _extracted()
    assert apply_merchant_note(original, MerchantNote("Joe's Cafe", category="", notes="")) is original
    assert apply_merchant_note(original, None) is original


def test_enrichment_never_changes_merchant_name() -> None:
    outcome = apply_merchant_note(_extracted(), MerchantNote("Someone Else", category="travel"))
    assert outcome.merchant_name == "Joe's Cafe"


def test_enrich_uses_lookup_by_merchant_name() -> None:
    calls: list[str] = []

    def lookup(name: str):
        calls.append(name)
        return MerchantNote(name, category="dining", notes="team")

    outcome = enrich(_extracted(), lookup)
    assert calls == ["Joe's Cafe"]
    assert (outcome.category, outcome.notes) == ("dining", "team")
    assert enrich(_extracted(), None) == _extracted()
