from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from rich.console import Console

from adapters.report_formatting import describe_outcome, outcome_fields, summary_table, suggestions_table
from core.models import NO_MATCH, Extracted, Placeholder, Skipped
from core.processor import ScanSummary
from core.suggest import suggest_patterns

WHEN = datetime(2024, 1, 2, tzinfo=timezone.utc)


def _render(renderable) -> str:
    console = Console(width=200, record=True)
    console.print(renderable)
    return console.export_text()


def test_describe_extracted_skips_empty_values() -> None:
    outcome = Extracted(
        amount=Decimal("450.00"),
        merchant_name="Cafe Mocha",
        date=WHEN,
        category="dining",
        payment_label="HDFC Card",
        rule_id="hdfc",
        rule_name="HDFC Card",
    )
    text = describe_outcome(outcome)
    assert text.startswith("Result: extracted, Rule: HDFC Card, Amount: 450.00, Merchant: Cafe Mocha")
    assert "Notes" not in text


def test_describe_other_outcomes() -> None:
    placeholder = Placeholder(merchant_name="Shop", rule_label="Bank", payment_label=None, date=WHEN)
    assert describe_outcome(placeholder) == f"Result: placeholder, Rule: Bank, Merchant: Shop, Date: {WHEN.isoformat()}"
    assert describe_outcome(Skipped(rule_id="promo")) == "Result: skipped, Rule: promo"
    assert describe_outcome(NO_MATCH) == "Result: no match"
    assert outcome_fields(NO_MATCH) == [("Result", "no match")]


def test_tables_render_counts_and_patterns() -> None:
    summary = ScanSummary(scanned=5, extracted=2, placeholders=1, duplicates=1, unmatched=1, failed=0)
    assert "Scan summary" in _render(summary_table(summary))

    rendered = _render(suggestions_table(suggest_patterns("Rs 20 paid to [Ravi]")))
    assert "amount_regex" in rendered
    assert r"(?:Rs|INR|₹)\.?\s*([\d,.]+)" in rendered
