"""Shared console formatting helpers.

Keeping formatting here prevents drift between CLI commands and keeps the
output consistent regardless of which command produced an outcome.
"""

from __future__ import annotations

from typing import List, Tuple

from rich.table import Table
from rich.text import Text

from core.models import Extracted, ExtractionOutcome, Placeholder, Skipped
from core.processor import ScanSummary
from core.suggest import PatternSuggestions


def outcome_fields(outcome: ExtractionOutcome) -> List[Tuple[str, str]]:
    """Return (label, value) pairs describing an outcome."""

    if isinstance(outcome, Extracted):
        return [
            ("Result", "extracted"),
            ("Rule", outcome.rule_name or outcome.rule_id),
            ("Amount", str(outcome.amount)),
            ("Merchant", outcome.merchant_name),
            ("Date", outcome.date.isoformat()),
            ("Category", outcome.category),
            ("Notes", outcome.notes),
            ("Payment", outcome.payment_label),
            ("Kind", outcome.transaction_kind),
        ]
    if isinstance(outcome, Placeholder):
        return [
            ("Result", "placeholder"),
            ("Rule", outcome.rule_label),
            ("Merchant", outcome.merchant_name),
            ("Date", outcome.date.isoformat()),
            ("Payment", outcome.payment_label or ""),
        ]
    if isinstance(outcome, Skipped):
        return [("Result", "skipped"), ("Rule", outcome.rule_id)]
    return [("Result", "no match")]


def describe_outcome(outcome: ExtractionOutcome) -> str:
    """One-line plain text summary, used in logs."""

    return ", ".join(f"{label}: {value}" for label, value in outcome_fields(outcome) if value)


def outcome_table(outcome: ExtractionOutcome) -> Table:
    table = Table(show_header=False, box=None)
    table.add_column(style="bold")
    table.add_column()
    for label, value in outcome_fields(outcome):
        table.add_row(label, Text(value))
    return table


def summary_table(summary: ScanSummary) -> Table:
    table = Table(title="Scan summary")
    table.add_column("Messages", justify="right")
    table.add_column("Extracted", justify="right")
    table.add_column("Placeholders", justify="right")
    table.add_column("Duplicates", justify="right")
    table.add_column("Unmatched", justify="right")
    table.add_column("Failed", justify="right")
    table.add_row(
        str(summary.scanned),
        str(summary.extracted),
        str(summary.placeholders),
        str(summary.duplicates),
        str(summary.unmatched),
        str(summary.failed),
    )
    return table


def suggestions_table(suggestions: PatternSuggestions) -> Table:
    table = Table(title="Suggested patterns")
    table.add_column("Field", style="bold")
    table.add_column("Pattern")
    sections = [
        ("amount_regex", suggestions.amount_patterns),
        ("merchant_condition", suggestions.merchant_patterns),
        ("merchant_common_patterns", suggestions.merchant_cleaning_patterns),
    ]
    for field_name, patterns in sections:
        for pattern in patterns:
            # Text() keeps rich from reading brackets in patterns as markup.
            table.add_row(field_name, Text(pattern))
    return table
