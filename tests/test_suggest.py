from __future__ import annotations

from core.patterns import PatternEvaluator
from core.suggest import suggest_patterns


def test_suggestions_for_bank_sms() -> None:
    text = "Rs. 450.00 spent at Cafe Mocha on 02-Jan"
    suggestions = suggest_patterns(text)

    assert suggestions.amount_patterns[0] == r"(?:Rs|INR|₹)\.?\s*([\d,.]+)"
    assert suggestions.amount_patterns[-1] == r"([\d,.]+)"
    assert r"^(.+?)\s+on\s+\d+" in suggestions.merchant_cleaning_patterns

    evaluator = PatternEvaluator()
    assert evaluator.capture(suggestions.amount_patterns[0], text) == "450.00"
    assert evaluator.capture(suggestions.merchant_patterns[0], text) == "Cafe Mocha"


def test_suggestions_without_currency_or_keywords() -> None:
    suggestions = suggest_patterns("12345")
    assert suggestions.amount_patterns == [r"([\d,.]+)"]
    assert suggestions.merchant_patterns == []
    assert suggestions.merchant_cleaning_patterns == []


def test_suggestions_are_unique() -> None:
    suggestions = suggest_patterns("INR 20 paid to Ravi on 05/06 via UPI")
    for patterns in (
        suggestions.amount_patterns,
        suggestions.merchant_patterns,
        suggestions.merchant_cleaning_patterns,
    ):
        assert len(patterns) == len(set(patterns))
