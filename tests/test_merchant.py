from __future__ import annotations

from core.merchant import (
    DelimiterExtractor,
    PatternExtractor,
    extract_merchant,
    merchant_from_sender,
)
from core.models import UNKNOWN_MERCHANT
from core.patterns import PatternEvaluator


def test_delimiter_extracts_between_markers() -> None:
    extractor = DelimiterExtractor(start_text="to ", end_text=" on", occurrence_index=1)
    assert extractor.extract("paid to Joe's Cafe on 5th", PatternEvaluator()) == "Joe's Cafe"


def test_delimiter_uses_nth_occurrence() -> None:
    extractor = DelimiterExtractor(start_text="to ", end_text=" on", occurrence_index=2)
    text = "Rs 50 sent to UPI to Corner Store on 01-02"
    assert extractor.extract(text, PatternEvaluator()) == "Corner Store"


def test_delimiter_requires_both_markers() -> None:
    evaluator = PatternEvaluator()
    assert DelimiterExtractor("to ", " on").extract("paid to Joe's Cafe", evaluator) is None
    assert DelimiterExtractor("at ", " on").extract("paid to Joe's Cafe on 5th", evaluator) is None
    assert DelimiterExtractor("to ", " on", 3).extract("paid to Joe's Cafe on 5th", evaluator) is None


def test_delimiter_search_is_case_sensitive() -> None:
    extractor = DelimiterExtractor(start_text="to ", end_text=" on")
    assert extractor.extract("PAID TO JOE ON 5TH", PatternEvaluator()) is None


def test_delimiter_empty_span_fails() -> None:
    extractor = DelimiterExtractor(start_text="to", end_text="on")
    assert extractor.extract("paid to   on 5th", PatternEvaluator()) is None


def test_delimiter_open_ended_markers() -> None:
    evaluator = PatternEvaluator()
    assert DelimiterExtractor(start_text="", end_text=" Limit").extract("SWIGGY Limit: 500", evaluator) == "SWIGGY"
    assert DelimiterExtractor(start_text="at ", end_text="").extract("spent at Big Bazaar", evaluator) == "Big Bazaar"


def test_pattern_extractor_trims_and_rejects_blank() -> None:
    evaluator = PatternEvaluator()
    assert PatternExtractor(r"at\s+(.+?)\s+on").extract("spent at  Cafe Mocha  on 02", evaluator) == "Cafe Mocha"
    assert PatternExtractor(r"at(\s*)on").extract("at on", evaluator) is None


def test_cascade_first_success_wins() -> None:
    extractors = [
        PatternExtractor(r"merchant:\s*(\w+)"),
        PatternExtractor(r"at ([A-Za-z]+)"),
        DelimiterExtractor("spent at ", " on"),
    ]
    text = "Rs. 450.00 spent at Cafe Mocha on 02-Jan"
    assert extract_merchant(extractors, text, PatternEvaluator()) == "Cafe"


def test_cascade_skips_malformed_pattern() -> None:
    extractors = [PatternExtractor("at ([A-Z"), DelimiterExtractor("spent at ", " on")]
    text = "Rs. 450.00 spent at Cafe Mocha on 02-Jan"
    assert extract_merchant(extractors, text, PatternEvaluator()) == "Cafe Mocha"


def test_cascade_returns_none_when_nothing_matches() -> None:
    extractors = [PatternExtractor(r"at (\w+)")]
    assert extract_merchant(extractors, "no merchant here", PatternEvaluator()) is None
    assert extract_merchant(extractors, None, PatternEvaluator()) is None
    assert extract_merchant([], "spent at Shop", PatternEvaluator()) is None


def test_merchant_from_sender_display_name() -> None:
    assert merchant_from_sender("Amazon.in <no-reply@amazon.in>") == "Amazon.in"


def test_merchant_from_sender_domain() -> None:
    assert merchant_from_sender("no-reply@paypal.com") == "Paypal"
    assert merchant_from_sender("<auto@swiggy.in>") == "Swiggy"


def test_merchant_from_sender_unknown() -> None:
    assert merchant_from_sender("HDFCBK") == UNKNOWN_MERCHANT
    assert merchant_from_sender("") == UNKNOWN_MERCHANT
    assert merchant_from_sender("user@") == UNKNOWN_MERCHANT
