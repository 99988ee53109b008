"""Merchant name extraction strategies (core domain)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from core.models import UNKNOWN_MERCHANT
from core.patterns import PatternEvaluator


@dataclass(frozen=True)
class PatternExtractor:
    """Extract the first capture group of a case-insensitive pattern."""

    pattern: str

    def extract(self, text: Optional[str], evaluator: PatternEvaluator) -> Optional[str]:
        captured = evaluator.capture(self.pattern, text)
        if captured is None:
            return None
        return captured.strip() or None


@dataclass(frozen=True)
class DelimiterExtractor:
    """Extract the span between two literal markers.

    The span starts after the `occurrence_index`-th (1-based) occurrence of
    `start_text` and ends at the next `end_text` after it. Marker search is
    case-sensitive. An empty `start_text` anchors at the beginning of the
    text and an empty `end_text` runs to its end.
    """

    start_text: str = ""
    end_text: str = ""
    occurrence_index: int = 1

    def _find_start(self, text: str) -> int:
        if not self.start_text:
            return 0
        position = -1
        search_from = 0
        for _ in range(max(1, self.occurrence_index)):
            position = text.find(self.start_text, search_from)
            if position == -1:
                return -1
            search_from = position + len(self.start_text)
        return search_from

    def extract(self, text: Optional[str], evaluator: PatternEvaluator) -> Optional[str]:
        if not text:
            return None
        start = self._find_start(text)
        if start == -1:
            return None
        if self.end_text:
            end = text.find(self.end_text, start)
            if end == -1:
                return None
        else:
            end = len(text)
        return text[start:end].strip() or None


MerchantExtractor = Union[PatternExtractor, DelimiterExtractor]


def extract_merchant(
    extractors: Iterable[MerchantExtractor],
    text: Optional[str],
    evaluator: PatternEvaluator,
) -> Optional[str]:
    """Run the extractor cascade in order and return the first success."""

    for extractor in extractors:
        merchant = extractor.extract(text, evaluator)
        if merchant:
            return merchant
    return None


def merchant_from_sender(sender: Optional[str]) -> str:
    """Derive a display name from a raw sender address.

    "Amazon.in <no-reply@amazon.in>" -> "Amazon.in"
    "no-reply@paypal.com"            -> "Paypal"
    """

    if not sender:
        return UNKNOWN_MERCHANT

    display_name, bracket, _ = sender.partition("<")
    if bracket and display_name.strip():
        return display_name.strip()

    _, at_sign, domain = sender.partition("@")
    if at_sign:
        label = domain.split(".", 1)[0].strip()
        if label:
            return label[0].upper() + label[1:]

    return UNKNOWN_MERCHANT
