"""Best-effort pattern suggestions for rule authoring.

Not used by the engine: this only proposes starting points for the amount
and merchant patterns of a new rule, given one sample message.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import List

_CURRENCY_AMOUNT = re.compile(r"\b(?:Rs|INR)\.?\s*[\d,.]+|₹\s*[\d,.]+", re.IGNORECASE)
_MERCHANT_KEYWORDS = ("at", "to", "in")
_DATED_SUFFIX = re.compile(r"\bon \d{1,2}[-/][A-Za-z0-9]{1,9}", re.IGNORECASE)
_ON_SUFFIX = re.compile(r"\bon [\w\s]+", re.IGNORECASE)


@dataclass
class PatternSuggestions:
    amount_patterns: List[str] = field(default_factory=list)
    merchant_patterns: List[str] = field(default_factory=list)
    merchant_cleaning_patterns: List[str] = field(default_factory=list)


def _unique(items: List[str]) -> List[str]:
    return list(dict.fromkeys(items))


def suggest_patterns(text: str) -> PatternSuggestions:
    """Suggest amount, merchant and cleaning patterns for a sample message."""

    suggestions = PatternSuggestions()

    if _CURRENCY_AMOUNT.search(text):
        suggestions.amount_patterns.append(r"(?:Rs|INR|₹)\.?\s*([\d,.]+)")
    suggestions.amount_patterns.append(r"([\d,.]+)")

    for keyword in _MERCHANT_KEYWORDS:
        if re.search(rf"\b{keyword} [A-Za-z0-9&.'-]", text, re.IGNORECASE):
            suggestions.merchant_patterns.append(rf"\b{keyword} ([^.,\n]+?)(?: on|\.|,|$)")
    if re.search(r"\b(?:at|to|in)\b", text, re.IGNORECASE):
        suggestions.merchant_patterns.append(r"\b(?:at|to|in)\s+(\S+)")

    # "at XYZ Store on 12-05-2025" -> keep "XYZ Store"
    if _DATED_SUFFIX.search(text):
        suggestions.merchant_cleaning_patterns.append(r"^(.+?)\s+on\s+\d+")
    if _ON_SUFFIX.search(text):
        suggestions.merchant_cleaning_patterns.append(r"^(.+?)\s+on\s+.+")

    suggestions.amount_patterns = _unique(suggestions.amount_patterns)
    suggestions.merchant_patterns = _unique(suggestions.merchant_patterns)
    suggestions.merchant_cleaning_patterns = _unique(suggestions.merchant_cleaning_patterns)
    return suggestions
