"""Rule compilation and transaction extraction logic (core domain)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
import logging
import re
from typing import Any, Iterable, List, Optional, Tuple

from dateutil import parser as date_parser

from core.enrichment import enrich
from core.merchant import (
    DelimiterExtractor,
    MerchantExtractor,
    PatternExtractor,
    extract_merchant,
    merchant_from_sender,
)
from core.models import (
    DEFAULT_PAYMENT_LABEL,
    NO_MATCH,
    Extracted,
    ExtractionOutcome,
    Message,
    NoMatch,
    Placeholder,
    Skipped,
)
from core.patterns import PatternCompileError, PatternEvaluator
from core.ports import MerchantNoteLookup

LOGGER = logging.getLogger(__name__)

TRANSACTION_KINDS = ("expense", "income")

_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)")


class RuleConfigError(ValueError):
    """A stored rule record is malformed beyond recovery."""


@dataclass(frozen=True)
class Rule:
    """Compiled rule used by the engine.

    `order` is the rule's registration index and breaks priority ties.
    """

    id: str
    name: str
    enabled: bool
    priority: int
    sender_patterns: Tuple[str, ...]
    subject_patterns: Tuple[str, ...] = ()
    amount_patterns: Tuple[str, ...] = ()
    merchant_extractors: Tuple[MerchantExtractor, ...] = ()
    skip_patterns: Tuple[str, ...] = ()
    no_extract_patterns: Tuple[str, ...] = ()
    date_capture_pattern: Optional[str] = None
    payment_label: Optional[str] = None
    extract_merchant_from_subject: bool = False
    additional_search_hint: Optional[str] = None
    transaction_kind: str = "expense"
    order: int = 0


def _as_patterns(value: Any) -> Tuple[str, ...]:
    """Normalize a string-or-list config value, dropping blank entries."""

    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    return tuple(str(item) for item in value if item is not None and str(item).strip())


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _as_enabled(name: str, value: Any) -> bool:
    if value is None:
        return True
    if not isinstance(value, bool):
        raise RuleConfigError(f"Rule {name!r} has a non-boolean enabled flag {value!r}")
    return value


def _build_extractors(name: str, rule: dict) -> Tuple[MerchantExtractor, ...]:
    """Flatten the cleaning, condition and delimiter settings into one cascade."""

    extractors: List[MerchantExtractor] = []
    for pattern in _as_patterns(rule.get("merchant_common_patterns")):
        extractors.append(PatternExtractor(pattern))
    for pattern in _as_patterns(rule.get("merchant_condition")):
        extractors.append(PatternExtractor(pattern))
    for position, extraction in enumerate(rule.get("merchant_extractions") or []):
        if not isinstance(extraction, dict):
            raise RuleConfigError(f"Rule {name!r} merchant extraction #{position} is not an object")
        start_text = extraction.get("start_text") or ""
        end_text = extraction.get("end_text") or ""
        if not start_text and not end_text:
            continue
        try:
            occurrence_index = int(extraction.get("start_index") or 1)
        except (TypeError, ValueError) as exc:
            raise RuleConfigError(
                f"Rule {name!r} merchant extraction #{position} has a non-integer start_index"
            ) from exc
        extractors.append(
            DelimiterExtractor(
                start_text=start_text,
                end_text=end_text,
                occurrence_index=occurrence_index,
            )
        )
    return tuple(extractors)


def build_rules(rules_config: Iterable[dict]) -> List[Rule]:
    """Normalize rule configs into immutable Rule records.

    Disabled rules are kept so that callers can toggle them without losing
    their registration order; the engine filters them at evaluation time.
    """

    compiled: List[Rule] = []
    for index, rule in enumerate(rules_config):
        if not isinstance(rule, dict):
            raise RuleConfigError(f"Rule #{index} is not an object")
        name = _optional_text(rule.get("name"))
        if name is None:
            raise RuleConfigError(f"Rule #{index} has no name")
        kind = str(rule.get("transaction_type") or "expense").lower()
        if kind not in TRANSACTION_KINDS:
            raise RuleConfigError(f"Rule {name!r} has unknown transaction_type {kind!r}")
        try:
            priority = int(rule.get("priority") or 0)
        except (TypeError, ValueError) as exc:
            raise RuleConfigError(f"Rule {name!r} has a non-integer priority") from exc
        compiled.append(
            Rule(
                id=str(rule.get("id") or name),
                name=name,
                enabled=_as_enabled(name, rule.get("enabled")),
                priority=priority,
                sender_patterns=_as_patterns(rule.get("sender_match")),
                subject_patterns=_as_patterns(rule.get("subject_match")),
                amount_patterns=_as_patterns(rule.get("amount_regex")),
                merchant_extractors=_build_extractors(name, rule),
                skip_patterns=_as_patterns(rule.get("skip_condition")),
                no_extract_patterns=_as_patterns(rule.get("no_extract_condition")),
                date_capture_pattern=_optional_text(rule.get("date_regex")),
                payment_label=_optional_text(rule.get("payment_bank")),
                extract_merchant_from_subject=bool(rule.get("extract_merchant_from_subject", False)),
                additional_search_hint=_optional_text(rule.get("additional_search_query")),
                transaction_kind=kind,
                order=index,
            )
        )
    return compiled


def validate_rule(rule: Rule, evaluator: Optional[PatternEvaluator] = None) -> List[PatternCompileError]:
    """Strictly compile every pattern-only field and collect the failures.

    Sender and subject entries are skipped because they are usually literal
    fragments matched by substring.
    """

    evaluator = evaluator or PatternEvaluator()
    patterns: List[str] = [
        *rule.amount_patterns,
        *rule.skip_patterns,
        *rule.no_extract_patterns,
        *(extractor.pattern for extractor in rule.merchant_extractors if isinstance(extractor, PatternExtractor)),
    ]
    if rule.date_capture_pattern:
        patterns.append(rule.date_capture_pattern)

    errors: List[PatternCompileError] = []
    for pattern in patterns:
        try:
            evaluator.compile_strict(pattern)
        except PatternCompileError as exc:
            errors.append(exc)
    return errors


def order_rules(rules: Iterable[Rule]) -> List[Rule]:
    """Enabled rules, highest priority first, then registration order."""

    return sorted((rule for rule in rules if rule.enabled), key=lambda rule: (-rule.priority, rule.order))


def parse_amount(raw: Optional[str]) -> Optional[Decimal]:
    """Parse a captured amount, stripping thousands separators.

    Only the leading numeric part is used, so "450.00." still parses.
    Returns None for anything that is not a finite number.
    """

    if raw is None:
        return None
    cleaned = raw.replace(",", "").strip()
    match = _LEADING_NUMBER.match(cleaned)
    if match is None:
        return None
    try:
        amount = Decimal(match.group(0))
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return abs(amount)


def parse_date(raw: Optional[str], default: datetime) -> Optional[datetime]:
    """Parse a captured date string, filling missing parts from `default`."""

    if raw is None or not raw.strip():
        return None
    base = default.replace(hour=0, minute=0, second=0, microsecond=0)
    try:
        return date_parser.parse(raw.strip(), default=base)
    except (ValueError, OverflowError):
        return None


def _gate_passes(patterns: Tuple[str, ...], text: Optional[str], evaluator: PatternEvaluator) -> bool:
    return any(evaluator.contains_or_matches(pattern, text) for pattern in patterns)


def _extract_amount(rule: Rule, body: str, evaluator: PatternEvaluator) -> Optional[Decimal]:
    for pattern in rule.amount_patterns:
        amount = parse_amount(evaluator.capture(pattern, body))
        if amount is not None:
            return amount
    return None


def _extract_date(rule: Rule, message: Message, evaluator: PatternEvaluator) -> datetime:
    if not rule.date_capture_pattern:
        return message.received_at
    captured = evaluator.capture(rule.date_capture_pattern, message.body)
    parsed = parse_date(captured, message.received_at)
    if parsed is None:
        if captured is not None:
            LOGGER.debug("Rule %s: unparseable date %r, using received time", rule.name, captured)
        return message.received_at
    return parsed


def match_rule(rule: Rule, message: Message, evaluator: PatternEvaluator) -> ExtractionOutcome:
    """Evaluate one rule against one message.

    Steps short-circuit in order: enabled, sender, subject, skip, amount,
    merchant, date, no-extract.
    """

    if not rule.enabled:
        return NO_MATCH

    if not _gate_passes(rule.sender_patterns, message.sender, evaluator):
        return NO_MATCH

    if rule.subject_patterns and not _gate_passes(rule.subject_patterns, message.subject, evaluator):
        return NO_MATCH

    if evaluator.matches_any(rule.skip_patterns, message.body):
        LOGGER.debug("Rule %s: skip condition matched", rule.name)
        return Skipped(rule_id=rule.id)

    amount = _extract_amount(rule, message.body, evaluator)
    if amount is None:
        LOGGER.debug("Rule %s: no amount found", rule.name)
        return NO_MATCH

    merchant_source = message.subject if rule.extract_merchant_from_subject else message.body
    merchant_name = extract_merchant(rule.merchant_extractors, merchant_source, evaluator)
    if merchant_name is None:
        merchant_name = merchant_from_sender(message.sender)

    date = _extract_date(rule, message, evaluator)

    if evaluator.matches_any(rule.no_extract_patterns, message.body):
        return Placeholder(
            merchant_name=merchant_name,
            rule_label=rule.name,
            payment_label=rule.payment_label,
            date=date,
            rule_id=rule.id,
        )

    return Extracted(
        amount=amount,
        merchant_name=merchant_name,
        date=date,
        payment_label=rule.payment_label or DEFAULT_PAYMENT_LABEL,
        transaction_kind=rule.transaction_kind,
        rule_id=rule.id,
        rule_name=rule.name,
    )


def evaluate(
    rules: Iterable[Rule],
    message: Message,
    notes_lookup: Optional[MerchantNoteLookup] = None,
    evaluator: Optional[PatternEvaluator] = None,
) -> ExtractionOutcome:
    """Return the outcome of the first rule that yields a decisive result.

    Skipped rules behave like non-matching ones: evaluation moves on to the
    next rule. Only Extracted outcomes are enriched from merchant notes.
    """

    evaluator = evaluator or PatternEvaluator()
    for rule in order_rules(rules):
        outcome = match_rule(rule, message, evaluator)
        if isinstance(outcome, (NoMatch, Skipped)):
            continue
        LOGGER.debug("Rule %s produced %s", rule.name, type(outcome).__name__)
        if isinstance(outcome, Extracted):
            return enrich(outcome, notes_lookup)
        return outcome
    return NO_MATCH


class RuleEngine:
    """Evaluator bound to an immutable snapshot of rules and a notes lookup."""

    def __init__(
        self,
        rules: Iterable[Rule],
        notes_lookup: Optional[MerchantNoteLookup] = None,
        evaluator: Optional[PatternEvaluator] = None,
    ) -> None:
        self._rules = tuple(order_rules(rules))
        self._notes_lookup = notes_lookup
        self._evaluator = evaluator or PatternEvaluator()

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return self._rules

    def evaluate(self, message: Message) -> ExtractionOutcome:
        return evaluate(self._rules, message, self._notes_lookup, self._evaluator)
