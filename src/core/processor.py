"""Core message processing pipeline.

This module is integration-agnostic. It only relies on the storage port,
so messages may come from mail, SMS or a file without changes here.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Iterable

from core.config import ScanConfig
from core.dedup import compute_fingerprint
from core.models import NO_MATCH, Extracted, ExtractionOutcome, Message, Placeholder
from core.ports import TransactionStorePort
from core.rules_engine import RuleEngine

LOGGER = logging.getLogger(__name__)

STATUS_EXTRACTED = "extracted"
STATUS_PLACEHOLDER = "placeholder"
STATUS_DUPLICATE = "duplicate"
STATUS_UNMATCHED = "unmatched"


@dataclass(frozen=True)
class HandleResult:
    """Outcome of one message plus what the processor did with it."""

    outcome: ExtractionOutcome
    status: str


@dataclass
class ScanSummary:
    """Counters reported at the end of a batch scan."""

    scanned: int = 0
    extracted: int = 0
    placeholders: int = 0
    duplicates: int = 0
    unmatched: int = 0
    failed: int = 0


class MessageProcessor:
    """Orchestrates dedup, rule evaluation and persistence."""

    def __init__(
        self,
        engine: RuleEngine,
        storage: TransactionStorePort,
        scan_config: ScanConfig,
    ) -> None:
        self._engine = engine
        self._storage = storage
        self._config = scan_config

    def handle(self, message: Message) -> HandleResult:
        """Process one message through the pipeline.

        Order: empty-body exit, message-level dedup, rule evaluation,
        transaction-level duplicate check, persistence, mark seen.
        """

        if not message.body.strip():
            return HandleResult(NO_MATCH, STATUS_UNMATCHED)

        fingerprint = compute_fingerprint(message, self._config.dedup_mode)
        if fingerprint and self._storage.is_seen(fingerprint):
            LOGGER.info("Dedup skip for %s (same message)", message.sender)
            return HandleResult(NO_MATCH, STATUS_DUPLICATE)

        outcome = self._engine.evaluate(message)

        if isinstance(outcome, Extracted):
            if self._storage.has_similar_transaction(
                outcome.amount,
                outcome.merchant_name,
                outcome.date,
                self._config.duplicate_window_seconds,
            ):
                LOGGER.info("Skipping duplicate transaction: %s - %s", outcome.merchant_name, outcome.amount)
                status = STATUS_DUPLICATE
            else:
                self._storage.save_transaction(message, outcome)
                LOGGER.info("Transaction saved for %s (%s)", outcome.merchant_name, outcome.rule_name)
                status = STATUS_EXTRACTED
        elif isinstance(outcome, Placeholder):
            self._storage.save_placeholder(message, outcome)
            LOGGER.info("Placeholder saved for %s (%s)", outcome.merchant_name, outcome.rule_label)
            status = STATUS_PLACEHOLDER
        else:
            status = STATUS_UNMATCHED

        # Marked only after persistence so a crash mid-message is retried on the next scan.
        if fingerprint:
            self._storage.mark_seen(fingerprint)
        return HandleResult(outcome, status)

    def scan(self, messages: Iterable[Message]) -> ScanSummary:
        """Process a batch; a failing message never aborts the batch."""

        summary = ScanSummary()
        for index, message in enumerate(messages):
            if index and self._config.scan_delay_seconds > 0:
                time.sleep(self._config.scan_delay_seconds)
            summary.scanned += 1
            try:
                result = self.handle(message)
            except Exception:
                LOGGER.exception("Error while processing message from %s", message.sender)
                summary.failed += 1
                continue

            if result.status == STATUS_EXTRACTED:
                summary.extracted += 1
            elif result.status == STATUS_PLACEHOLDER:
                summary.placeholders += 1
            elif result.status == STATUS_DUPLICATE:
                summary.duplicates += 1
            else:
                summary.unmatched += 1

        LOGGER.info(
            "Scan complete: messages=%s, extracted=%s, placeholders=%s, duplicates=%s, unmatched=%s, failed=%s",
            summary.scanned,
            summary.extracted,
            summary.placeholders,
            summary.duplicates,
            summary.unmatched,
            summary.failed,
        )
        return summary
