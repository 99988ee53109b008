"""Application entry point for the ledgerlens extractor."""

from __future__ import annotations

import argparse
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from rich.console import Console
from rich.markup import escape

import settings
from adapters.message_mapper import build_message, load_messages
from adapters.report_formatting import (
    describe_outcome,
    outcome_table,
    suggestions_table,
    summary_table,
)
from adapters.sqlite_storage import SQLiteStorage
from core.config import ScanConfig
from core.processor import MessageProcessor
from core.rules_engine import RuleEngine, build_rules, validate_rule
from core.suggest import suggest_patterns

NAME = "LEDGERLENS"
FONT = "tarty-1"

CONSOLE = Console()


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/ledgerlens.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _open_storage() -> SQLiteStorage:
    storage = SQLiteStorage(settings.DB_PATH)
    storage.init_db()
    imported = storage.import_merchant_notes(settings.MERCHANT_NOTES_CONFIG)
    if imported:
        logging.getLogger(__name__).info("%s merchant notes imported from config", imported)
    return storage


def _scan(path: str) -> int:
    logger = logging.getLogger(__name__)

    rules = build_rules(settings.RULES_CONFIG)
    if not any(rule.enabled for rule in rules):
        CONSOLE.print("No enabled rules configured; nothing to scan.")
        return 1
    logger.info("%s rules are loaded", len(rules))

    storage = _open_storage()
    engine = RuleEngine(rules, notes_lookup=storage.get_merchant_note)
    processor = MessageProcessor(
        engine=engine,
        storage=storage,
        scan_config=ScanConfig(
            dedup_mode=settings.DEDUP_MODE,
            duplicate_window_seconds=settings.DUPLICATE_WINDOW_SECONDS,
            scan_delay_seconds=settings.SCAN_DELAY_SECONDS,
        ),
    )

    messages = load_messages(path)
    logger.info("Processing %s messages from %s", len(messages), path)
    summary = processor.scan(messages)
    CONSOLE.print(summary_table(summary))
    return 0


def _test(sender: str, subject: Optional[str], body: str) -> int:
    rules = build_rules(settings.RULES_CONFIG)
    storage = _open_storage()
    engine = RuleEngine(rules, notes_lookup=storage.get_merchant_note)
    message = build_message(
        {
            "sender": sender,
            "subject": subject,
            "body": body,
            "date": datetime.now(timezone.utc).isoformat(),
        }
    )
    outcome = engine.evaluate(message)
    logging.getLogger(__name__).info("Rule test: %s", describe_outcome(outcome))
    CONSOLE.print(outcome_table(outcome))
    return 0


def _validate() -> int:
    rules = build_rules(settings.RULES_CONFIG)
    failures = 0
    for rule in rules:
        for error in validate_rule(rule):
            failures += 1
            CONSOLE.print(f"[bold red]{escape(rule.name)}[/]: {escape(str(error))}")
    CONSOLE.print(f"{len(rules)} rules checked, {failures} invalid patterns")
    return 1 if failures else 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="ledgerlens")
    subparsers = parser.add_subparsers(dest="command")

    scan_parser = subparsers.add_parser("scan", help="Extract transactions from a messages file")
    scan_parser.add_argument("path", help="JSON array or JSON-lines file of messages")

    test_parser = subparsers.add_parser("test", help="Run the configured rules against one message")
    test_parser.add_argument("--sender", required=True)
    test_parser.add_argument("--subject")
    test_parser.add_argument("--body", required=True)

    suggest_parser = subparsers.add_parser("suggest", help="Suggest patterns for a sample message")
    suggest_parser.add_argument("text")

    subparsers.add_parser("validate", help="Check every configured pattern compiles")

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 2

    _configure_logging()
    if args.command == "suggest":
        CONSOLE.print(suggestions_table(suggest_patterns(args.text)))
        return 0
    if args.command == "validate":
        return _validate()
    if args.command == "test":
        return _test(args.sender, args.subject, args.body)

    _print_banner()
    return _scan(args.path)


if __name__ == "__main__":
    raise SystemExit(main())
