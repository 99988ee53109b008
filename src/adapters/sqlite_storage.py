"""SQLite storage adapter.

Implements the core TransactionStorePort and the merchant-note lookup using
a simple SQLite database.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional

from core.models import Extracted, MerchantNote, Message, Placeholder

KIND_PLACEHOLDER = "placeholder"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the TransactionStorePort contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - seen: fingerprints of processed messages
        - transactions: append-only log of extracted and placeholder records
        - merchant_notes: saved category/notes per merchant name
        """

        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS seen (
                    fingerprint TEXT PRIMARY KEY,
                    first_seen TIMESTAMP NOT NULL
                )
                """
            )
            # Fields:
            # - kind: expense, income, or placeholder (amount is NULL for placeholders)
            # - date: transaction date in UTC ISO-8601
            # - sender/subject: copied from the message for auditing
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS transactions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    kind TEXT NOT NULL,
                    amount TEXT,
                    merchant_name TEXT NOT NULL,
                    date TIMESTAMP NOT NULL,
                    category TEXT,
                    notes TEXT,
                    payment_label TEXT,
                    rule_id TEXT,
                    rule_name TEXT,
                    sender TEXT,
                    subject TEXT,
                    created_at TIMESTAMP NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS merchant_notes (
                    merchant_name TEXT PRIMARY KEY,
                    category TEXT,
                    notes TEXT,
                    last_updated TIMESTAMP NOT NULL
                )
                """
            )

    def is_seen(self, fingerprint: str) -> bool:
        """Check if a fingerprint has already been recorded."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM seen WHERE fingerprint = ?",
                (fingerprint,),
            ).fetchone()
        return row is not None

    def mark_seen(self, fingerprint: str) -> None:
        """Insert a fingerprint if it does not exist."""

        now = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR IGNORE INTO seen (fingerprint, first_seen)
                VALUES (?, ?)
                """,
                (fingerprint, now.isoformat()),
            )

    def has_similar_transaction(
        self,
        amount: Decimal,
        merchant_name: str,
        date: datetime,
        window_seconds: int,
    ) -> bool:
        """True if a stored transaction has the same amount and merchant close in time."""

        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT amount, date FROM transactions
                WHERE kind != ? AND lower(merchant_name) = lower(?)
                """,
                (KIND_PLACEHOLDER, merchant_name),
            ).fetchall()
        target = _as_utc(date)
        for row in rows:
            # Amounts are stored as text; "450" and "450.00" are the same value.
            if row["amount"] is None or Decimal(row["amount"]) != amount:
                continue
            stored = _as_utc(datetime.fromisoformat(row["date"]))
            if abs((stored - target).total_seconds()) < window_seconds:
                return True
        return False

    def _insert(self, conn: sqlite3.Connection, message: Message, values: dict) -> None:
        conn.execute(
            """
            INSERT INTO transactions (
                kind,
                amount,
                merchant_name,
                date,
                category,
                notes,
                payment_label,
                rule_id,
                rule_name,
                sender,
                subject,
                created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                values["kind"],
                values.get("amount"),
                values["merchant_name"],
                _as_utc(values["date"]).isoformat(),
                values.get("category"),
                values.get("notes"),
                values.get("payment_label"),
                values.get("rule_id"),
                values.get("rule_name"),
                message.sender,
                message.subject,
                datetime.now(timezone.utc).isoformat(),
            ),
        )

    def save_transaction(self, message: Message, outcome: Extracted) -> None:
        """Persist an extracted transaction."""

        with self._connect() as conn:
            self._insert(
                conn,
                message,
                {
                    "kind": outcome.transaction_kind,
                    "amount": str(outcome.amount),
                    "merchant_name": outcome.merchant_name,
                    "date": outcome.date,
                    "category": outcome.category,
                    "notes": outcome.notes,
                    "payment_label": outcome.payment_label,
                    "rule_id": outcome.rule_id,
                    "rule_name": outcome.rule_name,
                },
            )

    def save_placeholder(self, message: Message, outcome: Placeholder) -> None:
        """Persist a placeholder, tagged distinctly from priced transactions."""

        with self._connect() as conn:
            self._insert(
                conn,
                message,
                {
                    "kind": KIND_PLACEHOLDER,
                    "merchant_name": outcome.merchant_name,
                    "date": outcome.date,
                    "payment_label": outcome.payment_label,
                    "rule_id": outcome.rule_id,
                    "rule_name": outcome.rule_label,
                },
            )

    def list_transactions(self) -> list[dict]:
        """Return all stored transactions, oldest first."""

        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM transactions ORDER BY id").fetchall()
        return [dict(row) for row in rows]

    def get_merchant_note(self, merchant_name: str) -> Optional[MerchantNote]:
        """Exact-name lookup used for enrichment."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT merchant_name, category, notes FROM merchant_notes WHERE merchant_name = ?",
                (merchant_name,),
            ).fetchone()
        if row is None:
            return None
        return MerchantNote(
            merchant_name=row["merchant_name"],
            category=row["category"] or None,
            notes=row["notes"] or None,
        )

    def upsert_merchant_note(self, note: MerchantNote) -> None:
        """Insert or replace the note for a merchant."""

        now = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO merchant_notes (merchant_name, category, notes, last_updated)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(merchant_name) DO UPDATE SET
                    category = excluded.category,
                    notes = excluded.notes,
                    last_updated = excluded.last_updated
                """,
                (note.merchant_name, note.category or "", note.notes or "", now.isoformat()),
            )

    def import_merchant_notes(self, raw_notes: Iterable[dict]) -> int:
        """Upsert notes from config records; returns the number imported."""

        imported = 0
        for raw in raw_notes:
            merchant_name = (raw.get("merchant_name") or "").strip()
            if not merchant_name:
                continue
            self.upsert_merchant_note(
                MerchantNote(
                    merchant_name=merchant_name,
                    category=raw.get("category") or None,
                    notes=raw.get("notes") or None,
                )
            )
            imported += 1
        return imported
