"""Static configuration for ledgerlens.

All user-editable settings (rules, merchant notes, dedup, logging) live in
a single JSON file for quick edits without touching Python.
"""

import json
import os

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# LEDGERLENS_CONFIG points at an alternate config file (e.g. per mailbox).
CONFIG_PATH = os.getenv("LEDGERLENS_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema.

    A missing file yields an empty config so that helper commands such as
    `suggest` work before any rules exist.
    """

    if not os.path.exists(CONFIG_PATH):
        return {}

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Where to store the SQLite database.
DB_PATH = _resolve_path(_CONFIG.get("db_path", "ledgerlens.db"))

# Rules and merchant notes are user-authored and loaded as plain records.
RULES_CONFIG = _CONFIG.get("rules", [])
MERCHANT_NOTES_CONFIG = _CONFIG.get("merchant_notes", [])

# Batch scan controls.
# - DEDUP_MODE: "off", "per_sender", or "global"
# - DUPLICATE_WINDOW_SECONDS: same amount + merchant within this window is a duplicate
# - SCAN_DELAY_SECONDS: pacing between messages for rate-limited sources
_scan = _CONFIG.get("scan", {})
DEDUP_MODE = _scan.get("dedup_mode", "per_sender")
DUPLICATE_WINDOW_SECONDS = int(_scan.get("duplicate_window_seconds", 30))
SCAN_DELAY_SECONDS = float(_scan.get("delay_seconds", 0))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
