"""Adapters that connect the core to SQLite, message files and the console."""
