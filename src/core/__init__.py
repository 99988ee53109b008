"""Core domain package for ledgerlens.

Core contains rules, extraction, and deduplication logic without any mail,
SMS or storage-specific code, keeping the business logic portable.
"""
