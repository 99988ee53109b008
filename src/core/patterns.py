"""Safe, case-insensitive pattern evaluation (core domain).

Rules are user-authored, so any pattern may be malformed. Evaluation never
raises on a bad pattern: it is treated as non-matching and reported once
to the injected logger.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

LOGGER = logging.getLogger(__name__)


class PatternCompileError(ValueError):
    """A user-authored pattern failed to compile."""

    def __init__(self, pattern: str, error: re.error) -> None:
        self.pattern = pattern
        self.error = error
        super().__init__(f"Invalid pattern {pattern!r}: {error}")


class PatternEvaluator:
    """Compile-once evaluator for user-authored patterns.

    Compiled patterns (and compile failures) are cached per evaluator, so a
    single instance can be shared across a batch. The cache only memoizes
    `re.compile`, which keeps `test`/`capture` pure with respect to their
    inputs.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or LOGGER
        self._compiled: dict[str, Optional[re.Pattern]] = {}

    def compile_strict(self, pattern: str) -> re.Pattern:
        """Compile a pattern, raising PatternCompileError on bad syntax."""

        try:
            return re.compile(pattern, re.IGNORECASE)
        except re.error as exc:
            raise PatternCompileError(pattern, exc) from exc

    def compile(self, pattern: str) -> Optional[re.Pattern]:
        """Return the compiled pattern, or None if it is malformed."""

        if pattern in self._compiled:
            return self._compiled[pattern]
        try:
            compiled: Optional[re.Pattern] = self.compile_strict(pattern)
        except PatternCompileError as exc:
            self._logger.warning("Ignoring malformed pattern %r: %s", pattern, exc.error)
            compiled = None
        self._compiled[pattern] = compiled
        return compiled

    def test(self, pattern: str, text: Optional[str]) -> bool:
        """Return True when the pattern matches anywhere in the text."""

        if not pattern or not pattern.strip() or text is None:
            return False
        compiled = self.compile(pattern)
        if compiled is None:
            return False
        return compiled.search(text) is not None

    def capture(self, pattern: str, text: Optional[str]) -> Optional[str]:
        """Return the first capture group of the first match, if any."""

        if not pattern or not pattern.strip() or text is None:
            return None
        compiled = self.compile(pattern)
        if compiled is None or compiled.groups < 1:
            return None
        match = compiled.search(text)
        if match is None:
            return None
        return match.group(1)

    def matches_any(self, patterns, text: Optional[str]) -> bool:
        """OR-match a list of patterns against the text."""

        return any(self.test(pattern, text) for pattern in patterns)

    def contains_or_matches(self, pattern: str, text: Optional[str]) -> bool:
        """Case-insensitive substring check, falling back to a pattern match.

        Used for sender/subject gating where users usually type a literal
        fragment ("alerts@bank.com") but may also write a pattern.
        """

        if not pattern or not pattern.strip() or text is None:
            return False
        if pattern.lower() in text.lower():
            return True
        return self.test(pattern, text)
