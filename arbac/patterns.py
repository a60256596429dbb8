"""Wildcard pattern compilation.

Patterns are dot-separated identifiers with two wildcards:

* ``*`` matches zero or more characters inside one segment (no ``.``)
* ``**`` matches any sequence, crossing segment boundaries

Every other character matches literally, and matching is always against
the whole candidate string.

Usage::

    matcher = compile_pattern("com.resource.db.*")
    matcher.test("com.resource.db.user")      # True
    matcher.test("com.resource.db.user.x")    # False
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass
from typing import Dict, Pattern

from arbac.constants import DOUBLE_WILDCARD, SEGMENT_SEPARATOR, SINGLE_WILDCARD

logger = logging.getLogger(__name__)

_ANY_SEQUENCE = ".*"
_ONE_SEGMENT = f"[^{re.escape(SEGMENT_SEPARATOR)}]*"


@dataclass(frozen=True)
class Matcher:
    """A compiled, anchored wildcard pattern."""

    pattern: str
    regex: Pattern[str]

    def test(self, candidate: str) -> bool:
        """Return ``True`` if *candidate* matches the whole pattern."""
        return self.regex.fullmatch(candidate) is not None


def pattern_to_regex(pattern: str) -> str:
    """Translate a wildcard *pattern* into regular-expression source.

    ``**`` runs are split out first so the single ``*`` expansion never
    sees them.
    """
    parts = []
    for chunk in pattern.split(DOUBLE_WILDCARD):
        parts.append(_ONE_SEGMENT.join(re.escape(p) for p in chunk.split(SINGLE_WILDCARD)))
    return _ANY_SEQUENCE.join(parts)


def compile_pattern(pattern: str) -> Matcher:
    """Compile *pattern* into a :class:`Matcher`.  Any string is accepted."""
    return Matcher(pattern=pattern, regex=re.compile(pattern_to_regex(pattern)))


class PatternCache:
    """Memoises compiled matchers by pattern string.

    Rule definitions stay immutable; the compiled state lives here and is
    shared by every rule that uses the same pattern.
    """

    def __init__(self) -> None:
        self._matchers: Dict[str, Matcher] = {}
        self._lock = threading.Lock()

    def get(self, pattern: str) -> Matcher:
        """Return the matcher for *pattern*, compiling it on first use."""
        matcher = self._matchers.get(pattern)
        if matcher is not None:
            return matcher
        with self._lock:
            matcher = self._matchers.get(pattern)
            if matcher is None:
                matcher = compile_pattern(pattern)
                self._matchers[pattern] = matcher
                logger.debug("Compiled pattern %r -> %s", pattern, matcher.regex.pattern)
        return matcher

    def __contains__(self, pattern: object) -> bool:
        return pattern in self._matchers

    def __len__(self) -> int:
        return len(self._matchers)
