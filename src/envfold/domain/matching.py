"""Pattern matching capability used by whitelist and blacklist rules.

Every match is anchored: the pattern has to consume the whole name.
The resolution engine only talks to the :class:`PatternMatcher` protocol,
so any conforming matcher (e.g. one supplied by a plugin) can replace
the default :class:`RegexMatcher`.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Protocol, runtime_checkable

DEFAULT_CACHE_SIZE = 256


class PatternSyntaxError(ValueError):
    """Raised by a matcher when a pattern is not valid syntax."""


@runtime_checkable
class PatternMatcher(Protocol):
    """Anchored full-string matching of a pattern against a name."""

    def validate(self, pattern: str) -> None:
        """Raise :class:`PatternSyntaxError` if *pattern* cannot be used."""
        ...

    def full_match(self, pattern: str, name: str) -> bool:
        """Return True if *pattern* matches the entire *name*."""
        ...


class RegexMatcher:
    """Default matcher backed by :mod:`re` with a compiled-pattern cache."""

    def __init__(self, cache_size: int = DEFAULT_CACHE_SIZE) -> None:
        self.cache_size = cache_size
        self._compile = lru_cache(maxsize=cache_size)(self._compile_uncached)

    @staticmethod
    def _compile_uncached(pattern: str) -> re.Pattern[str]:
        # re also rejects some patterns with OverflowError (huge repeat
        # counts) or RecursionError (very deep nesting).
        try:
            return re.compile(pattern)
        except (re.error, OverflowError, RecursionError) as exc:
            raise PatternSyntaxError(str(exc)) from exc

    def validate(self, pattern: str) -> None:
        self._compile(pattern)

    def full_match(self, pattern: str, name: str) -> bool:
        return self._compile(pattern).fullmatch(name) is not None
