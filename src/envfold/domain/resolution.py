"""The resolution fold: Snapshot + RuleSet -> LogicalEnvironment.

Each rule is applied against the *current* working state, left to right:

- whitelist removes every name the pattern does not fully match
- blacklist removes every name the pattern fully matches
- set inserts or overwrites a single name

A whitelist therefore only narrows what survived earlier rules; it never
brings back a name that a previous rule removed.

INVARIANT: resolve() is a pure function of (snapshot, rules). It reads no
process-global state and never fails for a built RuleSet.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum

from envfold.domain.environment import EnvironmentSnapshot, LogicalEnvironment
from envfold.domain.errors import ResolutionStateError
from envfold.domain.matching import PatternMatcher, RegexMatcher
from envfold.domain.rules import BlacklistRule, Rule, RuleSet, SetRule, WhitelistRule

logger = logging.getLogger(__name__)


class ResolutionState(StrEnum):
    UNINITIALIZED = "uninitialized"
    BUILDING = "building"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class RuleEffect:
    """What one rule did to the working state."""

    index: int
    rule: str
    removed: tuple[str, ...] = ()
    written: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "index": self.index,
            "rule": self.rule,
            "removed": list(self.removed),
            "written": list(self.written),
        }


@dataclass
class Resolution:
    """One in-flight resolution. Owns the mutable working state.

    ``UNINITIALIZED -> BUILDING -> RESOLVED``; RESOLVED is terminal.
    """

    snapshot: EnvironmentSnapshot
    matcher: PatternMatcher
    trace: bool = False
    state: ResolutionState = field(default=ResolutionState.UNINITIALIZED, init=False)
    effects: list[RuleEffect] = field(default_factory=list, init=False)
    _working: dict[str, str] | None = field(default=None, init=False, repr=False)
    _applied: int = field(default=0, init=False, repr=False)

    def apply(self, rule: Rule) -> None:
        """Apply a single rule to the working state."""
        if self.state is ResolutionState.RESOLVED:
            raise ResolutionStateError("resolution is already frozen")
        if self._working is None:
            self._working = dict(self.snapshot)
            self.state = ResolutionState.BUILDING

        working = self._working
        removed: list[str] = []
        written: list[str] = []
        if isinstance(rule, WhitelistRule):
            removed = [n for n in working if not self.matcher.full_match(rule.pattern, n)]
        elif isinstance(rule, BlacklistRule):
            removed = [n for n in working if self.matcher.full_match(rule.pattern, n)]
        elif isinstance(rule, SetRule):
            working[rule.name] = rule.value
            written = [rule.name]
        for name in removed:
            del working[name]

        if self.trace:
            self.effects.append(
                RuleEffect(
                    index=self._applied,
                    rule=rule.describe(),
                    removed=tuple(sorted(removed)),
                    written=tuple(written),
                )
            )
        logger.debug(
            "resolve.rule_applied: #%d %s removed=%d remaining=%d",
            self._applied,
            rule.kind,
            len(removed),
            len(working),
        )
        self._applied += 1

    def freeze(self) -> LogicalEnvironment:
        """Freeze the working state and discard it."""
        if self.state is ResolutionState.RESOLVED:
            raise ResolutionStateError("resolution is already frozen")
        working = self._working if self._working is not None else dict(self.snapshot)
        env = LogicalEnvironment(working)
        self._working = None
        self.state = ResolutionState.RESOLVED
        return env


class ResolutionEngine:
    """Applies a RuleSet to a Snapshot.

    Every call to :meth:`resolve` runs a fresh :class:`Resolution`; the
    engine itself holds only the matcher.
    """

    def __init__(self, matcher: PatternMatcher | None = None) -> None:
        self.matcher = matcher or RegexMatcher()

    def start(self, snapshot: EnvironmentSnapshot, *, trace: bool = False) -> Resolution:
        return Resolution(snapshot=snapshot, matcher=self.matcher, trace=trace)

    def resolve(self, snapshot: EnvironmentSnapshot, rules: RuleSet) -> LogicalEnvironment:
        """Fold *rules* over *snapshot* and return the frozen result."""
        resolution = self.start(snapshot)
        for rule in rules:
            resolution.apply(rule)
        return resolution.freeze()

    def explain(
        self, snapshot: EnvironmentSnapshot, rules: RuleSet
    ) -> tuple[LogicalEnvironment, list[RuleEffect]]:
        """Like :meth:`resolve`, also returning the per-rule effects."""
        resolution = self.start(snapshot, trace=True)
        for rule in rules:
            resolution.apply(rule)
        return resolution.freeze(), resolution.effects


def resolve(
    snapshot: EnvironmentSnapshot,
    rules: RuleSet,
    matcher: PatternMatcher | None = None,
) -> LogicalEnvironment:
    """Module-level shortcut for ``ResolutionEngine(matcher).resolve(...)``."""
    return ResolutionEngine(matcher).resolve(snapshot, rules)
