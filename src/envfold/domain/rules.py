"""Override rules and the ordered RuleSet.

Three rule kinds, discriminated by ``kind``:

- ``whitelist``: keep only names fully matching ``pattern``
- ``blacklist``: drop names fully matching ``pattern``
- ``set``: force ``name`` to ``value``, creating it if absent

INVARIANT: RuleSet order is the command-line order. No deduplication,
no reordering, no merging of adjacent rules.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import Annotated, Literal, overload

from pydantic import BaseModel, Field

from envfold.domain.errors import ConfigSyntaxError
from envfold.domain.matching import PatternMatcher, PatternSyntaxError, RegexMatcher

WHITELIST_OPTION = "--env-whitelist"
BLACKLIST_OPTION = "--env-blacklist"
SET_OPTION = "--env-set"

RULE_OPTIONS: tuple[str, ...] = (WHITELIST_OPTION, BLACKLIST_OPTION, SET_OPTION)


class RuleOrigin(BaseModel):
    """Where a rule came from, for diagnostics only."""

    model_config = {"frozen": True}

    option: str
    position: int | str


class WhitelistRule(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["whitelist"] = "whitelist"
    pattern: str
    origin: RuleOrigin | None = Field(default=None, exclude=True)

    def describe(self) -> str:
        return f"{WHITELIST_OPTION} {self.pattern}"


class BlacklistRule(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["blacklist"] = "blacklist"
    pattern: str
    origin: RuleOrigin | None = Field(default=None, exclude=True)

    def describe(self) -> str:
        return f"{BLACKLIST_OPTION} {self.pattern}"


class SetRule(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["set"] = "set"
    name: str
    value: str
    origin: RuleOrigin | None = Field(default=None, exclude=True)

    def describe(self) -> str:
        return f"{SET_OPTION} {self.name}={self.value}"


Rule = Annotated[WhitelistRule | BlacklistRule | SetRule, Field(discriminator="kind")]


class RuleSet(Sequence[Rule]):
    """Immutable, order-significant sequence of rules."""

    __slots__ = ("_rules",)

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: tuple[Rule, ...] = tuple(rules)

    @overload
    def __getitem__(self, index: int) -> Rule: ...

    @overload
    def __getitem__(self, index: slice) -> RuleSet: ...

    def __getitem__(self, index: int | slice) -> Rule | RuleSet:
        if isinstance(index, slice):
            return RuleSet(self._rules[index])
        return self._rules[index]

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __add__(self, other: RuleSet) -> RuleSet:
        if not isinstance(other, RuleSet):
            return NotImplemented
        return RuleSet(self._rules + other._rules)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleSet):
            return NotImplemented
        return self._rules == other._rules

    def __hash__(self) -> int:
        return hash(self._rules)

    def __repr__(self) -> str:
        return f"RuleSet({list(self._rules)!r})"

    def to_list(self) -> list[dict[str, str]]:
        """Serializable view, in order."""
        return [rule.model_dump() for rule in self._rules]


def parse_set_value(raw: str) -> tuple[str, str]:
    """Split a ``NAME=VALUE`` token at the first ``=``.

    Raises:
        ValueError: If there is no ``=`` or the name is empty.
    """
    name, sep, value = raw.partition("=")
    if not sep:
        raise ValueError("expected NAME=VALUE")
    if not name:
        raise ValueError("variable name is empty")
    return name, value


def build_rule(
    option: str,
    value: str,
    position: int | str,
    matcher: PatternMatcher,
) -> Rule:
    """Turn one ``(option, value)`` token into a Rule.

    Raises:
        ConfigSyntaxError: Unknown option, malformed ``--env-set`` value,
            or a pattern the matcher rejects.
    """
    origin = RuleOrigin(option=option, position=position)
    if option in (WHITELIST_OPTION, BLACKLIST_OPTION):
        try:
            matcher.validate(value)
        except PatternSyntaxError as exc:
            raise ConfigSyntaxError(option, value, position, f"invalid pattern: {exc}") from exc
        if option == WHITELIST_OPTION:
            return WhitelistRule(pattern=value, origin=origin)
        return BlacklistRule(pattern=value, origin=origin)
    if option == SET_OPTION:
        try:
            name, val = parse_set_value(value)
        except ValueError as exc:
            raise ConfigSyntaxError(option, value, position, str(exc)) from exc
        return SetRule(name=name, value=val, origin=origin)
    raise ConfigSyntaxError(option, value, position, "unknown rule option")


def build_rule_set(
    tokens: Iterable[tuple[str, str, int | str]],
    matcher: PatternMatcher | None = None,
) -> RuleSet:
    """Build a RuleSet from ordered ``(option, value, position)`` tokens.

    Fails fast on the first bad token; no partial RuleSet is returned.
    """
    matcher = matcher or RegexMatcher()
    return RuleSet(build_rule(option, value, pos, matcher) for option, value, pos in tokens)


def scan_rule_args(argv: Sequence[str], offset: int = 0) -> list[tuple[str, str, int]]:
    """Extract rule tokens from a raw argument vector, preserving order.

    Accepts ``--opt VALUE`` and ``--opt=VALUE``. Scanning stops at ``--``.
    Positions are 1-based indexes of the option in *argv*, shifted by
    *offset* when *argv* is the tail of a longer command line.

    Raises:
        ConfigSyntaxError: A rule option is the last argument (no value).
    """
    tokens: list[tuple[str, str, int]] = []
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--":
            break
        option, eq, inline = arg.partition("=")
        if option in RULE_OPTIONS:
            if eq:
                tokens.append((option, inline, i + 1 + offset))
            elif i + 1 < len(argv):
                tokens.append((option, argv[i + 1], i + 1 + offset))
                i += 1
            else:
                raise ConfigSyntaxError(option, None, i + 1 + offset, "missing value")
        i += 1
    return tokens
