"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, envfold.toml only contains
overrides. An empty file is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from envfold.domain.matching import DEFAULT_CACHE_SIZE
from envfold.domain.rules import BLACKLIST_OPTION, SET_OPTION, WHITELIST_OPTION
from envfold.infrastructure.environ import NonTextPolicy


class SnapshotConfig(BaseModel):
    """[snapshot] section."""

    model_config = {"frozen": True}

    non_text: NonTextPolicy = NonTextPolicy.EXCLUDE


class MatcherConfig(BaseModel):
    """[matcher] section."""

    model_config = {"frozen": True}

    cache_size: int = Field(default=DEFAULT_CACHE_SIZE, ge=1)


class RuleEntry(BaseModel):
    """One ``[[environment.rules]]`` table: exactly one of the three keys."""

    model_config = {"frozen": True, "extra": "forbid"}

    whitelist: str | None = None
    blacklist: str | None = None
    set: str | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> RuleEntry:
        given = [k for k in ("whitelist", "blacklist", "set") if getattr(self, k) is not None]
        if len(given) != 1:
            msg = "each rule needs exactly one of: whitelist, blacklist, set"
            raise ValueError(msg)
        return self

    def as_token(self) -> tuple[str, str]:
        """The equivalent ``(option, value)`` command-line token."""
        if self.whitelist is not None:
            return WHITELIST_OPTION, self.whitelist
        if self.blacklist is not None:
            return BLACKLIST_OPTION, self.blacklist
        return SET_OPTION, self.set or ""


class EnvironmentConfig(BaseModel):
    """[environment] section: preset rules applied before CLI rules."""

    model_config = {"frozen": True}

    rules: tuple[RuleEntry, ...] = ()

    def rule_tokens(self) -> list[tuple[str, str, str]]:
        return [(*entry.as_token(), f"config rule {i}") for i, entry in enumerate(self.rules, 1)]
