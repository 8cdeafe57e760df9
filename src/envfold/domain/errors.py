"""Exception hierarchy for envfold.

ConfigError is the only failure a caller can see from rule construction.
Resolution itself is total: given a built RuleSet it never raises.
"""

from __future__ import annotations


class EnvfoldError(Exception):
    """Base class for all envfold errors."""


class ConfigError(EnvfoldError):
    """Invalid configuration detected before resolution starts."""


class ConfigSyntaxError(ConfigError):
    """A rule token that cannot be turned into a Rule.

    Carries the offending option, its raw value, and where it appeared
    (a 1-based argument index, or a ``config rule N`` label).
    """

    def __init__(self, option: str, value: str | None, position: int | str, reason: str) -> None:
        self.option = option
        self.value = value
        self.position = position
        self.reason = reason
        super().__init__(self._render())

    def _render(self) -> str:
        where = f"argument {self.position}" if isinstance(self.position, int) else self.position
        if self.value is None:
            return f"{self.option} ({where}): {self.reason}"
        return f"{self.option} {self.value!r} ({where}): {self.reason}"


class ResolutionStateError(EnvfoldError):
    """A frozen resolution was asked to change."""
