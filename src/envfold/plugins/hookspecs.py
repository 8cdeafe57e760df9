"""Pluggy hook specifications for envfold.

One setup-time hook lets a plugin replace the pattern matcher; one
notification hook fires after every successful resolution.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from envfold.domain.matching import PatternMatcher

PROJECT_NAME = "envfold"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class EnvfoldHookSpec:
    """Hook specifications for the envfold plugin system."""

    @hookspec(firstresult=True)
    def envfold_pattern_matcher(self) -> PatternMatcher | None:
        """Return a matcher to use instead of the default regex matcher."""

    @hookspec
    def envfold_post_resolve(
        self,
        fingerprint: str,
        count: int,
        rule_count: int,
    ) -> None:
        """Called after a logical environment has been resolved and frozen."""
