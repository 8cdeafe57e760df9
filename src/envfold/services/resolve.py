"""ResolveService: snapshot, rules, and the fold, wired together.

Every operation follows the same order:

1. Build the RuleSet (config preset rules, then CLI rules). Any bad token
   fails the operation before the environment is even captured.
2. Capture the snapshot (once per service instance).
3. Resolve and freeze.

Operations: ``resolve``, ``lookup``, ``rules``, ``diff``, ``explain``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import structlog

from envfold.domain.errors import ConfigError
from envfold.domain.matching import PatternMatcher, RegexMatcher
from envfold.domain.resolution import ResolutionEngine, RuleEffect
from envfold.domain.rules import RuleSet, build_rule_set
from envfold.infrastructure.environ import capture_environment
from envfold.services.base import BaseService
from envfold.services.result import ErrorCode, ServiceResult
from envfold.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from envfold.config.settings import EnvfoldSettings
    from envfold.domain.environment import EnvironmentSnapshot, LogicalEnvironment
    from envfold.plugins.manager import PluginManager

log = structlog.get_logger(__name__)

RuleToken = tuple[str, str, int | str]


class ResolveService(BaseService):
    """Resolve the logical environment for one invocation.

    Pass *snapshot* to resolve against an explicit environment instead of
    capturing the real one.
    """

    def __init__(
        self,
        settings: EnvfoldSettings,
        plugins: PluginManager | None = None,
        *,
        snapshot: EnvironmentSnapshot | None = None,
    ) -> None:
        super().__init__(settings, plugins)
        self._snapshot = snapshot
        self._matcher: PatternMatcher | None = None

    # ------------------------------------------------------------------
    # Building blocks (raise on bad configuration)
    # ------------------------------------------------------------------

    @property
    def matcher(self) -> PatternMatcher:
        if self._matcher is None:
            cache_size = self._settings.matcher.cache_size
            if self._plugins is None:
                self._matcher = RegexMatcher(cache_size)
            else:
                self._matcher = self._plugins.pattern_matcher(cache_size=cache_size)
        return self._matcher

    def build_rules(self, cli_tokens: Sequence[RuleToken] = ()) -> RuleSet:
        """Config preset rules followed by CLI rules, in order.

        Raises:
            ConfigSyntaxError: On the first malformed token.
        """
        with trace_span("build_rules") as span:
            preset = build_rule_set(self._settings.environment.rule_tokens(), self.matcher)
            cli = build_rule_set(cli_tokens, self.matcher)
            rules = preset + cli
            if span:
                span.annotate("preset", len(preset))
                span.annotate("cli", len(cli))
        log.debug("rules.built", preset=len(preset), cli=len(cli))
        return rules

    def snapshot(self) -> EnvironmentSnapshot:
        """The base environment, captured on first use."""
        if self._snapshot is None:
            with trace_span("capture_snapshot") as span:
                self._snapshot = capture_environment(policy=self._settings.snapshot.non_text)
                if span:
                    span.annotate("count", len(self._snapshot))
        return self._snapshot

    def resolve_environment(self, cli_tokens: Sequence[RuleToken] = ()) -> LogicalEnvironment:
        """Resolve and return the frozen environment for embedding callers.

        Raises:
            ConfigError: If rule construction fails.
        """
        rules = self.build_rules(cli_tokens)
        return ResolutionEngine(self.matcher).resolve(self.snapshot(), rules)

    # ------------------------------------------------------------------
    # Service operations
    # ------------------------------------------------------------------

    @traced
    def resolve(self, cli_tokens: Sequence[RuleToken] = ()) -> ServiceResult:
        """Resolve the full logical environment."""
        op = "resolve"
        try:
            rules = self.build_rules(cli_tokens)
        except ConfigError as exc:
            return self._config_failure(op, exc)

        warnings = self._snapshot_warnings()
        env, _ = self._fold(rules, warnings)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "environment": env.to_dict(),
                "count": len(env),
                "rule_count": len(rules),
                "fingerprint": env.fingerprint(),
            },
            warnings=warnings,
        )

    @traced
    def lookup(self, name: str, cli_tokens: Sequence[RuleToken] = ()) -> ServiceResult:
        """Look up one name in the resolved environment."""
        op = "lookup"
        try:
            rules = self.build_rules(cli_tokens)
        except ConfigError as exc:
            return self._config_failure(op, exc)

        warnings = self._snapshot_warnings()
        env, _ = self._fold(rules, warnings)
        value = env.lookup(name)
        if value is None:
            return ServiceResult.failure(
                op,
                ErrorCode.NOT_FOUND,
                f"'{name}' is not set in the logical environment",
                detail={"name": name},
                warnings=warnings,
            )
        return ServiceResult(
            ok=True,
            op=op,
            data={"name": name, "value": value},
            warnings=warnings,
        )

    @traced
    def rules(self, cli_tokens: Sequence[RuleToken] = ()) -> ServiceResult:
        """Validate and list the effective RuleSet without resolving."""
        op = "rules"
        try:
            rules = self.build_rules(cli_tokens)
        except ConfigError as exc:
            return self._config_failure(op, exc)

        items: list[dict[str, Any]] = []
        for index, rule in enumerate(rules):
            item: dict[str, Any] = {"index": index, **rule.model_dump()}
            if rule.origin is not None:
                item["source"] = (
                    f"argument {rule.origin.position}"
                    if isinstance(rule.origin.position, int)
                    else rule.origin.position
                )
            items.append(item)
        return ServiceResult(ok=True, op=op, data={"rules": items, "count": len(items)})

    @traced
    def diff(self, cli_tokens: Sequence[RuleToken] = ()) -> ServiceResult:
        """Compare the logical environment with the snapshot it came from."""
        op = "diff"
        try:
            rules = self.build_rules(cli_tokens)
        except ConfigError as exc:
            return self._config_failure(op, exc)

        warnings = self._snapshot_warnings()
        base = self.snapshot()
        env, _ = self._fold(rules, warnings)

        removed = sorted(n for n in base if n not in env)
        added = {n: env[n] for n in sorted(env) if n not in base}
        changed = {
            n: {"before": base[n], "after": env[n]}
            for n in sorted(env)
            if n in base and base[n] != env[n]
        }
        unchanged = len(env) - len(added) - len(changed)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "removed": removed,
                "added": added,
                "changed": changed,
                "unchanged": unchanged,
                "fingerprint": env.fingerprint(),
            },
            warnings=warnings,
        )

    @traced
    def explain(self, cli_tokens: Sequence[RuleToken] = ()) -> ServiceResult:
        """Resolve while recording what each rule removed or wrote."""
        op = "explain"
        try:
            rules = self.build_rules(cli_tokens)
        except ConfigError as exc:
            return self._config_failure(op, exc)

        warnings = self._snapshot_warnings()
        env, effects = self._fold(rules, warnings, trace=True)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "snapshot_count": len(self.snapshot()),
                "steps": [effect.to_dict() for effect in effects],
                "count": len(env),
                "fingerprint": env.fingerprint(),
            },
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _snapshot_warnings(self) -> list[str]:
        return [
            f"Excluded non-text environment entry: {name}" for name in self.snapshot().excluded
        ]

    def _fold(
        self, rules: RuleSet, warnings: list[str], *, trace: bool = False
    ) -> tuple[LogicalEnvironment, list[RuleEffect]]:
        engine = ResolutionEngine(self.matcher)
        snapshot = self.snapshot()
        with trace_span("fold") as span:
            if trace:
                env, effects = engine.explain(snapshot, rules)
            else:
                env, effects = engine.resolve(snapshot, rules), []
            if span:
                span.annotate("rules", len(rules))
                span.annotate("entries", len(env))
        fingerprint = env.fingerprint()
        log.debug("resolve.complete", count=len(env), rules=len(rules), fingerprint=fingerprint)
        self._dispatch_event(
            "envfold_post_resolve",
            {"fingerprint": fingerprint, "count": len(env), "rule_count": len(rules)},
            warnings,
        )
        return env, effects
