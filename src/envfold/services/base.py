"""BaseService: shared plumbing for envfold services.

A service is built from frozen settings and a plugin manager. It turns
domain exceptions into failed ServiceResults and dispatches plugin
notifications without letting plugin failures escape.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from envfold.domain.errors import ConfigError, ConfigSyntaxError
from envfold.services.result import ErrorCode, ServiceResult

if TYPE_CHECKING:
    from envfold.config.settings import EnvfoldSettings
    from envfold.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes."""

    def __init__(self, settings: EnvfoldSettings, plugins: PluginManager | None = None) -> None:
        self._settings = settings
        self._plugins = plugins

    @staticmethod
    def _config_failure(op: str, exc: ConfigError) -> ServiceResult:
        """Convert a configuration error into a failed ServiceResult."""
        if isinstance(exc, ConfigSyntaxError):
            return ServiceResult.failure(
                op,
                ErrorCode.CONFIG_SYNTAX,
                str(exc),
                detail={"option": exc.option, "value": exc.value, "position": exc.position},
            )
        return ServiceResult.failure(op, ErrorCode.CONFIG_ERROR, str(exc))

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Call a notification hook. No-op without a plugin manager.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        if self._plugins is None:
            return
        try:
            getattr(self._plugins.hook, hook_name)(**payload)
        except Exception:
            logger.debug("Event dispatch failed for %s", hook_name, exc_info=True)
            warnings.append(f"Event dispatch failed for {hook_name}")
