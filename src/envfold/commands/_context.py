"""AppContext: shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Plugins are discovered lazily so ``--help`` and
``--version`` never load entry points or read the environment.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from envfold.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from envfold.config.settings import EnvfoldSettings
    from envfold.plugins.manager import PluginManager
    from envfold.services.resolve import ResolveService
    from envfold.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: EnvfoldSettings) -> None:
        self.settings = settings
        self._plugins: PluginManager | None = None

        from envfold.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from envfold.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def plugins(self) -> PluginManager:
        """Plugin manager with entry-point plugins loaded on first access."""
        if self._plugins is None:
            from envfold.plugins.manager import PluginManager

            self._plugins = PluginManager()
            self._plugins.discover_and_load()
        return self._plugins

    def resolve_service(self) -> ResolveService:
        from envfold.services.resolve import ResolveService

        return ResolveService(self.settings, self.plugins)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout. Warnings go to stderr so piped
          output stays clean.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
