"""Root CLI group for envfold with global flags and command registration."""

from __future__ import annotations

import click

from envfold import __version__
from envfold.commands import register_commands
from envfold.commands._base import EnvfoldGroup
from envfold.commands._context import AppContext
from envfold.config.settings import EnvfoldSettings


@click.group(cls=EnvfoldGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="envfold")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """envfold: resolve the logical environment from ordered override rules."""
    settings = EnvfoldSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
