"""Command: look up a single name in the logical environment."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from envfold.commands._base import EnvfoldCommand, rule_options, rule_tokens

if TYPE_CHECKING:
    from envfold.commands._context import AppContext


@click.command(
    cls=EnvfoldCommand,
    examples="""\
  envfold get HOME
  envfold -q get CARGO_PKG_NAME --env-whitelist 'CARGO_.*'
  envfold get FOO --env-set FOO=BAR""",
)
@click.argument("name")
@rule_options
@click.pass_context
def get(ctx: click.Context, name: str) -> None:
    """Print the value of NAME, or fail if it is not set."""
    app: AppContext = ctx.obj
    app.emit(app.resolve_service().lookup(name, rule_tokens(ctx)))
