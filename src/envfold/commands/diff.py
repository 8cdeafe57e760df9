"""Command: compare the logical environment with the process environment."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from envfold.commands._base import EnvfoldCommand, rule_options, rule_tokens

if TYPE_CHECKING:
    from envfold.commands._context import AppContext


@click.command(
    cls=EnvfoldCommand,
    examples="""\
  envfold diff --env-blacklist 'AWS_.*'
  envfold --json diff --env-set RUSTFLAGS=-Dwarnings""",
)
@rule_options
@click.pass_context
def diff(ctx: click.Context) -> None:
    """Show names removed, added, or changed by the rules."""
    app: AppContext = ctx.obj
    app.emit(app.resolve_service().diff(rule_tokens(ctx)))
