"""Command: print the resolved logical environment."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from envfold.commands._base import EnvfoldCommand, rule_options, rule_tokens

if TYPE_CHECKING:
    from envfold.commands._context import AppContext


@click.command(
    cls=EnvfoldCommand,
    examples="""\
  envfold resolve
  envfold --json resolve --env-blacklist '.*' --env-set CARGO_X=kept
  envfold -q resolve --env-whitelist 'CARGO_.*|PATH'
  envfold resolve --env-set FOO=BAR --env-blacklist FOO""",
)
@rule_options
@click.pass_context
def resolve(ctx: click.Context) -> None:
    """Resolve and print the logical environment.

    Rule options are applied strictly left to right against the current
    state. With no rule options the result equals the process environment.
    """
    app: AppContext = ctx.obj
    app.emit(app.resolve_service().resolve(rule_tokens(ctx)))
