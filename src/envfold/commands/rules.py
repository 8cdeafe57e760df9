"""Command: validate and list the effective rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from envfold.commands._base import EnvfoldCommand, rule_options, rule_tokens

if TYPE_CHECKING:
    from envfold.commands._context import AppContext


@click.command(
    cls=EnvfoldCommand,
    examples="""\
  envfold rules --env-blacklist '.*' --env-set HOME=/tmp
  envfold --json rules --env-whitelist 'CARGO_.*'""",
)
@rule_options
@click.pass_context
def rules(ctx: click.Context) -> None:
    """Check rule syntax and list rules in application order.

    Preset rules from envfold.toml come first. The environment is not read.
    """
    app: AppContext = ctx.obj
    app.emit(app.resolve_service().rules(rule_tokens(ctx)))
