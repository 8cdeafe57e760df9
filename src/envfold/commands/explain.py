"""Command: trace what each rule did."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from envfold.commands._base import EnvfoldCommand, rule_options, rule_tokens

if TYPE_CHECKING:
    from envfold.commands._context import AppContext


@click.command(
    cls=EnvfoldCommand,
    examples="""\
  envfold explain --env-blacklist '.*' --env-whitelist 'CARGO_.*'
  envfold -v explain --env-set FOO=BAR --env-blacklist FOO""",
)
@rule_options
@click.pass_context
def explain(ctx: click.Context) -> None:
    """Resolve step by step, listing the names each rule removed or wrote."""
    app: AppContext = ctx.obj
    app.emit(app.resolve_service().explain(rule_tokens(ctx)))
