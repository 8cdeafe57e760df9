"""Custom Click base classes: --examples support and ordered rule options.

Click collects each ``multiple=True`` option into its own tuple, which
loses the interleaving of ``--env-whitelist``, ``--env-blacklist`` and
``--env-set``. :class:`EnvfoldCommand` re-scans the raw arguments after
Click has validated them and stores the rule tokens, in command-line
order, in ``ctx.meta``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import click

from envfold.domain.rules import BLACKLIST_OPTION, SET_OPTION, WHITELIST_OPTION, scan_rule_args

RULE_TOKENS_KEY = "envfold.rule_tokens"
ARGC_KEY = "envfold.argc"

_F = TypeVar("_F", bound=Callable[..., Any])


def _add_examples_option(cmd: click.Command, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class EnvfoldCommand(click.Command):
    """Click Command with ``--examples`` and order-preserving rule options."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        raw = list(args)
        # Positions count from the start of the whole command line, so
        # skip past the global flags and the subcommand name.
        offset = ctx.meta.get(ARGC_KEY, len(raw)) - len(raw)
        remaining = super().parse_args(ctx, args)
        # Click already rejected options with missing values.
        ctx.meta[RULE_TOKENS_KEY] = scan_rule_args(raw, offset)
        return remaining


class EnvfoldGroup(click.Group):
    """Click Group whose subcommands default to :class:`EnvfoldCommand`."""

    command_class = EnvfoldCommand

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        ctx.meta.setdefault(ARGC_KEY, len(args))
        return super().parse_args(ctx, args)


def rule_options(func: _F) -> _F:
    """Declare the three rule options on a command.

    The values are not passed to the callback; read them in order with
    :func:`rule_tokens`.
    """
    options = [
        click.option(
            SET_OPTION,
            "env_set",
            multiple=True,
            expose_value=False,
            metavar="VAR=VALUE",
            help="Force VAR to VALUE in the current logical state. Repeatable.",
        ),
        click.option(
            BLACKLIST_OPTION,
            "env_blacklist",
            multiple=True,
            expose_value=False,
            metavar="REGEX",
            help="Drop names fully matching REGEX. Repeatable.",
        ),
        click.option(
            WHITELIST_OPTION,
            "env_whitelist",
            multiple=True,
            expose_value=False,
            metavar="REGEX",
            help="Keep only names fully matching REGEX. Repeatable.",
        ),
    ]
    for option in options:
        func = option(func)
    return func


def rule_tokens(ctx: click.Context) -> list[tuple[str, str, int]]:
    """Rule tokens of the current command, in command-line order."""
    return list(ctx.meta.get(RULE_TOKENS_KEY, []))
