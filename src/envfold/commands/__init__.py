"""Subcommand modules for envfold.

Provides register_commands() which uses deferred imports to keep
``envfold --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from envfold.commands.diff import diff
    from envfold.commands.explain import explain
    from envfold.commands.get import get
    from envfold.commands.resolve import resolve
    from envfold.commands.rules import rules

    cli.add_command(resolve)
    cli.add_command(get)
    cli.add_command(rules)
    cli.add_command(diff)
    cli.add_command(explain)
