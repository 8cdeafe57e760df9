"""Rich Console factory and theme for envfold output.

Consoles render into a StringIO buffer so formatters keep returning plain
strings. In non-TTY environments (tests, pipes) Rich drops color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

ENVFOLD_THEME = Theme(
    {
        "env.ok": "bold green",
        "env.error": "bold red",
        "env.warning": "bold yellow",
        "env.op": "bold cyan",
        "env.key": "dim",
        "env.name": "bold",
        "env.value": "",
        "env.removed": "red",
        "env.added": "green",
        "env.changed": "yellow",
        "env.rule.whitelist": "cyan",
        "env.rule.blacklist": "magenta",
        "env.rule.set": "blue",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=ENVFOLD_THEME,
        no_color=no_color,
        highlight=False,
        soft_wrap=True,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_rule(kind: str) -> str:
    return f"env.rule.{kind}" if kind in ("whitelist", "blacklist", "set") else ""
