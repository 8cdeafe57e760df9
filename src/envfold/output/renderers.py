"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer. Environment
names and values are always printed as ``Text`` so that brackets in
values are never parsed as Rich markup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from envfold.output.console import create_console, get_output, style_for_rule

if TYPE_CHECKING:
    from rich.console import Console

    from envfold.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal, script-friendly output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    data = result.data
    if result.op == "resolve":
        return "\n".join(f"{k}={v}" for k, v in data.get("environment", {}).items())
    if result.op == "lookup":
        return str(data.get("value", ""))
    if result.op == "explain":
        return str(data.get("fingerprint", ""))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="env.ok"), Text(f"  {result.op}", style="env.op"))


def _field(console: Console, key: str, value: Any) -> None:
    console.print(Text(f"  {key}: ", style="env.key"), Text(str(value)), sep="")


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print the meta block including the telemetry span tree."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_span(console, v, indent=4)
        else:
            console.print(Text(f"    {k}: {v}"))


def _render_span(console: Console, span: dict[str, Any], indent: int) -> None:
    duration = span.get("duration_ms", 0.0)
    style = "yellow" if duration > 100 else "dim"
    line = Text(" " * indent)
    line.append(f"{duration:>8.2f}ms", style=style)
    line.append(f"  {span.get('name', '?')}")
    annotations = span.get("annotations") or {}
    if annotations:
        line.append("  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")")
    console.print(line)
    for child in span.get("children", []):
        _render_span(console, child, indent + 4)


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="env.error"),
        Text(f"  {result.op}", style="env.op"),
        Text(f": {msg}"),
        sep="",
    )
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Operation renderers ───────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


def _render_resolve(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    data = result.data
    _field(console, "count", data.get("count", 0))
    _field(console, "rules", data.get("rule_count", 0))
    _field(console, "fingerprint", data.get("fingerprint", ""))

    environment: dict[str, str] = data.get("environment", {})
    if environment:
        console.print()
        table = Table(show_header=True, pad_edge=False, expand=False)
        table.add_column("Name", style="env.name", no_wrap=True)
        table.add_column("Value", style="env.value", overflow="fold")
        for name, value in environment.items():
            table.add_row(Text(name), Text(value))
        console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_lookup(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "name", result.data.get("name", ""))
    _field(console, "value", result.data.get("value", ""))
    if verbose:
        _render_meta(console, result)


def _render_rules(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    items: list[dict[str, Any]] = result.data.get("rules", [])
    _field(console, "count", len(items))
    if items:
        console.print()
        table = Table(show_header=True, pad_edge=False, expand=False)
        table.add_column("#", justify="right")
        table.add_column("Kind")
        table.add_column("Operand", overflow="fold")
        table.add_column("Source", style="dim")
        for item in items:
            kind = str(item.get("kind", ""))
            if kind == "set":
                operand = f"{item.get('name', '')}={item.get('value', '')}"
            else:
                operand = str(item.get("pattern", ""))
            table.add_row(
                str(item.get("index", "")),
                Text(kind, style=style_for_rule(kind)),
                Text(operand),
                Text(str(item.get("source", ""))),
            )
        console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_diff(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    data = result.data
    removed: list[str] = data.get("removed", [])
    added: dict[str, str] = data.get("added", {})
    changed: dict[str, dict[str, str]] = data.get("changed", {})
    _field(console, "removed", len(removed))
    _field(console, "added", len(added))
    _field(console, "changed", len(changed))
    _field(console, "unchanged", data.get("unchanged", 0))

    if removed or added or changed:
        console.print()
    for name in removed:
        console.print(Text(f"  - {name}", style="env.removed"))
    for name, value in added.items():
        console.print(Text(f"  + {name}={value}", style="env.added"))
    for name, change in changed.items():
        console.print(
            Text(f"  ~ {name}: {change['before']!r} -> {change['after']!r}", style="env.changed")
        )
    if verbose:
        _render_meta(console, result)


def _render_explain(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    data = result.data
    _field(console, "snapshot", data.get("snapshot_count", 0))

    for step in data.get("steps", []):
        line = Text(f"  #{step['index']} ")
        line.append(step["rule"], style="env.op")
        console.print(line)
        removed: list[str] = step.get("removed", [])
        if removed:
            shown = ", ".join(removed) if verbose or len(removed) <= 8 else (
                ", ".join(removed[:8]) + f", ... (+{len(removed) - 8})"
            )
            console.print(Text(f"      removed {len(removed)}: {shown}", style="env.removed"))
        for name in step.get("written", []):
            console.print(Text(f"      wrote {name}", style="env.added"))

    _field(console, "count", data.get("count", 0))
    _field(console, "fingerprint", data.get("fingerprint", ""))
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS = {
    "resolve": _render_resolve,
    "lookup": _render_lookup,
    "rules": _render_rules,
    "diff": _render_diff,
    "explain": _render_explain,
}
