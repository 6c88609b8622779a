"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from valetpy.output.console import create_console, get_output, style_for_decision

if TYPE_CHECKING:
    from rich.console import Console

    from valetpy.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="valet.ok")
    op = Text(f"  {result.op}", style="valet.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any, style: str = "") -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="valet.key")
    if not style and (key == "path" or key.endswith(("_path", "_dir")) or key == "file"):
        style = "valet.path"
    elif not style and key == "driver":
        style = "valet.driver"
    console.print(k, Text(str(value), style=style), end="")
    console.print()


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="valet.error")
    op = Text(f"  {result.op}", style="valet.op")
    console.print(label, op, Text(" — "), msg)

    if verbose and err:
        console.print(Text(f"  code: {err.code}", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Op renderers ──────────────────────────────────────────────────────


def _render_which(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    data = result.data
    decision = str(data.get("decision", ""))
    _field(console, "decision", decision, style=style_for_decision(decision))
    for key in (
        "reason",
        "site_name",
        "domain_fallback",
        "site_path",
        "driver",
        "file",
        "content_type",
        "front_controller",
        "working_dir",
    ):
        if key in data:
            _field(console, key, data[key])


def _render_paths(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Root", style="valet.path")
    table.add_column("Sites")
    for root in result.data.get("roots", []):
        sites = root.get("sites") or []
        table.add_row(root["path"], ", ".join(sites) if sites else "-")
    console.print(table)


def _render_drivers(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for position, name in enumerate(result.data.get("drivers", []), start=1):
        console.print(Text(f"  {position:>2}. "), Text(name, style="valet.driver"))


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "which": _render_which,
    "paths": _render_paths,
    "drivers": _render_drivers,
}
