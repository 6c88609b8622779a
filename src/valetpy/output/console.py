"""Rich Console factory and theme for valetpy output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

VALET_THEME = Theme(
    {
        "valet.ok": "bold green",
        "valet.error": "bold red",
        "valet.warning": "bold yellow",
        "valet.op": "bold cyan",
        "valet.key": "dim",
        "valet.path": "dim",
        "valet.driver": "bold blue",
        "valet.decision.static": "green",
        "valet.decision.dynamic": "magenta",
        "valet.decision.not_found": "yellow",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=VALET_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_decision(kind: str) -> str:
    """Return the Rich style name for a dispatch decision kind."""
    return f"valet.decision.{kind}"
