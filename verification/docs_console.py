"""Terminal output for the docs example checker.

Usage::

    from verification.docs_console import console

    console.section("javascript")
    console.check("/13.0/javascript-data-grid/", passed=True, suspicious=False)
    console.success("Did not find any broken examples.")
"""

from __future__ import annotations

from rich.console import Console
from rich.theme import Theme

_THEME = Theme(
    {
        "info": "default",
        "success": "bold green",
        "warning": "bold yellow",
        "error": "bold red",
        "section": "bold cyan",
        "check.pass": "green",
        "check.fail": "red",
        "check.suspicious": "yellow",
    }
)


def first_uppercase(text: str) -> str:
    return text[:1].upper() + text[1:]


class DocsConsole:
    """Rich-backed console. Markup is off so permalinks print verbatim."""

    def __init__(self, console: Console | None = None) -> None:
        self._con = console or Console(theme=_THEME, highlight=False, markup=False)

    def info(self, message: str) -> None:
        self._con.print(message, style="info", soft_wrap=True)

    def success(self, message: str) -> None:
        self._con.print(message, style="success", soft_wrap=True)

    def warning(self, message: str) -> None:
        self._con.print(message, style="warning", soft_wrap=True)

    def error(self, message: str) -> None:
        self._con.print(message, style="error", soft_wrap=True)

    def section(self, framework: str) -> None:
        self._con.print(f"\n{first_uppercase(framework)} flavor:", style="section")

    def check(self, path: str, passed: bool, suspicious: bool) -> None:
        """Print the per-page marker: a check, a cross or a question mark."""
        if not passed:
            self._con.print(f"  ✗ {path}", style="check.fail", soft_wrap=True)
        elif suspicious:
            self._con.print(f"  ? {path}", style="check.suspicious", soft_wrap=True)
        else:
            self._con.print(f"  ✓ {path}", style="check.pass", soft_wrap=True)


console = DocsConsole()
