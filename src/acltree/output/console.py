"""Rich Console factory and theme for acltree output.

Consoles render to a StringIO buffer so renderers keep a plain
``-> str`` contract. Rich drops color codes when no terminal is attached
(tests, pipes).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

ACL_THEME = Theme(
    {
        "acl.ok": "bold green",
        "acl.error": "bold red",
        "acl.op": "bold cyan",
        "acl.key": "dim",
        "acl.id": "bold blue",
        "acl.label": "bold",
        "acl.yes": "green",
        "acl.no": "red",
        "acl.role.resource": "magenta",
        "acl.role.requestor": "yellow",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    return Console(
        file=StringIO(),
        theme=ACL_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_role(role: str) -> str:
    return f"acl.role.{role}" if role in ("resource", "requestor") else ""
