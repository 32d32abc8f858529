"""
Console output utilities for zigdeps using Rich.

User-facing output for CLI commands lives here: status lines, the package
table, and the dependency tree. Diagnostics belong to
:mod:`zigdeps.utils.logger`.
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Dict, List, Optional

from rich.tree import Tree
from rich.table import Table
from rich.theme import Theme
from rich.console import Console
from rich.markup import escape

from zigdeps.models.tree import PackageTree

ZIGDEPS_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        "package": "bold magenta",
    }
)

_console: Optional[Console] = None
_err_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    """Return True if colored output should be enabled."""
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _make_console(*, stderr: bool) -> Console:
    use_color = _should_use_color()
    return Console(
        theme=ZIGDEPS_THEME,
        no_color=not use_color,
        highlight=use_color,
        stderr=stderr,
    )


def _get_console() -> Console:
    """Return the singleton stdout console."""
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                _console = _make_console(stderr=False)
    return _console


def _get_err_console() -> Console:
    """Return the singleton stderr console used for diagnostics."""
    global _err_console

    if _err_console is None:
        with _console_lock:
            if _err_console is None:
                _err_console = _make_console(stderr=True)
    return _err_console


def reconfigure_console() -> None:
    """Drop cached consoles so the next call re-reads NO_COLOR."""
    global _console, _err_console
    with _console_lock:
        _console = None
        _err_console = None


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    """Print a success message."""
    _get_console().print(
        f"{prefix} {message}", style="success", markup=False, soft_wrap=True
    )


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    """Print an error message to stderr."""
    _get_err_console().print(
        f"{prefix} {message}", style="error", markup=False, soft_wrap=True
    )


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    """Print a warning message to stderr."""
    _get_err_console().print(
        f"{prefix} {message}", style="warning", markup=False, soft_wrap=True
    )


def print_table(
    data: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
) -> None:
    """Render rows of dictionaries as a Rich table.

    Args:
        data: List of row dictionaries.
        headers: Column order. Defaults to keys of the first row.
        title: Optional table title.
        column_styles: Per-column ``style``/``justify``/``no_wrap`` options.
    """
    if not data:
        return

    if headers is None:
        headers = list(data[0].keys())

    table = Table(title=title, show_header=True, header_style="bold")

    column_styles = column_styles or {}
    for header in headers:
        config = column_styles.get(header, {})
        table.add_column(
            header,
            style=config.get("style"),
            justify=config.get("justify", "default"),
            no_wrap=config.get("no_wrap", False),
            overflow="fold",
        )

    for row in data:
        table.add_row(*(str(row.get(h, "")) for h in headers))

    _get_console().print(table)


def build_tree(root: PackageTree, *, show_paths: bool = True) -> Tree:
    """Convert a :class:`PackageTree` into a Rich renderable."""

    def label(node: PackageTree) -> str:
        text = f"[package]{escape(node.name)}[/package]"
        if show_paths:
            text += f" [dim]{escape(node.path)}[/dim]"
        return text

    rendered = Tree(label(root))
    stack = [(root, rendered)]
    while stack:
        node, branch = stack.pop()
        for child in node.dependencies:
            stack.append((child, branch.add(label(child))))
    return rendered


def print_tree(root: PackageTree, *, show_paths: bool = True) -> None:
    """Print a materialized dependency tree."""
    _get_console().print(build_tree(root, show_paths=show_paths))

