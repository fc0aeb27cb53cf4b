"""Central UI handler for depviz.

Single source of truth for Rich console styling. Import this instead of
instantiating Console() in every command file.

Usage:
    from depviz.pipeline.ui import console, print_header, print_warning

    console.print("[success]No circular dependencies[/success]")
    print_header("ANALYSIS RESULTS")
"""

import sys

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

DEPVIZ_THEME = Theme(
    {
        "info": "bold cyan",
        "warning": "bold yellow",
        "error": "bold red",
        "success": "bold green",
        "core": "bold blue",
        "utility": "bold magenta",
        "standalone": "dim white",
        "cmd": "bold magenta",
        "path": "bold cyan",
        "dim": "dim white",
    }
)

# Single console instance - import this, don't create your own
console = Console(theme=DEPVIZ_THEME, force_terminal=sys.stdout.isatty())


def print_header(title: str) -> None:
    """Print a styled section header with horizontal rules."""
    console.rule(f"[bold]{title}[/bold]", characters="=")


def print_warning(msg: str) -> None:
    console.print(f"[warning]WARNING:[/warning] {msg}", highlight=False)


def print_success(msg: str) -> None:
    console.print(f"[success]OK:[/success] {msg}", highlight=False)


def print_status_panel(status: str, message: str, detail: str, level: str = "info") -> None:
    """Print a status panel with colored border.

    Args:
        status: Status label (e.g., "CIRCULAR", "CLEAN")
        message: Main message line
        detail: Additional detail line
        level: One of "error", "warning", "success", "info"
    """
    style_map = {
        "error": ("bold red", "red"),
        "warning": ("bold yellow", "yellow"),
        "success": ("bold green", "green"),
        "info": ("bold cyan", "cyan"),
    }
    text_style, border_style = style_map.get(level, ("white", "white"))

    panel = Panel(
        Text.assemble(
            (f"STATUS: [{status}]\n", text_style),
            (f"{message}\n", border_style),
            (detail, border_style),
        ),
        border_style=border_style,
        expand=False,
    )
    console.print(panel)


def key_value_table(title: str, rows: list[tuple[str, str]]) -> Table:
    """Two-column table for summaries."""
    table = Table(title=title, show_header=False, title_justify="left", box=None, pad_edge=False)
    table.add_column("key", style="bold")
    table.add_column("value")
    for key, value in rows:
        table.add_row(key, value)
    return table
