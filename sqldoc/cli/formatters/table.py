"""
Rich table formatter for terminal output
"""

import json
from typing import Any, Dict, List

try:
    from rich import box
    from rich.console import Console
    from rich.markup import escape
    from rich.table import Table

    RICH_AVAILABLE = True
except ImportError:
    RICH_AVAILABLE = False
    Console = None
    Table = None
    box = None
    escape = None

from sqldoc.cli.formatters.base import BaseFormatter


class TableFormatter(BaseFormatter):
    """Format row dictionaries as a Rich table"""

    def format(self, results: List[Dict[str, Any]], **kwargs) -> str:
        """
        Format results as a Rich table

        Args:
            results: List of row dictionaries
            **kwargs: Options like 'no_color', 'show_footer'

        Returns:
            Formatted table string
        """
        if not RICH_AVAILABLE:
            raise ImportError(
                "Table formatter requires rich library. "
                "Install with: pip install sqldoc"
            )

        if not results:
            return "No results found."

        console = Console(force_terminal=not kwargs.get("no_color", False))
        columns = list(results[0].keys())

        if console.width < 80:
            table = Table(show_header=True, header_style="bold magenta", box=box.SIMPLE)
        else:
            table = Table(show_header=True, header_style="bold magenta")

        for col in columns:
            table.add_column(col, style="cyan", overflow="fold")

        for row in results:
            table.add_row(*[self._cell(row.get(col)) for col in columns])

        with console.capture() as capture:
            console.print(table)
        output = capture.get()

        if kwargs.get("show_footer", True):
            row_count = len(results)
            footer = f"[dim]{row_count} row{'s' if row_count != 1 else ''}[/dim]"
            with console.capture() as capture:
                console.print(footer)
            output += capture.get()

        return output

    def _cell(self, value: Any) -> str:
        # Strings print bare, everything else as its JSON text
        if value is None:
            return "[dim]null[/dim]"
        text = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)
        return escape(text)
