"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output.
Uses Rich for spinners, tables and colored output. Supports verbosity
levels and the --no-color flag.
"""

from contextlib import contextmanager
from typing import Iterator, List, Tuple

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner
from rich.table import Table

from .models import PackageSummary


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Logging verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Package read")
        >>> with handler.spinner("Reading..."):
        ...     pass
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
        """
        self.verbosity = verbosity
        self.console = Console(
            force_terminal=not no_color,
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        """Display success message in green."""
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        """Display error message in red."""
        self.console.print(f"[red]✗[/red] {message}", style="red")

    def warning(self, message: str) -> None:
        """Display warning message in yellow."""
        self.console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(message)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display spinner while a single operation runs.

        Args:
            message: Message to display with spinner
        """
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10, transient=True):
            yield

    def print_package_summary(self, summary: PackageSummary) -> None:
        """Display the content of an indexed package.

        Args:
            summary: Counts computed from the package index
        """
        if summary.spaces:
            table = Table(title="Spaces")
            table.add_column("Id", justify="right")
            table.add_column("Key")
            table.add_column("Name")
            table.add_column("Pages", justify="right")
            for space in summary.spaces:
                table.add_row(
                    str(space.space_id),
                    space.key or "",
                    space.name or "",
                    str(space.page_count),
                )
            self.console.print(table)

        self.console.print("\n[bold]Package Summary:[/bold]")
        self.console.print(f"  Spaces: {len(summary.spaces)}")
        self.console.print(f"  Pages: {summary.page_count}")
        self.console.print(f"  Attachments: {summary.attachment_count}")
        self.console.print(
            f"  Users: {summary.internal_user_count + summary.user_impl_count} "
            f"({summary.internal_user_count} internal, {summary.user_impl_count} by key)"
        )
        self.console.print(f"  Groups: {summary.group_count}")

        if not summary.spaces and summary.page_count == 0:
            self.console.print("\n[yellow]Package contains no pages[/yellow]")

    def print_space_pages(self, space_key: str, pages: List[Tuple[int, str]]) -> None:
        """Display the current pages of a space in export order.

        Args:
            space_key: Key of the listed space
            pages: (page id, title) pairs
        """
        self.console.print(f"\n[bold]Pages of {space_key}:[/bold]")

        if not pages:
            self.console.print("  [dim]No pages[/dim]")
            return

        for page_id, title in pages:
            self.console.print(f"  • {title} [dim]({page_id})[/dim]")
