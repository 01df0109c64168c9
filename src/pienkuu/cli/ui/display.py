"""
Rich display components for packaging results and errors
"""

from typing import Iterable, Optional, Tuple

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ...models.composition_models import (
    ConfigNotFoundError,
    ConfigParseError,
    DependencyCycleError,
    MinifyError,
    NetworkError,
    PackagingError,
    UnknownActionError,
)


def create_entries_table(
    entries: Iterable[Tuple[str, bytes]], title: str = "Archive Entries"
) -> Table:
    """
    Create a Rich table listing archive entries and their sizes
    """
    table = Table(title=title, show_header=True, header_style="bold blue")
    table.add_column("Path", style="cyan", no_wrap=True)
    table.add_column("Size", style="green", justify="right")

    for path, contents in entries:
        table.add_row(path, f"{len(contents):,} B")

    return table


def create_error_display(error: Exception, context: Optional[str] = None) -> Panel:
    """
    Create formatted error display with suggestions
    """
    error_lines = Text()

    if context:
        error_lines.append(f"Context: {context}\n\n")

    error_lines.append(f"Error: {error}\n", style="red")

    folder_name = getattr(error, "folder_name", None)
    if folder_name:
        error_lines.append(f"Folder: {folder_name}\n")

    suggestions = get_error_suggestions(error)
    if suggestions:
        error_lines.append("\nSuggestions:\n", style="yellow")
        for suggestion in suggestions:
            error_lines.append(f"  • {suggestion}\n")

    return Panel(error_lines, title="Error", border_style="red", padding=(0, 1))


def get_error_suggestions(error: Exception) -> list[str]:
    """Suggestions for resolving a packaging failure"""
    if isinstance(error, ConfigNotFoundError):
        return [
            "Check that the folder name is spelled correctly",
            "Every packaged folder and dependency needs a pienkuu.json file",
        ]
    if isinstance(error, ConfigParseError):
        return [
            "Validate the JSON syntax of pienkuu.json",
            "Actions must be written as [name, options] arrays",
        ]
    if isinstance(error, MinifyError):
        return [
            "Fix the syntax error in the source file",
            "Remove the file from the folder's minify list",
        ]
    if isinstance(error, NetworkError):
        return [
            "Check internet connectivity",
            "Verify the download URL is reachable",
        ]
    if isinstance(error, UnknownActionError):
        return ["Supported actions: print, download"]
    if isinstance(error, DependencyCycleError):
        return ["Remove one of the dependencies forming the cycle"]
    if isinstance(error, PackagingError):
        return []
    return ["Run again with --verbose for details"]
