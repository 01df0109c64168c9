"""
Main CLI entry point for Pienkuu
"""

import logging
import posixpath
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from .. import __version__
from ..core.action_runner import ActionRunner
from ..core.archive_sink import ZipArchiveSink, remove_stale_output, write_archive
from ..core.folder_composer import FolderComposer
from ..core.minifier import LuaMinifier
from ..core.settings_manager import SettingsManager
from ..integration.http_fetcher import HttpFetcher
from .ui.display import create_entries_table
from .utils.async_runner import async_command

# Initialize console
console = Console()

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
)

logger = logging.getLogger(__name__)


@click.command()
@click.version_option(version=__version__, prog_name="pienkuu")
@click.argument("folder", required=True)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option(
    "--settings",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Tool settings file (YAML)",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Compose the archive and list its entries without writing it",
)
@click.pass_context
@async_command
async def cli(
    ctx: click.Context,
    folder: str,
    verbose: bool,
    no_color: bool,
    settings: Optional[Path],
    dry_run: bool,
) -> None:
    """
    Pienkuu - Folder Packager

    Packages FOLDER and its declared dependency folders into FOLDER.zip in
    the current directory, applying the ignore, minify and action rules of
    each folder's pienkuu.json.

    Examples:
      pienkuu game                  # Write game.zip
      pienkuu game --dry-run        # List entries without writing
      pienkuu game -v               # Show composition details
    """
    out = Console(force_terminal=False, no_color=True) if no_color else console

    packager_settings = await SettingsManager().load_settings(settings)

    # Configure logging level
    logging.getLogger().setLevel(packager_settings.log_level)
    if verbose:
        logging.getLogger("pienkuu").setLevel(logging.DEBUG)

    folder_name = posixpath.normpath(folder)
    output_path = Path.cwd() / f"{Path(folder_name).name}{packager_settings.archive_extension}"

    if not dry_run:
        remove_stale_output(output_path)

    archive_sink = ZipArchiveSink(compression_level=packager_settings.compression_level)

    async with HttpFetcher(
        max_redirects=packager_settings.max_redirects,
        timeout=packager_settings.download_timeout,
    ) as fetcher:
        composer = FolderComposer(
            action_runner=ActionRunner.with_default_actions(out, fetcher),
            minifier=LuaMinifier(),
        )
        await composer.compose(folder_name, archive_sink)

    if dry_run:
        out.print(create_entries_table(archive_sink.entries()))
        out.print(f"[cyan]Dry run: {len(archive_sink)} entries, nothing written[/cyan]")
        return

    data = archive_sink.serialize()
    write_archive(output_path, data)

    out.print(f"[green]✅ Archive written: {output_path.name}[/green]")
    out.print(f"   Entries: {len(archive_sink)}")
    out.print(f"   Size: {len(data):,} bytes")


def main() -> None:
    """Main entry point for the CLI application"""
    try:
        cli()

    except KeyboardInterrupt:
        console.print("\n[yellow]Operation interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        Console(stderr=True).print(f"[red]Unexpected error: {e}[/red]")
        if "--verbose" in sys.argv or "-v" in sys.argv:
            console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
