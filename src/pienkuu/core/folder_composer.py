"""
Recursive folder composition into a shared archive sink.
"""

import asyncio
import logging
import os
import posixpath
from pathlib import Path
from typing import List, Optional, Tuple

from ..models.composition_models import (
    CompositionContext,
    DependencyCycleError,
    MinifyError,
    PackagingError,
)
from ..models.config_models import FolderConfig
from .action_runner import ActionRunner
from .archive_sink import ArchiveSink
from .config_loader import ConfigLoader
from .filter_engine import FolderFilters
from .minifier import LuaMinifier, Minifier

logger = logging.getLogger(__name__)


class FolderComposer:
    """
    Composes a folder and its dependencies into one archive.

    For every folder, in this order: load its configuration, compose each
    dependency depth-first in declared order, collect the folder's own
    files through its ignore filters (minifying the selected ones), write
    them to the sink, then run its actions one after another.

    Folders reached through several dependency paths are composed every
    time they are reached; later writes replace earlier entries at the
    same archive path. A folder reappearing on its own dependency chain
    raises DependencyCycleError.
    """

    def __init__(
        self,
        action_runner: ActionRunner,
        minifier: Optional[Minifier] = None,
        config_loader: Optional[ConfigLoader] = None,
        base_dir: Optional[Path] = None,
    ):
        """
        Initialize the composer.

        Args:
            action_runner: Runner dispatching each folder's declared actions
            minifier: Transform for files selected by minify filters
            config_loader: Loader for folder configuration files
            base_dir: Directory folder names are resolved against
        """
        self.base_dir = base_dir or (config_loader.base_dir if config_loader else Path.cwd())
        self.action_runner = action_runner
        self.minifier = minifier or LuaMinifier()
        self.config_loader = config_loader or ConfigLoader(self.base_dir)

    async def compose(self, folder_name: str, archive_sink: ArchiveSink) -> None:
        """
        Compose ``folder_name`` and everything it depends on into ``archive_sink``.

        Raises:
            PackagingError: The first failure anywhere in the dependency tree
        """
        await self._compose(folder_name, archive_sink, [])

    async def _compose(
        self, folder_name: str, archive_sink: ArchiveSink, active_chain: List[str]
    ) -> None:
        # Archive paths are built from the normalized name: "./proj/" is "proj"
        folder_name = posixpath.normpath(folder_name)
        if folder_name in active_chain:
            cycle = active_chain[active_chain.index(folder_name):] + [folder_name]
            raise DependencyCycleError(cycle)

        active_chain.append(folder_name)
        try:
            config = await self.config_loader.load(folder_name)

            for dependency in config.dependencies:
                logger.debug(f"{folder_name}: composing dependency {dependency}")
                await self._compose(dependency, archive_sink, active_chain)

            entries = await self._collect_entries(folder_name, config)
            for path, contents in entries:
                archive_sink.put(path, contents)

            context = CompositionContext(
                folder_name=folder_name, archive_sink=archive_sink, config=config
            )
            for spec in config.actions:
                await self.action_runner.run(spec, context)
        finally:
            active_chain.pop()

        logger.info(
            f"Composed {folder_name}: {len(entries)} files, {len(config.actions)} actions"
        )

    async def _collect_entries(
        self, folder_name: str, config: FolderConfig
    ) -> List[Tuple[str, bytes]]:
        filters = FolderFilters.for_folder(folder_name, config.ignore, config.minify)
        paths = await asyncio.get_event_loop().run_in_executor(
            None, self.list_files, folder_name
        )

        entries = []
        for path in paths:
            if filters.is_ignored(path):
                continue
            if filters.should_minify(path):
                contents = await self._read_minified(folder_name, path)
            else:
                contents = await self._read_file(folder_name, path)
            entries.append((path, contents))
        return entries

    def list_files(self, folder_name: str) -> List[str]:
        """Archive-relative paths of every file below ``folder_name``, sorted."""
        root = self.base_dir / folder_name
        paths = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames.sort()
            relative_dir = Path(dirpath).relative_to(root).as_posix()
            for filename in sorted(filenames):
                if relative_dir == ".":
                    paths.append(f"{folder_name}/{filename}")
                else:
                    paths.append(f"{folder_name}/{relative_dir}/{filename}")
        return paths

    async def _read_file(self, folder_name: str, path: str) -> bytes:
        file_path = self.base_dir / path
        try:
            return await asyncio.get_event_loop().run_in_executor(
                None, file_path.read_bytes
            )
        except OSError as e:
            raise PackagingError(f"Cannot read {path}: {e}", folder_name) from e

    async def _read_minified(self, folder_name: str, path: str) -> bytes:
        raw = await self._read_file(folder_name, path)
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MinifyError(
                f"Cannot minify {path}: not valid UTF-8 ({e})", folder_name, path
            ) from e

        try:
            minified = await asyncio.get_event_loop().run_in_executor(
                None, self.minifier.minify, text
            )
        except MinifyError as e:
            raise MinifyError(
                f"Failed to minify {path}: {e}", folder_name, path, e.line
            ) from e

        logger.debug(f"Minified {path}: {len(raw)} -> {len(minified)} characters")
        return minified.encode("utf-8")
