"""
Post-processing actions executed after a folder's files are archived.
"""

import logging
import posixpath
from typing import Dict, Optional, Protocol, Type, cast

import httpx
from pydantic import BaseModel, ValidationError
from rich.console import Console

from ..integration.http_fetcher import HttpFetcher
from ..models.composition_models import (
    CompositionContext,
    InvalidActionOptionsError,
    NetworkError,
    UnknownActionError,
)
from ..models.config_models import ActionSpec, DownloadOptions, PrintOptions
from .config_loader import CONFIG_FILENAME

logger = logging.getLogger(__name__)


class Action(Protocol):
    """A named post-processing step with validated options."""

    name: str
    options_model: Type[BaseModel]

    async def run(self, options: BaseModel, context: CompositionContext) -> None:
        ...


class PrintAction:
    """Writes ``<folder>: <text>`` to the operator console."""

    name = "print"
    options_model: Type[BaseModel] = PrintOptions

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    async def run(self, options: BaseModel, context: CompositionContext) -> None:
        options = cast(PrintOptions, options)
        self.console.print(
            f"{context.folder_name}: {options.text}", markup=False, highlight=False
        )


class DownloadAction:
    """Fetches a remote file and stores it inside the folder's archive scope."""

    name = "download"
    options_model: Type[BaseModel] = DownloadOptions

    def __init__(self, fetcher: HttpFetcher):
        self.fetcher = fetcher

    async def run(self, options: BaseModel, context: CompositionContext) -> None:
        options = cast(DownloadOptions, options)
        try:
            contents = await self.fetcher.fetch(options.url)
        except NetworkError as e:
            e.folder_name = context.folder_name
            raise

        target_path = resolve_download_path(
            context.folder_name, options.url, options.target
        )

        context.archive_sink.put(target_path, contents)
        logger.info(f"{context.folder_name}: downloaded {options.url} -> {target_path}")


def resolve_download_path(folder_name: str, url: str, target: str) -> str:
    """
    Compute the archive path a download is stored at.

    A target ending in '/' (or an empty target) names a directory and
    receives the URL's final path component; any other target is used
    verbatim as the file name. The result is always scoped to the folder.
    """
    full_path = f"{folder_name}/{target}"
    if full_path.endswith("/"):
        # httpx.URL.path excludes the query string and fragment
        file_name = posixpath.basename(httpx.URL(url).path)
        full_path += file_name
    return full_path


class ActionRunner:
    """Dispatches declared actions to their registered handlers."""

    def __init__(self, actions: Optional[Dict[str, Action]] = None):
        self._registry: Dict[str, Action] = dict(actions or {})

    @classmethod
    def with_default_actions(
        cls, console: Console, fetcher: HttpFetcher
    ) -> "ActionRunner":
        """Runner with the built-in ``print`` and ``download`` actions."""
        runner = cls()
        runner.register(PrintAction(console))
        runner.register(DownloadAction(fetcher))
        return runner

    def register(self, action: Action) -> None:
        if action.name in self._registry:
            logger.warning(f"Replacing handler for action '{action.name}'")
        self._registry[action.name] = action

    @property
    def action_names(self) -> list[str]:
        return sorted(self._registry)

    def resolve(self, folder_name: str, spec: ActionSpec) -> Action:
        """Look up the handler for ``spec``, failing on unknown names."""
        action = self._registry.get(spec.name)
        if action is None:
            raise UnknownActionError(folder_name, spec.name, CONFIG_FILENAME)
        return action

    async def run(self, spec: ActionSpec, context: CompositionContext) -> None:
        """Validate options and execute a single action to completion."""
        action = self.resolve(context.folder_name, spec)

        try:
            options = action.options_model.model_validate(spec.options)
        except ValidationError as e:
            raise InvalidActionOptionsError(
                f"Invalid options for action '{spec.name}' in "
                f"'{context.folder_name}/{CONFIG_FILENAME}': {e}",
                context.folder_name,
                spec.name,
            ) from e

        logger.debug(f"{context.folder_name}: running action '{spec.name}'")
        await action.run(options, context)
