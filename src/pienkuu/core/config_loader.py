"""
Loader for per-folder ``pienkuu.json`` configuration files.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..models.composition_models import ConfigNotFoundError, ConfigParseError
from ..models.config_models import FolderConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "pienkuu.json"


class ConfigLoader:
    """Reads and validates the configuration file of a folder."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self.base_dir = base_dir or Path.cwd()

    def config_path(self, folder_name: str) -> Path:
        """Location of the configuration file for ``folder_name``."""
        return self.base_dir / folder_name / CONFIG_FILENAME

    async def load(self, folder_name: str) -> FolderConfig:
        """
        Load the configuration of ``folder_name``.

        Every call reads the file again; results are never cached.

        Raises:
            ConfigNotFoundError: If the file is missing or unreadable
            ConfigParseError: If the file is not a valid configuration object
        """
        config_path = self.config_path(folder_name)

        try:
            content = await asyncio.get_event_loop().run_in_executor(
                None, lambda: config_path.read_text(encoding="utf-8")
            )
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigNotFoundError(
                f"Cannot read configuration file '{folder_name}/{CONFIG_FILENAME}': {e}",
                folder_name,
            ) from e

        config = self.parse(content, folder_name)
        logger.debug(
            f"Loaded {folder_name}/{CONFIG_FILENAME}: "
            f"{len(config.dependencies)} dependencies, "
            f"{len(config.ignore)} ignore, {len(config.minify)} minify, "
            f"{len(config.actions)} actions"
        )
        return config

    def parse(self, content: str, folder_name: str) -> FolderConfig:
        """Parse configuration text belonging to ``folder_name``."""
        try:
            data: Any = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigParseError(
                f"Invalid JSON in '{folder_name}/{CONFIG_FILENAME}': {e}", folder_name
            ) from e

        if not isinstance(data, dict):
            raise ConfigParseError(
                f"'{folder_name}/{CONFIG_FILENAME}' must contain a JSON object",
                folder_name,
            )

        return self._validate(data, folder_name)

    def _validate(self, data: Dict[str, Any], folder_name: str) -> FolderConfig:
        try:
            return FolderConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigParseError(
                f"Invalid configuration in '{folder_name}/{CONFIG_FILENAME}': {e}",
                folder_name,
            ) from e
