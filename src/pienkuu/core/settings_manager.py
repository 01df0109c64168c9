"""
Tool settings loading with file and environment sources.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..models.composition_models import SettingsError
from ..models.config_models import PackagerSettings
from .environment_manager import EnvironmentManager
from .yaml_parser import YAMLSettingsParser

logger = logging.getLogger(__name__)


class SettingsManager:
    """Resolves PackagerSettings from defaults, a YAML file and the environment."""

    def __init__(self) -> None:
        self.yaml_parser = YAMLSettingsParser()
        self.env_manager = EnvironmentManager()
        self.settings_path: Optional[Path] = None

    async def load_settings(self, settings_path: Optional[Path] = None) -> PackagerSettings:
        """
        Load settings.

        An explicitly given path (argument or environment variable) must
        exist; the default location is optional.
        """
        explicit_path = settings_path or self.env_manager.get_settings_path()
        path = explicit_path or self._get_default_settings_path()
        self.settings_path = path

        settings_data: Dict[str, Any] = {}
        if path.exists():
            try:
                settings_data = await self.yaml_parser.load_yaml_settings(path)
            except (OSError, ValueError) as e:
                raise SettingsError(f"Failed to load settings from {path}: {e}") from e
        elif explicit_path is not None:
            raise SettingsError(f"Settings file not found: {path}")
        else:
            logger.debug(f"No settings file at {path}, using defaults")

        settings_data.update(self.env_manager.get_settings_overrides())

        try:
            settings = PackagerSettings(**settings_data)
        except ValidationError as e:
            raise SettingsError(f"Invalid settings: {e}") from e

        logger.debug(f"Settings loaded: {settings.model_dump()}")
        return settings

    def _get_default_settings_path(self) -> Path:
        return Path.home() / ".pienkuu" / "settings.yaml"
