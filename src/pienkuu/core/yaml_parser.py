"""
YAML settings parser with environment variable substitution.
"""

import asyncio
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)


class YAMLSettingsParser:
    """YAML settings parser with environment variable substitution."""

    def __init__(self) -> None:
        self.env_var_pattern = re.compile(r"\$\{([^}]+)\}")

    async def load_yaml_settings(self, settings_path: Path) -> Dict[str, Any]:
        """Load and parse a YAML settings file with environment substitution."""

        if not settings_path.exists():
            raise FileNotFoundError(f"Settings file not found: {settings_path}")

        yaml_content = await asyncio.get_event_loop().run_in_executor(
            None, lambda: settings_path.read_text(encoding="utf-8")
        )

        substituted_content = self._substitute_environment_variables(yaml_content)

        try:
            settings_data = yaml.safe_load(substituted_content)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in settings file: {e}") from e

        # An empty file means "all defaults"
        if settings_data is None:
            return {}

        if not isinstance(settings_data, dict):
            raise ValueError("Settings file must contain a YAML dictionary")

        logger.debug(f"Loaded settings from {settings_path}")
        return settings_data

    def _substitute_environment_variables(self, content: str) -> str:
        """Substitute ${VAR} and ${VAR:default} references in YAML content."""

        processed_lines = []

        for line in content.split("\n"):
            # Skip processing environment variables in comment lines
            if line.strip().startswith("#"):
                processed_lines.append(line)
                continue

            def replace_env_var(match: Any) -> str:
                var_name = match.group(1)

                if ":" in var_name:
                    var_name, default_value = var_name.split(":", 1)
                    return os.getenv(var_name, default_value)

                env_value = os.getenv(var_name)
                if env_value is None:
                    raise ValueError(f"Environment variable '{var_name}' is not set")
                return env_value

            processed_lines.append(self.env_var_pattern.sub(replace_env_var, line))

        return "\n".join(processed_lines)
