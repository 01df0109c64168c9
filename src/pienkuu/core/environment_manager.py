"""
Environment variable overrides for tool settings.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

SETTINGS_PATH_VAR = "PIENKUU_SETTINGS_PATH"

# Environment variable -> settings field
OVERRIDE_VARS = {
    "PIENKUU_LOG_LEVEL": "log_level",
    "PIENKUU_MAX_REDIRECTS": "max_redirects",
    "PIENKUU_DOWNLOAD_TIMEOUT": "download_timeout",
}


class EnvironmentManager:
    """Reads settings related environment variables."""

    def get_settings_path(self) -> Optional[Path]:
        """Settings file named by the environment, if any."""
        env_path = os.getenv(SETTINGS_PATH_VAR)
        if env_path:
            return Path(env_path).expanduser()
        return None

    def get_settings_overrides(self) -> Dict[str, str]:
        """Settings values overridden through environment variables."""
        overrides = {}
        for var_name, field in OVERRIDE_VARS.items():
            value = os.getenv(var_name)
            if value:
                overrides[field] = value
        if overrides:
            logger.debug(f"Environment overrides: {sorted(overrides)}")
        return overrides
