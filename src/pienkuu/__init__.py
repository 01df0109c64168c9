"""
Pienkuu - Folder Packager

Packages a script project folder, together with its declared dependency
folders, into a single archive using per-folder ``pienkuu.json`` rules.
"""

__version__ = "1.0.0"

from .core.config_loader import CONFIG_FILENAME, ConfigLoader
from .core.folder_composer import FolderComposer
from .models.composition_models import PackagingError
from .models.config_models import FolderConfig, PackagerSettings

__all__ = [
    "CONFIG_FILENAME",
    "ConfigLoader",
    "FolderComposer",
    "FolderConfig",
    "PackagerSettings",
    "PackagingError",
]
