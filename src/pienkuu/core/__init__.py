"""
Core packaging logic for Pienkuu.
"""

from .action_runner import ActionRunner, DownloadAction, PrintAction
from .archive_sink import ArchiveSink, ZipArchiveSink, remove_stale_output, write_archive
from .config_loader import CONFIG_FILENAME, ConfigLoader
from .filter_engine import GLOBAL_IGNORE_FILTERS, FolderFilters, matches_any
from .folder_composer import FolderComposer
from .minifier import LuaMinifier, Minifier
from .settings_manager import SettingsManager

__all__ = [
    # Configuration
    "CONFIG_FILENAME",
    "ConfigLoader",
    "SettingsManager",
    # Filtering and minification
    "GLOBAL_IGNORE_FILTERS",
    "FolderFilters",
    "matches_any",
    "LuaMinifier",
    "Minifier",
    # Actions
    "ActionRunner",
    "DownloadAction",
    "PrintAction",
    # Composition and output
    "FolderComposer",
    "ArchiveSink",
    "ZipArchiveSink",
    "remove_stale_output",
    "write_archive",
]
