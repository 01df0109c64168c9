"""
Data models for Pienkuu.
"""

from .composition_models import (
    CompositionContext,
    ConfigNotFoundError,
    ConfigParseError,
    DependencyCycleError,
    InvalidActionOptionsError,
    MinifyError,
    NetworkError,
    PackagingError,
    SettingsError,
    UnknownActionError,
)
from .config_models import (
    ActionSpec,
    DownloadOptions,
    FolderConfig,
    PackagerSettings,
    PrintOptions,
)

__all__ = [
    # Configuration models
    "ActionSpec",
    "DownloadOptions",
    "FolderConfig",
    "PackagerSettings",
    "PrintOptions",
    # Composition
    "CompositionContext",
    # Errors
    "PackagingError",
    "ConfigNotFoundError",
    "ConfigParseError",
    "DependencyCycleError",
    "InvalidActionOptionsError",
    "MinifyError",
    "NetworkError",
    "SettingsError",
    "UnknownActionError",
]
