"""
Composition data models and the packaging error taxonomy.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from .config_models import FolderConfig

if TYPE_CHECKING:
    from ..core.archive_sink import ArchiveSink


class PackagingError(Exception):
    """Base exception for every failure that aborts a packaging run."""

    def __init__(self, message: str, folder_name: Optional[str] = None):
        super().__init__(message)
        self.folder_name = folder_name


class ConfigNotFoundError(PackagingError):
    """A folder has no readable configuration file."""

    pass


class ConfigParseError(PackagingError):
    """A configuration file is not valid structured data."""

    pass


class MinifyError(PackagingError):
    """Source text selected for minification could not be minified."""

    def __init__(
        self,
        message: str,
        folder_name: Optional[str] = None,
        path: Optional[str] = None,
        line: Optional[int] = None,
    ):
        super().__init__(message, folder_name)
        self.path = path
        self.line = line


class NetworkError(PackagingError):
    """A remote fetch failed at the transport or HTTP level."""

    def __init__(
        self,
        message: str,
        folder_name: Optional[str] = None,
        url: Optional[str] = None,
    ):
        super().__init__(message, folder_name)
        self.url = url


class UnknownActionError(PackagingError):
    """A folder declares an action with no registered handler."""

    def __init__(self, folder_name: str, action_name: str, config_file: str):
        super().__init__(
            f"Invalid action name '{action_name}' in '{folder_name}/{config_file}': "
            "no handler for action found.",
            folder_name,
        )
        self.action_name = action_name


class InvalidActionOptionsError(PackagingError):
    """Options given to a registered action failed validation."""

    def __init__(self, message: str, folder_name: str, action_name: str):
        super().__init__(message, folder_name)
        self.action_name = action_name


class DependencyCycleError(PackagingError):
    """A folder depends on itself, directly or transitively."""

    def __init__(self, cycle: List[str]):
        super().__init__(
            f"Dependency cycle detected: {' -> '.join(cycle)}", cycle[-1]
        )
        self.cycle = cycle


class SettingsError(PackagingError):
    """Tool settings could not be loaded or validated."""

    pass


@dataclass
class CompositionContext:
    """State handed to actions while a folder is being composed."""

    folder_name: str
    archive_sink: "ArchiveSink"
    config: FolderConfig
