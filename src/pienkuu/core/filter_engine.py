"""
Glob filter evaluation for archive-relative paths.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from wcmatch import glob

from .config_loader import CONFIG_FILENAME

logger = logging.getLogger(__name__)

# Archive-wide ignores, never prefixed with a folder name
GLOBAL_IGNORE_FILTERS = [
    "*/.git/**",
    f"*/{CONFIG_FILENAME}",
]

# Per-folder ignores, prefixed with the folder name like user patterns
FOLDER_IGNORE_FILTERS = [
    ".git/**",
    CONFIG_FILENAME,
]

# '*' stays within one path segment, '**' crosses segments, dot-files match
GLOB_FLAGS = glob.GLOBSTAR | glob.DOTGLOB


def matches_any(path: str, patterns: Sequence[str]) -> bool:
    """Return True if ``path`` matches at least one glob in ``patterns``."""
    return explain_match(path, patterns) is not None


def explain_match(path: str, patterns: Sequence[str]) -> Optional[str]:
    """Return the first pattern matching ``path``, or None."""
    for pattern in patterns:
        if glob.globmatch(path, pattern, flags=GLOB_FLAGS):
            return pattern
    return None


def scope_patterns(folder_name: str, patterns: Sequence[str]) -> List[str]:
    """Rewrite folder-relative patterns into archive-relative ones."""
    return [f"{folder_name}/{pattern}" for pattern in patterns]


@dataclass
class FolderFilters:
    """Resolved ignore and minify filters for one folder."""

    folder_name: str
    ignore_filters: List[str] = field(default_factory=list)
    minify_filters: List[str] = field(default_factory=list)

    @classmethod
    def for_folder(
        cls, folder_name: str, ignore: Sequence[str], minify: Sequence[str]
    ) -> "FolderFilters":
        """Build the filter sets for ``folder_name`` from its own patterns."""
        return cls(
            folder_name=folder_name,
            ignore_filters=(
                GLOBAL_IGNORE_FILTERS
                + scope_patterns(folder_name, FOLDER_IGNORE_FILTERS)
                + scope_patterns(folder_name, ignore)
            ),
            minify_filters=scope_patterns(folder_name, minify),
        )

    def is_ignored(self, path: str) -> bool:
        """Whether ``path`` is excluded from the archive."""
        pattern = explain_match(path, self.ignore_filters)
        if pattern is not None:
            logger.debug(f"Ignoring {path} (matched '{pattern}')")
            return True
        return False

    def should_minify(self, path: str) -> bool:
        """Whether ``path`` is minified before it is archived."""
        return matches_any(path, self.minify_filters)
