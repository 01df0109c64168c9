"""
In-memory archive accumulation and atomic output writing.
"""

import io
import logging
import os
import tempfile
import zipfile
from pathlib import Path
from typing import Dict, Iterator, Protocol, Tuple

logger = logging.getLogger(__name__)


class ArchiveSink(Protocol):
    """Destination for archive entries produced during composition."""

    def put(self, path: str, contents: bytes) -> None:
        """Store ``contents`` at archive-relative ``path``."""
        ...

    def serialize(self) -> bytes:
        """Encode every stored entry into the final archive bytes."""
        ...


class ZipArchiveSink:
    """
    Archive sink producing a deflate-compressed ZIP.

    Entries are kept in memory in insertion order. Writing a path twice
    replaces the earlier contents.
    """

    def __init__(self, compression_level: int = 6):
        self.compression_level = compression_level
        self._entries: Dict[str, bytes] = {}

    def put(self, path: str, contents: bytes) -> None:
        if path in self._entries:
            logger.debug(f"Overwriting archive entry {path}")
        self._entries[path] = bytes(contents)

    def get(self, path: str) -> bytes:
        return self._entries[path]

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> Iterator[Tuple[str, bytes]]:
        """Iterate over ``(path, contents)`` pairs in insertion order."""
        return iter(self._entries.items())

    @property
    def total_size(self) -> int:
        return sum(len(contents) for contents in self._entries.values())

    def serialize(self) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(
            buffer,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=self.compression_level,
        ) as archive:
            for path, contents in self._entries.items():
                archive.writestr(path, contents)

        data = buffer.getvalue()
        logger.debug(
            f"Serialized {len(self._entries)} entries: "
            f"{self.total_size} bytes -> {len(data)} bytes"
        )
        return data


def remove_stale_output(output_path: Path) -> None:
    """Delete a previous archive at ``output_path``; failures are ignored."""
    try:
        output_path.unlink()
        logger.debug(f"Removed previous output {output_path}")
    except OSError as e:
        logger.debug(f"No previous output removed at {output_path}: {e}")


def write_archive(output_path: Path, data: bytes) -> None:
    """Write archive bytes through a temporary file and an atomic replace."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(
        prefix=f".{output_path.name}.", suffix=".tmp", dir=output_path.parent
    )
    temp_path = Path(temp_name)

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        temp_path.replace(output_path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise

    logger.info(f"Wrote {len(data)} bytes to {output_path}")
