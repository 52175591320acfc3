"""Document store: the directory and file primitives the service calls.

The service composes every path from its Config roots; the store only moves
bytes. ``read_document`` raises FileNotFoundError for a missing document so
the service can map it to NotFoundError.
"""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

README_FILENAME = "README.md"
POSTMORTEM_FILENAME = "POSTMORTEM.md"


class DocumentStore(Protocol):
    def create_directory(self, path: Path) -> None: ...

    def move_directory(self, src: Path, dst: Path) -> None: ...

    def read_document(self, path: Path) -> str: ...

    def write_document(self, path: Path, content: str) -> None: ...

    def file_exists(self, path: Path) -> bool: ...

    def directory_exists(self, path: Path) -> bool: ...

    def list_directories(self, path: Path) -> list[str]: ...

    def modified_time(self, path: Path) -> datetime | None: ...


def write_atomic(path: Path, content: str) -> None:
    """Write content to path atomically via temp file + os.replace()."""
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_text(content, encoding="utf-8")
        os.replace(tmp, path)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise


class LocalDocumentStore:
    """DocumentStore backed by the local filesystem."""

    def create_directory(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def move_directory(self, src: Path, dst: Path) -> None:
        if dst.exists():
            msg = f"Destination already exists: {dst}"
            raise FileExistsError(msg)
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(src), str(dst))
        logger.debug("Moved %s -> %s", src, dst)

    def read_document(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def write_document(self, path: Path, content: str) -> None:
        write_atomic(path, content)

    def file_exists(self, path: Path) -> bool:
        return path.is_file()

    def directory_exists(self, path: Path) -> bool:
        return path.is_dir()

    def list_directories(self, path: Path) -> list[str]:
        """Names of immediate subdirectories, sorted. Empty when *path* is absent."""
        if not path.is_dir():
            return []
        return sorted(entry.name for entry in path.iterdir() if entry.is_dir())

    def modified_time(self, path: Path) -> datetime | None:
        try:
            return datetime.fromtimestamp(path.stat().st_mtime, tz=UTC)
        except OSError:
            return None
