"""Object-store boundary for raw document bytes.

The pipeline only downloads; uploading belongs to whoever hands documents in.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from resume_ranker.core.errors import StorageError

logger = logging.getLogger(__name__)


class ObjectStore(ABC):
    """Interface every binary object store must implement."""

    @abstractmethod
    def upload(self, path: str, data: bytes) -> None:
        """Store ``data`` under ``path``. Raises StorageError on failure."""

    @abstractmethod
    def download(self, path: str) -> bytes:
        """Return the bytes stored under ``path``. Raises StorageError on failure."""


class LocalObjectStore(ObjectStore):
    """Object store backed by a directory on the local filesystem."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def upload(self, path: str, data: bytes) -> None:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            msg = f"Failed to upload '{path}': {e.strerror or e}"
            raise StorageError(msg) from e
        logger.debug("Uploaded %d bytes to %s", len(data), target)

    def download(self, path: str) -> bytes:
        target = self._resolve(path)
        if not target.is_file():
            msg = f"Document not found in storage: {path}"
            raise StorageError(msg)
        try:
            return target.read_bytes()
        except OSError as e:
            msg = f"Failed to download '{path}': {e.strerror or e}"
            raise StorageError(msg) from e

    def _resolve(self, path: str) -> Path:
        target = (self._root / path).resolve()
        if not target.is_relative_to(self._root):
            msg = f"Path escapes storage root: {path}"
            raise StorageError(msg)
        return target
