# Where: certsync/services/artifact_writer.py
# What: Atomic, permission-aware persistence of PEM artifacts.
# Why: Consumers must never observe a truncated key or certificate.
"""
Artifact writer.

Writes go to a temporary file in the target directory, are fsynced, get
their final mode, and are then renamed over the destination.
"""

import logging
import os
import tempfile
import threading

from ..models.artifacts import WriteResult, WriteStatus

logger = logging.getLogger("certsync.artifact_writer")


class ArtifactWriter:
    """
    Persists changed artifacts under a single base directory.
    """

    def __init__(self, base_dir: str, encoding: str = "utf-8"):
        """
        Args:
            base_dir: Absolute directory owned by this service
            encoding: Text encoding for PEM content
        """
        self.base_dir = base_dir
        self.encoding = encoding
        self._dir_lock = threading.Lock()

    def ensure_base_dir(self) -> None:
        """Create the base directory (with parents) if it does not exist."""
        with self._dir_lock:
            if not os.path.isdir(self.base_dir):
                os.makedirs(self.base_dir, exist_ok=True)
                logger.info(f"Created certificate directory {self.base_dir}")

    def write_if_changed(self, path: str, content: str, changed: bool, mode: int) -> WriteResult:
        """
        Persist `content` at `path` when `changed` is set.

        Errors are logged and reported in the result, never raised.
        """
        if not changed:
            return WriteResult(path=path, status=WriteStatus.UNCHANGED)

        try:
            self.ensure_base_dir()
            self._atomic_write(path, content.encode(self.encoding), mode)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            return WriteResult(path=path, status=WriteStatus.FAILED, error=e)

        logger.info(f"Saved {path} (mode {mode:o})")
        return WriteResult(path=path, status=WriteStatus.WRITTEN)

    def _atomic_write(self, path: str, data: bytes, mode: int) -> None:
        directory = os.path.dirname(path) or "."
        fd, temp_path = tempfile.mkstemp(
            prefix=f".{os.path.basename(path)}.", suffix=".tmp", dir=directory
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            # mkstemp always creates 0600
            os.chmod(temp_path, mode)
            os.replace(temp_path, path)
        except BaseException:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise
