# Where: certsync/services/restart_signal.py
# What: Latched restart flag for downstream consumers.
# Why: Consumers reload at most once per unconsumed change-set.
"""
Restart signal.

A flag file is created when new material was written. An existing flag is
never rewritten; removing it is the consumer's job.

Before new material is written an "unsent" marker is left next to the flags.
It is removed once the flag exists, so a signal that could not be raised is
retried on the next run even when the artifacts no longer differ.
"""

import enum
import logging
import os
import tempfile
import threading

from ..core.exceptions import ArtifactWriteError

logger = logging.getLogger("certsync.restart_signal")

FLAG_SUFFIX = "new_ssl_cert.txt"
FLAG_PAYLOAD = b"restart"
FLAG_MODE = 0o644
UNSENT_SUFFIX = ".unsent"
UNSENT_MODE = 0o600


class RestartFlagScope(str, enum.Enum):
    COLLECTION = "collection"
    GLOBAL = "global"


class RestartSignal:
    """
    Creates restart flags under the flag directory according to a fixed scope policy.
    """

    def __init__(self, flag_dir: str, scope: RestartFlagScope = RestartFlagScope.COLLECTION):
        self.flag_dir = flag_dir
        self.scope = RestartFlagScope(scope)
        # check-then-create must not interleave when pipelines share a flag
        self._lock = threading.Lock()

    def flag_path(self, token: str) -> str:
        """Path of the flag for a collection token under the configured scope."""
        if self.scope is RestartFlagScope.GLOBAL:
            return os.path.join(self.flag_dir, FLAG_SUFFIX)
        return os.path.join(self.flag_dir, f"{token}_{FLAG_SUFFIX}")

    def unsent_marker_path(self, token: str) -> str:
        # Always per collection, whatever the flag scope.
        return os.path.join(self.flag_dir, f".{token}_{FLAG_SUFFIX}{UNSENT_SUFFIX}")

    def is_pending(self, token: str) -> bool:
        return os.path.exists(self.flag_path(token))

    def is_unsent(self, token: str) -> bool:
        return os.path.exists(self.unsent_marker_path(token))

    def mark_unsent(self, token: str) -> None:
        """
        Record that a signal is owed for `token`.

        Raises:
            ArtifactWriteError: if the marker could not be created
        """
        path = self.unsent_marker_path(token)
        try:
            os.makedirs(self.flag_dir, exist_ok=True)
            fd = os.open(path, os.O_WRONLY | os.O_CREAT, UNSENT_MODE)
            os.close(fd)
        except OSError as e:
            raise ArtifactWriteError(path, e) from e

    def clear_unsent(self, token: str) -> None:
        path = self.unsent_marker_path(token)
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            # The flag is already there; a stale marker only costs one latched retry.
            logger.warning(f"Could not remove unsent signal marker {path}: {e}")

    def raise_signal(self, token: str) -> bool:
        """
        Create the flag for `token` unless one is already present.

        The payload goes to a temporary file first and is hard-linked into
        place, so the flag never appears empty or half written.

        Returns:
            True if a new flag was created, False if one was already pending

        Raises:
            ArtifactWriteError: if the flag could not be created
        """
        path = self.flag_path(token)
        with self._lock:
            if os.path.exists(path):
                logger.warning(f"Restart flag already present, leaving it untouched: {path}")
                return False
            try:
                os.makedirs(self.flag_dir, exist_ok=True)
                self._link_flag(path)
            except FileExistsError:
                logger.warning(f"Restart flag already present, leaving it untouched: {path}")
                return False
            except OSError as e:
                raise ArtifactWriteError(path, e) from e

        logger.info(f"Restart flag created: {path}")
        return True

    def _link_flag(self, path: str) -> None:
        fd, temp_path = tempfile.mkstemp(
            prefix=f".{os.path.basename(path)}.", suffix=".tmp", dir=self.flag_dir
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(FLAG_PAYLOAD)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(temp_path, FLAG_MODE)
            # link() fails with EEXIST instead of replacing a consumer's flag
            os.link(temp_path, path)
        finally:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
