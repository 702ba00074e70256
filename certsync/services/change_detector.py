# Where: certsync/services/change_detector.py
# What: Byte-level comparison of candidate PEM content against files on disk.
# Why: Only rewrite (and signal) when material actually differs.
"""
Change detection for exported artifacts.

Compares what the store delivered with what is currently on disk. No
whitespace or line-ending normalization is applied.
"""

import logging

from ..models.artifacts import ArtifactSet, ChangeRecord
from ..models.collection import CertificateCollection

logger = logging.getLogger("certsync.change_detector")


class ChangeDetector:
    """
    Decides per artifact whether a write is needed.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def has_changed(self, path: str, candidate: str) -> bool:
        """
        Check whether `candidate` differs from the file at `path`.

        Returns:
            True if the file is missing, unreadable, or differs byte-for-byte
        """
        try:
            with open(path, "rb") as f:
                current = f.read()
        except FileNotFoundError:
            return True
        except OSError as e:
            # Unreadable existing file forces a rewrite.
            logger.warning(f"Could not read {path} for comparison, treating as changed: {e}")
            return True

        return current != candidate.encode(self.encoding)

    def detect(self, artifacts: ArtifactSet, collection: CertificateCollection) -> ChangeRecord:
        """
        Compute the change record for one collection.

        A collection without chain never marks the chain as changed; an
        existing chain file is left as it is.
        """
        chain_text = collection.chain_text
        return ChangeRecord(
            key_changed=self.has_changed(artifacts.key_path, collection.key),
            cert_changed=self.has_changed(artifacts.cert_path, collection.cert),
            chain_changed=(
                chain_text is not None and self.has_changed(artifacts.chain_path, chain_text)
            ),
        )
