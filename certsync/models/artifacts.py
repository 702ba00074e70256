"""
Artifact models.

Paths, change records and write results for the PEM files of one collection.
"""

import enum
import os
from dataclasses import dataclass
from typing import Optional

KEY_SUFFIX = "_key.pem"
CERT_SUFFIX = "_cert.pem"
CHAIN_SUFFIX = "_fullchain.pem"

KEY_MODE = 0o640
CERT_MODE = 0o644
CHAIN_MODE = 0o644


@dataclass(frozen=True)
class ArtifactSet:
    """Target file paths for one collection token."""

    key_path: str
    cert_path: str
    chain_path: str

    @classmethod
    def for_token(cls, base_dir: str, token: str) -> "ArtifactSet":
        return cls(
            key_path=os.path.join(base_dir, f"{token}{KEY_SUFFIX}"),
            cert_path=os.path.join(base_dir, f"{token}{CERT_SUFFIX}"),
            chain_path=os.path.join(base_dir, f"{token}{CHAIN_SUFFIX}"),
        )


@dataclass(frozen=True)
class ChangeRecord:
    key_changed: bool = False
    cert_changed: bool = False
    chain_changed: bool = False

    @property
    def any_changed(self) -> bool:
        return self.key_changed or self.cert_changed or self.chain_changed


class WriteStatus(str, enum.Enum):
    UNCHANGED = "unchanged"
    WRITTEN = "written"
    FAILED = "failed"


@dataclass
class WriteResult:
    """Outcome of a single write_if_changed call."""

    path: str
    status: WriteStatus
    error: Optional[Exception] = None

    @property
    def written(self) -> bool:
        return self.status is WriteStatus.WRITTEN

    @property
    def failed(self) -> bool:
        return self.status is WriteStatus.FAILED
