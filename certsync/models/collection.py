"""
Certificate collection models.

Defines the structure of one entry of `system.certificates.native.collections`.
"""

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class CertificateCollection(BaseModel):
    """
    A named bundle of private key, certificate and optional chain.

    Read-only snapshot of what the store returned; extra store fields
    (domains, staging, tsExpires, ...) are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    key: Optional[str] = None
    cert: Optional[str] = None
    chain: Optional[List[str]] = None
    # Set when the store entry could not be parsed; no material is carried then.
    malformed: Optional[str] = None

    @field_validator("chain", mode="before")
    @classmethod
    def _chain_as_blocks(cls, value):
        # Some stores keep the chain as one string instead of a list of blocks.
        if isinstance(value, str):
            return [value]
        return value

    @property
    def has_material(self) -> bool:
        """True if the collection carries a key or a certificate."""
        return self.malformed is None and (bool(self.key) or bool(self.cert))

    @property
    def chain_text(self) -> Optional[str]:
        """Chain blocks joined with a single newline, or None without a chain."""
        if not self.chain:
            return None
        return "\n".join(self.chain)


CollectionSnapshot = Mapping[str, CertificateCollection]


def freeze_snapshot(collections: Dict[str, CertificateCollection]) -> CollectionSnapshot:
    """Wrap collections in a read-only mapping for the duration of a run."""
    return MappingProxyType(dict(collections))
