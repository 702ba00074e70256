"""
Data model definitions package.

Aggregates collection, artifact and report models for use in other modules.
"""

from .artifacts import ArtifactSet, ChangeRecord, WriteResult, WriteStatus
from .collection import CertificateCollection, CollectionSnapshot, freeze_snapshot
from .report import CollectionOutcome, RunReport, RunStatus

__all__ = [
    "ArtifactSet",
    "ChangeRecord",
    "WriteResult",
    "WriteStatus",
    "CertificateCollection",
    "CollectionSnapshot",
    "freeze_snapshot",
    "CollectionOutcome",
    "RunReport",
    "RunStatus",
]
