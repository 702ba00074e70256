"""
Core logic package.

Provides name validation, PEM checks and the exception hierarchy.
"""

from .exceptions import (
    ArtifactWriteError,
    CertSyncError,
    InvalidCertificateDataError,
    InvalidCollectionNameError,
    NameCollisionError,
    RunDeadlineExceededError,
    StoreUnavailableError,
)
from .name_guard import find_collisions, normalize_collection_name, validate_collection_name
from .pem import is_well_formed, require_well_formed

__all__ = [
    "ArtifactWriteError",
    "CertSyncError",
    "InvalidCertificateDataError",
    "InvalidCollectionNameError",
    "NameCollisionError",
    "RunDeadlineExceededError",
    "StoreUnavailableError",
    "find_collisions",
    "normalize_collection_name",
    "validate_collection_name",
    "is_well_formed",
    "require_well_formed",
]
