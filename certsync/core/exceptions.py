"""
Custom exception classes.

Represent errors raised while syncing certificate collections to disk.
"""


class CertSyncError(Exception):
    """Base exception class for certificate sync."""

    pass


class StoreUnavailableError(CertSyncError):
    """Raised when the certificate store cannot be read or returns a malformed object."""

    def __init__(self, source: str, cause: object):
        self.source = source
        self.cause = cause
        super().__init__(f"Certificate store unavailable ({source}): {cause}")


class InvalidCollectionNameError(CertSyncError):
    """Raised when a collection name contains characters outside [A-Za-z0-9_-]."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid collection name: {name!r}")


class NameCollisionError(CertSyncError):
    """Raised when distinct collection names map to the same token."""

    def __init__(self, token: str, names: list):
        self.token = token
        self.names = sorted(names)
        super().__init__(f"Collection names {self.names} collide on token {token!r}")


class InvalidCertificateDataError(CertSyncError):
    """Raised when key or certificate material lacks a PEM header."""

    def __init__(self, collection: str, kind: str):
        self.collection = collection
        self.kind = kind
        super().__init__(f"Invalid {kind} for collection: {collection}")


class RunDeadlineExceededError(CertSyncError):
    """Raised inside a pipeline once the run deadline has passed."""

    def __init__(self, collection: str):
        self.collection = collection
        super().__init__(f"Run deadline exceeded before {collection} was finished")


class ArtifactWriteError(CertSyncError):
    """Raised when an artifact could not be persisted."""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write {path}: {cause}")
