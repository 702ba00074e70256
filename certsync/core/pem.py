"""
Structural PEM checks.

Only the header marker is inspected; no parsing or chain verification happens here.
"""

from .exceptions import InvalidCertificateDataError

PEM_HEADER = "-----BEGIN"


def is_well_formed(pem) -> bool:
    """True iff the material is text starting with the PEM header marker."""
    return isinstance(pem, str) and pem.startswith(PEM_HEADER)


def require_well_formed(collection: str, kind: str, pem) -> str:
    """
    Return the material unchanged if it looks like PEM.

    Raises:
        InvalidCertificateDataError: for empty, truncated or non-PEM input
    """
    if not is_well_formed(pem):
        raise InvalidCertificateDataError(collection, kind)
    return pem
