"""
Where: certsync/core/name_guard.py
What: Validate collection names and turn them into filesystem tokens.
Why: Names end up in file paths; anything unexpected is rejected, never rewritten.
"""

import re
from collections import defaultdict
from typing import Dict, Iterable, List

from .exceptions import InvalidCollectionNameError

_NAME_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


def validate_collection_name(raw_name: str) -> bool:
    """Return True if the name only uses ASCII letters, digits, underscore and hyphen."""
    if not isinstance(raw_name, str):
        return False
    return _NAME_PATTERN.fullmatch(raw_name) is not None


def normalize_collection_name(raw_name: str) -> str:
    """
    Turn a collection name into the token used for artifact paths.

    Valid names are returned unchanged.

    Raises:
        InvalidCollectionNameError: if the name fails validation
    """
    if not validate_collection_name(raw_name):
        raise InvalidCollectionNameError(raw_name)
    return raw_name


def collision_key(token: str) -> str:
    # Case-only variants share one file on case-insensitive filesystems.
    return token.casefold()


def find_collisions(names: Iterable[str]) -> Dict[str, List[str]]:
    """
    Group valid names whose tokens collide.

    Invalid names are ignored here; they are rejected separately.

    Returns:
        Dict of collision key -> raw names (only groups with more than one name)
    """
    groups: Dict[str, List[str]] = defaultdict(list)
    for name in names:
        if validate_collection_name(name):
            groups[collision_key(normalize_collection_name(name))].append(name)
    return {key: sorted(group) for key, group in groups.items() if len(group) > 1}
