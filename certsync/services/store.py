"""
Certificate store readers.

Fetch the `system.certificates` object and turn `native.collections` into an
immutable snapshot. Failing to read the object or finding no
`native.collections` mapping surfaces as StoreUnavailableError so the caller
can abort the run. A single malformed entry only marks that collection.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Protocol

import httpx
import yaml
from pydantic import ValidationError

from ..core.exceptions import StoreUnavailableError
from ..core.http_client import HttpClientFactory
from ..models.collection import CertificateCollection, CollectionSnapshot, freeze_snapshot

logger = logging.getLogger("certsync.store")

CERTIFICATES_OBJECT_ID = "system.certificates"


class CertificateStore(Protocol):
    def fetch_collections(self) -> CollectionSnapshot: ...


def parse_certificates_object(obj: Any, source: str = CERTIFICATES_OBJECT_ID) -> CollectionSnapshot:
    """
    Build a snapshot from a `system.certificates` object.

    Raises:
        StoreUnavailableError: if `native.collections` is missing or not a mapping
    """
    if not isinstance(obj, Mapping):
        raise StoreUnavailableError(source, "object is not a mapping")
    native = obj.get("native")
    if not isinstance(native, Mapping):
        raise StoreUnavailableError(source, "object has no 'native' section")
    raw_collections = native.get("collections")
    if not isinstance(raw_collections, Mapping):
        raise StoreUnavailableError(source, "object has no 'native.collections' mapping")

    collections: Dict[str, CertificateCollection] = {}
    for name, entry in raw_collections.items():
        if not isinstance(name, str):
            if str(name) in raw_collections:
                logger.error(f"Dropping collection with non-string name {name!r} from {source}")
                continue
            collections[str(name)] = _rejected(source, str(name), "name is not a string")
            continue
        if not isinstance(entry, Mapping):
            collections[name] = _rejected(source, name, "entry is not a mapping")
            continue
        # Stray non-string keys (YAML allows them) carry no field and are dropped.
        fields = {key: value for key, value in entry.items() if isinstance(key, str)}
        try:
            collections[name] = CertificateCollection.model_validate(
                {**fields, "name": name, "malformed": None}
            )
        except ValidationError as e:
            collections[name] = _rejected(source, name, _describe(e))

    return freeze_snapshot(collections)


def _rejected(source: str, name: str, reason: str) -> CertificateCollection:
    # Kept in the snapshot so the run skips and reports it next to its siblings.
    logger.debug(f"Malformed collection {name!r} in {source}: {reason}")
    return CertificateCollection(name=name, malformed=reason)


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}" for item in error.errors()
    )


class FileCertificateStore:
    """
    Reads a JSON or YAML export of the certificates object from disk.
    """

    def __init__(self, path: str):
        self.path = path

    def fetch_collections(self) -> CollectionSnapshot:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                # YAML is a superset of JSON
                obj = yaml.safe_load(f)
        except OSError as e:
            raise StoreUnavailableError(self.path, e) from e
        except yaml.YAMLError as e:
            raise StoreUnavailableError(self.path, f"parse error: {e}") from e

        snapshot = parse_certificates_object(obj, source=self.path)
        logger.info(f"Loaded {len(snapshot)} collections from {self.path}")
        return snapshot


class HttpCertificateStore:
    """
    Fetches the certificates object as JSON over HTTP.

    Works with endpoints that return the raw object, such as the ioBroker
    simple-api `getObject/system.certificates` route.
    """

    def __init__(
        self,
        url: str,
        client_factory: HttpClientFactory,
        timeout: float = 10.0,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ):
        self.url = url
        self.client_factory = client_factory
        self.timeout = timeout
        self.auth = (username, password or "") if username else None

    def fetch_collections(self) -> CollectionSnapshot:
        try:
            with self.client_factory.create_sync_client(timeout=self.timeout) as client:
                response = client.get(self.url, auth=self.auth)
                response.raise_for_status()
                obj = response.json()
        except httpx.HTTPError as e:
            raise StoreUnavailableError(self.url, e) from e
        except ValueError as e:
            raise StoreUnavailableError(self.url, f"invalid JSON: {e}") from e

        snapshot = parse_certificates_object(obj, source=self.url)
        logger.info(f"Fetched {len(snapshot)} collections from {self.url}")
        return snapshot
