"""
Where: certsync/tests/test_config_defaults.py
What: Validate default CertSyncConfig values and overrides.
Why: Keep documented defaults stable as environment defaults evolve.
"""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from certsync.config import CertSyncConfig

_MANAGED_VARS = (
    "CERTIFICATES_PATH",
    "STORE_SOURCE",
    "RESTART_FLAG_SCOPE",
    "SYNC_SCHEDULE",
    "SYNC_WORKERS",
    "RUN_ON_STARTUP",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _MANAGED_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = CertSyncConfig(_env_file=None)

    assert config.CERTIFICATES_PATH == Path("/opt/iobroker/certificates").resolve()
    assert config.STORE_SOURCE == "file"
    assert config.RESTART_FLAG_SCOPE == "collection"
    assert config.SYNC_SCHEDULE == "0 0 * * *"
    assert config.RUN_ON_STARTUP is True
    assert config.SYNC_WORKERS == 1
    assert config.VERIFY_SSL is True


def test_relative_certificates_path_resolved(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CERTIFICATES_PATH", "certs")

    config = CertSyncConfig(_env_file=None)

    assert config.CERTIFICATES_PATH.is_absolute()
    assert config.CERTIFICATES_PATH == (tmp_path / "certs").resolve()
    assert os.path.isabs(str(config.CERTIFICATES_PATH))


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("RESTART_FLAG_SCOPE", "global")
    monkeypatch.setenv("STORE_SOURCE", "http")
    monkeypatch.setenv("SYNC_WORKERS", "4")
    monkeypatch.setenv("RUN_ON_STARTUP", "false")

    config = CertSyncConfig(_env_file=None)

    assert config.RESTART_FLAG_SCOPE == "global"
    assert config.STORE_SOURCE == "http"
    assert config.SYNC_WORKERS == 4
    assert config.RUN_ON_STARTUP is False


@pytest.mark.parametrize(
    "name, value",
    [
        ("RESTART_FLAG_SCOPE", "per-domain"),
        ("STORE_SOURCE", "redis"),
        ("SYNC_SCHEDULE", "daily"),
        ("SYNC_WORKERS", "0"),
    ],
)
def test_invalid_values_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        CertSyncConfig(_env_file=None)
