"""
Where: certsync/tests/test_restart_signal.py
What: Unit tests for the latched restart flag.
Why: A pending flag must never be duplicated or refreshed.
"""

import os
import threading

import pytest

from certsync.core.exceptions import ArtifactWriteError
from certsync.services.restart_signal import RestartFlagScope, RestartSignal
from certsync.tests.conftest import file_mode, read_bytes


def test_collection_scope_flag_path(cert_dir):
    signal = RestartSignal(cert_dir)

    assert signal.flag_path("myhub") == os.path.join(cert_dir, "myhub_new_ssl_cert.txt")


def test_global_scope_flag_path(cert_dir):
    signal = RestartSignal(cert_dir, RestartFlagScope.GLOBAL)

    assert signal.flag_path("myhub") == os.path.join(cert_dir, "new_ssl_cert.txt")
    assert signal.flag_path("other") == signal.flag_path("myhub")


def test_scope_accepts_plain_string(cert_dir):
    assert RestartSignal(cert_dir, "global").scope is RestartFlagScope.GLOBAL


def test_raise_creates_flag(cert_dir):
    signal = RestartSignal(cert_dir)

    assert signal.raise_signal("myhub") is True

    path = signal.flag_path("myhub")
    assert read_bytes(path) == b"restart"
    assert file_mode(path) == 0o644
    assert signal.is_pending("myhub")


def test_existing_flag_is_left_untouched(cert_dir):
    signal = RestartSignal(cert_dir)
    os.makedirs(cert_dir)
    path = signal.flag_path("myhub")
    with open(path, "wb") as f:
        f.write(b"consumer-owned")
    mtime = os.stat(path).st_mtime_ns

    assert signal.raise_signal("myhub") is False

    assert read_bytes(path) == b"consumer-owned"
    assert os.stat(path).st_mtime_ns == mtime


def test_consumed_flag_can_be_raised_again(cert_dir):
    signal = RestartSignal(cert_dir)
    signal.raise_signal("myhub")
    os.remove(signal.flag_path("myhub"))

    assert signal.raise_signal("myhub") is True


def test_global_flag_raised_once_under_contention(cert_dir):
    signal = RestartSignal(cert_dir, RestartFlagScope.GLOBAL)
    results = []
    barrier = threading.Barrier(8)

    def raise_flag(token):
        barrier.wait()
        results.append(signal.raise_signal(token))

    threads = [threading.Thread(target=raise_flag, args=(f"hub{i}",)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 1
    assert os.listdir(cert_dir) == ["new_ssl_cert.txt"]


def test_uncreatable_flag_raises_write_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file")
    signal = RestartSignal(str(blocker / "certs"))

    with pytest.raises(ArtifactWriteError):
        signal.raise_signal("myhub")


def test_failed_flag_write_leaves_no_partial_flag(cert_dir, monkeypatch):
    signal = RestartSignal(cert_dir)

    def failing_fsync(fd):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(os, "fsync", failing_fsync)

    with pytest.raises(ArtifactWriteError):
        signal.raise_signal("myhub")

    assert not signal.is_pending("myhub")
    assert os.listdir(cert_dir) == []


def test_failed_link_cleans_up_temp_file(cert_dir, monkeypatch):
    signal = RestartSignal(cert_dir)

    def failing_link(src, dst):
        raise OSError(1, "Operation not permitted")

    monkeypatch.setattr(os, "link", failing_link)

    with pytest.raises(ArtifactWriteError):
        signal.raise_signal("myhub")

    assert os.listdir(cert_dir) == []


def test_flag_appearing_during_creation_is_kept(cert_dir, monkeypatch):
    signal = RestartSignal(cert_dir)
    path = signal.flag_path("myhub")
    real_link = os.link

    def consumer_wins(src, dst):
        with open(dst, "wb") as f:
            f.write(b"consumer-owned")
        return real_link(src, dst)

    monkeypatch.setattr(os, "link", consumer_wins)

    assert signal.raise_signal("myhub") is False
    assert read_bytes(path) == b"consumer-owned"
    assert os.listdir(cert_dir) == ["myhub_new_ssl_cert.txt"]


def test_unsent_marker_lifecycle(cert_dir):
    signal = RestartSignal(cert_dir, RestartFlagScope.GLOBAL)

    signal.mark_unsent("myhub")

    assert signal.is_unsent("myhub")
    assert not signal.is_unsent("other")
    assert file_mode(signal.unsent_marker_path("myhub")) == 0o600

    signal.clear_unsent("myhub")
    signal.clear_unsent("myhub")

    assert not signal.is_unsent("myhub")


def test_unmarkable_signal_raises_write_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file")
    signal = RestartSignal(str(blocker / "certs"))

    with pytest.raises(ArtifactWriteError):
        signal.mark_unsent("myhub")
