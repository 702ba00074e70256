# Where: certsync/services/orchestrator.py
# What: One sync run from store snapshot to written artifacts and restart flags.
# Why: Keep per-collection failures isolated and the whole run idempotent.
"""
Sync orchestrator.

Each collection goes through the same pipeline:

    Fetched -> NameValidated -> CertValidated -> ChangeDetected
            -> {Written | Unchanged} -> {SignalRaised | NoSignal}

terminating at Skipped (malformed entry or validation failure), Errored (I/O
failure) or Done.
Only StoreUnavailableError aborts a whole run.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Optional, Set, Tuple

from ..core.exceptions import (
    ArtifactWriteError,
    InvalidCertificateDataError,
    InvalidCollectionNameError,
    NameCollisionError,
    RunDeadlineExceededError,
    StoreUnavailableError,
)
from ..core.name_guard import find_collisions, normalize_collection_name, validate_collection_name
from ..core.pem import is_well_formed, require_well_formed
from ..models.artifacts import CERT_MODE, CHAIN_MODE, KEY_MODE, ArtifactSet, ChangeRecord
from ..models.collection import CertificateCollection, CollectionSnapshot
from ..models.report import CollectionOutcome, RunReport, RunStatus
from .artifact_writer import ArtifactWriter
from .change_detector import ChangeDetector
from .restart_signal import RestartSignal
from .store import CertificateStore

_default_logger = logging.getLogger("certsync.orchestrator")

PipelineResult = Tuple[CollectionOutcome, bool]


class SyncOrchestrator:
    """
    Drives sync runs against an injected store.

    Runs never overlap: a run started while another is in flight returns an
    OVERLAP report immediately.
    """

    def __init__(
        self,
        base_dir: str,
        store: CertificateStore,
        restart_signal: Optional[RestartSignal] = None,
        change_detector: Optional[ChangeDetector] = None,
        writer: Optional[ArtifactWriter] = None,
        workers: int = 1,
        run_timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            base_dir: Absolute directory receiving the PEM files
            store: Source of collection snapshots
            restart_signal: Flag policy; defaults to per-collection flags in base_dir
            change_detector: Content comparison
            writer: Atomic artifact writer bound to base_dir
            workers: Number of collection pipelines run in parallel
            run_timeout: Deadline for one run in seconds, None for unbounded
            logger: Sink for run events
        """
        self.base_dir = base_dir
        self.store = store
        self.restart_signal = restart_signal or RestartSignal(base_dir)
        self.change_detector = change_detector or ChangeDetector()
        self.writer = writer or ArtifactWriter(base_dir)
        self.workers = max(1, workers)
        self.run_timeout = run_timeout
        self.logger = logger or _default_logger
        self._run_lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._run_lock.locked()

    def execute(self) -> RunReport:
        """Fetch a fresh snapshot from the store and sync it."""
        if not self._run_lock.acquire(blocking=False):
            return self._overlap_report()
        try:
            started_at = time.time()
            try:
                snapshot = self.store.fetch_collections()
            except StoreUnavailableError as e:
                self.logger.error(f"Error fetching system.certificates: {e}")
                return RunReport(
                    status=RunStatus.STORE_UNAVAILABLE,
                    started_at=started_at,
                    finished_at=time.time(),
                )
            return self._run(snapshot, started_at)
        finally:
            self._run_lock.release()

    def run(self, snapshot: CollectionSnapshot) -> RunReport:
        """Sync an already captured snapshot."""
        if not self._run_lock.acquire(blocking=False):
            return self._overlap_report()
        try:
            return self._run(snapshot, time.time())
        finally:
            self._run_lock.release()

    def _overlap_report(self) -> RunReport:
        self.logger.warning("Previous sync run still in progress, skipping this trigger")
        now = time.time()
        return RunReport(status=RunStatus.OVERLAP, started_at=now, finished_at=now)

    def _run(self, snapshot: CollectionSnapshot, started_at: float) -> RunReport:
        report = RunReport(started_at=started_at)
        names = list(snapshot.keys())
        # Entries that would be skipped anyway must not block a valid sibling.
        colliding = self._colliding_names(
            name for name in names if self._is_exportable(name, snapshot[name])
        )
        cancel = threading.Event()

        executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="certsync")
        try:
            futures = [
                executor.submit(self._process_safely, name, snapshot[name], colliding, cancel)
                for name in names
            ]
            _, pending = wait(futures, timeout=self.run_timeout)
            if pending:
                cancel.set()
                for future in pending:
                    future.cancel()
                report.status = RunStatus.DEADLINE_EXCEEDED
                self.logger.error(
                    f"Sync run exceeded {self.run_timeout}s, {len(pending)} collections unfinished"
                )
        finally:
            # Stuck filesystem calls must not hold up the caller.
            executor.shutdown(wait=False, cancel_futures=True)

        for name, future in zip(names, futures):
            if future in pending:
                report.record(name, CollectionOutcome.ERRORED)
            else:
                outcome, signalled = future.result()
                report.record(name, outcome, signalled)

        report.finished_at = time.time()
        level = logging.ERROR if report.errored else logging.INFO
        self.logger.log(level, f"Sync run finished: {report.summary()}")
        return report

    @staticmethod
    def _is_exportable(name: str, collection: CertificateCollection) -> bool:
        return (
            collection.has_material
            and validate_collection_name(name)
            and is_well_formed(collection.key)
            and is_well_formed(collection.cert)
        )

    def _colliding_names(self, names) -> Set[str]:
        colliding: Set[str] = set()
        for key, group in find_collisions(names).items():
            self.logger.error(str(NameCollisionError(key, group)))
            colliding.update(group)
        return colliding

    def _process_safely(
        self,
        name: str,
        collection: CertificateCollection,
        colliding: Set[str],
        cancel: threading.Event,
    ) -> PipelineResult:
        try:
            return self._process(name, collection, colliding, cancel)
        except Exception as e:
            self.logger.error(
                f"Unexpected error processing collection {name}: {e}",
                exc_info=True,
                extra={"collection": name},
            )
            return CollectionOutcome.ERRORED, False

    def _process(
        self,
        name: str,
        collection: CertificateCollection,
        colliding: Set[str],
        cancel: threading.Event,
    ) -> PipelineResult:
        log_extra = {"collection": name}

        if collection.malformed is not None:
            self.logger.error(
                f"Skipping malformed collection {name}: {collection.malformed}", extra=log_extra
            )
            return CollectionOutcome.SKIPPED, False

        if not collection.has_material:
            self.logger.info(f"No certificates found for collection: {name}", extra=log_extra)
            return CollectionOutcome.SKIPPED, False

        try:
            token = normalize_collection_name(name)
        except InvalidCollectionNameError as e:
            self.logger.info(f"{e}, skipping", extra=log_extra)
            return CollectionOutcome.SKIPPED, False

        if name in colliding:
            self.logger.error(f"Skipping colliding collection: {name}", extra=log_extra)
            return CollectionOutcome.ERRORED, False

        try:
            require_well_formed(name, "private key", collection.key)
            require_well_formed(name, "certificate", collection.cert)
        except InvalidCertificateDataError as e:
            self.logger.error(str(e), extra=log_extra)
            return CollectionOutcome.SKIPPED, False

        artifacts = ArtifactSet.for_token(self.base_dir, token)
        changes = self.change_detector.detect(artifacts, collection)
        unsent = self.restart_signal.is_unsent(token)
        if not changes.any_changed and not unsent:
            self.logger.debug(f"Certificates unchanged for collection: {name}", extra=log_extra)
            return CollectionOutcome.UNCHANGED, False

        try:
            if changes.any_changed:
                self._write_changes(name, token, collection, artifacts, changes, cancel)
            else:
                self.logger.warning(
                    f"Retrying restart signal left unsent by an earlier run: {name}",
                    extra=log_extra,
                )
            signalled = self.restart_signal.raise_signal(token)
        except (ArtifactWriteError, RunDeadlineExceededError) as e:
            self.logger.error(f"Error saving certificates for {name}: {e}", extra=log_extra)
            return CollectionOutcome.ERRORED, False

        self.restart_signal.clear_unsent(token)
        if not changes.any_changed:
            return CollectionOutcome.UNCHANGED, signalled
        return CollectionOutcome.CHANGED, signalled

    def _write_changes(
        self,
        name: str,
        token: str,
        collection: CertificateCollection,
        artifacts: ArtifactSet,
        changes: ChangeRecord,
        cancel: threading.Event,
    ) -> None:
        chain_text = collection.chain_text
        if chain_text is None:
            self.logger.info(
                f"No certificate chain for collection: {name}", extra={"collection": name}
            )

        if cancel.is_set():
            raise RunDeadlineExceededError(name)
        # Outlives a crash or a failed flag so the next run still signals.
        self.restart_signal.mark_unsent(token)

        plan = [
            (artifacts.key_path, collection.key, changes.key_changed, KEY_MODE),
            (artifacts.cert_path, collection.cert, changes.cert_changed, CERT_MODE),
            (artifacts.chain_path, chain_text, changes.chain_changed, CHAIN_MODE),
        ]
        for path, content, changed, mode in plan:
            if cancel.is_set():
                raise RunDeadlineExceededError(name)
            result = self.writer.write_if_changed(path, content, changed, mode)
            if result.failed:
                raise ArtifactWriteError(path, result.error)
