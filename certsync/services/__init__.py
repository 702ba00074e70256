from .artifact_writer import ArtifactWriter
from .change_detector import ChangeDetector
from .orchestrator import SyncOrchestrator
from .restart_signal import RestartFlagScope, RestartSignal
from .scheduler import SyncScheduler
from .store import CertificateStore, FileCertificateStore, HttpCertificateStore

__all__ = [
    "ArtifactWriter",
    "ChangeDetector",
    "SyncOrchestrator",
    "RestartFlagScope",
    "RestartSignal",
    "SyncScheduler",
    "CertificateStore",
    "FileCertificateStore",
    "HttpCertificateStore",
]
