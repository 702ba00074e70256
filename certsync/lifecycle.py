"""
Where: certsync/lifecycle.py
What: Assemble store, orchestrator and scheduler from configuration.
Why: Keep main.py focused on process startup.
"""

import logging
import signal
from typing import Optional

from .config import CertSyncConfig
from .core.http_client import HttpClientFactory
from .services.orchestrator import SyncOrchestrator
from .services.restart_signal import RestartFlagScope, RestartSignal
from .services.scheduler import SyncScheduler
from .services.store import CertificateStore, FileCertificateStore, HttpCertificateStore

logger = logging.getLogger("certsync.main")


def build_store(app_config: CertSyncConfig) -> CertificateStore:
    """Create the configured certificate store."""
    if app_config.STORE_SOURCE == "http":
        if not app_config.STORE_URL:
            raise ValueError("STORE_URL is required when STORE_SOURCE=http")
        return HttpCertificateStore(
            app_config.STORE_URL,
            HttpClientFactory(app_config),
            timeout=app_config.STORE_TIMEOUT,
            username=app_config.STORE_USERNAME or None,
            password=app_config.STORE_PASSWORD or None,
        )
    return FileCertificateStore(app_config.STORE_FILE_PATH)


def build_orchestrator(
    app_config: CertSyncConfig, store: Optional[CertificateStore] = None
) -> SyncOrchestrator:
    base_dir = str(app_config.CERTIFICATES_PATH)
    return SyncOrchestrator(
        base_dir=base_dir,
        store=store or build_store(app_config),
        restart_signal=RestartSignal(base_dir, RestartFlagScope(app_config.RESTART_FLAG_SCOPE)),
        workers=app_config.SYNC_WORKERS,
        run_timeout=app_config.RUN_TIMEOUT_SECONDS,
    )


def run_service(app_config: CertSyncConfig, scheduler: Optional[SyncScheduler] = None) -> None:
    """
    Run once at startup (if enabled), then block on the cron schedule.
    """
    orchestrator = build_orchestrator(app_config)
    logger.info(
        f"certsync starting (target={orchestrator.base_dir}, "
        f"store={app_config.STORE_SOURCE}, flag_scope={app_config.RESTART_FLAG_SCOPE})"
    )

    scheduler = scheduler or SyncScheduler(
        orchestrator.execute,
        expression=app_config.SYNC_SCHEDULE,
        timezone=app_config.SCHEDULE_TIMEZONE,
    )

    if app_config.RUN_ON_STARTUP:
        scheduler.run_job()

    def _handle_sigterm(signum, frame):
        logger.info("Received SIGTERM, shutting down")
        scheduler.stop()

    signal.signal(signal.SIGTERM, _handle_sigterm)

    scheduler.schedule()
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        scheduler.stop()
