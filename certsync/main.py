"""
certsync entry point.

Exports ioBroker certificate collections as PEM files once at startup and then
on the configured schedule.
"""

from .config import config
from .core.logging_config import setup_logging
from .lifecycle import run_service


def main() -> None:
    setup_logging(config.LOG_CONFIG_PATH, default_level=config.LOG_LEVEL)
    run_service(config)


if __name__ == "__main__":
    main()
