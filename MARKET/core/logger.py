# MARKET/core/logger.py
import logging

from MARKET.core.config import ENABLE_CLOUD_LOGGING, LOG_LEVEL

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_configured = False


def setup_logging() -> None:
    """
    Configure the root logger once per process.
    Cloud Logging is attached only when ENABLE_CLOUD_LOGGING is set.
    """
    global _configured
    if _configured:
        return

    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format=LOG_FORMAT,
    )

    if ENABLE_CLOUD_LOGGING:
        import google.cloud.logging

        client = google.cloud.logging.Client()
        client.setup_logging()
        logging.getLogger("core.logger").info("Cloud logging handler attached")

    _configured = True


def log_to_cloud(category: str, severity: str, message: str, metadata: dict = None):
    logging.log(
        getattr(logging, severity.upper(), logging.INFO),
        f"[{category}] {message}",
        extra={"metadata": metadata or {}}
    )
