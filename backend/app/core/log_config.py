# backend/app/core/log_config.py

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the API process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # Motor/pymongo heartbeat logs are noisy at DEBUG
    logging.getLogger("pymongo").setLevel(logging.WARNING)
