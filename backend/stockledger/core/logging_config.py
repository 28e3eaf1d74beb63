"""
Logging setup for the API process
"""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO"):
    """
    Configure root logging once at start-up.

    Modules log through ``logging.getLogger(__name__)``; this only sets the
    format and the threshold.
    """
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
    logging.getLogger("stockledger").setLevel(numeric_level)
