"""
Process-wide logging setup.
Library modules only ever call logging.getLogger(__name__); the embedding
application calls configure_logging() once at startup.
"""
import logging
from typing import Optional

from leasedesk.core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Apply the standard format at the configured level (LOG_LEVEL by default)."""
    resolved = getattr(logging, (level or get_settings().LOG_LEVEL).upper(), logging.INFO)
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger("leasedesk").setLevel(resolved)
