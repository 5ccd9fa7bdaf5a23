"""Process-wide notifier shared by all requests"""

import logging
import threading

from competition_manager.backends.email_client import EmailClient, Notifier
from competition_manager.config import config

_notifier_lock = threading.Lock()
_notifier = None

logger = logging.getLogger(__name__)


def get_notifier() -> Notifier:
    """Get the singleton Mailgun notifier, creating it on first use"""
    global _notifier
    if _notifier is None:
        with _notifier_lock:
            if _notifier is None:
                _notifier = EmailClient(config)
                logger.info("Initialized Mailgun notifier")
    return _notifier
