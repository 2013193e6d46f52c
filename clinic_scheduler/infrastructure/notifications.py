import logging
from typing import Dict, Any

logger = logging.getLogger(__name__)


class Notifier:
    """Delivery capability used by the reminder dispatcher.

    Implementations return True when the provider accepted the message and
    False (or raise) when it did not. Subclass this to plug in SMTP, Twilio
    or any other transport.
    """

    def send_email(self, address: str, context: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def send_sms(self, phone: str, context: Dict[str, Any]) -> bool:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Placeholder adapter that logs the rendered reminder and reports success"""

    def send_email(self, address: str, context: Dict[str, Any]) -> bool:
        logger.info(f"Sending email reminder to {address}: {context.get('subject', '')}")
        logger.debug(context.get("message", ""))
        return True

    def send_sms(self, phone: str, context: Dict[str, Any]) -> bool:
        logger.info(f"Sending SMS reminder to {phone}")
        logger.debug(context.get("message", ""))
        return True


_notifier: Notifier = LoggingNotifier()


def get_notifier() -> Notifier:
    """Dependency returning the configured notifier"""
    return _notifier


def set_notifier(notifier: Notifier) -> None:
    global _notifier
    _notifier = notifier
