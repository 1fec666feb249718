import logging


class LoggingNotifier:
    """Notifier used when the hosting application has no message surface of its own."""

    def success(self, text: str) -> None:
        logging.info("[Notifier] " + text, extra={"notification": "success"})

    def error(self, text: str) -> None:
        logging.error("[Notifier] " + text, extra={"notification": "error"})
