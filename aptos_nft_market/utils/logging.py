"""
This module contains the custom logger and formatter for the marketplace client.

To use the custom logger, call `configure_logging` once from the hosting application
and then log through the standard module functions:

        import logging
        logging.info("[Fetcher] Fetched NFTs", extra={"count": 3})
The resulting log message will be in JSON format:
    {
        "timestamp": "2024-03-15 14:29:31,000",
        "level": "INFO",
        "fields": {
            "message": "[Fetcher] Fetched NFTs",
            "count": 3
        },
        "module": "fetcher",
        "func_name": "fetch_market_nfts",
        "path_name": "/.../aptos_nft_market/marketplace/fetcher.py",
        "line_no": 41
    }
"""

import logging
import json

DEFAULT_LOGGER_NAME = "aptos_nft_market"


class CustomLogger(logging.Logger):
    """Keeps caller-supplied `extra` together under a single `fields` attribute."""

    def makeRecord(self, name, level, fn, lno, msg, args, exc_info, func=None, extra=None, sinfo=None):
        # Nesting keeps keys like "message" or "module" from clashing with LogRecord attributes
        nested = {"fields": dict(extra)} if extra else None
        return super().makeRecord(
            name, level, fn, lno, msg, args, exc_info, func=func, extra=nested, sinfo=sinfo
        )


class JsonFormatter(logging.Formatter):
    def format(self, record):
        fields = {"message": record.getMessage(), **getattr(record, "fields", {})}
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "fields": fields,
            "module": record.module,
            "func_name": record.funcName,
            "path_name": record.pathname,
            "line_no": record.lineno,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    logger = CustomLogger(DEFAULT_LOGGER_NAME)
    logger.setLevel(level)

    # Stream handler for stdout
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(JsonFormatter())
    logger.addHandler(stream_handler)

    logging.root = logger
    return logger
