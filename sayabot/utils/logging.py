"""
Logging utilities for the Saya verification bot.
"""

import logging
from datetime import datetime
from typing import List, Optional


_logger: Optional[logging.Logger] = None


def get_logger() -> logging.Logger:
    """Get the application logger, initializing if needed."""
    global _logger
    if _logger is None:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s | %(levelname)-8s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        _logger = logging.getLogger("saya_bot")
    return _logger


logger = get_logger()


class RequestLogCollector:
    """Collects the audit trail of a single verification request."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        self.tag = f"verify:{user_id}"
        self.logs: List[str] = []

    def log(self, level: str, message: str) -> None:
        """Add a log entry."""
        timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
        entry = f"{timestamp} | {level:<8} | [{self.tag}] {message}"
        self.logs.append(entry)
        # Also log to main logger
        getattr(logger, level.lower(), logger.info)(f"[{self.tag}] {message}")

    def info(self, message: str) -> None:
        """Log an info message."""
        self.log("INFO", message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.log("WARNING", message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.log("ERROR", message)
