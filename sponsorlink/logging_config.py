"""
Logging configuration for SponsorLink.

Provides structured JSON logging and an audit logger for manifest
lifecycle events. Audit records carry counts and statuses only, never
salts, identifiers or hash values.
"""

import json
import logging
import sys
import time
from typing import Optional

PACKAGE_LOGGER = "sponsorlink"

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


class StructuredFormatter(logging.Formatter):
    """JSON formatter, one object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        return json.dumps(log_data)


class ManifestAuditLogger:
    """
    Specialized logger for manifest events.

    Records creation, signing and every read attempt with its status.
    """

    def __init__(self, name: str = "sponsorlink.audit"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, event_type: str, message: str, **kwargs) -> None:
        """Internal logging method with extra fields."""
        if not self._logger.isEnabledFor(level):
            return

        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "",
            0,
            f"{event_type}: {message}",
            (),
            None
        )
        record.extra_fields = {"event_type": event_type, **kwargs}
        self._logger.handle(record)

    def manifest_created(self, hash_count: int, expires_at: str) -> None:
        """Log creation of an unsigned manifest."""
        self._log(
            logging.INFO,
            "MANIFEST_CREATED",
            f"Unsigned manifest with {hash_count} hashes",
            hash_count=hash_count,
            expires_at=expires_at,
        )

    def manifest_signed(self, hash_count: int, expires_at: str) -> None:
        """Log signing of a manifest."""
        self._log(
            logging.INFO,
            "MANIFEST_SIGNED",
            f"Signed manifest with {hash_count} hashes",
            hash_count=hash_count,
            expires_at=expires_at,
        )

    def manifest_read(self, status: str, reason: Optional[str] = None) -> None:
        """Log the outcome of a read attempt."""
        level = logging.INFO if status == "Verified" else logging.WARNING
        self._log(
            level,
            "MANIFEST_READ",
            f"Manifest {status}" + (f" ({reason})" if reason else ""),
            status=status,
            reason=reason,
        )


def configure_logging(
    level: str = "WARNING",
    json_format: bool = False,
    log_file: Optional[str] = None
) -> None:
    """
    Configure the sponsorlink package logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatting
        log_file: Optional file path for log output
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, level.upper()))

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)

    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)


# Global audit logger instance
audit_log = ManifestAuditLogger()
