"""
Structured logging for mapper operations.
Wraps the standard logging module with operation/status/details records.
"""

import logging
from typing import Any, Dict, List

from ..core.config import LOG_LEVEL, debug_enabled


def _truncate(value: Any, limit: int = 50) -> Any:
    if isinstance(value, str) and len(value) > limit:
        return value[:limit - 3] + "..."
    return value


class StructuredLogger:
    """Structured logger for schema, statement and codec operations."""

    def __init__(self, name: str = "rowmapper"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG if debug_enabled() else getattr(logging, LOG_LEVEL, logging.INFO))

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None, level: int = logging.INFO):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        self.logger.log(level, message)

    def log_statement(self, kind: str, table: str, text: str, parameters: Dict[str, Any] = None):
        """Log a generated statement. Parameter values are truncated."""
        details = {"table": table, "text": _truncate(text, 200)}
        if parameters:
            details["parameters"] = {k: _truncate(v) for k, v in parameters.items()}

        self.log_operation(f"statement.{kind}", "generated", details, level=logging.DEBUG)

    def log_schema_mismatch(self, table: str, reason: str, columns: List[str] = None):
        """Log a record type that does not fit the live table."""
        details = {"table": table, "reason": reason}
        if columns:
            details["columns"] = columns

        self.log_operation("schema.validate", "rejected", details, level=logging.WARNING)

    def log_encode_failure(self, field: str, value_type: str, reason: str = ""):
        """Log a field value that could not be converted for storage."""
        details = {"field": field, "value_type": value_type}
        if reason:
            details["reason"] = _truncate(reason, 100)

        self.log_operation("codec.encode", "failed", details, level=logging.WARNING)

    def log_decode_failure(self, field: str, target: str, raw: Any = None):
        """Log a stored value that could not be converted back."""
        details = {"field": field, "target": target}
        if raw is not None:
            details["raw"] = _truncate(str(raw))

        self.log_operation("codec.decode", "failed", details, level=logging.DEBUG)

    def log_driver_error(self, action: str, error: Exception, text: str = ""):
        """Log an error raised by the sqlite driver."""
        details = {"action": action, "error": _truncate(str(error), 100)}
        if text:
            details["text"] = _truncate(text, 200)

        self.log_operation(f"driver.{action}", "failed", details, level=logging.ERROR)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()
