"""Logging configuration for the application."""
import logging
import sys
from datetime import datetime
from typing import Optional

from ..config.settings import LOG_LEVEL, LOG_FILE


def setup_logger(name: str = "ledger_bridge") -> logging.Logger:
    """
    Set up logger with file and console handlers.

    Console output goes to stderr so converted documents can be piped
    through stdout.

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, LOG_LEVEL.upper(), logging.INFO))

    # Create formatters
    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    simple_formatter = logging.Formatter(
        '%(levelname)s: %(message)s'
    )

    # Console handler (WARNING and above)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(simple_formatter)
    logger.addHandler(console_handler)

    # File handler (DEBUG and above)
    try:
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(LOG_FILE, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)
        logger.addHandler(file_handler)
    except OSError as e:
        logger.warning(f"Could not set up file logging: {e}")

    return logger


def log_conversion_audit(
    input_format: str,
    output_format: Optional[str],
    success: bool,
    transaction_count: int = 0,
    source: Optional[str] = None,
    error: Optional[str] = None
) -> None:
    """
    Log conversion audit trail.

    Args:
        input_format: Source format name
        output_format: Target format name (None for decode-only runs)
        success: Whether conversion succeeded
        transaction_count: Number of transactions carried over
        source: Source file name, if known
        error: Error message if failed
    """
    logger = logging.getLogger("ledger_bridge.audit")

    audit_data = {
        "timestamp": datetime.now().isoformat(),
        "source": source or "-",
        "input": input_format,
        "output": output_format or "-",
        "success": success,
        "transactions": transaction_count,
    }

    if error:
        audit_data["error"] = error

    # Format as structured log entry
    audit_message = " | ".join(f"{k}={v}" for k, v in audit_data.items())
    logger.info(f"AUDIT: {audit_message}")
