"""
Logging utilities with automatic API key masking for security.
Supports context-aware logging for CLI runs vs embedded service use.
"""

import logging
import re
import os
from typing import Optional
from enum import Enum
from config.settings import Settings


class LoggingContext(Enum):
    """Logging context modes for different execution scenarios."""
    STANDALONE = "standalone"      # Module run independently (full logging)
    ORCHESTRATED = "orchestrated"  # Called by run_intelligence.py (quiet sub-modules)
    SILENT = "silent"              # Embedded in a host application (errors only)


# Global logging mode (default: check env var, else standalone)
_env_mode = os.getenv('LOG_MODE', 'standalone').lower()
try:
    _CURRENT_MODE = LoggingContext(_env_mode)
except ValueError:
    _CURRENT_MODE = LoggingContext.STANDALONE

# Console loggers that should always show INFO level (entry scripts)
CONSOLE_LOGGERS = {
    'run_intelligence',
}


def set_logging_mode(mode: LoggingContext):
    """
    Set the global logging mode.

    Args:
        mode: LoggingContext enum value
    """
    global _CURRENT_MODE
    _CURRENT_MODE = mode


def get_logging_mode() -> LoggingContext:
    """Get the current logging mode."""
    return _CURRENT_MODE


class SecureFormatter(logging.Formatter):
    """Formatter that masks API keys (including ones embedded in URLs)."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Long alphanumeric runs look like API keys
        self.api_key_pattern = re.compile(r'\b[A-Za-z0-9]{20,}\b')
        # Query-string credentials: apikey=..., token=...
        self.query_key_pattern = re.compile(r'((?:apikey|apiKey|token|x-cg-demo-api-key)=)([^&\s]+)')

    def format(self, record):
        message = super().format(record)
        message = self.query_key_pattern.sub(
            lambda m: m.group(1) + Settings.mask_api_key(m.group(2)), message
        )
        return self.api_key_pattern.sub(lambda m: Settings.mask_api_key(m.group(0)), message)


def setup_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Setup a logger with secure formatting and context-aware levels.

    Args:
        name: Logger name
        level: Logging level (default: INFO, may be overridden by mode)
        log_file: Optional file path for file logging (defaults to LOG_FILE)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    log_file = log_file or os.getenv('LOG_FILE') or None

    effective_level = level
    current_mode = get_logging_mode()

    if current_mode == LoggingContext.ORCHESTRATED:
        # Only entry-script loggers keep INFO, sub-modules drop to WARNING
        if name not in CONSOLE_LOGGERS:
            effective_level = max(level, logging.WARNING)
    elif current_mode == LoggingContext.SILENT:
        effective_level = logging.ERROR

    logger.setLevel(effective_level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(effective_level)

    formatter = SecureFormatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(effective_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def quiet_loggers(names, level: int = logging.WARNING) -> None:
    """Raise the level of already-created loggers (used by CLI --quiet)."""
    for name in names:
        logging.getLogger(name).setLevel(level)
