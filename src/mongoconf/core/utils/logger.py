# mongoconf/core/utils/logger.py

"""
Logging configuration and utilities for mongoconf.

This module provides centralized logging configuration and helper functions
so that the registry, the resolver and the CLI all report through one
``mongoconf`` logger with the same message shape.

The logging system is designed to provide:
- Consistent log formatting across all modules
- Console output with an optional log file
- Structured error reporting with context
- Resolution tracing (which layer supplied which property)

Key Features:
- Global logger instance with lazy initialization
- Level taken from ``MONGOCONF_LOG_LEVEL`` when not given explicitly
- Module-prefixed messages: ``[RESOLVER] message | Context: ...``
"""

import logging
import os
import sys
from typing import Any

# Global logger instance for singleton pattern
# This ensures all modules use the same logger configuration
_logger: logging.Logger | None = None

# Default logging configuration values
# The level can be overridden through the MONGOCONF_LOG_LEVEL environment variable
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL_ENV_VAR = "MONGOCONF_LOG_LEVEL"


def setup_logging(
    level: str | None = None,
    log_file: str | None = None,
    format_string: str | None = None,
) -> logging.Logger:
    """
    Set up logging configuration for mongoconf.

    This function initializes the global logging system with console and
    optional file output. Calling it again replaces the handlers of the
    previous configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Falls
               back to ``MONGOCONF_LOG_LEVEL`` and then to ``INFO``. An
               unknown ``MONGOCONF_LOG_LEVEL`` is reported and ignored.
        log_file: Path to log file (optional). If provided, logs will be
                 written to both console and file.
        format_string: Custom log format string (optional). Uses default
                      format if not provided.

    Returns:
        Configured logger instance

    Raises:
        ValueError: If ``level`` is not a known logging level.
    """
    global _logger

    ignored_env_level = None
    if level:
        numeric_level = _level_number(level)
        if numeric_level is None:
            raise ValueError(f"Unknown log level: {level.upper()}")
    else:
        env_level = os.environ.get(LOG_LEVEL_ENV_VAR) or DEFAULT_LOG_LEVEL
        numeric_level = _level_number(env_level)
        if numeric_level is None:
            ignored_env_level = env_level
            numeric_level = _level_number(DEFAULT_LOG_LEVEL)

    logger = logging.getLogger("mongoconf")
    logger.disabled = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(numeric_level)

    formatter = logging.Formatter(format_string or DEFAULT_LOG_FORMAT)

    # Diagnostics go to stderr so resolved output on stdout stays clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    _logger = logger
    if ignored_env_level is not None:
        log_warning(
            "logger",
            f"Unknown log level {ignored_env_level!r}, using {DEFAULT_LOG_LEVEL}",
            context=LOG_LEVEL_ENV_VAR,
        )
    return logger


def _level_number(name: str) -> int | None:
    number = getattr(logging, name.strip().upper(), None)
    return number if isinstance(number, int) else None


def get_logger() -> logging.Logger:
    """
    Get the global logger instance.

    If the logger hasn't been initialized yet, it will be set up
    with default configuration.
    """
    if _logger is None:
        return setup_logging()
    return _logger


def _format(module: str, message: str, context: str = "") -> str:
    formatted = f"[{module.upper()}] {message}"
    if context:
        formatted += f" | Context: {context}"
    return formatted


def log_error(
    module: str, error: str, context: str = "", exception: Exception | None = None
) -> None:
    """
    Log a standardized error message.

    Args:
        module: Name of the module where the error occurred
        error: Error message describing what went wrong
        context: Additional context information (optional)
        exception: Exception object to include stack trace (optional)
    """
    logger = get_logger()
    if exception:
        logger.error(_format(module, error, context), exc_info=exception)
    else:
        logger.error(_format(module, error, context))


def log_warning(module: str, warning: str, context: str = "") -> None:
    """Log a standardized warning message."""
    get_logger().warning(_format(module, warning, context))


def log_debug(module: str, message: str, context: str = "") -> None:
    """Log a standardized debug message."""
    get_logger().debug(_format(module, message, context))


def log_configuration_change(setting: str, old_value: Any, new_value: Any) -> None:
    """
    Log a configuration change.

    Args:
        setting: Name of the setting that changed
        old_value: Previous value of the setting
        new_value: New value of the setting
    """
    get_logger().info(f"Configuration changed: {setting} = {old_value} -> {new_value}")
