"""Centralized Logging Configuration

This module provides:
- One dictConfig-based setup for console and file logging
- Logger factory with the ``graph_analysis.`` naming convention
- Helpers for logging the start and end of long operations

Library modules only call ``get_logger``; entry points call ``setup_logging``.
"""

import logging
import logging.config
import os
from pathlib import Path
from typing import Any, Dict, Optional


LOGGER_NAMESPACE = "graph_analysis"


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    console_output: bool = True
) -> None:
    """Setup logging for the graph_analysis namespace

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path; no file handler when omitted
        console_output: Whether to output logs to the console (stderr)
    """
    log_level = log_level.upper()

    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            },
            "detailed": {
                "format": "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(funcName)s() - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            }
        },
        "handlers": {},
        "loggers": {
            LOGGER_NAMESPACE: {
                "level": log_level,
                "handlers": [],
                "propagate": False
            }
        }
    }

    if console_output:
        config["handlers"]["console"] = {
            "class": "logging.StreamHandler",
            "level": log_level,
            "formatter": "standard",
            "stream": "ext://sys.stderr"
        }
        config["loggers"][LOGGER_NAMESPACE]["handlers"].append("console")

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        config["handlers"]["file"] = {
            "class": "logging.FileHandler",
            "level": log_level,
            "formatter": "detailed",
            "filename": str(log_path),
            "mode": "a",
            "encoding": "utf-8"
        }
        config["loggers"][LOGGER_NAMESPACE]["handlers"].append("file")

    logging.config.dictConfig(config)

    logger = get_logger("core.logging")
    logger.debug("Logging system initialized - Level: %s, Console: %s, File: %s",
                 log_level, console_output, log_file or "None")


def setup_logging_from_env(default_level: str = "INFO") -> None:
    """Setup logging from GRAPH_ANALYSIS_LOG_LEVEL / GRAPH_ANALYSIS_LOG_FILE."""
    setup_logging(
        log_level=os.getenv("GRAPH_ANALYSIS_LOG_LEVEL", default_level),
        log_file=os.getenv("GRAPH_ANALYSIS_LOG_FILE"),
        console_output=os.getenv("GRAPH_ANALYSIS_LOG_CONSOLE", "true").lower() == "true"
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the graph_analysis namespace

    Args:
        name: Logger name (prefixed with 'graph_analysis.' unless already there)

    Returns:
        Logger instance

    Example:
        logger = get_logger("tools.centrality_analysis")
        # Creates logger named "graph_analysis.tools.centrality_analysis"
    """
    if name == LOGGER_NAMESPACE or name.startswith(LOGGER_NAMESPACE + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def log_operation_start(logger: logging.Logger, operation: str, **kwargs):
    """Log the start of an operation with context"""
    context = " ".join(f"{k}={v}" for k, v in kwargs.items())
    logger.info("Starting %s%s", operation, f" ({context})" if context else "")


def log_operation_end(logger: logging.Logger, operation: str, duration: float, success: bool = True, **kwargs):
    """Log the completion of an operation with timing"""
    status = "completed" if success else "failed"
    context = " ".join(f"{k}={v}" for k, v in kwargs.items())
    logger.info("%s %s in %.2fs%s", operation.capitalize(), status, duration,
                f" ({context})" if context else "")
