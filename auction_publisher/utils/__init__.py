"""Utility exports."""

from .logging import configure_logging, get_logger, submission_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "submission_logger",
]
