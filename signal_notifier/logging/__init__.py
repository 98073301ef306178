"""
Logging configuration and utilities for the signal notifier.
"""
from .config import configure_logging, get_logger, get_run_logger

__all__ = ["configure_logging", "get_logger", "get_run_logger"]
