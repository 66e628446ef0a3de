"""Shared utilities."""
from .logging import setup_logging, get_logger, cleanup_old_logs

__all__ = ['setup_logging', 'get_logger', 'cleanup_old_logs']
