"""
Logging package for the config uploader.

File-only logging so log lines never interleave with operator prompts.
"""

from .manager import LoggingManager, get_logger, configure_logging, get_logging_manager

__all__ = ['LoggingManager', 'get_logger', 'configure_logging', 'get_logging_manager']
