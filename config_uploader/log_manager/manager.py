#!/usr/bin/env python3
"""
Centralized Logging Manager for the config uploader

Log output goes to files only so it never mixes with the interactive prompts.
Files live in $CONFIG_UPLOADER_HOME/logs (default ~/.config-uploader/logs).
"""

import os
import json
import logging
import logging.handlers
from pathlib import Path
from typing import Optional, Dict, Any


def _debug_from_env() -> bool:
    return os.environ.get('CONFIG_UPLOADER_DEBUG', '').lower() in ('1', 'true', 'yes')


class LoggingManager:
    """
    Manages file-based logging for all uploader components.

    Features:
    - File-only output (no console interference)
    - Shared run log plus a separate error log
    - Automatic rotation
    - Debug mode (CONFIG_UPLOADER_DEBUG or --debug) adds a verbose debug.log
    """

    _instance = None
    _initialized = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, log_dir: Optional[Path] = None, debug: Optional[bool] = None):
        """Initialize the logging manager (singleton)"""
        if not self._initialized:
            home = Path(os.environ.get('CONFIG_UPLOADER_HOME', Path.home() / '.config-uploader'))
            self.log_dir = Path(log_dir) if log_dir else home / 'logs'
            self.debug_mode = _debug_from_env() if debug is None else debug
            self.loggers = {}
            self._initialized = True

            self.log_dir.mkdir(parents=True, exist_ok=True)
            self._configure_root_logger()

    def _configure_root_logger(self):
        """Keep the root logger silent on the console"""
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG if self.debug_mode else logging.INFO)
        for handler in root_logger.handlers[:]:
            if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
                root_logger.removeHandler(handler)
        root_logger.addHandler(logging.NullHandler())

    def set_debug(self, enabled: bool):
        """Switch debug mode on existing and future loggers"""
        self.debug_mode = enabled
        level = logging.DEBUG if enabled else logging.INFO
        for logger in self.loggers.values():
            logger.setLevel(level)
            debug_handlers = [h for h in logger.handlers if h.get_name() == 'debug']
            if enabled:
                if not debug_handlers:
                    logger.addHandler(self._debug_handler())
                continue
            for handler in debug_handlers:
                logger.removeHandler(handler)
                handler.close()

    def _debug_handler(self) -> logging.Handler:
        """Verbose handler writing debug.log, attached only in debug mode"""
        debug_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / 'debug.log',
            maxBytes=20 * 1024 * 1024,
            backupCount=3,
            encoding='utf-8'
        )
        debug_handler.set_name('debug')
        debug_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        debug_handler.setLevel(logging.DEBUG)
        return debug_handler

    def get_logger(self, name: str, component: Optional[str] = None) -> logging.Logger:
        """
        Get or create a logger for a specific component.

        Args:
            name: Logger name (e.g., 'UploadOrchestrator')
            component: Component category ('gateway', 'manager', None for main)

        Returns:
            Configured logger instance
        """
        logger_key = f"{component}.{name}" if component else name

        if logger_key in self.loggers:
            return self.loggers[logger_key]

        logger = logging.getLogger(f"config-uploader.{logger_key}")
        logger.setLevel(logging.DEBUG if self.debug_mode else logging.INFO)
        logger.handlers = []
        logger.propagate = False

        if self.debug_mode:
            fmt = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
        else:
            fmt = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

        # Shared by all components
        file_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / 'config-uploader.log',
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(logging.Formatter(fmt, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

        if self.debug_mode:
            logger.addHandler(self._debug_handler())

        error_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / 'error.log',
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding='utf-8'
        )
        error_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d]\n%(message)s\n',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        error_handler.setLevel(logging.ERROR)
        logger.addHandler(error_handler)

        self.loggers[logger_key] = logger
        return logger

    def log_with_context(self, logger: logging.Logger, level: int, message: str,
                         context: Optional[Dict[str, Any]] = None):
        """
        Log a message with additional context.

        Args:
            logger: Logger instance
            level: Log level
            message: Log message
            context: Additional context dict (never put setting values here)
        """
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        logger.log(level, message)


_logging_manager = None


def get_logging_manager() -> LoggingManager:
    """Get the singleton LoggingManager instance"""
    global _logging_manager
    if _logging_manager is None:
        _logging_manager = LoggingManager()
    return _logging_manager


def get_logger(name: str, component: Optional[str] = None) -> logging.Logger:
    """
    Convenience function to get a logger.

    Args:
        name: Logger name
        component: Component type ('gateway', 'manager', or None)

    Returns:
        Configured logger
    """
    return get_logging_manager().get_logger(name, component)


def configure_logging(log_dir: Optional[Path] = None, debug: Optional[bool] = None) -> LoggingManager:
    """Initialize logging system (called once at startup)"""
    global _logging_manager
    if _logging_manager is None:
        _logging_manager = LoggingManager(log_dir=log_dir, debug=debug)
    elif debug is not None:
        _logging_manager.set_debug(debug)
    return _logging_manager
