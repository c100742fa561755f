"""Centralized logging configuration with environment variable support."""

import os
import logging
import sys
from pythonjsonlogger import jsonlogger


class LoggingConfig:
    """Centralized logging configuration."""
    
    # Environment variable defaults
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json").lower()
    LOG_TASK_TITLES = os.environ.get("LOG_TASK_TITLES", "true").lower() == "true"
    LOG_TITLE_MAX_LENGTH = int(os.environ.get("LOG_TITLE_MAX_LENGTH", "80"))
    LOG_SLOW_OPERATION_THRESHOLD_MS = int(os.environ.get("LOG_SLOW_OPERATION_THRESHOLD_MS", "250"))
    
    @classmethod
    def setup_logging(cls) -> None:
        """Configure logging based on environment variables."""
        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, cls.LOG_LEVEL, logging.INFO))
        
        # Remove existing handlers
        root_logger.handlers.clear()
        
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(getattr(logging, cls.LOG_LEVEL, logging.INFO))
        
        # Set formatter based on LOG_FORMAT
        if cls.LOG_FORMAT == "json":
            formatter = jsonlogger.JsonFormatter(
                "%(timestamp)s %(levelname)s %(name)s %(message)s",
                timestamp=True
            )
        else:
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
        
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
        
        # asyncio logs every cancelled timer at DEBUG
        logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
