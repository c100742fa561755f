"""Structured logging utilities with trace IDs, performance timing, and title sanitizing."""

import logging
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Optional, Dict, Callable

from src.utils.logging_config import LoggingConfig, get_logger


_trace_id_var: ContextVar[Optional[str]] = ContextVar('trace_id', default=None)


def generate_trace_id(prefix: str = "tick") -> str:
    """Generate a unique trace ID for one tick or mutation."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def get_trace_id() -> Optional[str]:
    """Get the current trace ID from context."""
    return _trace_id_var.get()


def set_trace_id(trace_id: Optional[str]) -> None:
    """Set the trace ID in context."""
    _trace_id_var.set(trace_id)


@contextmanager
def trace_context(trace_id: Optional[str] = None, prefix: str = "tick"):
    """Context manager for trace ID propagation."""
    if trace_id is None:
        trace_id = generate_trace_id(prefix)
    
    old_id = get_trace_id()
    set_trace_id(trace_id)
    try:
        yield trace_id
    finally:
        set_trace_id(old_id)


def sanitize_title(text: Optional[str], max_length: Optional[int] = None) -> Optional[str]:
    """Sanitize a task/habit title for logging."""
    if not LoggingConfig.LOG_TASK_TITLES:
        return None
    
    if not text:
        return None
    
    max_length = max_length or LoggingConfig.LOG_TITLE_MAX_LENGTH
    if len(text) > max_length:
        text = text[:max_length] + "..."
    
    return text


class StructuredLogger:
    """Enhanced logger with structured logging support."""
    
    def __init__(self, logger: logging.Logger):
        self.logger = logger
    
    def _get_extra(self, **kwargs: Any) -> Dict[str, Any]:
        """Build extra fields for structured logging."""
        extra = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        
        trace_id = get_trace_id()
        if trace_id:
            extra["trace_id"] = trace_id
        
        extra.update(kwargs)
        
        return extra
    
    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message with structured fields."""
        self.logger.debug(message, extra=self._get_extra(**kwargs))
    
    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message with structured fields."""
        self.logger.info(message, extra=self._get_extra(**kwargs))
    
    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message with structured fields."""
        self.logger.warning(message, extra=self._get_extra(**kwargs))
    
    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Log error message with structured fields."""
        self.logger.error(message, extra=self._get_extra(**kwargs), exc_info=exc_info)
    

def get_structured_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(get_logger(name))


@contextmanager
def log_timing(operation_name: str, logger: Optional[StructuredLogger] = None, **context: Any):
    """Context manager for timing operations."""
    if logger is None:
        logger = get_structured_logger(__name__)
    
    start_time = time.perf_counter()
    logger.debug(f"Starting {operation_name}", operation=operation_name, **context)
    
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            f"Completed {operation_name}",
            operation=operation_name,
            processing_time_ms=round(elapsed_ms, 2),
            **context
        )
        
        # A tick has to finish well inside the repaint budget
        if elapsed_ms > LoggingConfig.LOG_SLOW_OPERATION_THRESHOLD_MS:
            logger.warning(
                f"Slow operation detected: {operation_name}",
                operation=operation_name,
                processing_time_ms=round(elapsed_ms, 2),
                threshold_ms=LoggingConfig.LOG_SLOW_OPERATION_THRESHOLD_MS,
                **context
            )


def timed(operation_name: Optional[str] = None, logger: Optional[StructuredLogger] = None):
    """Decorator for timing function calls."""
    def decorator(func: Callable) -> Callable:
        op_name = operation_name or f"{func.__module__}.{func.__name__}"
        log = logger or get_structured_logger(func.__module__)
        
        @wraps(func)
        def wrapper(*args, **kwargs):
            with log_timing(op_name, logger=log):
                return func(*args, **kwargs)
        
        return wrapper
    
    return decorator


def setup_logging() -> logging.Logger:
    """Set up structured logging and return the package logger."""
    LoggingConfig.setup_logging()
    return get_logger("src")
