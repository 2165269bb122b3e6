# ditachunk/utils/logger.py

import logging
import traceback
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Any, Dict, Optional

from ..models.types import LogContext, ProcessingError, ProcessingPhase

PACKAGE_LOGGER = "ditachunk"


class DITALogger:
    """Logging facade for the chunk map pass."""

    def __init__(self, name: str = PACKAGE_LOGGER):
        self.logger = logging.getLogger(name)

    def setup(self, log_file: Optional[Path] = None, level: int = logging.DEBUG) -> None:
        """Configure handlers on the package logger. Safe to call repeatedly."""
        base = logging.getLogger(PACKAGE_LOGGER)
        base.setLevel(level)
        if getattr(base, "_dita_configured", False):
            return

        # Create console handler
        console = logging.StreamHandler()
        console.setLevel(logging.INFO)
        console.setFormatter(logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s'
        ))
        base.addHandler(console)

        if log_file is not None:
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            ))
            base.addHandler(file_handler)

        base._dita_configured = True

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.logger.error(msg, *args, **kwargs)

    def log_phase_start(self, phase: ProcessingPhase, context: LogContext) -> None:
        """Log the start of a processing phase."""
        self.logger.info(
            f"Starting {phase.value} phase - "
            f"Map: {context.map_id or 'N/A'}"
        )

    def log_phase_end(self, phase: ProcessingPhase, context: LogContext) -> None:
        """Log the end of a processing phase."""
        self.logger.info(
            f"Completed {phase.value} phase - "
            f"Map: {context.map_id or 'N/A'}"
        )

    def log_error(self, error: ProcessingError, phase: Optional[ProcessingPhase] = None) -> None:
        """Log processing error with context."""
        error_msg = (
            f"Error during {phase.value if phase else 'processing'}: "
            f"{error.message}\n"
            f"Context: {error.context}\n"
            f"Element: {error.element_id or 'N/A'}"
        )

        if error.stacktrace:
            error_msg += f"\nStacktrace:\n{error.stacktrace}"

        self.logger.error(error_msg)

    def create_error_log(self, e: Exception, context: Dict[str, Any]) -> None:
        """Create comprehensive error log entry."""
        self.logger.error(
            "Error Details:\n"
            f"Timestamp: {datetime.now().isoformat()}\n"
            f"Error Type: {type(e).__name__}\n"
            f"Message: {str(e)}\n"
            f"Context: {context}\n"
            f"Stacktrace:\n{traceback.format_exc()}"
        )


def log_processing_phase(phase: ProcessingPhase):
    """Decorator for logging processing phases."""
    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            context = LogContext(
                phase=phase,
                map_id=getattr(self, 'current_map_id', None)
            )

            self.logger.log_phase_start(phase, context)
            try:
                result = func(self, *args, **kwargs)
                self.logger.log_phase_end(phase, context)
                return result
            except Exception as e:
                if isinstance(e, ProcessingError):
                    self.logger.log_error(e, phase)
                else:
                    self.logger.create_error_log(e, {
                        'phase': phase.value,
                        'function': func.__name__,
                    })
                raise
        return wrapper
    return decorator
