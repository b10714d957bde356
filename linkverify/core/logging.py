"""
Logging configuration for linkverify.

Provides centralized logging setup with verbosity levels:
- 0 (default): WARNING - errors and warnings only
- 1 (-v):      INFO - run start/finish and totals
- 2 (-vv):     DEBUG - per-link classification, cache hits
- 3+ (-vvv):   TRACE - everything (each verifier consulted, HTTP requests)

When a RunContext is set, messages are prefixed with the scan root.
"""

import logging
import sys
from dataclasses import dataclass
from typing import Optional

# Custom TRACE level (more verbose than DEBUG)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Third-party loggers shown at TRACE level
HTTP_LOGGERS = ("httpx", "httpcore")


def trace(self, message, *args, **kwargs):
    """Log at TRACE level."""
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kwargs)


# Add trace method to Logger class
logging.Logger.trace = trace


@dataclass
class RunContext:
    """Context for the current check run."""
    root: Optional[str] = None
    workers: Optional[int] = None

    def format_prefix(self) -> str:
        """Format the context as a log prefix.

        Examples:
            [docs]
            [docs:w8]
        """
        if not self.root:
            return ""
        if self.workers:
            return f"[{self.root}:w{self.workers}]"
        return f"[{self.root}]"


_current_run_context: Optional[RunContext] = None


def get_run_context() -> Optional[RunContext]:
    """Get the current run context."""
    return _current_run_context


def set_run_context(context: Optional[RunContext]) -> None:
    """Set the current run context."""
    global _current_run_context
    _current_run_context = context


class RunContextFormatter(logging.Formatter):
    """Formatter that includes the run context if available."""

    def format(self, record):
        ctx = get_run_context()
        if ctx:
            prefix = ctx.format_prefix()
            if prefix:
                record.msg = f"{prefix} {record.msg}"
        return super().format(record)


def setup_logging(verbosity: int = 0, quiet: bool = False) -> logging.Logger:
    """Configure logging based on verbosity level.

    Args:
        verbosity: Number of -v flags (0=WARNING, 1=INFO, 2=DEBUG, 3+=TRACE)
        quiet: If True, suppress all output except errors

    Returns:
        The configured root logger for linkverify
    """
    if quiet:
        level = logging.ERROR
    elif verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    elif verbosity == 2:
        level = logging.DEBUG
    else:  # verbosity >= 3
        level = TRACE

    logger = logging.getLogger("linkverify")
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if verbosity >= 2:
        # Worker thread names matter once per-link output is on
        fmt = "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s"
        datefmt = "%H:%M:%S"
        formatter = RunContextFormatter(fmt, datefmt=datefmt)
    elif verbosity == 1:
        fmt = "[%(levelname)s] %(message)s"
        formatter = RunContextFormatter(fmt)
    else:
        formatter = logging.Formatter("%(message)s")

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # At TRACE level, also show the HTTP client's own debug output
    for name in HTTP_LOGGERS:
        http_logger = logging.getLogger(name)
        http_logger.handlers.clear()
        if level == TRACE:
            http_logger.setLevel(logging.DEBUG)
            http_logger.addHandler(handler)
            http_logger.propagate = False
        else:
            http_logger.setLevel(logging.NOTSET)
            http_logger.propagate = True

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger for a module.

    Args:
        name: Module name (e.g., "linkverify.core.engine").
              If None, returns the root linkverify logger.
    """
    if name is None:
        return logging.getLogger("linkverify")
    return logging.getLogger(name)
