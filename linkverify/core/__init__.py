"""Core components for linkverify."""

from .cache import Cache, MemoryCache, NullCache, WritableCache
from .exceptions import ConfigError, ExitCode, InvalidLink, LinkverifyError
from .logging import get_logger, setup_logging
from .models import BrokenLink, CheckedLink, Link, Location, Outcome, ValidationResult

__all__ = [
    "BrokenLink",
    "Cache",
    "CheckedLink",
    "ConfigError",
    "ExitCode",
    "InvalidLink",
    "Link",
    "LinkverifyError",
    "Location",
    "MemoryCache",
    "NullCache",
    "Outcome",
    "ValidationResult",
    "WritableCache",
    "get_logger",
    "setup_logging",
]
