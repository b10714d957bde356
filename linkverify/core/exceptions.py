"""
Custom exceptions for linkverify.

Provides specific exception types with associated exit codes
for different failure modes. All exceptions support JSON serialization
for CI integration via --json-errors flag.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional


class ExitCode:
    """Standard exit codes for linkverify."""
    SUCCESS = 0
    GENERAL_ERROR = 1
    CONFIG_ERROR = 2
    VERIFY_FAILED = 7


class LinkverifyError(Exception):
    """Base class for linkverify errors."""

    @property
    def exit_code(self) -> int:
        return ExitCode.GENERAL_ERROR


@dataclass
class InvalidLink(LinkverifyError):
    """Raised by a verifier that recognized a link and found it broken.

    Attributes:
        reason: Human-readable explanation (e.g. "HTTP 404")
        href: The offending link target, when known
    """
    reason: str
    href: Optional[str] = None

    def __str__(self) -> str:
        if self.href:
            return f"Broken link {self.href}: {self.reason}"
        return f"Broken link: {self.reason}"

    @property
    def exit_code(self) -> int:
        return ExitCode.VERIFY_FAILED


@dataclass
class ConfigError(LinkverifyError):
    """Raised when a configuration file cannot be read or parsed.

    Attributes:
        path: The config file that failed to load
        details: What went wrong
    """
    path: Path
    details: str

    def __str__(self) -> str:
        return f"Invalid configuration in {self.path}: {self.details}"

    @property
    def exit_code(self) -> int:
        return ExitCode.CONFIG_ERROR


def exception_to_json(exc: Exception, context: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    """Convert an exception to a JSON-serializable dictionary.

    Args:
        exc: The exception to convert
        context: Optional additional context (root, command, etc.)

    Returns:
        JSON-serializable dict with error details
    """
    error_dict: dict[str, Any] = {
        "type": type(exc).__name__,
        "message": str(exc),
    }

    if hasattr(exc, "exit_code"):
        error_dict["exit_code"] = exc.exit_code
    else:
        error_dict["exit_code"] = ExitCode.GENERAL_ERROR

    if isinstance(exc, InvalidLink):
        error_dict["reason"] = exc.reason
        if exc.href:
            error_dict["href"] = exc.href

    elif isinstance(exc, ConfigError):
        error_dict["path"] = str(exc.path)
        error_dict["details"] = exc.details

    if context:
        error_dict["context"] = context

    return {"error": error_dict}


def format_json_error(exc: Exception, context: Optional[dict[str, Any]] = None) -> str:
    """Format an exception as a JSON string.

    Args:
        exc: The exception to format
        context: Optional additional context

    Returns:
        JSON string with error details
    """
    return json.dumps(exception_to_json(exc, context), indent=2, default=str)
