"""
linkverify - Link verification for document trees

Classifies file-system paths and web addresses found in documents as
valid, broken, ignored, or unsupported, checking them in parallel
behind a shared cache.
"""

__version__ = "0.1.0"

from .core.cache import Cache, MemoryCache, NullCache
from .core.engine import verify, verify_one
from .core.exceptions import InvalidLink
from .core.models import Link, Location, Outcome, ValidationResult
from .core.scanner import scan_links
from .verifiers import FileVerifier, Verifier, WebVerifier

__all__ = [
    "Cache",
    "FileVerifier",
    "InvalidLink",
    "Link",
    "Location",
    "MemoryCache",
    "NullCache",
    "Outcome",
    "ValidationResult",
    "Verifier",
    "WebVerifier",
    "scan_links",
    "verify",
    "verify_one",
    "__version__",
]
