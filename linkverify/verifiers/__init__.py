"""
Link verifiers for linkverify.

Built-in verifiers check local file paths and web addresses. Any object
with a verify(link, cache) method, or any function taking (link, cache),
can be added to the chain.
"""

from .base import FunctionVerifier, Verifier, VerifierLike, as_verifier
from .files import FileVerifier
from .web import WebVerifier

# Registry of available verifiers (built-in)
VERIFIERS: dict[str, type] = {
    "files": FileVerifier,
    "web": WebVerifier,
}

__all__ = [
    "FileVerifier",
    "FunctionVerifier",
    "Verifier",
    "VerifierLike",
    "WebVerifier",
    "as_verifier",
    "VERIFIERS",
]
