"""
Base protocol for link verifiers.

A verifier judges one class of link (local files, web addresses, ...).
It must answer ValidationResult.UNSUPPORTED quickly for links it does
not understand, so the engine can try several verifiers per link.
A link that is recognized but broken is reported by raising InvalidLink.

Any callable taking (link, cache) works as a verifier too.
"""

from typing import Callable, Protocol, Union, runtime_checkable

from ..core.cache import Cache
from ..core.models import Link, ValidationResult


@runtime_checkable
class Verifier(Protocol):
    """Protocol for link verification implementations."""

    def verify(self, link: Link, cache: Cache) -> ValidationResult:
        """Check a single link.

        Args:
            link: The link to check
            cache: Shared cache; may be consulted or written to

        Returns:
            VALID or IGNORED when this verifier handles the link,
            UNSUPPORTED when it does not

        Raises:
            InvalidLink: The link is handled here and is broken
        """
        ...


VerifierFunc = Callable[[Link, Cache], ValidationResult]
VerifierLike = Union[Verifier, VerifierFunc]


class FunctionVerifier:
    """Adapts a plain function to the Verifier protocol."""

    def __init__(self, func: VerifierFunc) -> None:
        self.func = func
        self.name = getattr(func, "__name__", repr(func))

    def verify(self, link: Link, cache: Cache) -> ValidationResult:
        return self.func(link, cache)

    def __repr__(self) -> str:
        return f"FunctionVerifier({self.name})"


def as_verifier(obj: VerifierLike) -> Verifier:
    """Return obj as a Verifier, wrapping bare callables."""
    if isinstance(obj, Verifier):
        return obj
    if callable(obj):
        return FunctionVerifier(obj)
    raise TypeError(f"Not a verifier: {obj!r}")


def verifier_name(verifier: Verifier) -> str:
    return getattr(verifier, "name", type(verifier).__name__)
