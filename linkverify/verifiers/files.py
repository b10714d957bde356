"""
File link verification - check that path links resolve to existing files.

Handles links without a scheme and file: links. Relative paths resolve
against the directory of the document that contains them, absolute
paths against the scan root.
"""

import fnmatch
from pathlib import Path
from typing import Iterable, Optional

from ..core.cache import Cache
from ..core.exceptions import InvalidLink
from ..core.logging import get_logger
from ..core.models import Link, ValidationResult

logger = get_logger(__name__)


class FileVerifier:
    """Verify that path links resolve to existing files or directories."""

    name = "files"
    description = "Check that path links resolve to files"

    def __init__(
        self,
        root: Path,
        allow_outside_root: bool = False,
        ignore: Optional[Iterable[str]] = None,
    ) -> None:
        self.root = Path(root).resolve()
        self.allow_outside_root = allow_outside_root
        self.ignore = tuple(ignore or ())

    def verify(self, link: Link, cache: Cache) -> ValidationResult:
        if link.scheme not in ("", "file"):
            return ValidationResult.UNSUPPORTED

        # Anchors into the same document
        if link.is_anchor:
            return ValidationResult.VALID

        path_part = link.path_part
        if not path_part:
            return ValidationResult.VALID

        if any(fnmatch.fnmatch(path_part, pattern) for pattern in self.ignore):
            return ValidationResult.IGNORED

        resolved = self._resolve(path_part, link.base)

        if not self.allow_outside_root and not resolved.is_relative_to(self.root):
            raise InvalidLink(f"{path_part} points outside {self.root}", href=link.href)

        if resolved.exists():
            logger.trace(f"{link.href} -> {resolved}")
            return ValidationResult.VALID

        raise InvalidLink(f"{path_part} does not exist", href=link.href)

    def _resolve(self, path_part: str, base: Optional[Path]) -> Path:
        if path_part.startswith("/"):
            # Absolute from root
            resolved = self.root / path_part.lstrip("/")
        else:
            resolved = Path(base or self.root) / path_part

        try:
            return resolved.resolve()
        except (OSError, RuntimeError):
            # Symlink loops and the like; keep the unresolved path
            return resolved.absolute()
