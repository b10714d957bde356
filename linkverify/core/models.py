"""
Data model for link verification.

Links and their locations are plain frozen dataclasses so they can be
shared freely between worker threads. The Outcome collects the
classification of every checked link and can be merged with other
Outcomes in any order, which is what lets the engine fold results per
worker and combine the partial reports afterwards.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Sequence


class ValidationResult(Enum):
    """Classification returned by a verifier for a single link."""
    VALID = "valid"
    UNSUPPORTED = "unsupported"  # No verifier recognizes this kind of link
    IGNORED = "ignored"  # Recognized, but excluded by policy


@dataclass(frozen=True, order=True)
class Location:
    """Where a link was found."""
    file: str
    line: int
    column: int = 1

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass(frozen=True, order=True)
class Link:
    """A parsed reference to a file or web address.

    Attributes:
        href: Raw link target; also the cache key
        text: Link label from the source document
        base: Directory relative paths resolve against
    """
    href: str
    text: str = ""
    base: Optional[Path] = field(default=None, compare=False)

    @property
    def scheme(self) -> str:
        """Lower-cased URL scheme, or "" for plain paths.

        Single letters are treated as Windows drive letters, not schemes.
        """
        head, sep, _ = self.href.partition(":")
        if not sep or len(head) < 2 or "/" in head or "#" in head or "?" in head:
            return ""
        if not (head[0].isalpha() and all(c.isalnum() or c in "+-." for c in head)):
            return ""
        return head.lower()

    @property
    def is_anchor(self) -> bool:
        return self.href.startswith("#")

    @property
    def path_part(self) -> str:
        """The href without scheme, fragment, or query."""
        target = self.href
        if self.scheme == "file":
            target = target[len("file:"):]
            if target.startswith("//"):
                target = target[2:]
        return target.split("#")[0].split("?")[0]


@dataclass(frozen=True, order=True)
class CheckedLink:
    """A link together with where it was found."""
    location: Location
    link: Link

    def to_dict(self) -> dict:
        return {
            "file": self.location.file,
            "line": self.location.line,
            "column": self.location.column,
            "href": self.link.href,
            "text": self.link.text,
        }


@dataclass(frozen=True, order=True)
class BrokenLink:
    """A link that a verifier recognized and found broken."""
    location: Location
    link: Link
    reason: str

    def to_dict(self) -> dict:
        return {
            "file": self.location.file,
            "line": self.location.line,
            "column": self.location.column,
            "href": self.link.href,
            "text": self.link.text,
            "reason": self.reason,
        }


@dataclass(eq=False)
class Outcome:
    """Aggregate result of a verification run.

    Each (location, link) pair lands in exactly one bucket. Merging is
    associative and commutative, with the empty Outcome as identity;
    equality compares bucket contents as multisets, so physical order
    never matters.

    The with_* methods append in place and are meant for a single
    owner building up a partial result. normalized() returns a
    read-only report whose buckets are tuples.
    """
    valid: Sequence[CheckedLink] = field(default_factory=list)
    ignored: Sequence[CheckedLink] = field(default_factory=list)
    unsupported: Sequence[CheckedLink] = field(default_factory=list)
    broken: Sequence[BrokenLink] = field(default_factory=list)

    def _append(self, bucket: Sequence, entry) -> "Outcome":
        if isinstance(bucket, tuple):
            raise TypeError("Outcome is normalized and read-only")
        bucket.append(entry)
        return self

    def with_result(
        self,
        location: Location,
        link: Link,
        result: ValidationResult,
    ) -> "Outcome":
        """Fold one classified link into this outcome and return it."""
        entry = CheckedLink(location, link)
        if result is ValidationResult.VALID:
            return self._append(self.valid, entry)
        if result is ValidationResult.IGNORED:
            return self._append(self.ignored, entry)
        if result is ValidationResult.UNSUPPORTED:
            return self._append(self.unsupported, entry)
        raise TypeError(f"Not a ValidationResult: {result!r}")

    def with_broken(self, location: Location, link: Link, reason: str) -> "Outcome":
        """Fold one broken link into this outcome and return it."""
        return self._append(self.broken, BrokenLink(location, link, reason))

    @staticmethod
    def merge(left: "Outcome", right: "Outcome") -> "Outcome":
        """Combine two outcomes into a new one. Neither input is modified."""
        return Outcome(
            valid=[*left.valid, *right.valid],
            ignored=[*left.ignored, *right.ignored],
            unsupported=[*left.unsupported, *right.unsupported],
            broken=[*left.broken, *right.broken],
        )

    def __add__(self, other: "Outcome") -> "Outcome":
        if not isinstance(other, Outcome):
            return NotImplemented
        return Outcome.merge(self, other)

    def normalized(self) -> "Outcome":
        """Read-only copy with every bucket sorted by location, then link."""
        return Outcome(
            valid=tuple(sorted(self.valid)),
            ignored=tuple(sorted(self.ignored)),
            unsupported=tuple(sorted(self.unsupported)),
            broken=tuple(sorted(self.broken)),
        )

    def _buckets(self) -> tuple:
        return (
            Counter(self.valid),
            Counter(self.ignored),
            Counter(self.unsupported),
            Counter(self.broken),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Outcome):
            return NotImplemented
        return self._buckets() == other._buckets()

    __hash__ = None  # type: ignore[assignment]

    def __len__(self) -> int:
        return self.total

    @property
    def total(self) -> int:
        return len(self.valid) + len(self.ignored) + len(self.unsupported) + len(self.broken)

    def counts(self) -> dict[str, int]:
        return {
            "valid": len(self.valid),
            "broken": len(self.broken),
            "ignored": len(self.ignored),
            "unsupported": len(self.unsupported),
        }

    def passed(self, strict: bool = False) -> bool:
        """True when nothing is broken (and, in strict mode, nothing unsupported)."""
        if self.broken:
            return False
        return not (strict and self.unsupported)

    @property
    def summary(self) -> str:
        return (
            f"Checked {self.total} link(s): {len(self.valid)} valid, "
            f"{len(self.broken)} broken, {len(self.ignored)} ignored, "
            f"{len(self.unsupported)} unsupported"
        )

    def to_json(self, strict: bool = False) -> dict[str, Any]:
        """Format the outcome as a JSON-serializable dict."""
        return {
            "passed": self.passed(strict),
            "summary": self.summary,
            "counts": self.counts(),
            "broken": [b.to_dict() for b in self.broken],
            "unsupported": [u.to_dict() for u in self.unsupported],
            "ignored": [i.to_dict() for i in self.ignored],
            "valid": [v.to_dict() for v in self.valid],
        }

    def to_markdown(self, strict: bool = False) -> str:
        """Format the outcome as a markdown report."""
        lines = []

        status = "✅ Passed" if self.passed(strict) else "❌ Failed"
        lines.append(f"## Link Check: {status}")
        lines.append("")
        lines.append(self.summary)
        lines.append("")

        if self.broken:
            lines.append(f"### Broken ({len(self.broken)})")
            lines.append("")
            for item in self.broken:
                lines.append(f"- **{item.location}**: `{item.link.href}` ({item.reason})")
            lines.append("")

        if self.unsupported:
            lines.append(f"### Unsupported ({len(self.unsupported)})")
            lines.append("")
            for item in self.unsupported:
                lines.append(f"- **{item.location}**: `{item.link.href}`")
            lines.append("")

        return "\n".join(lines)
