"""
Link discovery - find links in markdown documents.

Scans files for inline links, reference-style links, and autolinks,
yielding (Location, Link) pairs one at a time so verification can start
before the scan finishes.
"""

import fnmatch
import re
from pathlib import Path
from typing import Iterable, Iterator, Optional

from .logging import get_logger
from .models import Link, Location

logger = get_logger(__name__)

IGNORE_FILENAME = ".linkverifyignore"

# Default directories to exclude from scans
DEFAULT_EXCLUDES = {
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".git",
    ".tox",
    ".nox",
    ".pytest_cache",
    ".mypy_cache",
    ".ruff_cache",
    "dist",
    "build",
    "*.egg-info",
    ".eggs",
}

# Markdown inline links and images: [text](url) / ![alt](url "title")
LINK_PATTERN = re.compile(r'!?\[([^\]]*)\]\(\s*<?([^)\s>]+)>?(?:\s+"[^"]*")?\s*\)')

# Reference-style links: [text][ref] or [ref][]
REF_LINK_PATTERN = re.compile(r'\[([^\]]+)\]\[([^\]]*)\]')

# Reference definitions: [ref]: url
REF_LINK_DEF = re.compile(r'^[ \t]*\[([^\]]+)\]:[ \t]*<?(\S+?)>?(?:[ \t]+.*)?$', re.MULTILINE)

# Autolinks: <https://example.com>
AUTOLINK_PATTERN = re.compile(r'<((?:https?|ftp|mailto):[^>\s]+)>')

CODE_BLOCK_PATTERN = re.compile(r'^\s*(```|~~~)')
INLINE_CODE_PATTERN = re.compile(r'`[^`]+`')


def load_ignore_file(root: Path) -> set[str]:
    """Load exclusion patterns from a .linkverifyignore file.

    Format is similar to .gitignore:
    - One pattern per line
    - Lines starting with # are comments
    - Empty lines are ignored
    - Patterns use glob syntax
    """
    ignore_file = root / IGNORE_FILENAME
    patterns: set[str] = set()

    if ignore_file.exists():
        try:
            for line in ignore_file.read_text().splitlines():
                line = line.strip()
                if line and not line.startswith("#"):
                    patterns.add(line)
        except OSError as e:
            logger.warning(f"Could not read {ignore_file}: {e}")

    return patterns


def should_exclude(path: Path, root: Path, exclude_patterns: set[str]) -> bool:
    """Check if a path should be excluded from scanning."""
    try:
        rel_path = path.relative_to(root)
    except ValueError:
        rel_path = path

    rel_str = rel_path.as_posix()

    for pattern in exclude_patterns:
        if any(fnmatch.fnmatch(part, pattern) for part in rel_path.parts):
            return True
        if fnmatch.fnmatch(rel_str, pattern):
            return True

    return False


def scan_files(
    root: Path,
    extensions: Iterable[str],
    recursive: bool = True,
    exclude_patterns: Optional[Iterable[str]] = None,
) -> list[Path]:
    """Find files with the given extensions under root, sorted by path.

    Respects DEFAULT_EXCLUDES and .linkverifyignore patterns.
    """
    root = Path(root)
    if root.is_file():
        return [root]

    excludes = set(DEFAULT_EXCLUDES)
    excludes.update(load_ignore_file(root))
    if exclude_patterns:
        excludes.update(exclude_patterns)

    suffixes = set(extensions)
    candidates = root.rglob("*") if recursive else root.glob("*")

    return sorted(
        f for f in candidates
        if f.is_file()
        and f.suffix in suffixes
        and not should_exclude(f, root, excludes)
    )


def extract_links(content: str, file: str, base: Optional[Path] = None) -> Iterator[tuple[Location, Link]]:
    """Yield every link in a markdown document.

    Links inside fenced code blocks and inline code are skipped.
    Reference-style links whose definition is missing are skipped too;
    they render as plain text. Definition lines themselves yield nothing.
    """
    ref_defs = {
        match.group(1).lower(): match.group(2)
        for match in REF_LINK_DEF.finditer(content)
    }

    in_code_block = False
    for line_num, line in enumerate(content.split("\n"), 1):
        if CODE_BLOCK_PATTERN.match(line):
            in_code_block = not in_code_block
            continue
        if in_code_block:
            continue
        # Definitions are reported where they are used
        if REF_LINK_DEF.match(line):
            continue

        # Blank out inline code so columns still line up
        stripped = INLINE_CODE_PATTERN.sub(lambda m: " " * len(m.group(0)), line)

        found = []
        for match in LINK_PATTERN.finditer(stripped):
            text, url = match.groups()
            found.append((match.start() + 1, text, url))

        for match in REF_LINK_PATTERN.finditer(stripped):
            text, ref = match.groups()
            url = ref_defs.get((ref or text).lower())
            if url is not None:
                found.append((match.start() + 1, text, url))

        for match in AUTOLINK_PATTERN.finditer(stripped):
            found.append((match.start() + 1, match.group(1), match.group(1)))

        for column, text, url in sorted(found):
            yield Location(file, line_num, column), Link(url, text=text, base=base)


def scan_links(
    root: Path,
    extensions: Iterable[str] = (".md", ".markdown", ".txt"),
    recursive: bool = True,
    exclude_patterns: Optional[Iterable[str]] = None,
) -> Iterator[tuple[Location, Link]]:
    """Lazily yield (Location, Link) pairs for every document under root.

    Locations use paths relative to root. Unreadable files are logged
    and skipped.
    """
    root = Path(root)
    for filepath in scan_files(root, extensions, recursive, exclude_patterns):
        try:
            content = filepath.read_text(errors="replace")
        except OSError as e:
            logger.warning(f"Could not read {filepath}: {e}")
            continue

        display = _relative_path(filepath, root)
        count = 0
        for pair in extract_links(content, display, base=filepath.parent.resolve()):
            count += 1
            yield pair
        logger.debug(f"Found {count} link(s) in {display}")


def _relative_path(path: Path, root: Path) -> str:
    """Get path relative to root, or as given if not under root."""
    if root.is_file():
        return path.name
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()
