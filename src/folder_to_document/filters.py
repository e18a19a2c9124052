from __future__ import annotations

from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from folder_to_document.config import EXCLUDED_EXTENSIONS, EXCLUDED_FOLDERS

if TYPE_CHECKING:
    from collections.abc import Sequence

    from folder_to_document.config import FileSystemEntry
    from folder_to_document.globbing import IncludePattern


def is_root(rel: str) -> bool:
    """Check if a relative path denotes the scan root itself."""
    return rel in {"", "."}


def is_default_excluded(entry: FileSystemEntry) -> bool:
    """Check the fixed exclusion sets, which win over any include pattern.

    Args:
        entry (FileSystemEntry): the entry to check

    Returns:
        bool: True if the extension (files) or the name (directories) is excluded
    """
    if entry.is_dir:
        return entry.name.lower() in EXCLUDED_FOLDERS
    return PurePosixPath(entry.name).suffix.lower() in EXCLUDED_EXTENSIONS


def matches_directly(entry: FileSystemEntry, patterns: Sequence[IncludePattern]) -> bool:
    """Check whether the relative path or the bare name of ``entry`` matches a pattern."""
    return any(p.matches(entry.rel) or p.matches(entry.name) for p in patterns)


def _pattern_reaches_directory(rel: str, name: str, pattern: IncludePattern) -> bool:
    # Raw-text heuristics are loose on purpose: a false positive only costs a
    # visit, files below are filtered one by one anyway.
    text = pattern.pattern.lower()
    return (
        text.startswith(rel.lower() + "/")
        or f"/{name.lower()}/" in text
        or pattern.is_universal
        or pattern.may_contain(rel)
    )


def is_included(entry: FileSystemEntry, patterns: Sequence[IncludePattern]) -> bool:
    """Decide whether an entry belongs to the rendered tree and the content dump.

    - The root is always included.
    - Entries in the fixed exclusion sets are never included.
    - Without patterns, everything else is included.
    - A file is included when its relative path or its bare name matches a pattern.
    - A directory is included when it matches a pattern, or when a pattern may
      select something below it (see `_pattern_reaches_directory`).

    Excluded directories must not be enumerated by callers, so nothing below
    them is ever tested.

    Args:
        entry (FileSystemEntry): the file or directory to test
        patterns (Sequence[IncludePattern]): compiled include patterns

    Returns:
        bool: True if the entry is included
    """
    if is_root(entry.rel):
        return True
    if is_default_excluded(entry):
        return False
    if not patterns:
        return True
    if matches_directly(entry, patterns):
        return True
    if not entry.is_dir:
        return False
    return any(_pattern_reaches_directory(entry.rel, entry.name, p) for p in patterns)
