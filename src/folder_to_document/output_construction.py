from __future__ import annotations

from typing import TYPE_CHECKING

from folder_to_document.config import ENTRY_POINT_FILES, RenderedLine, TraversalStats, guess_language
from folder_to_document.file_manipulation import (
    choose_fence,
    included_children,
    project_name,
    read_text,
    relpath,
    split_lines,
)
from folder_to_document.filters import matches_directly
from folder_to_document.logging import logger
from folder_to_document.sanitizer import sanitize

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from pathlib import Path
    from typing import TextIO

    from folder_to_document.config import FileSystemEntry
    from folder_to_document.globbing import IncludePattern

ACCESS_DENIED = "[Access Denied]"
ENTRY_POINT_SUFFIX = " [Entry Point]"


def tree_label(entry: FileSystemEntry) -> str:
    """Label of an entry in the tree: a trailing ``/`` for directories, a marker for entry points."""
    if entry.is_dir:
        return entry.name + "/"
    if entry.name.lower() in ENTRY_POINT_FILES:
        return entry.name + ENTRY_POINT_SUFFIX
    return entry.name


def build_tree_lines(
    directory: Path,
    root: Path,
    patterns: Sequence[IncludePattern],
    prefix: str = "",
) -> list[str]:
    """Build a visual tree of the included entries below ``directory``.

    The output reproduces the ``tree`` command layout: siblings sorted by
    path, ``└── `` for the last one and ``├── `` otherwise, and children
    indented by ``"    "`` below a last sibling or ``"│   "`` below any other.
    Excluded directories are neither shown nor enumerated. With include
    patterns, a directory that no pattern names and under which nothing is
    shown is left out as well.

    Args:
        directory (Path): directory whose children are rendered
        root (Path): scan root
        patterns (Sequence[IncludePattern]): compiled include patterns
        prefix (str): indentation inherited from the parent levels

    Returns:
        list[str]: one string per rendered entry, without the root line
    """
    try:
        children = included_children(directory, root, patterns)
    except PermissionError:
        logger.warning("directory_access_denied", path=str(directory))
        return [f"{prefix}└── {ACCESS_DENIED}"]

    shown: list[tuple[FileSystemEntry, list[str]]] = []
    for child in children:
        below = build_tree_lines(child.path, root, patterns) if child.is_dir else []
        if child.is_dir and not below and patterns and not matches_directly(child, patterns):
            continue
        shown.append((child, below))

    lines: list[str] = []
    for idx, (child, below) in enumerate(shown):
        last = idx == len(shown) - 1
        branch = "└── " if last else "├── "
        ext = "    " if last else "│   "
        lines.append(prefix + branch + tree_label(child))
        lines.extend(prefix + ext + line for line in below)
    return lines


def numbered_lines(text: str) -> Iterator[RenderedLine]:
    """Yield the lines of ``text`` numbered from 1."""
    for number, line in enumerate(split_lines(text), start=1):
        yield RenderedLine(number=number, text=line)


def write_file_section(
    sink: TextIO,
    entry: FileSystemEntry,
    *,
    strip_comments: bool,
) -> TraversalStats:
    """Write the numbered, sanitized content of one file.

    A file that cannot be read gets an inline error marker instead of its
    content and is not counted.

    Args:
        sink (TextIO): output document
        entry (FileSystemEntry): the file to write
        strip_comments (bool): whether comment stripping is enabled for the run

    Returns:
        TraversalStats: one file and its line count, or zeros on a read failure
    """
    logger.info("writing_file", path=entry.rel)
    sink.write(f"### File: {entry.rel}\n\n")
    try:
        content = read_text(entry.path)
    except OSError as e:
        logger.warning("file_read_failed", path=entry.rel, error=str(e))
        sink.write(f"> [Error] Unable to read {entry.rel}: {e}\n\n")
        return TraversalStats()

    content = sanitize(content, entry.path, strip=strip_comments)
    fence = choose_fence(content)
    line_count = 0
    sink.write(f"{fence}{guess_language(entry.file_type)}\n")
    for line in numbered_lines(content):
        sink.write(line.render() + "\n")
        line_count = line.number
    sink.write(f"{fence}\n\n")
    return TraversalStats(file_count=1, line_count=line_count)


def write_directory_contents(
    sink: TextIO,
    directory: Path,
    root: Path,
    patterns: Sequence[IncludePattern],
    *,
    strip_comments: bool = False,
) -> TraversalStats:
    """Write every included file below ``directory`` and return the totals.

    Files of a directory are written before any of its subdirectories, both
    in sorted order. Each level returns its own totals, which the caller adds
    to its own.

    Args:
        sink (TextIO): output document
        directory (Path): directory to process
        root (Path): scan root
        patterns (Sequence[IncludePattern]): compiled include patterns
        strip_comments (bool): whether comment stripping is enabled for the run

    Returns:
        TraversalStats: files and lines written for this subtree
    """
    try:
        children = included_children(directory, root, patterns)
    except PermissionError:
        rel = relpath(directory, root) or project_name(root)
        logger.warning("directory_access_denied", path=rel)
        sink.write(f"> {ACCESS_DENIED} {rel}/\n\n")
        return TraversalStats()

    stats = TraversalStats()
    for entry in (c for c in children if not c.is_dir):
        stats += write_file_section(sink, entry, strip_comments=strip_comments)
    for entry in (c for c in children if c.is_dir):
        stats += write_directory_contents(
            sink,
            entry.path,
            root,
            patterns,
            strip_comments=strip_comments,
        )
    return stats
