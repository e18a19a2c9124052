"""Assemble the whole document: header, instructions, tree, metadata, code, summary."""

from __future__ import annotations

import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from folder_to_document.config import TraversalStats
from folder_to_document.exceptions import RootNotFoundError
from folder_to_document.file_manipulation import project_name
from folder_to_document.globbing import compile_patterns
from folder_to_document.instructions import render_instructions
from folder_to_document.logging import logger
from folder_to_document.output_construction import build_tree_lines, write_directory_contents
from folder_to_document.project_metadata import collect_metadata, render_metadata_section

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import TextIO

    from folder_to_document.globbing import IncludePattern
    from folder_to_document.settings import Settings

_ = Path()


class DocumentResult(BaseModel):
    """Where a document was written and what it contains."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    output: Path = Field(..., description="Written document")
    stats: TraversalStats = Field(..., description="Totals of the code section")


def now_local() -> str:
    """Return the current local time as ``YYYY-MM-DD HH:MM:SS``."""
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def resolve_output_path(root: Path, output: Path | None = None) -> Path:
    """Choose the file the document is written to.

    An explicit output file is used as is and an explicit directory gets
    ``<project>.md`` appended. Without output, the document goes to
    ``<base>/Md/<project>/<project>.md``, where ``<base>`` is the parent of
    the root, or its grandparent when the parent carries the project name
    (``Project/Project`` checkouts).

    Args:
        root (Path): folder being documented
        output (Path | None): user supplied output path

    Returns:
        Path: the output file
    """
    root = root.resolve()
    name = project_name(root)
    if output is not None:
        return output / f"{name}.md" if output.is_dir() else output

    parent = root.parent if root.parent != root else None
    if parent is not None and parent.name.lower() == name.lower():
        parent = parent.parent
    base = parent or root
    return base / "Md" / name / f"{name}.md"


def write_document(
    sink: TextIO,
    root: Path,
    patterns: Sequence[IncludePattern],
    *,
    strip_comments: bool = False,
) -> TraversalStats:
    """Stream the complete document for ``root`` into ``sink``.

    Args:
        sink (TextIO): output document
        root (Path): folder to document, already validated
        patterns (Sequence[IncludePattern]): compiled include patterns
        strip_comments (bool): whether comment stripping is enabled for the run

    Returns:
        TraversalStats: totals of the code section
    """
    name = project_name(root)
    sink.write(f"# {name} Project Document\n\n")
    sink.write(f"**Generated at**: {now_local()}\n")
    sink.write(f"**Project path**: {root}\n")
    if patterns:
        sink.write(f"**Include patterns**: {', '.join(p.pattern for p in patterns)}\n")
    sink.write(f"**Comments stripped**: {'yes' if strip_comments else 'no'}\n\n")

    sink.write("## 0. Review Instructions\n\n")
    sink.write(render_instructions(strip_comments=strip_comments))
    sink.write("\n")

    sink.write("## 1. Project Structure\n\n")
    sink.write("```text\n")
    sink.write(f"{name}/\n")
    for line in build_tree_lines(root, root, patterns):
        sink.write(line + "\n")
    sink.write("```\n\n---\n\n")

    metadata = render_metadata_section(collect_metadata(root, patterns))
    if metadata:
        sink.write("## 2. Project Metadata\n\n")
        sink.write("\n".join(metadata))
        sink.write("\n")

    sink.write("## 3. Source Code\n\n")
    stats = write_directory_contents(sink, root, root, patterns, strip_comments=strip_comments)

    sink.write("---\n\n## Summary\n\n")
    sink.write(f"- Total files: {stats.file_count}\n")
    sink.write(f"- Total lines: {stats.line_count}\n")
    return stats


def generate_document(settings: Settings) -> DocumentResult:
    """Validate the root, then write the document to its output file.

    Args:
        settings (Settings): run configuration

    Raises:
        RootNotFoundError: if the root is missing or not a directory; nothing
            is written in that case

    Returns:
        DocumentResult: the output path and the totals
    """
    root = settings.root.resolve()
    if not root.is_dir():
        raise RootNotFoundError(folder=settings.root)

    patterns = compile_patterns(settings.include)
    output = resolve_output_path(root, settings.output)
    logger.info(
        "scan_started",
        root=str(root),
        output=str(output),
        include=[p.pattern for p in patterns],
        strip_comments=settings.strip_comments,
    )

    # Staged outside the root so the traversal never reads the document being written.
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        newline="\n",
        suffix=".md",
        delete=False,
    ) as sink:
        staged = Path(sink.name)
        try:
            stats = write_document(sink, root, patterns, strip_comments=settings.strip_comments)
        except BaseException:
            sink.close()
            staged.unlink(missing_ok=True)
            raise
    output.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(staged, output)

    logger.info(
        "document_written",
        output=str(output),
        files=stats.file_count,
        lines=stats.line_count,
    )
    return DocumentResult(output=output, stats=stats)
