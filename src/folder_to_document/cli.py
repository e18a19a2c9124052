"""
folder-to-document: export a source folder as one markdown document for an LLM reviewer.

Overview
--------
The generated document contains:

- reading instructions for the reviewer,
- the directory tree of the included files,
- a summary of every `.csproj` project (frameworks, packages, references),
- the content of every included file, one `N|text` line per source line,
  with secrets redacted in configuration files and, optionally, comments
  stripped from C#, JavaScript, TypeScript and JSON files,
- the total number of files and lines.

Build outputs, VCS folders, dependency caches and binary files are always
skipped. Include globs (`-i`) restrict the export further.

Usage
-----
Run `folder-to-document --help` for full options. Common examples:
    - Whole folder, document written to ../Md/<project>/<project>.md:
        folder-to-document path/to/project

    - One module plus the solution file, without comments:
        folder-to-document path/to/project -i "BusinessModule/**" -i "*.sln" --strip-comments

    - Explicit output and a log file:
        folder-to-document path/to/project --output review.md --log-file export.log

Settings can also come from a YAML file (`--config`) or from `FOLDER_DOC_*`
variables, for instance in a `.env` file.
"""

from __future__ import annotations

import argparse
import sys
from typing import TYPE_CHECKING

from folder_to_document import __version__
from folder_to_document.document import generate_document
from folder_to_document.exceptions import ConfigFileError, RootNotFoundError
from folder_to_document.logging import logger, setup_logging
from folder_to_document.settings import load_settings

if TYPE_CHECKING:
    from collections.abc import Sequence

    from folder_to_document.settings import Settings


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="folder-to-document",
        description="Export a source folder as a line-numbered markdown document for LLM review.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument(
        "root",
        nargs="?",
        default=None,
        help="Folder to document (default: current directory).",
    )
    p.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Output file or directory (default: <parent>/Md/<project>/<project>.md).",
    )
    p.add_argument(
        "-i",
        "--include",
        action="append",
        default=None,
        help="Include glob, relative to the root (repeatable).",
    )
    p.add_argument(
        "--strip-comments",
        action="store_true",
        default=None,
        help="Remove comments from C#, JavaScript, TypeScript and JSON files.",
    )
    p.add_argument("--config", type=str, default=None, help="YAML configuration file.")
    p.add_argument("--log-file", type=str, default=None, help="Log file path.")
    return p


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse the command line and merge it with the other configuration layers.

    Raises:
        ConfigFileError: if the YAML configuration file cannot be loaded.

    Returns:
        Settings: the settings of the run
    """
    args = build_parser().parse_args(argv)
    return load_settings(vars(args))


def main(argv: Sequence[str] | None = None) -> int:
    try:
        settings = parse_args(argv)
    except ConfigFileError as e:
        logger.error("config_file_invalid", file=str(e.file), reason=e.reason)
        print(f"{e.message} {e.file}: {e.reason}", file=sys.stderr)
        return 1

    if settings.log_file:
        setup_logging(settings.log_file)

    try:
        result = generate_document(settings)
    except RootNotFoundError as e:
        logger.error("root_not_found", root=str(e.folder))
        print(f"{e.message} {e.folder}", file=sys.stderr)
        return 1

    print(f"Wrote {result.output} files={result.stats.file_count} lines={result.stats.line_count}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
