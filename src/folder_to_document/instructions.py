"""Reading instructions placed at the top of every generated document."""

from __future__ import annotations

from folder_to_document.sanitizer import REDACTED, REDACTED_EMAIL, REDACTED_TOKEN

_BASE_INSTRUCTIONS = f"""\
You are reviewing a source tree exported as a single document.

- Section 1 shows the directory structure. Entries marked `[Entry Point]` are
  where execution starts.
- Section 3 holds the files. Every line of code is written as `N|text`, where
  `N` is the 1-based line number in the original file. Cite findings as
  `path:N` using these numbers.
- Configuration values were redacted: `{REDACTED}` replaces passwords, tokens,
  keys and connection strings, `{REDACTED_TOKEN}` replaces long hexadecimal
  strings, and `{REDACTED_EMAIL}` replaces e-mail addresses. Do not report
  these placeholders as bugs.
- Files that could not be read are marked with `[Error]`, folders that could
  not be listed with `[Access Denied]`.
"""

_STRIPPED_COMMENTS = """\
- Comments were removed from C#, JavaScript, TypeScript and JSON files. The
  blank lines they leave keep every line number unchanged.
"""


def render_instructions(*, strip_comments: bool) -> str:
    """Return the markdown instructions for the reviewer of the document.

    Args:
        strip_comments (bool): whether comment stripping was enabled for the run

    Returns:
        str: the instructions, ending with a newline
    """
    if strip_comments:
        return _BASE_INSTRUCTIONS + _STRIPPED_COMMENTS
    return _BASE_INSTRUCTIONS
