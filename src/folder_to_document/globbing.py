"""Compile include globs into case-insensitive, fully anchored matchers.

Supported tokens:

- ``**/`` matches zero or more leading path segments,
- ``**`` matches anything, ``/`` included,
- ``*`` matches anything except ``/``,
- ``?`` matches a single character except ``/``.

Everything else is matched literally.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from folder_to_document.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence

_TOKEN_PATTERN = re.compile(r"\*\*/|\*\*|\*|\?")

_TOKEN_REGEX: dict[str, str] = {
    "**/": "(?:.*/)?",
    "**": ".*",
    "*": "[^/]*",
    "?": "[^/]",
}


class IncludePattern(BaseModel):
    """A user include glob together with its compiled matcher.

    The raw text is kept because directory inclusion also relies on prefix
    and substring checks against it.

    Attributes:
        pattern: Normalized pattern text (POSIX separators).
        regex: Compiled matcher, ``None`` when compilation failed.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    pattern: str = Field(..., description="Normalized glob text")
    regex: re.Pattern[str] | None = Field(default=None, description="Compiled matcher")

    @property
    def fallback(self) -> bool:
        """Whether the pattern degraded to literal substring matching."""
        return self.regex is None

    @property
    def is_universal(self) -> bool:
        """Whether the pattern can match at any depth below any directory.

        A leading ``**`` reaches every descendant, and a pattern without ``/``
        is also tried against bare filenames.
        """
        return self.pattern.startswith("**") or "/" not in self.pattern

    def matches(self, text: str) -> bool:
        """Match ``text`` against the whole pattern, ignoring case."""
        if self.regex is None:
            return self.pattern.lower() in text.lower()
        return self.regex.fullmatch(text) is not None

    def may_contain(self, dir_rel: str) -> bool:
        """Check whether files below ``dir_rel`` could match this pattern.

        The leading segments of the pattern are matched one by one against
        the directory segments; a ``**`` segment accepts everything below it.

        Args:
            dir_rel (str): directory path relative to the scan root

        Returns:
            bool: True if the pattern may select something inside the directory
        """
        if self.regex is None:
            return False
        pattern_parts = self.pattern.split("/")
        dir_parts = dir_rel.split("/")
        for pattern_part, dir_part in zip(pattern_parts, dir_parts):  # noqa: B905
            if "**" in pattern_part:
                return True
            if re.fullmatch(translate(pattern_part), dir_part, flags=re.IGNORECASE) is None:
                return False
        return len(pattern_parts) > len(dir_parts)


def normalize_globs(globs: Sequence[str]) -> list[str]:
    """Normalize a sequence of path glob patterns.

    Normalize a sequence of glob patterns by stripping whitespace and
    replacing backslashes with forward slashes.

    Args:
        globs (Sequence[str]): the glob patterns to normalize

    Returns:
        list[str]: the normalized glob patterns
    """
    out: list[str] = []
    for g in globs:
        g2 = (g or "").strip()
        if not g2:
            continue
        out.append(g2.replace("\\", "/"))
    return out


def translate(pattern: str) -> str:
    """Translate a glob into an unanchored regular expression.

    Literal runs are escaped before wildcard tokens are substituted, so regex
    metacharacters in file names never leak into the expression.

    Args:
        pattern (str): normalized glob pattern

    Returns:
        str: the regular expression source
    """
    parts: list[str] = []
    pos = 0
    for token in _TOKEN_PATTERN.finditer(pattern):
        parts.append(re.escape(pattern[pos : token.start()]))
        parts.append(_TOKEN_REGEX[token.group()])
        pos = token.end()
    parts.append(re.escape(pattern[pos:]))
    return "".join(parts)


def compile_pattern(pattern: str) -> IncludePattern:
    """Compile a single include glob.

    Compilation never raises: a pattern that fails to compile is logged and
    kept as a literal substring matcher.

    Args:
        pattern (str): glob pattern, with ``/`` or ``\\`` separators

    Returns:
        IncludePattern: the compiled pattern
    """
    normalized = pattern.strip().replace("\\", "/")
    try:
        regex = re.compile(translate(normalized), flags=re.IGNORECASE)
    except re.error as e:
        logger.warning("pattern_compile_failed", pattern=normalized, error=str(e))
        return IncludePattern(pattern=normalized)
    return IncludePattern(pattern=normalized, regex=regex)


def compile_patterns(globs: Sequence[str] | None) -> tuple[IncludePattern, ...]:
    """Compile every non-empty include glob.

    An empty result means that every entry is included.
    """
    return tuple(compile_pattern(g) for g in normalize_globs(globs or []))
