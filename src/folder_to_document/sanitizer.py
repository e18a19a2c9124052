"""Redact secrets and strip comments without moving any line.

Every rewrite keeps the line breaks found inside the text it replaces, so
line ``N`` of the sanitized text is still line ``N`` of the file on disk.
Comment detection is a regex heuristic, not a lexer: nested block comments
and raw string forms other than C# verbatim strings are not understood.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from folder_to_document.config import (
    COMMENT_STRIPPABLE,
    CONFIG_EXTENSIONS,
    CONFIG_NAME_MARKERS,
    FileType,
    guess_file_type,
)

_ = Path()

Replacement = str | Callable[[re.Match[str]], str]

_LINE_BREAK = re.compile(r"\r\n|\r|\n")

REDACTED = "***"
REDACTED_TOKEN = "[REDACTED_TOKEN]"  # noqa: S105
REDACTED_EMAIL = "user@example.com"

_CREDENTIAL_NAMES = (
    r"password|passwd|pwd|secret|token|apikey|api_key|appkey|app_key"
    r"|accesskey|access_key|privatekey|private_key|credential"
)

_JSON_VALUE = re.compile(r'("(?:[^"\\\r\n]|\\.)*"\s*:\s*)"(?:[^"\\\r\n]|\\.)*"')


def line_breaks(text: str) -> list[str]:
    """Return the line break sequences of ``text`` in order."""
    return _LINE_BREAK.findall(text)


def count_line_breaks(text: str) -> int:
    """Count ``\\r\\n``, ``\\r`` and ``\\n`` line breaks, ``\\r\\n`` counting once."""
    return len(line_breaks(text))


def keep_line_breaks(original: str, replacement: str) -> str:
    """Append the line breaks of ``original`` that ``replacement`` lost.

    Args:
        original (str): the matched span
        replacement (str): its rewritten form

    Returns:
        str: ``replacement`` with as many line breaks as ``original``
    """
    missing = line_breaks(original)[count_line_breaks(replacement) :]
    return replacement + "".join(missing)


class SanitizationRule(BaseModel):
    """An ordered rewrite: a compiled pattern and its replacement.

    The replacement is either an ``re`` template (``\\1`` group references)
    or a callable receiving the match.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: str = Field(..., description="Rule identifier")
    pattern: re.Pattern[str] = Field(..., description="Compiled matcher")
    replacement: Replacement = Field(..., description="Template or callable")

    def _replace(self, match: re.Match[str]) -> str:
        if callable(self.replacement):
            rewritten = self.replacement(match)
        else:
            rewritten = match.expand(self.replacement)
        return keep_line_breaks(match.group(0), rewritten)

    def apply(self, text: str) -> str:
        return self.pattern.sub(self._replace, text)


def _redact_json_block(match: re.Match[str]) -> str:
    body = _JSON_VALUE.sub(rf'\1"{REDACTED}"', match.group("body"))
    return match.group("open") + body + match.group("close")


def _rule(name: str, pattern: str, replacement: Replacement) -> SanitizationRule:
    return SanitizationRule(
        name=name,
        pattern=re.compile(pattern, flags=re.IGNORECASE),
        replacement=replacement,
    )


# Order matters: connection strings go first so that a password embedded in
# one is redacted together with the rest of the string.
SECRET_RULES: tuple[SanitizationRule, ...] = (
    _rule(
        "connection_string_attribute",
        r"""(\bconnectionString\w*\s*=\s*)(["'])(?!\*\*\*\2)[^"'\r\n]+\2""",
        rf"\1\2{REDACTED}\2",
    ),
    _rule(
        "connection_strings_block",
        r'(?P<open>"ConnectionStrings"\s*:\s*\{)(?P<body>[^{}]*)(?P<close>\})',
        _redact_json_block,
    ),
    _rule(
        "connection_string_json",
        r'("[\w.-]*Connection[\w.-]*"\s*:\s*)"(?!\*\*\*")(?:[^"\\\r\n]|\\.)*"',
        rf'\1"{REDACTED}"',
    ),
    _rule(
        "credential_assignment",
        rf"""(\b[\w.-]*(?:{_CREDENTIAL_NAMES})[\w.-]*\s*=\s*)(["'])(?!\*\*\*\2)[^"'\r\n]+\2""",
        rf"\1\2{REDACTED}\2",
    ),
    _rule(
        "credential_json",
        rf'("[\w.-]*(?:{_CREDENTIAL_NAMES})[\w.-]*"\s*:\s*)"(?!\*\*\*")(?:[^"\\\r\n]|\\.)+"',
        rf'\1"{REDACTED}"',
    ),
    _rule(
        "credential_xml_setting",
        rf"""(<add\s+key\s*=\s*"[^"]*(?:{_CREDENTIAL_NAMES})[^"]*"\s+value\s*=\s*")(?!\*\*\*")[^"]+(")""",
        rf"\1{REDACTED}\2",
    ),
    _rule(
        "hex_token",
        r"\b[0-9a-f]{32,}\b",
        REDACTED_TOKEN,
    ),
    _rule(
        "email",
        rf"\b(?!{re.escape(REDACTED_EMAIL)}\b)[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{{2,}}\b",
        REDACTED_EMAIL,
    ),
)

# Literals come first in the alternation so that `//` or `/*` inside a string
# is consumed as part of the string.
COMMENT_PATTERN = re.compile(
    r"""
    (?P<literal>
        @"(?:[^"]|"")*"                 # verbatim string
      | "(?:\\.|[^"\\\r\n])*"           # escaped string
      | '(?:\\.|[^'\\\r\n])*'           # character or single-quoted string
    )
    | (?P<line>//[^\r\n]*)              # line comment, line break excluded
    | (?P<block>/\*.*?\*/)              # block comment, not nested
    """,
    flags=re.VERBOSE | re.DOTALL,
)


def is_config_like(path: Path) -> bool:
    """Check whether a file holds configuration and must be redacted.

    Args:
        path (Path): file path

    Returns:
        bool: True for JSON/XML/.config files or names containing
            "setting", "constant" or "config"
    """
    name = path.name.lower()
    return path.suffix.lower() in CONFIG_EXTENSIONS or any(m in name for m in CONFIG_NAME_MARKERS)


def supports_comment_stripping(file_type: FileType) -> bool:
    return file_type in COMMENT_STRIPPABLE


def redact_secrets(text: str, rules: tuple[SanitizationRule, ...] = SECRET_RULES) -> str:
    """Apply the secret redaction rules in order.

    Each rule sees the output of the previous one. Running the rules twice
    gives the same text as running them once.

    Args:
        text (str): whole file content
        rules (tuple[SanitizationRule, ...]): rules to apply, all of them by default

    Returns:
        str: the redacted content, with the same line breaks
    """
    for rule in rules:
        text = rule.apply(text)
    return text


def _strip_comment(match: re.Match[str], previous: str) -> str:
    if match.group("literal") is not None:
        return match.group(0)
    kept = "".join(line_breaks(match.group(0)))
    following = match.string[match.end() : match.end() + 1]
    # A lone `\r` next to a `\n` would read as a single `\r\n` break.
    if previous == "\r" and (kept or following).startswith("\n"):
        kept = " " + kept
    if kept.endswith("\r") and following == "\n":
        kept += " "
    return kept


def strip_comments(text: str, file_type: FileType) -> str:
    """Remove `//` and `/* */` comments, keeping string literals untouched.

    A comment is replaced by the line breaks it contained and nothing else,
    except for a single space where removing it would join a lone ``\\r``
    and a ``\\n`` into one ``\\r\\n`` break.
    Files of other kinds are returned unchanged.

    Args:
        text (str): whole file content
        file_type (FileType): kind of the file

    Returns:
        str: the content without comments, with the same line breaks
    """
    if not supports_comment_stripping(file_type):
        return text
    out: list[str] = []
    previous = ""
    pos = 0
    for match in COMMENT_PATTERN.finditer(text):
        gap = text[pos : match.start()]
        previous = gap[-1:] or previous
        rewritten = _strip_comment(match, previous)
        previous = rewritten[-1:] or previous
        out += [gap, rewritten]
        pos = match.end()
    out.append(text[pos:])
    return "".join(out)


def sanitize(text: str, path: Path, *, strip: bool = False) -> str:
    """Run the sanitization a file qualifies for.

    Args:
        text (str): file content
        path (Path): file path, used for classification
        strip (bool): whether comment stripping is enabled for the run

    Returns:
        str: redacted content for config-like files, then comment-stripped
            content for supported source kinds when ``strip`` is set
    """
    if is_config_like(path):
        text = redact_secrets(text)
    if strip:
        text = strip_comments(text, guess_file_type(path))
    return text
