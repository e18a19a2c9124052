from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from folder_to_document import globbing
from folder_to_document.globbing import compile_pattern, compile_patterns, normalize_globs, translate

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


@pytest.mark.unit
def test_normalize_globs_strips_and_normalizes() -> None:
    globs = ["  src/**/*.cs ", "Module\\Sub\\*.cs", ""]

    assert normalize_globs(globs) == ["src/**/*.cs", "Module/Sub/*.cs"]


@pytest.mark.unit
def test_translate_escapes_literals_before_tokens() -> None:
    assert translate("**/a.b/*?") == r"(?:.*/)?a\.b/[^/]*[^/]"
    assert translate("src/**") == "src/.*"


@pytest.mark.unit
@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("src/Program.cs", True),
        ("SRC/program.CS", True),
        ("src/Program.csx", False),
        ("other/src/Program.cs", False),
        ("src", False),
    ],
)
def test_literal_pattern_matches_only_its_own_path(text: str, expected: bool) -> None:
    pattern = compile_pattern("src/Program.cs")

    assert pattern.matches(text) is expected


@pytest.mark.unit
def test_double_star_slash_matches_zero_or_more_segments() -> None:
    pattern = compile_pattern("**/*.cs")

    assert pattern.matches("Program.cs")
    assert pattern.matches("a/b/c/Program.cs")
    assert not pattern.matches("a/Program.csproj")


@pytest.mark.unit
def test_double_star_alone_crosses_separators() -> None:
    pattern = compile_pattern("src/**")

    assert pattern.matches("src/x.cs")
    assert pattern.matches("src/a/b/x.cs")
    assert not pattern.matches("src")
    assert not pattern.matches("docs/x.cs")


@pytest.mark.unit
def test_single_star_and_question_mark_stay_within_a_segment() -> None:
    star = compile_pattern("src/*.cs")
    question = compile_pattern("v?.txt")

    assert star.matches("src/a.cs")
    assert not star.matches("src/a/b.cs")
    assert question.matches("v1.txt")
    assert not question.matches("v10.txt")
    assert not question.matches("v/.txt")


@pytest.mark.unit
def test_regex_metacharacters_are_literal() -> None:
    pattern = compile_pattern("file(1)+[x].cs")

    assert pattern.matches("file(1)+[x].cs")
    assert not pattern.matches("file1.cs")
    assert not pattern.matches("file(1)+x.cs")


@pytest.mark.unit
def test_backslashes_are_normalized() -> None:
    pattern = compile_pattern("Module\\**")

    assert pattern.pattern == "Module/**"
    assert pattern.matches("module/Service.cs")


@pytest.mark.unit
def test_compile_failure_falls_back_to_substring(mocker: MockerFixture) -> None:
    mocker.patch.object(globbing, "translate", return_value="(")

    pattern = compile_pattern("Orders")

    assert pattern.fallback
    assert pattern.matches("src/orders/Service.cs")
    assert not pattern.matches("src/Billing.cs")
    assert not pattern.may_contain("src")


@pytest.mark.unit
def test_compile_patterns_skips_blank_entries() -> None:
    assert compile_patterns([]) == ()
    assert compile_patterns(None) == ()
    patterns = compile_patterns(["  ", "src/**", "*.sln"])

    assert [p.pattern for p in patterns] == ["src/**", "*.sln"]


@pytest.mark.unit
def test_is_universal() -> None:
    assert compile_pattern("**/*.cs").is_universal
    assert compile_pattern("*.sln").is_universal
    assert not compile_pattern("src/*.cs").is_universal


@pytest.mark.unit
def test_may_contain_matches_leading_segments() -> None:
    pattern = compile_pattern("src/*/Controllers/*.cs")

    assert pattern.may_contain("src")
    assert pattern.may_contain("SRC/Api")
    assert pattern.may_contain("src/Api/Controllers")
    assert not pattern.may_contain("docs")
    assert not pattern.may_contain("src/Api/Models")
    assert not pattern.may_contain("src/Api/Controllers/Nested")
    assert compile_pattern("src/**").may_contain("src/a/b")
