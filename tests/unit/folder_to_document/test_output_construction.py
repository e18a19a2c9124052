from __future__ import annotations

import io
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from folder_to_document import file_manipulation
from folder_to_document.config import EntryKind, FileSystemEntry, RenderedLine, TraversalStats
from folder_to_document.globbing import compile_patterns
from folder_to_document.output_construction import (
    build_tree_lines,
    numbered_lines,
    tree_label,
    write_directory_contents,
    write_file_section,
)

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


def make_tree(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8", newline="")


@pytest.mark.unit
def test_rendered_line_trims_trailing_whitespace() -> None:
    assert RenderedLine(number=3, text="x = 1;  \t").render() == "3|x = 1;"
    assert RenderedLine(number=1, text="").render() == "1|"


@pytest.mark.unit
def test_traversal_stats_add() -> None:
    total = TraversalStats(file_count=1, line_count=2) + TraversalStats(file_count=2, line_count=5)

    assert total == TraversalStats(file_count=3, line_count=7)
    assert TraversalStats() + TraversalStats() == TraversalStats()


@pytest.mark.unit
def test_tree_label() -> None:
    def entry(kind: EntryKind, rel: str) -> FileSystemEntry:
        return FileSystemEntry(kind=kind, path=Path("/r") / rel, rel=rel)

    assert tree_label(entry(EntryKind.DIRECTORY, "src")) == "src/"
    assert tree_label(entry(EntryKind.FILE, "src/Program.cs")) == "Program.cs [Entry Point]"
    assert tree_label(entry(EntryKind.FILE, "web/INDEX.TS")) == "INDEX.TS [Entry Point]"
    assert tree_label(entry(EntryKind.FILE, "src/util.cs")) == "util.cs"


@pytest.mark.unit
def test_numbered_lines() -> None:
    assert [line.render() for line in numbered_lines("a\r\n\nb  \n")] == ["1|a", "2|", "3|b"]
    assert list(numbered_lines("")) == []


@pytest.mark.unit
def test_build_tree_lines_layout(tmp_path: Path) -> None:
    make_tree(tmp_path, {"src/app/Program.cs": "", "src/util.cs": "", "z.txt": ""})

    assert build_tree_lines(tmp_path, tmp_path, ()) == [
        "├── src/",
        "│   ├── app/",
        "│   │   └── Program.cs [Entry Point]",
        "│   └── util.cs",
        "└── z.txt",
    ]


@pytest.mark.unit
def test_excluded_folder_is_pruned_even_when_files_match(tmp_path: Path) -> None:
    make_tree(tmp_path, {"x.cs": "", "bin/y.cs": "", "obj/Debug/z.cs": ""})
    patterns = compile_patterns(["*.cs"])

    assert build_tree_lines(tmp_path, tmp_path, patterns) == ["└── x.cs"]


@pytest.mark.unit
def test_write_directory_contents_numbers_lines(tmp_path: Path) -> None:
    make_tree(tmp_path, {"a.txt": "hello\nworld\n", "bin/skip.txt": "nope\n"})
    sink = io.StringIO()

    stats = write_directory_contents(sink, tmp_path, tmp_path, ())

    assert sink.getvalue() == "### File: a.txt\n\n```text\n1|hello\n2|world\n```\n\n"
    assert stats == TraversalStats(file_count=1, line_count=2)


@pytest.mark.unit
def test_files_come_before_subdirectories(tmp_path: Path) -> None:
    make_tree(tmp_path, {"a/inner.txt": "1\n", "z.txt": "2\n"})
    sink = io.StringIO()

    stats = write_directory_contents(sink, tmp_path, tmp_path, ())
    out = sink.getvalue()

    assert out.index("### File: z.txt") < out.index("### File: a/inner.txt")
    assert stats == TraversalStats(file_count=2, line_count=2)


@pytest.mark.unit
def test_empty_file_has_no_lines(tmp_path: Path) -> None:
    make_tree(tmp_path, {"empty.txt": ""})
    sink = io.StringIO()

    stats = write_directory_contents(sink, tmp_path, tmp_path, ())

    assert sink.getvalue() == "### File: empty.txt\n\n```text\n```\n\n"
    assert stats == TraversalStats(file_count=1, line_count=0)


@pytest.mark.unit
def test_fence_is_widened_for_markdown_with_fences(tmp_path: Path) -> None:
    make_tree(tmp_path, {"readme.md": "```bash\nls\n```\n"})
    sink = io.StringIO()

    write_directory_contents(sink, tmp_path, tmp_path, ())

    assert "````markdown\n1|```bash\n2|ls\n3|```\n````\n" in sink.getvalue()


@pytest.mark.unit
def test_secrets_and_comments_are_rewritten_in_place(tmp_path: Path) -> None:
    make_tree(
        tmp_path,
        {
            "app.json": '{"Password": "abc123"}\n',
            "main.cs": "// comment\ncode();\n",
        },
    )
    sink = io.StringIO()

    stats = write_directory_contents(sink, tmp_path, tmp_path, (), strip_comments=True)
    out = sink.getvalue()

    assert '1|{"Password": "***"}' in out
    assert "abc123" not in out
    assert "```csharp\n1|\n2|code();\n```" in out
    assert stats == TraversalStats(file_count=2, line_count=3)


@pytest.mark.unit
def test_unreadable_file_gets_an_error_marker(tmp_path: Path, mocker: MockerFixture) -> None:
    make_tree(tmp_path, {"a.txt": "secret\n", "b.txt": "ok\n"})
    mocker.patch(
        "folder_to_document.output_construction.read_text",
        side_effect=[PermissionError("denied"), "ok\n"],
    )
    sink = io.StringIO()

    stats = write_directory_contents(sink, tmp_path, tmp_path, ())
    out = sink.getvalue()

    assert "### File: a.txt\n\n> [Error] Unable to read a.txt: denied\n\n" in out
    assert "### File: b.txt\n\n```text\n1|ok\n```\n\n" in out
    assert stats == TraversalStats(file_count=1, line_count=1)


@pytest.mark.unit
def test_write_file_section_counts_lines(tmp_path: Path) -> None:
    make_tree(tmp_path, {"x.cs": "a\nb\nc"})
    entry = FileSystemEntry(kind=EntryKind.FILE, path=tmp_path / "x.cs", rel="x.cs")
    sink = io.StringIO()

    stats = write_file_section(sink, entry, strip_comments=False)

    assert stats == TraversalStats(file_count=1, line_count=3)
    assert sink.getvalue().startswith("### File: x.cs\n\n```csharp\n1|a\n")


@pytest.mark.unit
def test_unlistable_directory_is_marked(tmp_path: Path, mocker: MockerFixture) -> None:
    make_tree(tmp_path, {"locked/secret.txt": "x\n", "open.txt": "ok\n"})
    real = file_manipulation.included_children

    def fake_children(directory, root, patterns):  # noqa: ANN001, ANN202
        if directory.name == "locked":
            raise PermissionError(directory)
        return real(directory, root, patterns)

    mocker.patch("folder_to_document.output_construction.included_children", side_effect=fake_children)

    tree = build_tree_lines(tmp_path, tmp_path, ())
    sink = io.StringIO()
    stats = write_directory_contents(sink, tmp_path, tmp_path, ())

    assert tree == ["├── locked/", "│   └── [Access Denied]", "└── open.txt"]
    assert "> [Access Denied] locked/\n\n" in sink.getvalue()
    assert "secret.txt" not in sink.getvalue()
    assert stats == TraversalStats(file_count=1, line_count=1)


@pytest.mark.unit
def test_directory_symlink_is_neither_listed_nor_read(tmp_path: Path) -> None:
    make_tree(tmp_path, {"real/a.txt": "a\n"})
    (tmp_path / "link").symlink_to(tmp_path / "real", target_is_directory=True)
    sink = io.StringIO()

    stats = write_directory_contents(sink, tmp_path, tmp_path, ())

    assert build_tree_lines(tmp_path, tmp_path, ()) == ["└── real/", "    └── a.txt"]
    assert "link" not in sink.getvalue()
    assert "[Error]" not in sink.getvalue()
    assert stats == TraversalStats(file_count=1, line_count=1)


@pytest.mark.unit
def test_folders_without_matches_are_hidden_from_the_tree(tmp_path: Path) -> None:
    make_tree(tmp_path, {"A/B/x.cs": "", "C/App.sln": "", "D/notes.txt": ""})

    lines = build_tree_lines(tmp_path, tmp_path, compile_patterns(["*.sln"]))

    assert lines == ["└── C/", "    └── App.sln"]


@pytest.mark.unit
def test_folder_named_by_a_pattern_stays_in_the_tree(tmp_path: Path) -> None:
    make_tree(tmp_path, {"docs/guide.md": "", "src/x.cs": ""})

    lines = build_tree_lines(tmp_path, tmp_path, compile_patterns(["docs"]))

    assert lines == ["└── docs/"]


@pytest.mark.unit
def test_empty_folders_stay_without_patterns(tmp_path: Path) -> None:
    (tmp_path / "empty").mkdir()

    assert build_tree_lines(tmp_path, tmp_path, ()) == ["└── empty/"]


@pytest.mark.unit
def test_unlistable_root_is_marked_with_the_project_name(tmp_path: Path, mocker: MockerFixture) -> None:
    root = tmp_path / "proj"
    root.mkdir()
    mocker.patch(
        "folder_to_document.output_construction.included_children",
        side_effect=PermissionError("denied"),
    )
    sink = io.StringIO()

    stats = write_directory_contents(sink, root, root, ())

    assert sink.getvalue() == "> [Access Denied] proj/\n\n"
    assert build_tree_lines(root, root, ()) == ["└── [Access Denied]"]
    assert stats == TraversalStats()
