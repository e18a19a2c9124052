from pathlib import Path

from folder_to_document import cli


def export(root: Path, output: Path, *extra: str) -> str:
    exit_code = cli.main([str(root), "--output", str(output), *extra])
    assert exit_code == 0
    return output.read_text(encoding="utf-8")


def test_end_to_end_numbers_lines_and_skips_build_output(tmp_path: Path) -> None:
    root = tmp_path / "proj"
    (root / "bin").mkdir(parents=True)
    (root / "a.txt").write_text("hello\nworld\n", encoding="utf-8")
    (root / "bin" / "x.txt").write_text("compiled\n", encoding="utf-8")

    text = export(root, tmp_path / "proj.md")

    assert "### File: a.txt\n\n```text\n1|hello\n2|world\n```\n" in text
    assert "bin/" not in text
    assert "compiled" not in text
    assert "- Total files: 1\n- Total lines: 2\n" in text


def test_end_to_end_redacts_configuration(tmp_path: Path) -> None:
    root = tmp_path / "proj"
    root.mkdir()
    (root / "app.json").write_text('{"Password": "abc123"}', encoding="utf-8")

    text = export(root, tmp_path / "proj.md")

    assert '1|{"Password": "***"}' in text
    assert "abc123" not in text


def test_end_to_end_include_pattern_prunes_folders(tmp_path: Path) -> None:
    root = tmp_path / "proj"
    (root / "src").mkdir(parents=True)
    (root / "docs").mkdir()
    (root / "src" / "x.cs").write_text("class X {}\n", encoding="utf-8")
    (root / "docs" / "readme.md").write_text("# readme\n", encoding="utf-8")

    text = export(root, tmp_path / "proj.md", "--include", "src/**")

    assert "### File: src/x.cs" in text
    assert "└── src/\n    └── x.cs\n" in text
    assert "readme.md" not in text
    assert "docs/" not in text


def test_end_to_end_strips_comments_without_shifting_lines(tmp_path: Path) -> None:
    root = tmp_path / "proj"
    root.mkdir()
    (root / "main.cs").write_text("// comment\ncode();", encoding="utf-8")

    text = export(root, tmp_path / "proj.md", "--strip-comments")

    assert "```csharp\n1|\n2|code();\n```" in text
    assert "comment\n" not in text.split("## 3. Source Code", 1)[1]


def test_end_to_end_default_output_location(tmp_path: Path) -> None:
    root = tmp_path / "Work" / "Shop"
    root.mkdir(parents=True)
    (root / "Program.cs").write_text("Run();\n", encoding="utf-8")

    exit_code = cli.main([str(root)])

    assert exit_code == 0
    output = tmp_path / "Work" / "Md" / "Shop" / "Shop.md"
    assert output.exists()
    assert "Program.cs [Entry Point]" in output.read_text(encoding="utf-8")
