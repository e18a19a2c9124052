"""Summaries of the `.csproj` files found in the documented tree."""

from __future__ import annotations

import xml.etree.ElementTree as ET  # noqa: S405
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from folder_to_document.file_manipulation import included_children, relpath
from folder_to_document.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from folder_to_document.globbing import IncludePattern


class PackageReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    version: str = ""


class ProjectMetadata(BaseModel):
    """Build information read from one `.csproj` file.

    Attributes:
        rel: Project file path relative to the scan root.
        name: Assembly name, or the file stem when none is declared.
        sdk: MSBuild SDK of SDK-style projects.
        target_frameworks: Declared target framework monikers.
        output_type: `Exe`, `Library`, ... when declared.
        package_references: NuGet dependencies.
        project_references: Referenced projects, as written in the file.
    """

    model_config = ConfigDict(frozen=True)

    rel: str = Field(..., description="Project file relative path")
    name: str = Field(..., description="Assembly name")
    sdk: str = Field(default="", description="MSBuild SDK")
    target_frameworks: list[str] = Field(default_factory=list, description="Target frameworks")
    output_type: str = Field(default="", description="Output type")
    package_references: list[PackageReference] = Field(default_factory=list, description="NuGet packages")
    project_references: list[str] = Field(default_factory=list, description="Referenced projects")


def _local(tag: str) -> str:
    # Old-style projects put every element in the MSBuild namespace.
    return tag.rsplit("}", 1)[-1]


def _iter_local(element: ET.Element, name: str) -> list[ET.Element]:
    return [e for e in element.iter() if _local(e.tag) == name]


def _first_text(element: ET.Element, name: str) -> str:
    for e in _iter_local(element, name):
        if e.text and e.text.strip():
            return e.text.strip()
    return ""


def find_project_files(
    root: Path,
    patterns: Sequence[IncludePattern],
    directory: Path | None = None,
) -> list[Path]:
    """Find included `.csproj` files with the same pruning as the document.

    Args:
        root (Path): scan root
        patterns (Sequence[IncludePattern]): compiled include patterns
        directory (Path | None): directory to search, the root by default

    Returns:
        list[Path]: project files, files of a directory before its subdirectories
    """
    directory = directory or root
    try:
        children = included_children(directory, root, patterns)
    except PermissionError:
        return []
    found = [c.path for c in children if not c.is_dir and c.name.lower().endswith(".csproj")]
    for child in children:
        if child.is_dir:
            found.extend(find_project_files(root, patterns, child.path))
    return found


def extract_csproj_metadata(path: Path, root: Path) -> ProjectMetadata | None:
    """Read the build metadata of a `.csproj` file.

    Args:
        path (Path): project file
        root (Path): scan root, for the relative path

    Returns:
        ProjectMetadata | None: the metadata, or None if the file cannot be
            read or parsed
    """
    try:
        tree = ET.parse(path)  # noqa: S314
    except (OSError, ET.ParseError) as e:
        logger.warning("csproj_parse_failed", path=str(path), error=str(e))
        return None

    project = tree.getroot()
    frameworks = _first_text(project, "TargetFrameworks") or _first_text(project, "TargetFramework")
    packages: list[PackageReference] = []
    for ref in _iter_local(project, "PackageReference"):
        include = ref.get("Include") or ref.get("Update") or ""
        if not include:
            continue
        version = ref.get("Version") or _first_text(ref, "Version")
        packages.append(PackageReference(name=include, version=version))

    return ProjectMetadata(
        rel=relpath(path, root),
        name=_first_text(project, "AssemblyName") or path.stem,
        sdk=project.get("Sdk", ""),
        target_frameworks=[f.strip() for f in frameworks.split(";") if f.strip()],
        output_type=_first_text(project, "OutputType"),
        package_references=packages,
        project_references=[
            ref.get("Include", "").replace("\\", "/")
            for ref in _iter_local(project, "ProjectReference")
            if ref.get("Include")
        ],
    )


def collect_metadata(root: Path, patterns: Sequence[IncludePattern]) -> list[ProjectMetadata]:
    """Extract the metadata of every included project file, skipping unreadable ones."""
    items = (extract_csproj_metadata(p, root) for p in find_project_files(root, patterns))
    return [m for m in items if m is not None]


def render_metadata_section(items: Sequence[ProjectMetadata]) -> list[str]:
    """Render project metadata as markdown lines.

    Args:
        items (Sequence[ProjectMetadata]): projects to describe

    Returns:
        list[str]: markdown lines, empty when there is no project
    """
    lines: list[str] = []
    for meta in items:
        lines.append(f"### {meta.name} (`{meta.rel}`)")
        lines.append("")
        if meta.sdk:
            lines.append(f"- **SDK**: {meta.sdk}")
        if meta.target_frameworks:
            lines.append(f"- **Target frameworks**: {', '.join(meta.target_frameworks)}")
        if meta.output_type:
            lines.append(f"- **Output type**: {meta.output_type}")
        if meta.project_references:
            lines.append(f"- **Project references**: {', '.join(meta.project_references)}")
        if meta.package_references:
            lines.append("")
            lines.append("| Package | Version |")
            lines.append("|---------|---------|")
            lines.extend(f"| {p.name} | {p.version or '-'} |" for p in meta.package_references)
        lines.append("")
    return lines
