"""
Evidence collection for license detection.

Gathers raw evidence from a dependency checkout without judging it: license
files, legal notice files, the license section of a README, and license
declarations from package manifests or caller metadata.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .config import DetectionConfig, get_config
from .error_handling import log_filesystem_error
from .files import list_files, read_text_file
from .manifests import declared_metadata_license, extract_declared_licenses
from .paths import search_directories, source_identifier
from .structured_logging import get_evidence_logger


class EvidenceClass(Enum):
    """Kinds of license evidence."""

    LICENSE_FILE = "license_file"
    NOTICE_FILE = "notice_file"
    README = "readme"
    PACKAGE_MANAGER = "package_manager"


@dataclass(frozen=True)
class EvidenceItem:
    """A single piece of evidence and where it came from."""

    evidence_class: EvidenceClass
    source: str
    text: str


@dataclass(frozen=True)
class Evidence:
    """All evidence collected for one dependency."""

    license_files: List[EvidenceItem] = field(default_factory=list)
    notice_files: List[EvidenceItem] = field(default_factory=list)
    readme: Optional[EvidenceItem] = None
    declared: List[EvidenceItem] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.license_files or self.readme or self.declared)


def is_license_filename(filename: str, config: Optional[DetectionConfig] = None) -> bool:
    """Check a file name against the license file table, ignoring case."""
    config = config or get_config().detection
    lowered = filename.lower()
    return any(
        lowered == stem + extension
        for stem in config.license_stems
        for extension in config.license_extensions
    )


def is_notice_filename(filename: str, config: Optional[DetectionConfig] = None) -> bool:
    """Check a file name against the notice table; any extension is allowed."""
    config = config or get_config().detection
    lowered = filename.lower()
    return any(lowered == stem or lowered.startswith(stem + ".") for stem in config.notice_stems)


def is_readme_filename(filename: str, config: Optional[DetectionConfig] = None) -> bool:
    config = config or get_config().detection
    return filename.lower() in config.readme_filenames


def collect_license_files(
    path: Path,
    search_root: Optional[Path] = None,
    additional_files: Iterable[Path] = (),
) -> List[EvidenceItem]:
    """
    Collect license file evidence.

    Searches ``path`` first. If it holds no license file, walks up towards
    ``search_root`` and stops at the first directory that has one. Every
    matching file in that directory contributes an item; texts are kept
    exactly as read.

    Args:
        path: Dependency root
        search_root: Upper boundary for the upward walk
        additional_files: Extra files always treated as license files

    Returns:
        List[EvidenceItem]: License file evidence in discovery order
    """
    config = get_config().detection
    items = []

    for directory in search_directories(path, search_root):
        matches = [f for f in list_files(directory) if is_license_filename(f.name, config)]
        if not matches:
            continue
        for file_path in matches:
            text = read_text_file(file_path)
            if text is not None:
                items.append(
                    EvidenceItem(
                        EvidenceClass.LICENSE_FILE,
                        source_identifier(file_path, path, search_root),
                        text,
                    )
                )
        break

    for extra in additional_files:
        file_path = extra if extra.is_absolute() else path / extra
        if not file_path.is_file():
            log_filesystem_error(
                "Additional license file not found",
                "evidence",
                "collect_license_files",
                file_path=str(file_path),
            )
            continue
        text = read_text_file(file_path)
        if text is not None:
            items.append(
                EvidenceItem(
                    EvidenceClass.LICENSE_FILE,
                    source_identifier(file_path, path, search_root),
                    text,
                )
            )

    return items


def collect_notice_files(path: Path) -> List[EvidenceItem]:
    """
    Collect legal notice evidence (AUTHORS, NOTICE, LEGAL) from ``path`` only.

    Texts are right-trimmed; files with no content are excluded.
    """
    config = get_config().detection
    items = []
    for file_path in list_files(path):
        if not is_notice_filename(file_path.name, config):
            continue
        text = read_text_file(file_path)
        if text is None:
            continue
        text = text.rstrip()
        if text:
            items.append(EvidenceItem(EvidenceClass.NOTICE_FILE, file_path.name, text))
    return items


_ATX_HEADING = re.compile(r"^(#{1,6})\s+(.*?)\s*#*\s*$")
_RDOC_HEADING = re.compile(r"^(={1,6})\s+(.*?)\s*$")
_SETEXT_UNDERLINE = re.compile(r"^(=+|-+)\s*$")
_LICENSE_TITLE = re.compile(r"^licen[sc](e|es|ing)\s*:?$", re.IGNORECASE)
_FENCE = re.compile(r"^\s{0,3}(`{3,}|~{3,})")


def _heading_at(lines: List[str], index: int) -> Optional[Tuple[int, str, int]]:
    """Return (level, title, lines consumed) if a heading starts at ``index``."""
    line = lines[index].rstrip("\r\n")
    for pattern in (_ATX_HEADING, _RDOC_HEADING):
        match = pattern.match(line)
        if match:
            return len(match.group(1)), match.group(2), 1

    if line.strip() and index + 1 < len(lines):
        underline = _SETEXT_UNDERLINE.match(lines[index + 1].rstrip("\r\n"))
        if underline:
            level = 1 if underline.group(1).startswith("=") else 2
            return level, line.strip(), 2

    return None


def _update_fence(line: str, fence: Optional[str]) -> Optional[str]:
    """Track fenced code blocks; returns the open fence marker, if any."""
    match = _FENCE.match(line)
    if not match:
        return fence
    marker = match.group(1)
    if fence is None:
        return marker
    if marker[0] == fence[0] and len(marker) >= len(fence):
        return None
    return fence


def extract_license_section(content: str) -> Optional[str]:
    """
    Extract the license section of a README.

    The section starts after a heading titled "License" (markdown, rdoc or
    setext style) and runs to the next heading of the same or a higher level.
    Lines inside fenced code blocks are never headings.

    Returns:
        Optional[str]: Right-trimmed section text, or None if there is none
    """
    lines = content.splitlines(keepends=True)
    index = 0
    fence = None
    while index < len(lines):
        heading = None if fence else _heading_at(lines, index)
        if heading is None:
            fence = _update_fence(lines[index], fence)
            index += 1
            continue

        level, title, consumed = heading
        index += consumed
        if not _LICENSE_TITLE.match(title):
            continue

        section = []
        while index < len(lines):
            if fence is None:
                next_heading = _heading_at(lines, index)
                if next_heading is not None and next_heading[0] <= level:
                    break
            fence = _update_fence(lines[index], fence)
            section.append(lines[index])
            index += 1

        text = "".join(section).lstrip("\r\n").rstrip()
        return text or None

    return None


def find_readme_license(path: Path) -> Optional[EvidenceItem]:
    """Find the README in ``path`` and return its license section, if any."""
    config = get_config().detection
    for file_path in list_files(path):
        if not is_readme_filename(file_path.name, config):
            continue
        content = read_text_file(file_path)
        if content is None:
            return None
        section = extract_license_section(content)
        if section is None:
            return None
        return EvidenceItem(EvidenceClass.README, file_path.name, section)
    return None


def collect_declared_licenses(path: Path, metadata_license=None) -> List[EvidenceItem]:
    """
    Collect package-manager license declarations.

    The item text is the declared license string, not file content; these
    items take part in resolution only.
    """
    declarations = extract_declared_licenses(path)
    metadata_declaration = declared_metadata_license(metadata_license)
    if metadata_declaration is not None:
        declarations.append(metadata_declaration)

    return [
        EvidenceItem(EvidenceClass.PACKAGE_MANAGER, declaration.source, declaration.value)
        for declaration in declarations
    ]


def collect_evidence(
    path: Path,
    search_root: Optional[Path] = None,
    metadata_license=None,
    additional_files: Iterable[Path] = (),
) -> Evidence:
    """Collect every class of evidence for a dependency root."""
    evidence = Evidence(
        license_files=collect_license_files(path, search_root, additional_files),
        notice_files=collect_notice_files(path),
        readme=find_readme_license(path),
        declared=collect_declared_licenses(path, metadata_license),
    )

    get_evidence_logger().debug(
        "evidence_collected",
        path=str(path),
        license_files=[item.source for item in evidence.license_files],
        notice_files=[item.source for item in evidence.notice_files],
        readme=evidence.readme.source if evidence.readme else None,
        declared=[item.source for item in evidence.declared],
    )
    return evidence
