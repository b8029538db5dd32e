"""
Package manifest license extraction.

Reads the license a package declares in its own manifest. Each parser returns
the raw declared string, or None if the manifest makes no license assertion.
Several declared licenses are joined into an SPDX ``OR`` expression.
Malformed manifests are reported and treated as making no assertion.
"""

import configparser
import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import toml
from license_expression import ExpressionError, Licensing, combine_expressions

from .error_handling import log_parsing_error
from .files import list_files, read_text_file

_licensing = Licensing()

# Ruby gemspecs commonly freeze the literal: spec.license = "MIT".freeze
_GEMSPEC_LICENSE = re.compile(
    r"^\s*[a-z0-9_]+\.license\s*=\s*['\"]([^'\"]+)['\"](?:\.freeze)?\s*$",
    re.IGNORECASE | re.MULTILINE,
)
_GEMSPEC_LICENSES = re.compile(
    r"^\s*[a-z0-9_]+\.licenses\s*=\s*\[(.*)\](?:\.freeze)?\s*$",
    re.IGNORECASE | re.MULTILINE,
)
_QUOTED = re.compile(r"['\"]([^'\"]+)['\"]")
_DESCRIPTION_LICENSE = re.compile(r"^License:\s*(.+)$", re.MULTILINE)


@dataclass(frozen=True)
class DeclaredLicense:
    """A license asserted by a package manifest."""

    source: str
    value: str


def _join_declarations(values: List[str]) -> Optional[str]:
    """Combine declared licenses into one SPDX expression, any of which applies."""
    values = [value.strip() for value in values if isinstance(value, str) and value.strip()]
    unique = list(dict.fromkeys(values))
    if len(unique) <= 1:
        return unique[0] if unique else None

    try:
        return str(combine_expressions(unique, relation="OR", licensing=_licensing))
    except ExpressionError:
        # Free-form names such as "Apache License 2.0" are kept verbatim
        return " OR ".join(unique)


def parse_gemspec(content: str) -> Optional[str]:
    """Extract ``spec.license = "x"`` or ``spec.licenses = ["x", "y"]``."""
    match = _GEMSPEC_LICENSE.search(content)
    if match:
        return match.group(1)

    match = _GEMSPEC_LICENSES.search(content)
    if match:
        return _join_declarations(_QUOTED.findall(match.group(1)))

    return None


def parse_package_json(content: str) -> Optional[str]:
    """
    Extract the license from package.json or bower.json.

    Handles the ``"license": "MIT"`` string form, the legacy
    ``"license": {"type": "MIT"}`` object and the deprecated
    ``"licenses": [{"type": "MIT"}]`` array.
    """
    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError("manifest must contain a JSON object")

    license_field = data.get("license")
    if isinstance(license_field, str):
        return _join_declarations([license_field])
    if isinstance(license_field, dict):
        return _join_declarations([license_field.get("type", "")])

    licenses = data.get("licenses")
    if isinstance(licenses, list):
        return _join_declarations(
            [entry.get("type", "") if isinstance(entry, dict) else entry for entry in licenses]
        )

    return None


def parse_cargo_toml(content: str) -> Optional[str]:
    """Extract ``[package] license`` from Cargo.toml."""
    data = toml.loads(content)
    package = data.get("package", {})
    if isinstance(package, dict) and isinstance(package.get("license"), str):
        return _join_declarations([package["license"]])
    return None


def parse_pyproject_toml(content: str) -> Optional[str]:
    """
    Extract the license from pyproject.toml.

    Checks ``[project] license`` as a string (PEP 639), the legacy
    ``license = {text = "..."}`` table when its text is a short identifier,
    and ``[tool.poetry] license``.
    """
    data = toml.loads(content)

    project = data.get("project", {})
    if isinstance(project, dict):
        license_field = project.get("license")
        if isinstance(license_field, str):
            return _join_declarations([license_field])
        if isinstance(license_field, dict):
            text = license_field.get("text", "")
            if isinstance(text, str) and "\n" not in text.strip() and len(text) <= 100:
                return _join_declarations([text])

    poetry = data.get("tool", {}).get("poetry", {})
    if isinstance(poetry, dict) and isinstance(poetry.get("license"), str):
        return _join_declarations([poetry["license"]])

    return None


def parse_setup_cfg(content: str) -> Optional[str]:
    """Extract ``[metadata] license`` from setup.cfg."""
    parser = configparser.ConfigParser(interpolation=None)
    parser.read_string(content)
    if parser.has_option("metadata", "license"):
        return _join_declarations([parser.get("metadata", "license")])
    return None


def parse_r_description(content: str) -> Optional[str]:
    """Extract the ``License:`` field of an R package DESCRIPTION file."""
    match = _DESCRIPTION_LICENSE.search(content)
    if not match:
        return None
    value = re.sub(r"\s*\+\s*file\s+LICEN[SC]E\s*$", "", match.group(1).strip())
    return _join_declarations(value.split("|"))


MANIFEST_PARSERS: Dict[str, Callable[[str], Optional[str]]] = {
    "package.json": parse_package_json,
    "bower.json": parse_package_json,
    "cargo.toml": parse_cargo_toml,
    "pyproject.toml": parse_pyproject_toml,
    "setup.cfg": parse_setup_cfg,
    "description": parse_r_description,
}


def detect_manifest_type(filename: str) -> Optional[str]:
    """
    Detect the manifest parser key for a filename.

    Args:
        filename: Base name of the file

    Returns:
        Optional[str]: Parser key, or None if the file is not a manifest
    """
    lowered = filename.lower()
    if lowered.endswith(".gemspec"):
        return "gemspec"
    if lowered in MANIFEST_PARSERS:
        return lowered
    return None


def _get_parser(manifest_type: str) -> Callable[[str], Optional[str]]:
    if manifest_type == "gemspec":
        return parse_gemspec
    return MANIFEST_PARSERS[manifest_type]


def extract_declared_licenses(directory: Path) -> List[DeclaredLicense]:
    """
    Collect license declarations from the manifests in a directory.

    Args:
        directory: Directory to scan (not recursive)

    Returns:
        List[DeclaredLicense]: One entry per manifest with a license assertion
    """
    declarations = []
    for file_path in list_files(directory):
        manifest_type = detect_manifest_type(file_path.name)
        if manifest_type is None:
            continue

        content = read_text_file(file_path)
        if content is None:
            continue

        try:
            value = _get_parser(manifest_type)(content)
        except (ValueError, TypeError, AttributeError, toml.TomlDecodeError, configparser.Error) as e:
            log_parsing_error(
                f"Could not read license from manifest: {e}",
                "manifests",
                "extract_declared_licenses",
                file_path=str(file_path),
                exception=e,
            )
            continue

        if value:
            declarations.append(DeclaredLicense(source=file_path.name, value=value))

    return declarations


def declared_metadata_license(metadata_license: Any) -> Optional[DeclaredLicense]:
    """Wrap a license supplied through dependency metadata."""
    if isinstance(metadata_license, (list, tuple)):
        value = _join_declarations(list(metadata_license))
    elif isinstance(metadata_license, str):
        value = _join_declarations([metadata_license])
    else:
        value = None
    return DeclaredLicense(source="metadata", value=value) if value else None
