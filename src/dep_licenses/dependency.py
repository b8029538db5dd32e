"""
Dependency license detection.

``Dependency`` is the entry point of the package: construct one per checked
out dependency and read ``record`` (or ``license_key``, ``license_contents``,
``notice_contents``). Every read rescans the checkout; nothing is cached.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .contents import aggregate
from .error_handling import ErrorCategory, get_error_handler
from .evidence import Evidence, collect_evidence, collect_notice_files
from .license_corpus import NONE_KEY
from .oracle import LicenseOracle, get_license_oracle
from .paths import validate_dependency_path
from .resolution import LicenseResolution, resolve_license
from .structured_logging import (
    clear_dependency_context,
    log_detection_skipped,
    set_dependency_context,
)

PATH_NOT_FOUND_ERROR = "dependency path not found"


@dataclass(frozen=True)
class DependencyMetadata:
    """Caller-supplied metadata. Only ``name`` and ``license`` are recognised."""

    name: Optional[str] = None
    license: Optional[Union[str, List[str]]] = None

    @classmethod
    def from_mapping(
        cls, metadata: Optional[Union[Mapping[str, Any], "DependencyMetadata"]]
    ) -> "DependencyMetadata":
        if metadata is None:
            return cls()
        if isinstance(metadata, DependencyMetadata):
            return metadata

        unknown = sorted(str(key) for key in metadata if key not in ("name", "license"))
        if unknown:
            get_error_handler().warning(
                ErrorCategory.VALIDATION,
                "Ignoring unknown metadata keys",
                "dependency",
                "from_mapping",
                details={"keys": unknown},
            )

        name = metadata.get("name")
        return cls(name=str(name) if name else None, license=metadata.get("license"))


@dataclass(frozen=True)
class DependencyRecord:
    """License record for one dependency."""

    license: str
    name: str
    version: str
    licenses: List[Dict[str, str]] = field(default_factory=list)
    notices: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the record to its serialized shape."""
        return {
            "license": self.license,
            "name": self.name,
            "version": self.version,
            "licenses": [dict(entry) for entry in self.licenses],
            "notices": [dict(entry) for entry in self.notices],
        }

    def __getitem__(self, key: str) -> Any:
        return self.to_dict()[key]


class Dependency:
    """
    A third-party dependency checked out on disk.

    Args:
        name: Dependency name, overridden by ``metadata["name"]``
        version: Dependency version
        path: Absolute path of the checkout; None or "" marks the
            dependency as erroring instead of raising
        search_root: Ancestor directory bounding the upward search for
            license files, defaults to ``path``
        metadata: Optional ``name`` and ``license`` values
        errors: Errors attached by the caller; any error disables detection
        oracle: License oracle, defaults to the process-wide oracle
        additional_license_files: Files always treated as license files,
            absolute or relative to ``path``

    Raises:
        InvalidDependencyPathError: If ``path`` or ``search_root`` is relative
    """

    def __init__(
        self,
        name: str,
        version: str,
        path: Optional[str],
        search_root: Optional[str] = None,
        metadata: Optional[Union[Mapping[str, Any], DependencyMetadata]] = None,
        errors: Optional[Iterable[Optional[str]]] = None,
        oracle: Optional[LicenseOracle] = None,
        additional_license_files: Optional[Iterable[Union[str, Path]]] = None,
    ):
        self.path = validate_dependency_path(path)
        self.search_root = validate_dependency_path(search_root) or self.path
        self.metadata = DependencyMetadata.from_mapping(metadata)
        self.name = self.metadata.name or name
        self.version = version
        self.errors: List[str] = [error for error in (errors or []) if error]
        if self.path is None:
            self.errors.append(PATH_NOT_FOUND_ERROR)

        self._oracle = oracle
        self.additional_license_files = [Path(f) for f in additional_license_files or []]

    def __repr__(self):
        return f"Dependency(name='{self.name}', version='{self.version}', path='{self.path}')"

    @property
    def oracle(self) -> LicenseOracle:
        return self._oracle or get_license_oracle()

    @property
    def has_errors(self) -> bool:
        """Whether detection is disabled by errors."""
        return len(self.errors) > 0

    @contextmanager
    def _logging_context(self):
        set_dependency_context(self.name, self.version)
        try:
            yield
        finally:
            clear_dependency_context()

    def _collect_evidence(self) -> Evidence:
        return collect_evidence(
            self.path,
            self.search_root,
            metadata_license=self.metadata.license,
            additional_files=self.additional_license_files,
        )

    def _skip(self) -> bool:
        if self.has_errors:
            log_detection_skipped(self.name, self.errors)
            return True
        return False

    @property
    def record(self) -> Optional[DependencyRecord]:
        """Fresh license record, or None if the dependency has errors."""
        if self._skip():
            return None

        with self._logging_context():
            evidence = self._collect_evidence()
            resolution = resolve_license(evidence, self.oracle, self.name)
        return DependencyRecord(
            license=str(resolution),
            name=self.name,
            version=self.version,
            licenses=aggregate(evidence.license_files),
            notices=aggregate(evidence.notice_files),
        )

    @property
    def license_resolution(self) -> LicenseResolution:
        """Resolved license as a ``LicenseResolution``."""
        if self._skip():
            return LicenseResolution.absent()
        with self._logging_context():
            return resolve_license(self._collect_evidence(), self.oracle, self.name)

    @property
    def license_key(self) -> str:
        """Detected license key, ``other`` or ``none``."""
        if self.has_errors:
            return NONE_KEY
        return str(self.license_resolution)

    @property
    def license_contents(self) -> List[Dict[str, str]]:
        """License texts from license files and the README license section."""
        if self._skip():
            return []

        evidence = self._collect_evidence()
        items = list(evidence.license_files)
        if evidence.readme is not None:
            items.append(evidence.readme)
        return aggregate(items)

    @property
    def notice_contents(self) -> List[Dict[str, str]]:
        """Legal notice texts."""
        if self._skip():
            return []
        return aggregate(collect_notice_files(self.path))
