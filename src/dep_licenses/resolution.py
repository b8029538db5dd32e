"""
License resolution policy.

Combines evidence into exactly one license key. The policy is conservative:
every license file, the README license section and every manifest
declaration yields a candidate key, and any disagreement between candidates
resolves to ``other``. Nothing is guessed from disagreeing declarations.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from .evidence import Evidence, EvidenceItem
from .license_corpus import NO_LICENSE_KEY, NONE_KEY, OTHER_KEY
from .oracle import LicenseOracle
from .structured_logging import log_license_conflict, log_license_resolved


class ResolutionKind(Enum):
    """Outcome classes of license resolution."""

    CONCRETE = "concrete"  # One license identified
    UNRESOLVED = "unresolved"  # Evidence found but unrecognised or conflicting
    ABSENT = "absent"  # No evidence at all


@dataclass(frozen=True)
class LicenseResolution:
    """Resolved license of a dependency; ``str()`` gives the license key."""

    kind: ResolutionKind
    key: Optional[str] = None

    @classmethod
    def concrete(cls, key: str) -> "LicenseResolution":
        if key in (OTHER_KEY, NONE_KEY):
            return cls.unresolved() if key == OTHER_KEY else cls.absent()
        return cls(ResolutionKind.CONCRETE, key)

    @classmethod
    def unresolved(cls) -> "LicenseResolution":
        return cls(ResolutionKind.UNRESOLVED)

    @classmethod
    def absent(cls) -> "LicenseResolution":
        return cls(ResolutionKind.ABSENT)

    @property
    def license_key(self) -> str:
        if self.kind == ResolutionKind.CONCRETE:
            return self.key
        if self.kind == ResolutionKind.UNRESOLVED:
            return OTHER_KEY
        return NONE_KEY

    def __str__(self) -> str:
        return self.license_key


def classify_text(item: EvidenceItem, oracle: LicenseOracle) -> str:
    """Classify license text; unrecognised text is ``other``."""
    return oracle.match(item.text) or OTHER_KEY


def candidate_keys(evidence: Evidence, oracle: LicenseOracle) -> Dict[str, str]:
    """
    Compute the candidate key contributed by each evidence source.

    Identical texts are classified once.

    Returns:
        Dict[str, str]: Source identifier to license key, in evidence order
    """
    candidates: Dict[str, str] = {}
    classified: Dict[str, str] = {}

    text_items: List[EvidenceItem] = list(evidence.license_files)
    if evidence.readme is not None:
        text_items.append(evidence.readme)

    for item in text_items:
        lookup = item.text.rstrip()
        if lookup not in classified:
            classified[lookup] = classify_text(item, oracle)
        candidates[item.source] = classified[lookup]

    for item in evidence.declared:
        candidates[f"{item.source} (declared)"] = oracle.normalize_key(item.text)

    return candidates


def resolve_license(
    evidence: Evidence, oracle: LicenseOracle, dependency_name: str = ""
) -> LicenseResolution:
    """
    Resolve evidence to a single license.

    One distinct key across all sources gives that key, more than one gives
    ``other`` and none gives ``none``. Copyright-only texts (``no-license``)
    carry no license information and are ignored next to other evidence; when
    they are the only evidence the license is ``other``, since evidence exists
    but names no license.
    """
    candidates = candidate_keys(evidence, oracle)
    keys = list(dict.fromkeys(key for key in candidates.values() if key != NO_LICENSE_KEY))

    if not candidates:
        resolution = LicenseResolution.absent()
    elif not keys:
        resolution = LicenseResolution.unresolved()
    elif len(keys) == 1:
        resolution = LicenseResolution.concrete(keys[0])
    else:
        log_license_conflict(dependency_name, candidates)
        resolution = LicenseResolution.unresolved()

    log_license_resolved(dependency_name, resolution.license_key, len(candidates))
    return resolution
