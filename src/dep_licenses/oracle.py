"""
License-matching oracle.

The detection core only needs one capability from a matcher: given some text,
name the license it contains. ``LicenseOracle`` is that interface;
``CorpusLicenseOracle`` is the default implementation, matching against the
SPDX license list with ``spdx_lookup``.
"""

import re
from abc import ABC, abstractmethod
from typing import Optional

import spdx_lookup

from .config import get_config
from .license_corpus import (
    LICENSE_ALIASES,
    NO_LICENSE_KEY,
    OTHER_KEY,
    license_key,
    parse_spdx_expression,
)
from .structured_logging import get_oracle_logger

# Lines a copyright-only file may consist of
_COPYRIGHT_ONLY_LINE = re.compile(
    r"^\s*((copyright|\(c\)|©)\s.*|all rights reserved\.?)\s*$", re.IGNORECASE
)

# Texts that reference a license instead of reproducing it
_LICENSE_REFERENCES = {
    'Licensed under the Apache License, Version 2.0 (the "License")': "Apache-2.0",
    "This LICENSE AGREEMENT is between the Python Software Foundation": "Python-2.0",
}


def is_copyright_only(text: str) -> bool:
    lines = [line for line in text.splitlines() if line.strip()]
    return bool(lines) and all(_COPYRIGHT_ONLY_LINE.match(line) for line in lines)


class LicenseOracle(ABC):
    """Classifies text against a corpus of known licenses."""

    @abstractmethod
    def match(self, text: str) -> Optional[str]:
        """
        Classify license text.

        Args:
            text: Arbitrary text from a license file or README section

        Returns:
            Optional[str]: License key, ``no-license`` for copyright-only
            text, or None when the text is not recognised
        """

    def normalize_key(self, declared: str) -> str:
        """Map a declared license identifier to a license key."""
        return declared.strip().lower() or OTHER_KEY


class CorpusLicenseOracle(LicenseOracle):
    """Default oracle backed by the SPDX license list."""

    def __init__(self, min_confidence: Optional[float] = None):
        """
        Initialize the oracle.

        Args:
            min_confidence: Lowest ``spdx_lookup`` match confidence accepted,
                as a fraction (defaults to ``matching.min_confidence``)
        """
        self.min_confidence = (
            min_confidence
            if min_confidence is not None
            else get_config().matching.min_confidence
        )
        self.logger = get_oracle_logger()

    def _lookup(self, text: str):
        for reference, spdx_id in _LICENSE_REFERENCES.items():
            if reference in text:
                return spdx_lookup.LicenseMatch(100.0, spdx_lookup.by_id(spdx_id), None)

        match = spdx_lookup.match(text)
        if not match and "\n\n" in text:
            # Retry without the first paragraph, usually a title or copyright line
            match = spdx_lookup.match(text[text.index("\n\n") + 2 :])
        return match

    def match(self, text: str) -> Optional[str]:
        if not text or not text.strip():
            return None
        if is_copyright_only(text):
            return NO_LICENSE_KEY

        match = self._lookup(text.strip())
        if not match or not match.license:
            return None

        confidence = match.confidence / 100.0
        if confidence < self.min_confidence:
            self.logger.debug(
                "oracle_rejected",
                spdx_id=match.license.id,
                confidence=round(confidence, 4),
            )
            return None

        key = license_key(match.license.id)
        self.logger.debug(
            "oracle_match", license_key=key, confidence=round(confidence, 4)
        )
        return key

    def normalize_key(self, declared: str) -> str:
        if not declared or not declared.strip():
            return OTHER_KEY

        lookup = declared.strip()
        trimmed = re.sub(r"^the\s+", "", lookup.lower())
        trimmed = re.sub(r"\s+licen[sc]e$", "", trimmed)

        for candidate in (lookup.lower(), trimmed):
            if candidate in LICENSE_ALIASES:
                return LICENSE_ALIASES[candidate]

        for candidate in (lookup, trimmed):
            parsed = parse_spdx_expression(candidate)
            if parsed is None:
                continue
            keys, unknown = parsed
            if not keys or unknown:
                continue
            # Compound expressions name more than one license
            return license_key(keys[0]) if len(keys) == 1 else OTHER_KEY
        return OTHER_KEY


# Global oracle instance
_license_oracle: Optional[LicenseOracle] = None


def get_license_oracle() -> LicenseOracle:
    """Get the process-wide license oracle."""
    global _license_oracle
    if _license_oracle is None:
        _license_oracle = CorpusLicenseOracle()
    return _license_oracle


def set_license_oracle(oracle: Optional[LicenseOracle]) -> None:
    """Replace the process-wide license oracle (None restores the default)."""
    global _license_oracle
    _license_oracle = oracle
