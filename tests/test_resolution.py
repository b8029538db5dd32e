"""
Resolution policy tests for dep-licenses.
Uses a fake oracle so the policy is tested in isolation from text matching.
"""

import pytest

from dep_licenses.contents import aggregate
from dep_licenses.evidence import Evidence, EvidenceClass, EvidenceItem
from dep_licenses.resolution import (
    LicenseResolution,
    ResolutionKind,
    candidate_keys,
    resolve_license,
)


def license_file(source, text):
    return EvidenceItem(EvidenceClass.LICENSE_FILE, source, text)


def readme(text):
    return EvidenceItem(EvidenceClass.README, "README.md", text)


def declared(value, source="package.json"):
    return EvidenceItem(EvidenceClass.PACKAGE_MANAGER, source, value)


@pytest.fixture
def oracle(fake_oracle):
    fake_oracle.texts = {
        "mit text": "mit",
        "bsd text": "bsd-3-clause",
        "copyright line": "no-license",
    }
    return fake_oracle


class TestLicenseResolution:
    """Test the closed resolution type."""

    def test_serialization(self):
        assert str(LicenseResolution.concrete("mit")) == "mit"
        assert str(LicenseResolution.unresolved()) == "other"
        assert str(LicenseResolution.absent()) == "none"

    def test_sentinel_keys_map_to_kinds(self):
        assert LicenseResolution.concrete("other").kind == ResolutionKind.UNRESOLVED
        assert LicenseResolution.concrete("none").kind == ResolutionKind.ABSENT


class TestResolveLicense:
    """Test the any-conflict-is-other policy."""

    def test_no_evidence(self, oracle):
        assert str(resolve_license(Evidence(), oracle)) == "none"

    def test_single_license_file(self, oracle):
        evidence = Evidence(license_files=[license_file("LICENSE", "mit text")])
        assert resolve_license(evidence, oracle) == LicenseResolution.concrete("mit")

    def test_identical_license_files_classified_once(self, oracle):
        evidence = Evidence(
            license_files=[license_file("LICENSE", "mit text"), license_file("LICENSE.md", "mit text\n")]
        )
        assert str(resolve_license(evidence, oracle)) == "mit"
        assert len(oracle.calls) == 1

    def test_disagreeing_license_files(self, oracle):
        evidence = Evidence(
            license_files=[license_file("LICENSE", "mit text"), license_file("LICENSE.md", "bsd text")]
        )
        assert str(resolve_license(evidence, oracle)) == "other"

    def test_unrecognised_license_file(self, oracle):
        evidence = Evidence(license_files=[license_file("LICENSE", "garbled")])
        assert str(resolve_license(evidence, oracle)) == "other"

    def test_readme_only(self, oracle):
        assert str(resolve_license(Evidence(readme=readme("bsd text")), oracle)) == "bsd-3-clause"

    def test_declared_only_is_normalized(self, oracle):
        assert str(resolve_license(Evidence(declared=[declared("MIT")]), oracle)) == "mit"

    def test_agreement_across_classes(self, oracle):
        evidence = Evidence(
            license_files=[license_file("LICENSE", "mit text")],
            readme=readme("mit text"),
            declared=[declared("mit")],
        )
        assert str(resolve_license(evidence, oracle)) == "mit"

    def test_declared_disagrees_with_license_file(self, oracle):
        evidence = Evidence(
            license_files=[license_file("LICENSE", "mit text")],
            declared=[declared("bsd-3-clause")],
        )
        assert str(resolve_license(evidence, oracle)) == "other"

    def test_readme_disagrees_with_license_file(self, oracle):
        evidence = Evidence(
            license_files=[license_file("LICENSE", "mit text")], readme=readme("bsd text")
        )
        assert str(resolve_license(evidence, oracle)) == "other"

    def test_unrecognised_file_with_declaration(self, oracle):
        """A declaration never overrides an unrecognised license file."""
        evidence = Evidence(
            license_files=[license_file("LICENSE.md", "See project.gemspec")],
            declared=[declared("mit", "project.gemspec")],
        )
        assert str(resolve_license(evidence, oracle)) == "other"

    def test_copyright_only_is_ignored(self, oracle):
        evidence = Evidence(
            license_files=[
                license_file("COPYRIGHT", "copyright line"),
                license_file("LICENSE", "mit text"),
            ]
        )
        assert str(resolve_license(evidence, oracle)) == "mit"

    def test_copyright_only_alone_is_other(self, oracle):
        evidence = Evidence(license_files=[license_file("COPYRIGHT", "copyright line")])
        resolution = resolve_license(evidence, oracle)
        assert str(resolution) == "other"
        assert resolution.kind == ResolutionKind.UNRESOLVED

    def test_candidate_keys(self, oracle):
        evidence = Evidence(
            license_files=[license_file("LICENSE", "mit text")],
            readme=readme("garbled"),
            declared=[declared("MIT")],
        )
        assert candidate_keys(evidence, oracle) == {
            "LICENSE": "mit",
            "README.md": "other",
            "package.json (declared)": "mit",
        }


class TestAggregate:
    """Test content aggregation."""

    def test_merges_identical_text(self):
        items = [
            license_file("LICENSE", "mit text\n"),
            license_file("COPYING", "bsd text"),
            license_file("LICENSE.md", "mit text"),
        ]
        assert aggregate(items) == [
            {"sources": "LICENSE, LICENSE.md", "text": "mit text\n"},
            {"sources": "COPYING", "text": "bsd text"},
        ]

    def test_duplicate_source_listed_once(self):
        items = [license_file("LICENSE", "a"), license_file("LICENSE", "a")]
        assert aggregate(items) == [{"sources": "LICENSE", "text": "a"}]

    def test_empty(self):
        assert aggregate([]) == []
