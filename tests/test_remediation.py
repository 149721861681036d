"""Tests for k4a_installer.core.remediation — static advice lookup."""

from __future__ import annotations

import pytest

from k4a_installer.core.diagnostics import FailureCategory, FailureTag
from k4a_installer.core.remediation import REMEDIATION, remediate


class TestCatalog:
    def test_every_category_has_advice(self):
        assert set(REMEDIATION) == set(FailureCategory)

    @pytest.mark.parametrize("category", list(FailureCategory))
    def test_advice_is_non_empty(self, category):
        assert remediate(category)

    def test_category_names_match_source_set(self):
        assert {c.value for c in FailureCategory} == {
            "apt-update", "graphics-libs", "ssl", "ninja", "soundio",
            "depthengine", "udev", "microsoft-repo", "k4a-packages",
            "sdk-clone", "sdk-build",
        }


class TestRemediate:
    def test_lookup_by_string(self):
        advice = remediate("depthengine")
        assert advice[0].startswith("Ensure you have write permissions")
        assert len(advice) == 4

    def test_lookup_by_tag_uses_category(self):
        assert remediate(FailureTag.of("udev-copy")) == remediate(FailureCategory.UDEV)

    def test_lookup_by_tag_name_uses_family(self):
        assert remediate("udev-sdk-not-cloned") == remediate("udev")

    def test_family_found_inside_name(self):
        assert remediate("missing-depthengine") == remediate(FailureCategory.DEPTHENGINE)

    def test_unknown_returns_empty_list(self):
        assert remediate("flux-capacitor") == []

    def test_deterministic(self):
        assert remediate("ssl") == remediate("ssl")

    def test_returns_copy(self):
        advice = remediate("ninja")
        advice.append("tampered")
        assert "tampered" not in remediate("ninja")
