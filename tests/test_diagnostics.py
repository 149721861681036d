"""Tests for k4a_installer.core.diagnostics — tags, categories, accumulator."""

from __future__ import annotations

import pytest

from k4a_installer.core.diagnostics import (
    DiagnosticAccumulator,
    FailureCategory,
    FailureTag,
    category_for,
)


# ---------------------------------------------------------------------------
# category_for / FailureTag.of
# ---------------------------------------------------------------------------

class TestCategoryFor:
    @pytest.mark.parametrize("category", list(FailureCategory))
    def test_every_category_name_resolves_to_itself(self, category):
        assert category_for(category.value) is category

    @pytest.mark.parametrize(
        "tag,expected",
        [
            ("graphics-lib-libGLU.so", FailureCategory.GRAPHICS_LIBS),
            ("openssl-command", FailureCategory.SSL),
            ("libssl", FailureCategory.SSL),
            ("ninja-command", FailureCategory.NINJA),
            ("libsoundio", FailureCategory.SOUNDIO),
            ("udev-copy", FailureCategory.UDEV),
            ("udev-missing", FailureCategory.UDEV),
            ("udev-sdk-not-cloned", FailureCategory.UDEV),
            ("microsoft-repo-list", FailureCategory.MICROSOFT_REPO),
            ("libk4a-package", FailureCategory.K4A_PACKAGES),
            ("k4a-tools", FailureCategory.K4A_PACKAGES),
            ("sdk-install", FailureCategory.SDK_BUILD),
            ("cmake-command", FailureCategory.NINJA),
            ("git-command", FailureCategory.NINJA),
        ],
    )
    def test_tag_families(self, tag, expected):
        assert category_for(tag) is expected

    def test_udev_sub_tags_collapse_to_one_category(self):
        tags = ["udev-copy", "udev-missing", "udev-sdk-not-cloned"]
        assert {category_for(t) for t in tags} == {FailureCategory.UDEV}

    def test_family_matches_anywhere_in_name(self):
        assert category_for("missing-depthengine") is FailureCategory.DEPTHENGINE
        assert category_for("x-udev") is FailureCategory.UDEV

    def test_udev_family_wins_over_sdk(self):
        assert category_for("udev-sdk-not-cloned") is FailureCategory.UDEV

    def test_unknown_name_returns_none(self):
        assert category_for("flux-capacitor") is None


class TestFailureTag:
    def test_of_resolves_category(self):
        tag = FailureTag.of("graphics-lib-libSDL2.so")
        assert tag.name == "graphics-lib-libSDL2.so"
        assert tag.category is FailureCategory.GRAPHICS_LIBS

    def test_of_unknown_raises(self):
        with pytest.raises(ValueError, match="No failure category"):
            FailureTag.of("flux-capacitor")

    def test_str_is_name(self):
        assert str(FailureTag.of("depthengine")) == "depthengine"

    def test_tags_are_hashable_and_equal_by_value(self):
        assert FailureTag.of("libssl") == FailureTag.of("libssl")
        assert len({FailureTag.of("libssl"), FailureTag.of("libssl")}) == 1


# ---------------------------------------------------------------------------
# DiagnosticAccumulator
# ---------------------------------------------------------------------------

class TestDiagnosticAccumulator:
    def test_starts_empty(self):
        acc = DiagnosticAccumulator()
        assert acc.is_empty()
        assert len(acc) == 0

    def test_preserves_insertion_order_and_duplicates(self):
        acc = DiagnosticAccumulator()
        for name in ["udev-missing", "depthengine", "udev-missing"]:
            acc.append(FailureTag.of(name))
        assert acc.names == ["udev-missing", "depthengine", "udev-missing"]
        assert len(acc) == 3

    def test_contains_is_substring_match(self):
        acc = DiagnosticAccumulator([FailureTag.of("udev-sdk-not-cloned")])
        assert acc.contains("udev")
        assert acc.contains("sdk")
        assert not acc.contains("depthengine")

    def test_matching_returns_tags_in_order(self):
        acc = DiagnosticAccumulator([
            FailureTag.of("libk4a-package"),
            FailureTag.of("depthengine"),
            FailureTag.of("k4a-tools"),
        ])
        assert [t.name for t in acc.matching("k4a")] == ["libk4a-package", "k4a-tools"]

    def test_has_any_is_exact_match(self):
        acc = DiagnosticAccumulator([FailureTag.of("sdk-install")])
        assert acc.has_any(["sdk-clone", "sdk-install"])
        assert not acc.has_any(["sdk"])

    def test_categories_distinct_in_detection_order(self):
        acc = DiagnosticAccumulator([
            FailureTag.of("udev-missing"),
            FailureTag.of("graphics-lib-libGLU.so"),
            FailureTag.of("udev-copy"),
        ])
        assert acc.categories() == [FailureCategory.UDEV, FailureCategory.GRAPHICS_LIBS]

    def test_iterates_tags(self):
        tags = [FailureTag.of("libssl"), FailureTag.of("libsoundio")]
        assert list(DiagnosticAccumulator(tags)) == tags

    def test_constructor_copies_input(self):
        tags = [FailureTag.of("libssl")]
        acc = DiagnosticAccumulator(tags)
        tags.append(FailureTag.of("depthengine"))
        assert len(acc) == 1
