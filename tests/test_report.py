"""Tests for k4a_installer.core.report — summary, remediation, impact."""

from __future__ import annotations

import io
from datetime import datetime

from rich.console import Console

from k4a_installer.core.diagnostics import (
    DiagnosticAccumulator,
    FailureCategory,
    FailureTag,
)
from k4a_installer.core.output import StatusPrinter
from k4a_installer.core.report import (
    IMPACT_RULES,
    ReportConfig,
    Reporter,
    categories_to_remediate,
)

STAMP = datetime(2024, 3, 5, 14, 7, 9)

MINIMAL = ReportConfig(
    filters=["depthengine", "udev"],
    next_steps=["Connect your Azure Kinect device"],
)
FULL = ReportConfig(filters=["depthengine", "udev", "k4a", "sdk"], impact_summary=True)


def _acc(*names):
    return DiagnosticAccumulator([FailureTag.of(n) for n in names])


def _render(config, accumulator):
    buf = io.StringIO()
    console = Console(file=buf, width=200, force_terminal=False, color_system=None)
    Reporter(StatusPrinter(console), config).render(accumulator, completed_at=STAMP)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# categories_to_remediate
# ---------------------------------------------------------------------------

class TestCategoriesToRemediate:
    def test_follows_filter_order(self):
        acc = _acc("udev-missing", "depthengine")
        assert categories_to_remediate(acc, ["depthengine", "udev"]) == [
            FailureCategory.DEPTHENGINE,
            FailureCategory.UDEV,
        ]

    def test_unfiltered_tags_get_no_advice(self):
        acc = _acc("graphics-lib-libGLU.so", "libssl")
        assert categories_to_remediate(acc, ["depthengine", "udev"]) == []

    def test_each_category_once(self):
        acc = _acc("udev-copy", "udev-missing", "udev-sdk-not-cloned")
        assert categories_to_remediate(acc, ["udev", "sdk"]) == [FailureCategory.UDEV]

    def test_k4a_filter_covers_package_tags(self):
        acc = _acc("libk4a-package", "k4a-tools")
        assert categories_to_remediate(acc, ["k4a"]) == [FailureCategory.K4A_PACKAGES]

    def test_sdk_filter_covers_clone_and_build(self):
        acc = _acc("sdk-clone", "sdk-install")
        assert categories_to_remediate(acc, ["sdk"]) == [
            FailureCategory.SDK_CLONE,
            FailureCategory.SDK_BUILD,
        ]


# ---------------------------------------------------------------------------
# Reporter.render
# ---------------------------------------------------------------------------

class TestRenderSuccess:
    def test_all_checks_passed(self):
        out = _render(MINIMAL, DiagnosticAccumulator())
        assert "Installation Summary" in out
        assert "All dependency checks passed!" in out
        assert "Next steps:" in out
        assert "1. Connect your Azure Kinect device" in out
        assert "warning(s)/issue(s)" not in out
        assert "Action required" not in out

    def test_completion_stamp(self):
        out = _render(MINIMAL, DiagnosticAccumulator())
        assert "Installation log completed at Tue Mar 05 14:07:09 2024" in out


class TestRenderWarnings:
    def test_graphics_only_lists_tag_without_advice(self):
        out = _render(MINIMAL, _acc("graphics-lib-libGLU.so"))
        assert "Installation completed with 1 warning(s)/issue(s):" in out
        assert "- graphics-lib-libGLU.so" in out
        assert "Action required" not in out
        assert "Suggested solutions" not in out
        assert "All dependency checks passed!" not in out

    def test_depthengine_prints_advice(self):
        out = _render(MINIMAL, _acc("depthengine"))
        assert "Action required:" in out
        assert "Suggested solutions for depthengine:" in out
        assert "1. Ensure you have write permissions" in out

    def test_advice_printed_in_filter_order(self):
        out = _render(MINIMAL, _acc("udev-missing", "depthengine"))
        assert out.index("solutions for depthengine") < out.index("solutions for udev")

    def test_udev_advice_printed_once(self):
        out = _render(FULL, _acc("udev-sdk-not-cloned", "udev-copy"))
        assert out.count("Suggested solutions for udev:") == 1

    def test_tag_count_includes_duplicates(self):
        out = _render(MINIMAL, _acc("udev-missing", "udev-missing"))
        assert "completed with 2 warning(s)/issue(s)" in out

    def test_minimal_config_has_no_impact_section(self):
        out = _render(MINIMAL, _acc("depthengine"))
        assert "Functionality impact" not in out

    def test_render_is_idempotent(self):
        acc = _acc("depthengine", "udev-missing", "sdk-build")
        assert _render(FULL, acc) == _render(FULL, acc)
        assert len(acc) == 3


# ---------------------------------------------------------------------------
# Impact rules
# ---------------------------------------------------------------------------

class TestImpact:
    def test_all_functional_when_clean(self):
        out = _render(FULL, DiagnosticAccumulator())
        assert "Functionality impact:" in out
        assert out.count("FUNCTIONAL") == len(IMPACT_RULES)

    def test_depthengine_only(self):
        out = _render(FULL, _acc("depthengine"))
        assert "Depth processing: MAY NOT WORK" in out
        assert "Device access: FUNCTIONAL" in out
        assert "Core SDK library (libk4a): FUNCTIONAL" in out

    def test_build_failure_makes_tools_unavailable(self):
        out = _render(FULL, _acc("sdk-install"))
        assert "Viewer and recorder tools (k4aviewer, k4arecorder): NOT AVAILABLE" in out

    def test_udev_requires_root(self):
        out = _render(FULL, _acc("udev-copy"))
        assert "Device access: ROOT REQUIRED" in out

    def test_libk4a_may_not_work(self):
        out = _render(FULL, _acc("libk4a-dev-package"))
        assert "Core SDK library (libk4a): MAY NOT WORK" in out

    def test_rules_evaluated_in_order(self):
        out = _render(FULL, DiagnosticAccumulator())
        positions = [out.index(rule.capability) for rule in IMPACT_RULES]
        assert positions == sorted(positions)

    def test_k4a_tools_tag_does_not_trip_libk4a_rule(self):
        status, _ = IMPACT_RULES[0].evaluate(_acc("k4a-tools"))
        assert status == "FUNCTIONAL"


class TestPrintRemediation:
    def test_prints_numbered_advice(self, printer, output):
        Reporter(printer, MINIMAL).print_remediation(FailureCategory.NINJA)
        text = output.getvalue()
        assert "Suggested solutions for ninja:" in text
        assert "1. Try alternative installation: sudo pip3 install ninja" in text
