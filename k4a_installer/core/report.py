"""Final reporting pass — warnings, remediation and functionality impact."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from k4a_installer.core.diagnostics import DiagnosticAccumulator, FailureCategory
from k4a_installer.core.output import StatusPrinter
from k4a_installer.core.remediation import remediate

BUILD_FAILURE_TAGS = ("sdk-clone", "sdk-build", "sdk-install")


@dataclass(frozen=True)
class ImpactRule:
    capability: str
    degraded_status: str
    matches: Callable[[DiagnosticAccumulator], bool]
    degraded_notes: tuple[str, ...]
    functional_notes: tuple[str, ...]

    def evaluate(self, accumulator: DiagnosticAccumulator) -> tuple[str, tuple[str, ...]]:
        if self.matches(accumulator):
            return self.degraded_status, self.degraded_notes
        return "FUNCTIONAL", self.functional_notes


# Evaluated in this order; rules are independent of each other.
IMPACT_RULES: list[ImpactRule] = [
    ImpactRule(
        capability="Core SDK library (libk4a)",
        degraded_status="MAY NOT WORK",
        matches=lambda acc: acc.contains("libk4a"),
        degraded_notes=(
            "libk4a packages were not found in the package database",
            "Applications linking against libk4a may fail to start",
        ),
        functional_notes=("libk4a runtime and development packages are installed",),
    ),
    ImpactRule(
        capability="Viewer and recorder tools (k4aviewer, k4arecorder)",
        degraded_status="NOT AVAILABLE",
        matches=lambda acc: acc.has_any(BUILD_FAILURE_TAGS),
        degraded_notes=(
            "The SDK source build did not produce or install the tools",
            "Device streaming can still be tested from your own code",
        ),
        functional_notes=("Built from source and installed to the system path",),
    ),
    ImpactRule(
        capability="Depth processing",
        degraded_status="MAY NOT WORK",
        matches=lambda acc: acc.contains("depthengine"),
        degraded_notes=(
            "libdepthengine.so.2.0 is missing from the linker cache",
            "Color and IMU streams work; depth and IR streams fail to start",
            "Install the depth engine manually, then run: sudo ldconfig",
        ),
        functional_notes=("Depth engine library is registered",),
    ),
    ImpactRule(
        capability="Device access",
        degraded_status="ROOT REQUIRED",
        matches=lambda acc: acc.contains("udev"),
        degraded_notes=(
            "udev rules for the Azure Kinect are not installed",
            "Run tools with sudo until 99-k4a.rules is in /etc/udev/rules.d/",
        ),
        functional_notes=("Non-root users can open the device",),
    ),
]


@dataclass
class ReportConfig:
    """Per-variant report settings."""

    filters: list[str] = field(default_factory=list)
    impact_summary: bool = False
    next_steps: list[str] = field(default_factory=list)


def categories_to_remediate(
    accumulator: DiagnosticAccumulator, filters: list[str]
) -> list[FailureCategory]:
    """Categories whose advice the report prints, in filter order, each once."""
    selected: list[FailureCategory] = []
    for fragment in filters:
        for tag in accumulator.matching(fragment):
            if tag.category not in selected:
                selected.append(tag.category)
    return selected


class Reporter:
    """Renders the end-of-run summary."""

    def __init__(self, printer: StatusPrinter, config: ReportConfig):
        self.printer = printer
        self.config = config

    def render(
        self,
        accumulator: DiagnosticAccumulator,
        completed_at: Optional[datetime] = None,
    ) -> None:
        self.printer.console.print()
        self.printer.banner(["Installation Summary"])

        if accumulator.is_empty():
            self._render_success()
        else:
            self._render_warnings(accumulator)

        if self.config.impact_summary:
            self._render_impact(accumulator)

        stamp = (completed_at or datetime.now()).strftime("%a %b %d %H:%M:%S %Y")
        self.printer.heading(f"Installation log completed at {stamp}", style="blue")

    def _render_success(self) -> None:
        self.printer.success("All dependency checks passed!")
        if self.config.next_steps:
            self.printer.heading("Next steps:", style="green")
            self.printer.numbered(self.config.next_steps)

    def _render_warnings(self, accumulator: DiagnosticAccumulator) -> None:
        self.printer.warning(
            f"Installation completed with {len(accumulator)} warning(s)/issue(s):"
        )
        self.printer.bullets(accumulator.names)

        categories = categories_to_remediate(accumulator, self.config.filters)
        if not categories:
            return
        self.printer.heading("Action required:")
        for category in categories:
            self.print_remediation(category)

    def print_remediation(self, category: FailureCategory) -> None:
        advice = remediate(category)
        if not advice:
            return
        self.printer.heading(f"Suggested solutions for {category.value}:")
        self.printer.numbered(advice)

    def _render_impact(self, accumulator: DiagnosticAccumulator) -> None:
        self.printer.heading("Functionality impact:", style="bold")
        for rule in IMPACT_RULES:
            status, notes = rule.evaluate(accumulator)
            style = "green" if status == "FUNCTIONAL" else "yellow"
            self.printer.console.print(f"  {rule.capability}: [{style}]{status}[/]")
            self.printer.bullets(list(notes), indent="    ")
