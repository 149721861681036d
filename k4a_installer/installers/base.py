"""InstallVariant — abstract base class and the step toolkit variants share."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from k4a_installer.core import probes as probe_library
from k4a_installer.core.diagnostics import FailureCategory, FailureTag
from k4a_installer.core.executor import CommandExecutor
from k4a_installer.core.models import HostEnvironment, ProbeResult, StepOutcome
from k4a_installer.core.output import StatusPrinter
from k4a_installer.core.report import ReportConfig

SDK_DIR_NAME = "Azure-Kinect-Sensor-SDK"


@dataclass
class InstallSettings:
    work_dir: str = "."
    sdk_repo_url: str = "https://github.com/microsoft/Azure-Kinect-Sensor-SDK.git"
    depthengine_url: str = (
        "https://www.nuget.org/api/v2/package/Microsoft.Azure.Kinect.Sensor/1.4.1"
    )

    @property
    def sdk_dir(self) -> str:
        return os.path.join(self.work_dir, SDK_DIR_NAME)

    @property
    def downloads_dir(self) -> str:
        return os.path.join(self.work_dir, "downloads")


@dataclass
class StepContext:
    """Everything a step body may touch. Probes are swappable for tests."""

    environment: HostEnvironment
    executor: CommandExecutor
    printer: StatusPrinter
    settings: InstallSettings = field(default_factory=InstallSettings)
    probes: Any = probe_library

    def check_library(
        self,
        lib: str,
        tag: FailureTag,
        missing: str = "not found in ldconfig cache (may still work)",
    ) -> ProbeResult:
        if self.probes.library_registered(lib):
            self.printer.success(f"  {lib} found")
            return ProbeResult(passed=True, tag=tag, label=lib)
        self.printer.warning(f"  {lib} {missing}")
        return ProbeResult(passed=False, tag=tag, label=lib)

    def check_command(
        self,
        command: str,
        tag: FailureTag,
        version_args: Optional[list[str]] = None,
    ) -> ProbeResult:
        if self.probes.command_available(command):
            self.printer.success(f"  {command} command available")
            if version_args:
                result = self.executor.run([command] + version_args)
                if result.success and result.stdout.strip():
                    self.printer.text(result.stdout.strip())
            return ProbeResult(passed=True, tag=tag, label=command)
        self.printer.error(f"  {command} command not found")
        return ProbeResult(passed=False, tag=tag, label=command)

    def check_package(self, package: str, tag: FailureTag) -> ProbeResult:
        if self.probes.package_installed(package):
            self.printer.success(f"  {package} package installed")
            return ProbeResult(passed=True, tag=tag, label=package)
        self.printer.warning(f"  {package} package not installed")
        return ProbeResult(passed=False, tag=tag, label=package)

    def check_file(self, path: str, tag: FailureTag, label: str) -> ProbeResult:
        if self.probes.file_present(path):
            self.printer.success(f"  {label} found at {path}")
            return ProbeResult(passed=True, tag=tag, label=label)
        self.printer.warning(f"  {label} not found at {path}")
        return ProbeResult(passed=False, tag=tag, label=label)


StepBody = Callable[[StepContext], StepOutcome]
ProbeFn = Callable[[StepContext], ProbeResult]


@dataclass(frozen=True)
class Step:
    title: str
    body: StepBody
    category: FailureCategory


def package_step(
    title: str,
    packages: list[str],
    category: FailureCategory,
    label: str,
    checks: Optional[list[ProbeFn]] = None,
) -> Step:
    """A step that installs ``packages`` and then runs post-install checks."""

    def body(ctx: StepContext) -> StepOutcome:
        result = ctx.executor.install_packages(packages)
        if not result.success:
            return StepOutcome.failed(category, f"Failed to install {label}", result)
        ctx.printer.success(f"{label} installed")
        if not checks:
            return StepOutcome()
        ctx.printer.info(f"Testing {label} installation...")
        return StepOutcome(probes=[check(ctx) for check in checks])

    return Step(title=title, body=body, category=category)


@dataclass
class VariantInfo:
    identifier: str
    name: str
    description: str


class InstallVariant(ABC):
    @abstractmethod
    def get_info(self) -> VariantInfo: ...

    @abstractmethod
    def build_steps(self, settings: InstallSettings) -> list[Step]: ...

    @abstractmethod
    def get_report_config(self, settings: InstallSettings) -> ReportConfig: ...
