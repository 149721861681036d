"""Core data models for k4a-installer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from k4a_installer.core.diagnostics import FailureCategory, FailureTag


@dataclass
class HostEnvironment:
    os_name: str
    os_version: str  # human readable, e.g. "Ubuntu 20.04.6 LTS"
    os_version_id: str  # from /etc/os-release, e.g. "20.04"
    architecture: str
    is_root: bool
    python_version: str
    package_manager: Optional[str] = None
    tools: dict[str, bool] = field(default_factory=dict)

    @property
    def sudo_prefix(self) -> list[str]:
        return [] if self.is_root else ["sudo"]

    @property
    def is_arm64(self) -> bool:
        return self.architecture in ("aarch64", "arm64")


@dataclass
class CommandResult:
    success: bool
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    error: str = ""


@dataclass
class ProbeResult:
    passed: bool
    tag: FailureTag
    label: str = ""


@dataclass
class FatalFailure:
    category: FailureCategory
    message: str
    exit_code: int = 1


@dataclass
class StepOutcome:
    probes: list[ProbeResult] = field(default_factory=list)
    fatal: Optional[FatalFailure] = None

    @classmethod
    def failed(
        cls,
        category: FailureCategory,
        message: str,
        result: Optional[CommandResult] = None,
    ) -> StepOutcome:
        exit_code = result.exit_code if result and result.exit_code else 1
        return cls(fatal=FatalFailure(category, message, exit_code))

    @property
    def soft_failures(self) -> list[ProbeResult]:
        return [p for p in self.probes if not p.passed]


@dataclass
class RunResult:
    exit_code: int
    total_steps: int
    steps_completed: int
    tags: list[FailureTag] = field(default_factory=list)
    failed_step: Optional[int] = None
    fatal_category: Optional[FailureCategory] = None

    @property
    def success(self) -> bool:
        return self.exit_code == 0
