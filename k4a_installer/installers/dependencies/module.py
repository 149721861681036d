"""Dependencies-only variant: system packages, depth engine check, udev rules."""

from __future__ import annotations

from k4a_installer.core.diagnostics import FailureCategory
from k4a_installer.core.models import ProbeResult, StepOutcome
from k4a_installer.core.report import ReportConfig
from k4a_installer.installers.base import (
    InstallSettings,
    InstallVariant,
    Step,
    StepContext,
    VariantInfo,
)
from k4a_installer.installers.kinect_common import (
    DEPTHENGINE,
    DEPTHENGINE_NAME,
    DEPTHENGINE_PATH,
    LIB_DIR,
    graphics_step,
    ninja_step,
    print_depthengine_instructions,
    soundio_step,
    ssl_step,
    udev_step,
    update_package_lists_step,
)


def _check_depth_engine(ctx: StepContext) -> StepOutcome:
    ctx.printer.info(f"The depth engine library ({DEPTHENGINE_NAME}) must be manually installed.")
    ctx.printer.info("Checking for existing installation...")

    if ctx.probes.file_present(DEPTHENGINE_PATH):
        ctx.printer.success(f"Depth engine library already installed at {DEPTHENGINE_PATH}")
        probe = ProbeResult(True, DEPTHENGINE, DEPTHENGINE_PATH)
    else:
        ctx.printer.warning(f"Depth engine library NOT found at {DEPTHENGINE_PATH}")
        ctx.printer.info("This library is REQUIRED for Azure Kinect SDK to function.")
        print_depthengine_instructions(ctx)
        probe = ProbeResult(False, DEPTHENGINE, DEPTHENGINE_PATH)

    if ctx.probes.directory_present(LIB_DIR):
        ctx.printer.info(f"Ensuring {LIB_DIR} is accessible...")
        result = ctx.executor.run(["chmod", "755", LIB_DIR], privileged=True)
        if not result.success:
            ctx.printer.warning("Could not modify directory permissions")
    return StepOutcome(probes=[probe])


class DependenciesVariant(InstallVariant):
    """Installs build/runtime dependencies; the SDK itself is built by hand."""

    def get_info(self) -> VariantInfo:
        return VariantInfo(
            identifier="dependencies",
            name="Dependencies only",
            description=(
                "System packages, depth engine check and udev rules. "
                "Leaves cloning and building the SDK to you."
            ),
        )

    def build_steps(self, settings: InstallSettings) -> list[Step]:
        return [
            update_package_lists_step(),
            graphics_step(),
            ssl_step(),
            ninja_step(["ninja-build"]),
            soundio_step(),
            Step(
                "Configuring depth engine library",
                _check_depth_engine,
                FailureCategory.DEPTHENGINE,
            ),
            udev_step(),
        ]

    def get_report_config(self, settings: InstallSettings) -> ReportConfig:
        return ReportConfig(
            filters=["depthengine", "udev"],
            impact_summary=False,
            next_steps=[
                f"Clone Azure Kinect SDK: git clone {settings.sdk_repo_url}",
                "Build the SDK: cd Azure-Kinect-Sensor-SDK && mkdir build && cd build "
                "&& cmake .. -GNinja && ninja",
                "Connect your Azure Kinect device",
                "Test with: ./bin/k4aviewer",
            ],
        )
