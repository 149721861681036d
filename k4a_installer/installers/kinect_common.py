"""Shared Azure Kinect steps, package lists and paths used by every variant."""

from __future__ import annotations

import os

from k4a_installer.core.diagnostics import FailureCategory, FailureTag
from k4a_installer.core.models import ProbeResult, StepOutcome
from k4a_installer.core.remediation import remediate
from k4a_installer.installers.base import Step, StepContext, package_step

LIB_DIR = "/lib/aarch64-linux-gnu"
DEPTHENGINE_NAME = "libdepthengine.so.2.0"
DEPTHENGINE_PATH = f"{LIB_DIR}/{DEPTHENGINE_NAME}"
UDEV_RULES_DIR = "/etc/udev/rules.d/"
UDEV_RULES_FILE = "99-k4a.rules"
NUGET_PAGE = "https://www.nuget.org/packages/Microsoft.Azure.Kinect.Sensor/"

GRAPHICS_PACKAGES = [
    "libglu1-mesa-dev",
    "freeglut3-dev",
    "mesa-common-dev",
    "libxinerama-dev",
    "libsdl2-dev",
]
GRAPHICS_LIBRARIES = ["libGLU.so", "libglut.so", "libSDL2.so", "libXinerama.so"]
SSL_PACKAGES = ["openssl", "libssl-dev"]
SOUNDIO_PACKAGES = ["libsoundio-dev"]

DEPTHENGINE = FailureTag.of("depthengine")
UDEV_COPY = FailureTag.of("udev-copy")
UDEV_MISSING = FailureTag.of("udev-missing")
UDEV_SDK_NOT_CLONED = FailureTag.of("udev-sdk-not-cloned")
OPENSSL_COMMAND = FailureTag.of("openssl-command")
LIBSSL = FailureTag.of("libssl")
LIBSOUNDIO = FailureTag.of("libsoundio")


def graphics_tag(lib: str) -> FailureTag:
    return FailureTag.of(f"graphics-lib-{lib}")


def update_package_lists_step() -> Step:
    def body(ctx: StepContext) -> StepOutcome:
        result = ctx.executor.update_package_lists()
        if not result.success:
            return StepOutcome.failed(
                FailureCategory.APT_UPDATE, "Failed to update package lists", result,
            )
        ctx.printer.success("Package lists updated")
        return StepOutcome()

    return Step("Updating package lists", body, FailureCategory.APT_UPDATE)


def graphics_step() -> Step:
    return package_step(
        "Installing graphics and display libraries",
        GRAPHICS_PACKAGES,
        FailureCategory.GRAPHICS_LIBS,
        label="Graphics libraries",
        checks=[
            (lambda ctx, lib=lib: ctx.check_library(lib, graphics_tag(lib)))
            for lib in GRAPHICS_LIBRARIES
        ],
    )


def ssl_step() -> Step:
    return package_step(
        "Installing OpenSSL and SSL libraries",
        SSL_PACKAGES,
        FailureCategory.SSL,
        label="OpenSSL",
        checks=[
            lambda ctx: ctx.check_command("openssl", OPENSSL_COMMAND, ["version"]),
            lambda ctx: ctx.check_library(
                "libssl.so", LIBSSL, missing="library not found",
            ),
        ],
    )


def toolchain_tag(command: str) -> FailureTag:
    return FailureTag.of(f"{command}-command")


def ninja_step(
    packages: list[str],
    title: str = "Installing Ninja build system",
    label: str = "Ninja build system",
    commands: tuple[str, ...] = ("ninja",),
) -> Step:
    def body(ctx: StepContext) -> StepOutcome:
        result = ctx.executor.install_packages(packages)
        if not result.success:
            return StepOutcome.failed(
                FailureCategory.NINJA, f"Failed to install {label}", result,
            )
        ctx.printer.success(f"{label} installed")
        ctx.printer.info(f"Testing {label} installation...")
        probes = [
            ctx.check_command(command, toolchain_tag(command), ["--version"])
            for command in commands
        ]
        if any(not probe.passed for probe in probes):
            _print_advice(ctx, FailureCategory.NINJA)
        return StepOutcome(probes=probes)

    return Step(title, body, FailureCategory.NINJA)


def soundio_step() -> Step:
    return package_step(
        "Installing libsoundio",
        SOUNDIO_PACKAGES,
        FailureCategory.SOUNDIO,
        label="libsoundio",
        checks=[
            lambda ctx: ctx.check_library(
                "libsoundio.so", LIBSOUNDIO, missing="library not found",
            ),
        ],
    )


def udev_step() -> Step:
    return Step(
        "Configuring udev rules for Kinect device access",
        _configure_udev_rules,
        FailureCategory.UDEV,
    )


def _configure_udev_rules(ctx: StepContext) -> StepOutcome:
    ctx.printer.info("Checking for Azure Kinect SDK repository...")
    sdk_dir = ctx.settings.sdk_dir
    if not ctx.probes.directory_present(sdk_dir):
        ctx.printer.warning("Azure Kinect SDK repository not found in working directory")
        ctx.printer.info(
            "You'll need to configure udev rules after cloning the SDK repository:"
        )
        ctx.printer.numbered([
            f"Clone the SDK: git clone {ctx.settings.sdk_repo_url} {sdk_dir}",
            f"Copy rules: sudo cp {sdk_dir}/scripts/{UDEV_RULES_FILE} {UDEV_RULES_DIR}",
            "Reload rules: sudo udevadm control --reload-rules && sudo udevadm trigger",
        ])
        return StepOutcome(probes=[ProbeResult(False, UDEV_SDK_NOT_CLONED, sdk_dir)])

    source = os.path.join(sdk_dir, "scripts", UDEV_RULES_FILE)
    if not ctx.probes.file_present(source):
        ctx.printer.warning(f"Udev rules file not found at {source}")
        return StepOutcome(probes=[ProbeResult(False, UDEV_MISSING, source)])

    ctx.printer.info("Found udev rules file in SDK repository")
    if not ctx.executor.copy_file(source, UDEV_RULES_DIR).success:
        ctx.printer.error("Failed to copy udev rules")
        return StepOutcome(probes=[ProbeResult(False, UDEV_COPY, source)])

    ctx.printer.success(f"Udev rules installed to {UDEV_RULES_DIR}")
    ctx.executor.reload_device_rules()
    ctx.printer.success("Udev rules reloaded")
    return StepOutcome(probes=[ProbeResult(True, UDEV_COPY, source)])


def print_depthengine_instructions(ctx: StepContext) -> None:
    ctx.printer.heading("Manual installation steps:")
    ctx.printer.numbered([
        "Download Microsoft.Azure.Kinect.Sensor NuGet package (v1.4.0-alpha.4 or later) "
        f"from {NUGET_PAGE}",
        "Extract the .nupkg file (it's a zip archive)",
        "Navigate to: linux/lib/native/arm64/release/",
        f"Copy {DEPTHENGINE_NAME} to {LIB_DIR}/",
        f"Set permissions: sudo chmod 755 {DEPTHENGINE_PATH}",
        "Update library cache: sudo ldconfig",
    ])


def _print_advice(ctx: StepContext, category: FailureCategory) -> None:
    ctx.printer.heading(f"Suggested solutions for {category.value}:")
    ctx.printer.numbered(remediate(category))
