"""Network variant: registers the Microsoft repository and builds the SDK."""

from __future__ import annotations

import os
import zipfile

from k4a_installer.core.diagnostics import FailureCategory, FailureTag
from k4a_installer.core.models import StepOutcome
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
    soundio_step,
    ssl_step,
    udev_step,
    update_package_lists_step,
)

MICROSOFT_KEY_URL = "https://packages.microsoft.com/keys/microsoft.asc"
MICROSOFT_KEY_DEST = "/etc/apt/trusted.gpg.d/microsoft.asc"
MICROSOFT_LIST_DEST = "/etc/apt/sources.list.d/microsoft-prod.list"

# K4A packages are only published in the bionic repository; newer
# releases reuse it.
MICROSOFT_REPOS: dict[str, tuple[str, str]] = {
    "18.04": ("https://packages.microsoft.com/ubuntu/18.04/prod", "bionic"),
    "20.04": ("https://packages.microsoft.com/ubuntu/18.04/prod", "bionic"),
    "22.04": ("https://packages.microsoft.com/ubuntu/18.04/prod", "bionic"),
}
DEFAULT_REPO_VERSION = "18.04"

K4A_PACKAGES = ["libk4a1.4", "libk4a1.4-dev", "k4a-tools"]
K4A_EULA_SELECTIONS = (
    "libk4a1.4 libk4a1.4/accepted-eula-hash string "
    "0f5d5c5de396e4fee4c0753a21fee0c1ed726cf0316204edda484f08cb266d76\n"
    "libk4a1.4 libk4a1.4/accept-eula boolean true\n"
)
DEPTHENGINE_MEMBER = f"linux/lib/native/arm64/release/{DEPTHENGINE_NAME}"
SYSTEM_BIN_DIR = "/usr/local/bin/"

MICROSOFT_REPO_LIST = FailureTag.of("microsoft-repo-list")
LIBK4A_PACKAGE = FailureTag.of("libk4a-package")
LIBK4A_DEV_PACKAGE = FailureTag.of("libk4a-dev-package")
K4A_TOOLS = FailureTag.of("k4a-tools")
SDK_CLONE = FailureTag.of("sdk-clone")
SDK_BUILD = FailureTag.of("sdk-build")
SDK_INSTALL = FailureTag.of("sdk-install")


def microsoft_repo_for(version_id: str) -> tuple[str, str]:
    """Return (repository URL, suite) for an Ubuntu VERSION_ID."""
    return MICROSOFT_REPOS.get(version_id, MICROSOFT_REPOS[DEFAULT_REPO_VERSION])


def _register_microsoft_repo(ctx: StepContext) -> StepOutcome:
    category = FailureCategory.MICROSOFT_REPO
    version_id = ctx.environment.os_version_id
    if version_id not in MICROSOFT_REPOS:
        ctx.printer.warning(
            f"No repository mapping for OS version {version_id or 'unknown'}; "
            f"using Ubuntu {DEFAULT_REPO_VERSION}"
        )
    repo_url, suite = microsoft_repo_for(version_id)
    downloads = ctx.settings.downloads_dir
    os.makedirs(downloads, exist_ok=True)

    key_file = os.path.join(downloads, "microsoft.asc")
    result = ctx.executor.fetch_url(MICROSOFT_KEY_URL, key_file)
    if not result.success:
        return StepOutcome.failed(category, "Failed to download Microsoft signing key", result)
    result = ctx.executor.copy_file(key_file, MICROSOFT_KEY_DEST)
    if not result.success:
        return StepOutcome.failed(category, "Failed to install Microsoft signing key", result)

    list_file = os.path.join(downloads, "microsoft-prod.list")
    with open(list_file, "w") as f:
        f.write(f"deb [arch=arm64] {repo_url} {suite} main\n")
    result = ctx.executor.copy_file(list_file, MICROSOFT_LIST_DEST)
    if not result.success:
        return StepOutcome.failed(category, "Failed to register Microsoft repository", result)
    ctx.printer.success(f"Repository registered: {repo_url} ({suite})")

    result = ctx.executor.update_package_lists()
    if not result.success:
        return StepOutcome.failed(category, "Failed to refresh package lists", result)
    ctx.printer.success("Package lists refreshed")
    return StepOutcome(probes=[
        ctx.check_file(MICROSOFT_LIST_DEST, MICROSOFT_REPO_LIST, "Repository entry"),
    ])


def _install_k4a_packages(ctx: StepContext) -> StepOutcome:
    category = FailureCategory.K4A_PACKAGES
    ctx.printer.info("Pre-accepting the libk4a EULA...")
    result = ctx.executor.run(
        ["debconf-set-selections"], input_text=K4A_EULA_SELECTIONS, privileged=True,
    )
    if not result.success:
        return StepOutcome.failed(category, "Failed to pre-accept the libk4a EULA", result)

    result = ctx.executor.install_packages(K4A_PACKAGES)
    if not result.success:
        return StepOutcome.failed(category, "Failed to install Azure Kinect packages", result)
    ctx.printer.success("Azure Kinect packages installed")
    ctx.printer.info("Testing Azure Kinect package installation...")
    return StepOutcome(probes=[
        ctx.check_package("libk4a1.4", LIBK4A_PACKAGE),
        ctx.check_package("libk4a1.4-dev", LIBK4A_DEV_PACKAGE),
        ctx.check_command("k4arecorder", K4A_TOOLS),
    ])


def _install_depth_engine(ctx: StepContext) -> StepOutcome:
    category = FailureCategory.DEPTHENGINE
    if ctx.probes.file_present(DEPTHENGINE_PATH):
        ctx.printer.success(f"Depth engine library already installed at {DEPTHENGINE_PATH}")
    else:
        package = os.path.join(ctx.settings.downloads_dir, "microsoft.azure.kinect.sensor.nupkg")
        os.makedirs(ctx.settings.downloads_dir, exist_ok=True)
        ctx.printer.info(f"Downloading {ctx.settings.depthengine_url}")
        result = ctx.executor.fetch_url(ctx.settings.depthengine_url, package)
        if not result.success:
            return StepOutcome.failed(category, "Failed to download the sensor package", result)

        extracted = os.path.join(ctx.settings.downloads_dir, DEPTHENGINE_NAME)
        try:
            with zipfile.ZipFile(package) as archive:
                with archive.open(DEPTHENGINE_MEMBER) as src, open(extracted, "wb") as dst:
                    dst.write(src.read())
        except (KeyError, zipfile.BadZipFile, OSError) as e:
            return StepOutcome.failed(category, f"Could not extract {DEPTHENGINE_NAME}: {e}")

        result = ctx.executor.copy_file(extracted, DEPTHENGINE_PATH)
        if not result.success:
            return StepOutcome.failed(category, f"Failed to copy {DEPTHENGINE_NAME} to {LIB_DIR}", result)
        ctx.executor.run(["chmod", "755", DEPTHENGINE_PATH], privileged=True)
        ctx.printer.success(f"Depth engine library installed at {DEPTHENGINE_PATH}")

    ctx.executor.run(["ldconfig"], privileged=True)
    ctx.printer.info("Testing depth engine registration...")
    return StepOutcome(probes=[
        ctx.check_library("libdepthengine", DEPTHENGINE, missing="not registered with ldconfig"),
    ])


def _build_sdk(ctx: StepContext) -> StepOutcome:
    sdk_dir = ctx.settings.sdk_dir
    cmake_lists = os.path.join(sdk_dir, "CMakeLists.txt")

    if ctx.probes.file_present(cmake_lists):
        ctx.printer.info(f"SDK source already present at {sdk_dir}")
    else:
        result = ctx.executor.run(
            ["git", "clone", "--recursive", ctx.settings.sdk_repo_url, sdk_dir],
            timeout=1800,
        )
        if not result.success:
            return StepOutcome.failed(FailureCategory.SDK_CLONE, "Failed to clone the SDK repository", result)
        ctx.printer.success("SDK repository cloned")

    clone_probe = ctx.check_file(cmake_lists, SDK_CLONE, "CMakeLists.txt")
    if not clone_probe.passed:
        ctx.printer.warning("Skipping build: the SDK checkout is incomplete")
        return StepOutcome(probes=[clone_probe])

    build_dir = os.path.join(sdk_dir, "build")
    os.makedirs(build_dir, exist_ok=True)
    for args in (["cmake", "..", "-GNinja", "-DCMAKE_BUILD_TYPE=Release"], ["ninja"]):
        result = ctx.executor.run_build(args, cwd=build_dir)
        if not result.success:
            return StepOutcome.failed(FailureCategory.SDK_BUILD, f"Build command failed: {' '.join(args)}", result)
    ctx.printer.success("SDK built")

    viewer = os.path.join(build_dir, "bin", "k4aviewer")
    build_probe = ctx.check_file(viewer, SDK_BUILD, "k4aviewer")
    probes = [clone_probe, build_probe]
    if build_probe.passed:
        result = ctx.executor.copy_file(viewer, SYSTEM_BIN_DIR)
        if not result.success:
            return StepOutcome.failed(FailureCategory.SDK_BUILD, "Failed to install k4aviewer", result)
        ctx.printer.success(f"k4aviewer installed to {SYSTEM_BIN_DIR}")
    probes.append(ctx.check_command("k4aviewer", SDK_INSTALL))
    return StepOutcome(probes=probes)


class NetworkVariant(InstallVariant):
    """Full install: Microsoft packages, depth engine download, SDK build."""

    def get_info(self) -> VariantInfo:
        return VariantInfo(
            identifier="network",
            name="Full network install",
            description=(
                "Everything in 'dependencies', plus the Microsoft package "
                "repository, libk4a packages, depth engine download and an SDK "
                "source build."
            ),
        )

    def build_steps(self, settings: InstallSettings) -> list[Step]:
        return [
            update_package_lists_step(),
            graphics_step(),
            ssl_step(),
            ninja_step(
                ["ninja-build", "cmake", "git"],
                title="Installing build toolchain",
                label="Build toolchain",
                commands=("ninja", "cmake", "git"),
            ),
            soundio_step(),
            Step(
                "Registering Microsoft package repository",
                _register_microsoft_repo,
                FailureCategory.MICROSOFT_REPO,
            ),
            Step(
                "Installing Azure Kinect packages",
                _install_k4a_packages,
                FailureCategory.K4A_PACKAGES,
            ),
            Step(
                "Installing depth engine library",
                _install_depth_engine,
                FailureCategory.DEPTHENGINE,
            ),
            Step(
                "Cloning and building Azure Kinect SDK",
                _build_sdk,
                FailureCategory.SDK_BUILD,
            ),
            udev_step(),
        ]

    def get_report_config(self, settings: InstallSettings) -> ReportConfig:
        return ReportConfig(
            filters=["depthengine", "udev", "k4a", "sdk"],
            impact_summary=True,
            next_steps=[
                "Connect your Azure Kinect device to a USB 3 port",
                "Test with: k4aviewer",
                "Record a short clip: k4arecorder -l 5 output.mkv",
            ],
        )
