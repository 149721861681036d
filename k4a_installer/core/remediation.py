"""Remediation catalog — static suggested fixes per failure category."""

from __future__ import annotations

from typing import Union

from k4a_installer.core.diagnostics import FailureCategory, FailureTag, category_for

REMEDIATION: dict[FailureCategory, list[str]] = {
    FailureCategory.APT_UPDATE: [
        "Check your internet connection",
        "Try: sudo apt-get clean && sudo apt-get update",
        "Check /etc/apt/sources.list for corrupted entries",
    ],
    FailureCategory.GRAPHICS_LIBS: [
        "Ensure universe repository is enabled: sudo add-apt-repository universe",
        "Try: sudo apt-get update && sudo apt-get install -f",
        "Check disk space: df -h",
    ],
    FailureCategory.SSL: [
        "Try: sudo apt-get install --reinstall openssl libssl-dev",
        "Check if ca-certificates is installed: sudo apt-get install ca-certificates",
    ],
    FailureCategory.NINJA: [
        "Try alternative installation: sudo pip3 install ninja",
        "Or build from source: git clone https://github.com/ninja-build/ninja.git",
    ],
    FailureCategory.SOUNDIO: [
        "Try: sudo add-apt-repository universe && sudo apt-get update",
        "Build from source: https://github.com/andrewrk/libsoundio",
    ],
    FailureCategory.DEPTHENGINE: [
        "Ensure you have write permissions: sudo chmod a+rwx /lib/aarch64-linux-gnu",
        "Verify architecture is arm64: uname -m",
        "Download manually from: https://www.nuget.org/packages/Microsoft.Azure.Kinect.Sensor/",
        "Extract libdepthengine.so.2.0 from linux/lib/native/arm64/release/",
    ],
    FailureCategory.UDEV: [
        "Check directory permissions: ls -la /etc/udev/rules.d/",
        "Try: sudo chmod 755 /etc/udev/rules.d",
        "Reload udev rules: sudo udevadm control --reload-rules && sudo udevadm trigger",
    ],
    FailureCategory.MICROSOFT_REPO: [
        "Check that packages.microsoft.com is reachable: curl -I https://packages.microsoft.com",
        "Azure Kinect packages are only published for Ubuntu 18.04 (bionic); "
        "check the repository URL in /etc/apt/sources.list.d/microsoft-prod.list",
        "Remove a broken entry and retry: sudo rm /etc/apt/sources.list.d/microsoft-prod.list",
    ],
    FailureCategory.K4A_PACKAGES: [
        "Accept the EULA non-interactively: "
        "echo 'libk4a1.4 libk4a1.4/accepted-eula-hash string 0f5d5c5de396e4fee4c0753a21fee0c1ed726cf0316204edda484f08cb266d76' "
        "| sudo debconf-set-selections",
        "Check which versions are available: apt-cache policy libk4a1.4 k4a-tools",
        "Fall back to building the SDK from source (network variant step 9)",
    ],
    FailureCategory.SDK_CLONE: [
        "Check git is installed: git --version",
        "Clone manually: git clone https://github.com/microsoft/Azure-Kinect-Sensor-SDK.git",
        "Remove a partial clone and retry: rm -rf Azure-Kinect-Sensor-SDK",
    ],
    FailureCategory.SDK_BUILD: [
        "Re-run the configure step: cd Azure-Kinect-Sensor-SDK/build && cmake .. -GNinja",
        "Check that cmake and ninja are installed: cmake --version && ninja --version",
        "Build output is in Azure-Kinect-Sensor-SDK/build; inspect the first error reported by ninja",
        "Free disk space and memory (close other applications, add swap) and rebuild",
    ],
}


def remediate(key: Union[FailureCategory, FailureTag, str]) -> list[str]:
    """Return the ordered advice for a category, tag or tag name.

    Unknown names yield an empty list.
    """
    if isinstance(key, FailureTag):
        category = key.category
    elif isinstance(key, FailureCategory):
        category = key
    else:
        category = category_for(key)
        if category is None:
            return []
    return list(REMEDIATION.get(category, []))
