"""Environment detection — OS release, architecture, privileges, tools."""

from __future__ import annotations

import os
import platform
import shutil
import subprocess
from typing import Optional

from k4a_installer.core.models import HostEnvironment

OS_RELEASE_PATH = "/etc/os-release"

RELEVANT_TOOLS = ["apt-get", "dpkg-query", "ldconfig", "udevadm", "git", "cmake", "ninja"]


class EnvironmentDetector:
    """Detects what the installer needs to know about the host."""

    @staticmethod
    def detect_current() -> HostEnvironment:
        """Detect the current environment."""
        os_release = _read_os_release()
        return HostEnvironment(
            os_name=os_release.get("ID", platform.system().lower()),
            os_version=_detect_os_version(os_release),
            os_version_id=os_release.get("VERSION_ID", ""),
            architecture=platform.machine(),
            is_root=_detect_root(),
            python_version=platform.python_version(),
            package_manager=_detect_package_manager(),
            tools={tool: shutil.which(tool) is not None for tool in RELEVANT_TOOLS},
        )


def parse_os_release(text: str) -> dict[str, str]:
    """Parse os-release(5) KEY=value lines, stripping optional quotes."""
    values: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key.strip()] = value.strip().strip('"').strip("'")
    return values


def _read_os_release(path: str = OS_RELEASE_PATH) -> dict[str, str]:
    try:
        with open(path) as f:
            return parse_os_release(f.read())
    except OSError:
        return {}


def _detect_os_version(os_release: dict[str, str]) -> str:
    if os_release.get("PRETTY_NAME"):
        return os_release["PRETTY_NAME"]
    try:
        result = subprocess.run(
            ["lsb_release", "-ds"],
            capture_output=True, text=True, timeout=5,
        )
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout.strip().strip('"')
        return platform.platform()
    except Exception:
        return platform.platform()


def _detect_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def _detect_package_manager() -> Optional[str]:
    for manager in ("apt-get", "dnf", "yum", "pacman"):
        if shutil.which(manager):
            return manager
    return None
