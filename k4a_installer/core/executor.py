"""Command executor — runs package-manager, download, build and copy actions."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import urllib.request
from pathlib import Path
from typing import Optional, Protocol

from k4a_installer.core.models import CommandResult, HostEnvironment

logger = logging.getLogger(__name__)

PACKAGE_TIMEOUT = 1800
BUILD_TIMEOUT = 7200
DOWNLOAD_TIMEOUT = 300
DEFAULT_TIMEOUT = 120

USER_AGENT = "k4a-installer/1.0"


class CommandExecutor(Protocol):
    """Capability set the installation steps depend on."""

    def run(
        self,
        args: list[str],
        cwd: Optional[str] = None,
        input_text: Optional[str] = None,
        privileged: bool = False,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> CommandResult: ...

    def update_package_lists(self) -> CommandResult: ...

    def install_packages(self, packages: list[str]) -> CommandResult: ...

    def fetch_url(self, url: str, dest: str) -> CommandResult: ...

    def run_build(self, args: list[str], cwd: str) -> CommandResult: ...

    def copy_file(self, src: str, dst: str) -> CommandResult: ...

    def reload_device_rules(self) -> CommandResult: ...


class SystemExecutor:
    """Executes actions on the real system via subprocess."""

    def __init__(self, environment: HostEnvironment, stream_output: bool = True):
        self.environment = environment
        self.stream_output = stream_output

    def run(
        self,
        args: list[str],
        cwd: Optional[str] = None,
        input_text: Optional[str] = None,
        privileged: bool = False,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> CommandResult:
        command = (self.environment.sudo_prefix if privileged else []) + list(args)
        logger.debug("Running: %s (cwd=%s)", " ".join(command), cwd or ".")
        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                input=input_text,
                capture_output=not self.stream_output,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning("Command timed out after %ss: %s", timeout, command[0])
            return CommandResult(
                success=False,
                exit_code=124,
                error=f"Command timed out after {timeout} seconds",
            )
        except FileNotFoundError:
            logger.warning("Command not found: %s", command[0])
            return CommandResult(
                success=False,
                exit_code=127,
                error=f"Command not found: {command[0]}",
            )
        except OSError as e:
            logger.warning("Could not start %s: %s", command[0], e)
            return CommandResult(success=False, exit_code=126, error=str(e))
        if result.returncode != 0:
            logger.warning(
                "Command failed with exit code %d: %s",
                result.returncode, " ".join(command),
            )
        return CommandResult(
            success=result.returncode == 0,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            exit_code=result.returncode,
        )

    def update_package_lists(self) -> CommandResult:
        return self.run(
            ["apt-get", "update"], privileged=True, timeout=PACKAGE_TIMEOUT,
        )

    def install_packages(self, packages: list[str]) -> CommandResult:
        if not packages:
            return CommandResult(success=False, error="No packages specified")
        return self.run(
            ["apt-get", "install", "-y"] + packages,
            privileged=True,
            timeout=PACKAGE_TIMEOUT,
        )

    def fetch_url(self, url: str, dest: str) -> CommandResult:
        logger.debug("Downloading %s -> %s", url, dest)
        try:
            Path(dest).parent.mkdir(parents=True, exist_ok=True)
            req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
            with urllib.request.urlopen(req, timeout=DOWNLOAD_TIMEOUT) as resp:
                with open(dest, "wb") as f:
                    shutil.copyfileobj(resp, f)
            return CommandResult(success=True, stdout=dest)
        except Exception as e:
            logger.warning("Download failed for %s: %s", url, e)
            return CommandResult(success=False, exit_code=1, error=f"Download failed: {e}")

    def run_build(self, args: list[str], cwd: str) -> CommandResult:
        return self.run(args, cwd=cwd, timeout=BUILD_TIMEOUT)

    def copy_file(self, src: str, dst: str) -> CommandResult:
        if not os.path.exists(src):
            return CommandResult(success=False, exit_code=1, error=f"File not found: {src}")
        return self.run(["cp", src, dst], privileged=True)

    def reload_device_rules(self) -> CommandResult:
        result = self.run(["udevadm", "control", "--reload-rules"], privileged=True)
        if not result.success:
            return result
        return self.run(["udevadm", "trigger"], privileged=True)
