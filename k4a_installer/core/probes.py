"""Probe library — read-only checks for packages, libraries, commands, files."""

from __future__ import annotations

import os
import shutil
import subprocess


def package_installed(name: str) -> bool:
    """True if dpkg marks the package as fully installed."""
    try:
        result = subprocess.run(
            ["dpkg-query", "-W", "-f=${Status}", name],
            capture_output=True, text=True, timeout=10,
        )
    except (OSError, subprocess.SubprocessError):
        return False
    return result.returncode == 0 and result.stdout.strip() == "install ok installed"


def library_registered(fragment: str) -> bool:
    """True if the dynamic linker cache lists a library whose name contains ``fragment``.

    Versioned names differ between releases (libssl.so.3 vs libssl.so.1.1),
    so this is a substring match on the library name column.
    """
    try:
        result = subprocess.run(
            ["ldconfig", "-p"], capture_output=True, text=True, timeout=10,
        )
    except (OSError, subprocess.SubprocessError):
        return False
    if result.returncode != 0:
        return False
    for line in result.stdout.splitlines():
        lib = line.strip().split(" ", 1)[0]
        if fragment in lib:
            return True
    return False


def command_available(name: str) -> bool:
    return shutil.which(name) is not None


def file_present(path: str) -> bool:
    return os.path.isfile(path)


def directory_present(path: str) -> bool:
    return os.path.isdir(path)
