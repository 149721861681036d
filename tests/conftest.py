"""Shared test fixtures for k4a-installer tests."""

from __future__ import annotations

import io
import os
from typing import Optional

import pytest
from rich.console import Console

from k4a_installer.core.models import CommandResult, HostEnvironment
from k4a_installer.core.output import StatusPrinter
from k4a_installer.data.store import DataStore
from k4a_installer.installers.base import InstallSettings, StepContext


class FakeExecutor:
    """Records every call; returns success unless a failure is scripted.

    Failures are keyed by method name, or by "<method>:<first arg>" for
    install_packages / run / run_build / copy_file / fetch_url.
    """

    def __init__(
        self,
        failures: Optional[dict[str, CommandResult]] = None,
        downloads: Optional[dict[str, bytes]] = None,
        stdout: Optional[dict[str, str]] = None,
    ):
        self.failures = dict(failures or {})
        self.downloads = dict(downloads or {})
        self.stdout = dict(stdout or {})
        self.calls: list[tuple] = []

    def _result(self, method: str, first: str = "") -> CommandResult:
        for key in (f"{method}:{first}", method):
            if key in self.failures:
                return self.failures[key]
        return CommandResult(success=True, stdout=self.stdout.get(first, ""))

    def run(self, args, cwd=None, input_text=None, privileged=False, timeout=120):
        self.calls.append(("run", list(args), privileged))
        return self._result("run", args[0])

    def update_package_lists(self):
        self.calls.append(("update_package_lists",))
        return self._result("update_package_lists")

    def install_packages(self, packages):
        self.calls.append(("install_packages", list(packages)))
        return self._result("install_packages", packages[0])

    def fetch_url(self, url, dest):
        self.calls.append(("fetch_url", url, dest))
        result = self._result("fetch_url", url)
        if result.success:
            with open(dest, "wb") as f:
                f.write(self.downloads.get(url, b""))
        return result

    def run_build(self, args, cwd):
        self.calls.append(("run_build", list(args), cwd))
        return self._result("run_build", args[0])

    def copy_file(self, src, dst):
        self.calls.append(("copy_file", src, dst))
        return self._result("copy_file", os.path.basename(src))

    def reload_device_rules(self):
        self.calls.append(("reload_device_rules",))
        return self._result("reload_device_rules")

    def methods(self) -> list[str]:
        return [call[0] for call in self.calls]


class FakeProbes:
    """Probe library stand-in. ``everything=True`` makes every probe pass."""

    def __init__(
        self,
        everything: bool = False,
        libraries=(),
        commands=(),
        packages=(),
        files=(),
        directories=(),
        missing=(),
    ):
        self.everything = everything
        self.libraries = set(libraries)
        self.commands = set(commands)
        self.packages = set(packages)
        self.files = set(files)
        self.directories = set(directories)
        self.missing = set(missing)

    def _present(self, name: str, pool: set) -> bool:
        if any(fragment in name for fragment in self.missing):
            return False
        return self.everything or name in pool

    def library_registered(self, fragment):
        if any(m in fragment for m in self.missing):
            return False
        return self.everything or any(fragment in lib for lib in self.libraries)

    def command_available(self, name):
        return self._present(name, self.commands)

    def package_installed(self, name):
        return self._present(name, self.packages)

    def file_present(self, path):
        return self._present(path, self.files)

    def directory_present(self, path):
        return self._present(path, self.directories)


def make_environment(**overrides) -> HostEnvironment:
    values = dict(
        os_name="ubuntu",
        os_version="Ubuntu 20.04.6 LTS",
        os_version_id="20.04",
        architecture="aarch64",
        is_root=False,
        python_version="3.10.12",
        package_manager="apt-get",
        tools={"apt-get": True, "git": True},
    )
    values.update(overrides)
    return HostEnvironment(**values)


@pytest.fixture
def host_environment() -> HostEnvironment:
    """Jetson-like environment, non-root."""
    return make_environment()


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def printer(output) -> StatusPrinter:
    """StatusPrinter writing plain text into ``output``."""
    console = Console(file=output, width=200, force_terminal=False, color_system=None)
    return StatusPrinter(console)


@pytest.fixture
def make_context(host_environment, printer, tmp_path):
    """Factory for a StepContext wired to fakes and a temp work dir."""

    def _make(executor=None, probes=None, environment=None) -> StepContext:
        return StepContext(
            environment=environment or host_environment,
            executor=executor or FakeExecutor(),
            printer=printer,
            settings=InstallSettings(work_dir=str(tmp_path)),
            probes=probes or FakeProbes(everything=True),
        )

    return _make


@pytest.fixture
def fake_executor_cls():
    return FakeExecutor


@pytest.fixture
def fake_probes_cls():
    return FakeProbes


@pytest.fixture
def temp_db(tmp_path):
    """DataStore with a temporary SQLite database."""
    db_path = str(tmp_path / "test.db")
    store = DataStore(db_path=db_path)
    yield store
    store.close()
