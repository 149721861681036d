"""Variant registry — auto-discovers install variants from subdirectories."""

from __future__ import annotations

import importlib
import inspect
import logging
from pathlib import Path

from k4a_installer.installers.base import InstallVariant

logger = logging.getLogger(__name__)

_registry: dict[str, InstallVariant] = {}
_discovered = False


def _discover() -> None:
    """Walk k4a_installer/installers/ subdirectories and register variants."""
    global _discovered
    if _discovered:
        return

    installers_dir = Path(__file__).parent
    for child in sorted(installers_dir.iterdir()):
        if not child.is_dir():
            continue
        if child.name.startswith("_"):
            continue
        module_file = child / "module.py"
        if not module_file.exists():
            continue

        module_path = f"k4a_installer.installers.{child.name}.module"
        try:
            mod = importlib.import_module(module_path)
        except Exception:
            logger.warning("Failed to import %s", module_path, exc_info=True)
            continue

        for _name, obj in inspect.getmembers(mod, inspect.isclass):
            if not issubclass(obj, InstallVariant) or obj is InstallVariant:
                continue
            if inspect.isabstract(obj):
                continue
            try:
                instance = obj()
                info = instance.get_info()
                _registry[info.identifier] = instance
            except Exception:
                logger.warning(
                    "Failed to instantiate %s from %s", _name, module_path,
                    exc_info=True,
                )

    _discovered = True


def list_variants() -> list[str]:
    """Return identifiers of all registered install variants."""
    _discover()
    return list(_registry.keys())


def get_variant(identifier: str) -> InstallVariant:
    """Return a variant by identifier, or raise ValueError."""
    _discover()
    if identifier not in _registry:
        available = ", ".join(_registry.keys()) or "(none)"
        raise ValueError(
            f"Unknown variant: {identifier!r}. Available: {available}"
        )
    return _registry[identifier]


def _reset() -> None:
    """Reset registry state. For testing only."""
    global _discovered
    _registry.clear()
    _discovered = False
