"""Failure tags, categories and the per-run diagnostic accumulator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional


class FailureCategory(Enum):
    APT_UPDATE = "apt-update"
    GRAPHICS_LIBS = "graphics-libs"
    SSL = "ssl"
    NINJA = "ninja"
    SOUNDIO = "soundio"
    DEPTHENGINE = "depthengine"
    UDEV = "udev"
    MICROSOFT_REPO = "microsoft-repo"
    K4A_PACKAGES = "k4a-packages"
    SDK_CLONE = "sdk-clone"
    SDK_BUILD = "sdk-build"


# Tag families, matched in order by substring after an exact category match
# fails. Several distinct tags collapse onto one category (e.g. every udev-* tag).
TAG_FAMILIES: list[tuple[str, FailureCategory]] = [
    ("graphics-lib", FailureCategory.GRAPHICS_LIBS),
    ("openssl", FailureCategory.SSL),
    ("libssl", FailureCategory.SSL),
    ("ninja", FailureCategory.NINJA),
    ("cmake", FailureCategory.NINJA),
    ("git", FailureCategory.NINJA),
    ("libsoundio", FailureCategory.SOUNDIO),
    ("depthengine", FailureCategory.DEPTHENGINE),
    ("udev", FailureCategory.UDEV),
    ("microsoft-repo", FailureCategory.MICROSOFT_REPO),
    ("libk4a", FailureCategory.K4A_PACKAGES),
    ("k4a", FailureCategory.K4A_PACKAGES),
    ("sdk-clone", FailureCategory.SDK_CLONE),
    ("sdk", FailureCategory.SDK_BUILD),
]


def category_for(name: str) -> Optional[FailureCategory]:
    """Resolve a tag or category name to its category, or None."""
    for category in FailureCategory:
        if category.value == name:
            return category
    for fragment, category in TAG_FAMILIES:
        if fragment in name:
            return category
    return None


@dataclass(frozen=True)
class FailureTag:
    name: str
    category: FailureCategory

    @classmethod
    def of(cls, name: str) -> FailureTag:
        """Build a tag, resolving its category. Raises ValueError if unmapped."""
        category = category_for(name)
        if category is None:
            raise ValueError(f"No failure category for tag: {name!r}")
        return cls(name=name, category=category)

    def __str__(self) -> str:
        return self.name


class DiagnosticAccumulator:
    """Append-only, ordered record of soft failures for one run."""

    def __init__(self, tags: Optional[Iterable[FailureTag]] = None):
        self._tags: list[FailureTag] = list(tags or [])

    def append(self, tag: FailureTag) -> None:
        self._tags.append(tag)

    def is_empty(self) -> bool:
        return not self._tags

    def contains(self, fragment: str) -> bool:
        """True if any accumulated tag name contains ``fragment``."""
        return any(fragment in tag.name for tag in self._tags)

    def matching(self, fragment: str) -> list[FailureTag]:
        return [tag for tag in self._tags if fragment in tag.name]

    def has_any(self, names: Iterable[str]) -> bool:
        wanted = set(names)
        return any(tag.name in wanted for tag in self._tags)

    def categories(self) -> list[FailureCategory]:
        """Distinct categories in first-detection order."""
        seen: list[FailureCategory] = []
        for tag in self._tags:
            if tag.category not in seen:
                seen.append(tag.category)
        return seen

    @property
    def names(self) -> list[str]:
        return [tag.name for tag in self._tags]

    def __len__(self) -> int:
        return len(self._tags)

    def __iter__(self) -> Iterator[FailureTag]:
        return iter(self._tags)
