"""Screenshot discovery on disk.

Expected layout::

    {products_dir}/{slug}/screenshots/{locale}/phone/1.png, 2.png, ...
    {products_dir}/{slug}/screenshots/{locale}/tablet/1.png, ...
    {products_dir}/{slug}/screenshots/{locale}/{device}/raw/1.png   (staged)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union


class DeviceType(str, Enum):
    PHONE = "phone"
    TABLET = "tablet"


DEVICE_TYPES = (DeviceType.PHONE, DeviceType.TABLET)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".webp")
RAW_DIR_NAME = "raw"

SCREENSHOT_NAME_RE = re.compile(r"^(\d+)\.(png|jpe?g|webp)$", re.IGNORECASE)

# Flat list for every device type, or per-device lists.
ScreenshotNumbers = Union[Sequence[int], Mapping[str, Sequence[int]], None]


def screenshot_number(filename: str) -> Optional[int]:
    """Leading index of a screenshot file name, None if it isn't one."""
    match = SCREENSHOT_NAME_RE.match(filename)
    if not match:
        return None
    number = int(match.group(1))
    return number if number > 0 else None


@dataclass(frozen=True)
class ScreenshotInfo:
    device_type: DeviceType
    filename: str
    full_path: Path

    @property
    def number(self) -> int:
        number = screenshot_number(self.filename)
        if number is None:
            raise ValueError(f"Not a numbered screenshot: {self.filename}")
        return number


def _scan_dir(directory: Path, device_type: DeviceType) -> List[ScreenshotInfo]:
    if not directory.is_dir():
        return []
    entries = []
    for path in directory.iterdir():
        if not path.is_file():
            continue
        number = screenshot_number(path.name)
        if number is None:
            continue
        entries.append((number, path.name, path))
    entries.sort(key=lambda item: (item[0], item[1]))
    return [ScreenshotInfo(device_type, name, path) for _, name, path in entries]


class ScreenshotInventory:
    """Read-only view of a products directory, plus output path helpers."""

    def __init__(self, products_dir: Path):
        self.products_dir = Path(products_dir)

    def screenshots_dir(self, slug: str) -> Path:
        return self.products_dir / slug / "screenshots"

    def scan(
        self,
        slug: str,
        locale: str,
        device_types: Sequence[DeviceType] = DEVICE_TYPES,
    ) -> List[ScreenshotInfo]:
        locale_dir = self.screenshots_dir(slug) / locale
        if not locale_dir.is_dir():
            return []
        found: List[ScreenshotInfo] = []
        for device_type in device_types:
            device_type = DeviceType(device_type)
            found.extend(_scan_dir(locale_dir / device_type.value, device_type))
        return found

    def scan_raw(
        self,
        slug: str,
        locale: str,
        device_types: Sequence[DeviceType] = DEVICE_TYPES,
    ) -> List[ScreenshotInfo]:
        locale_dir = self.screenshots_dir(slug) / locale
        found: List[ScreenshotInfo] = []
        for device_type in device_types:
            device_type = DeviceType(device_type)
            found.extend(_scan_dir(locale_dir / device_type.value / RAW_DIR_NAME, device_type))
        return found

    def _locale_dirs(self, slug: str) -> List[Path]:
        root = self.screenshots_dir(slug)
        if not root.is_dir():
            return []
        return sorted(
            (p for p in root.iterdir() if p.is_dir() and not p.name.startswith(".")),
            key=lambda p: p.name,
        )

    def list_available_locales(self, slug: str) -> List[str]:
        return [p.name for p in self._locale_dirs(slug)]

    def list_raw_locales(self, slug: str) -> List[str]:
        """Locales with a ``raw/`` staging directory for any device type."""
        return [
            p.name
            for p in self._locale_dirs(slug)
            if any((p / device.value / RAW_DIR_NAME).is_dir() for device in DEVICE_TYPES)
        ]

    def output_path(
        self,
        slug: str,
        locale: str,
        device_type: DeviceType,
        filename: str,
        raw: bool = False,
    ) -> Path:
        return output_path(self.screenshots_dir(slug), locale, device_type, filename, raw=raw)

    def ensure_output_dir(
        self, slug: str, locale: str, device_type: DeviceType, raw: bool = False
    ) -> Path:
        directory = self.output_path(slug, locale, device_type, "", raw=raw)
        directory.mkdir(parents=True, exist_ok=True)
        return directory


def output_path(
    screenshots_dir: Path,
    locale: str,
    device_type: DeviceType,
    filename: str,
    raw: bool = False,
) -> Path:
    directory = Path(screenshots_dir) / locale / DeviceType(device_type).value
    if raw:
        directory = directory / RAW_DIR_NAME
    return directory / filename if filename else directory


def _numbers_by_device(numbers: ScreenshotNumbers) -> Dict[DeviceType, List[int]]:
    if numbers is None:
        return {}
    if isinstance(numbers, Mapping):
        return {
            DeviceType(device): [int(n) for n in values or []]
            for device, values in numbers.items()
        }
    flat = [int(n) for n in numbers]
    return {device: flat for device in DEVICE_TYPES}


def select_screenshots(
    screenshots: Iterable[ScreenshotInfo],
    device_types: Optional[Sequence[DeviceType]] = None,
    numbers: ScreenshotNumbers = None,
) -> List[ScreenshotInfo]:
    """Filter by device type and screenshot number.

    A device type without numbers (or with an empty list) keeps all of its
    screenshots.
    """
    allowed = {DeviceType(d) for d in device_types} if device_types else set(DEVICE_TYPES)
    by_device = _numbers_by_device(numbers)
    selected = []
    for shot in screenshots:
        if shot.device_type not in allowed:
            continue
        wanted = by_device.get(shot.device_type)
        if wanted and shot.number not in wanted:
            continue
        selected.append(shot)
    return selected


def describe_numbers(numbers: ScreenshotNumbers) -> str:
    if numbers is None:
        return ""
    if isinstance(numbers, Mapping):
        parts = [
            f"{DeviceType(device).value}: {', '.join(str(n) for n in values)}"
            for device, values in numbers.items()
            if values
        ]
        return " | ".join(parts)
    return f"all: {', '.join(str(n) for n in numbers)}"
