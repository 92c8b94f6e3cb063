"""Second stage of the two-step workflow: ``raw/`` images to final device size."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from .imaging import (
    RGB,
    SCREENSHOT_DIMENSIONS,
    FileError,
    ImageDimensions,
    get_image_dimensions,
    resize_to_target,
)
from .inventory import (
    DEVICE_TYPES,
    DeviceType,
    ScreenshotInfo,
    ScreenshotInventory,
    ScreenshotNumbers,
    select_screenshots,
)


@dataclass(frozen=True)
class ResizeTask:
    raw_path: Path
    output_path: Path
    locale: str
    device_type: DeviceType
    filename: str


class ResizeStatus(str, Enum):
    RESIZING = "resizing"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ResizeProgress:
    current: int
    total: int
    locale: str
    device_type: DeviceType
    filename: str
    status: ResizeStatus
    error: Optional[str] = None
    raw_dimensions: Optional[ImageDimensions] = None
    final_dimensions: Optional[ImageDimensions] = None

    @property
    def label(self) -> str:
        return f"{self.locale}/{self.device_type.value}/{self.filename}"


@dataclass
class ResizeSummary:
    total: int = 0
    resized: int = 0
    skipped: int = 0
    errors: List[FileError] = field(default_factory=list)


def build_resize_tasks(
    inventory: ScreenshotInventory,
    slug: str,
    source_screenshots: Sequence[ScreenshotInfo],
    raw_locales: Sequence[str],
    device_types: Sequence[DeviceType] = DEVICE_TYPES,
    numbers: ScreenshotNumbers = None,
    skip_existing: bool = False,
) -> List[ResizeTask]:
    """Raw files that have a counterpart in the source locale, per locale."""
    source_keys = {(shot.device_type, shot.filename) for shot in source_screenshots}
    tasks: List[ResizeTask] = []
    for locale in raw_locales:
        raw_shots = select_screenshots(
            inventory.scan_raw(slug, locale), device_types=device_types, numbers=numbers
        )
        for shot in raw_shots:
            if (shot.device_type, shot.filename) not in source_keys:
                continue
            final_path = inventory.output_path(slug, locale, shot.device_type, shot.filename)
            if skip_existing and final_path.exists():
                continue
            tasks.append(
                ResizeTask(
                    raw_path=shot.full_path,
                    output_path=final_path,
                    locale=locale,
                    device_type=shot.device_type,
                    filename=shot.filename,
                )
            )
    return tasks


class ResizeRun:
    """Iterate to execute. Every output lands on the canonical device size."""

    def __init__(self, tasks: Sequence[ResizeTask], bg_color: Optional[RGB] = None):
        self.tasks = list(tasks)
        self.bg_color = bg_color
        self.summary = ResizeSummary(total=len(self.tasks))

    def __len__(self) -> int:
        return len(self.tasks)

    def __iter__(self) -> Iterator[ResizeProgress]:
        total = len(self.tasks)
        for idx, task in enumerate(self.tasks, start=1):
            event = dict(
                current=idx,
                total=total,
                locale=task.locale,
                device_type=task.device_type,
                filename=task.filename,
            )
            yield ResizeProgress(status=ResizeStatus.RESIZING, **event)

            if not task.raw_path.exists():
                self.summary.skipped += 1
                yield ResizeProgress(status=ResizeStatus.SKIPPED, **event)
                continue

            target = SCREENSHOT_DIMENSIONS[task.device_type]
            try:
                raw_dimensions = get_image_dimensions(task.raw_path)
                resize_to_target(task.raw_path, task.output_path, target, self.bg_color)
            except (ValueError, OSError) as exc:
                logging.warning("Resize failed for %s: %s", task.raw_path, exc)
                self.summary.errors.append(FileError(task.raw_path, str(exc)))
                yield ResizeProgress(status=ResizeStatus.FAILED, error=str(exc), **event)
                continue

            self.summary.resized += 1
            yield ResizeProgress(
                status=ResizeStatus.COMPLETED,
                raw_dimensions=raw_dimensions,
                final_dimensions=target,
                **event,
            )
