"""Turn a locale plan into image translation calls and run them in order.

One task is one backend call: a source screenshot rendered into one
translation group. The resulting image is written to every output path of
the task, one per unified locale in the group.
"""

from __future__ import annotations

import io
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from PIL import Image, UnidentifiedImageError

from .config import DEFAULT_COOLDOWN_SECONDS
from .gemini import (
    ImageTranslationRequest,
    ImageTranslator,
    aspect_ratio_for,
    mime_type_for,
)
from .imaging import FileError, save_image
from .inventory import RAW_DIR_NAME, DeviceType, ScreenshotInfo, output_path
from .locales import TranslationGroup, language_name


@dataclass(frozen=True)
class TranslationTask:
    source_path: Path
    source_locale: str
    target: TranslationGroup
    output_paths: Tuple[Path, ...]
    device_type: DeviceType
    filename: str


class ProgressStatus(str, Enum):
    TRANSLATING = "translating"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class TranslationProgress:
    current: int
    total: int
    source_locale: str
    target: TranslationGroup
    device_type: DeviceType
    filename: str
    status: ProgressStatus
    error: Optional[str] = None
    written_paths: Tuple[Path, ...] = ()

    @property
    def label(self) -> str:
        return f"{self.target.value}/{self.device_type.value}/{self.filename}"


@dataclass
class TranslationSummary:
    successful: int = 0
    failed: int = 0
    errors: List[FileError] = field(default_factory=list)
    written_paths: List[Path] = field(default_factory=list)


def build_translation_tasks(
    screenshots_dir: Path,
    screenshots: Sequence[ScreenshotInfo],
    primary_locale: str,
    targets: Sequence[TranslationGroup],
    locale_mapping: Dict[TranslationGroup, Sequence[str]],
    skip_existing: bool = True,
    stage_raw: bool = True,
) -> List[TranslationTask]:
    """One task per (target, screenshot), in target-major order.

    With ``skip_existing`` an output path whose file is already on disk is
    dropped, and a task with nothing left to write is dropped entirely, so
    re-running after a crash only redoes the missing files.
    """
    tasks: List[TranslationTask] = []
    for target in targets:
        output_locales = locale_mapping.get(target, ())
        for shot in screenshots:
            paths = []
            for locale in output_locales:
                path = output_path(
                    screenshots_dir, locale, shot.device_type, shot.filename, raw=stage_raw
                )
                if skip_existing and path.exists():
                    continue
                paths.append(path)
            if not paths:
                continue
            tasks.append(
                TranslationTask(
                    source_path=shot.full_path,
                    source_locale=primary_locale,
                    target=target,
                    output_paths=tuple(paths),
                    device_type=shot.device_type,
                    filename=shot.filename,
                )
            )
    return tasks


def preview_translation_tasks(tasks: Iterable[TranslationTask]) -> List[Tuple[str, str]]:
    """(locale, relative file) pairs a run would write. Touches nothing."""
    preview = []
    for task in tasks:
        for path in task.output_paths:
            # .../{locale}/{device}/[raw/]{filename}
            if path.parent.name == RAW_DIR_NAME:
                locale = path.parents[2].name
                relative = f"{task.device_type.value}/{RAW_DIR_NAME}/{task.filename}"
            else:
                locale = path.parents[1].name
                relative = f"{task.device_type.value}/{task.filename}"
            preview.append((locale, relative))
    return preview


def ensure_task_directories(tasks: Iterable[TranslationTask]) -> None:
    for task in tasks:
        for path in task.output_paths:
            path.parent.mkdir(parents=True, exist_ok=True)


class TranslationRun:
    """Iterate to execute; yields a ``translating`` event and a final event per task.

    Tasks run strictly one after another with ``cooldown`` seconds after every
    call. A backend failure fails only its own task. Errors writing the
    result to disk are not caught.
    """

    def __init__(
        self,
        tasks: Sequence[TranslationTask],
        translator: ImageTranslator,
        preserve_words: Optional[Sequence[str]] = None,
        cooldown: float = DEFAULT_COOLDOWN_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.tasks = list(tasks)
        self.translator = translator
        self.preserve_words = tuple(preserve_words or ())
        self.cooldown = cooldown
        self.sleep = sleep
        self.summary = TranslationSummary()

    def __len__(self) -> int:
        return len(self.tasks)

    def _request(self, task: TranslationTask) -> ImageTranslationRequest:
        return ImageTranslationRequest(
            image_bytes=Path(task.source_path).read_bytes(),
            mime_type=mime_type_for(task.source_path),
            source_language=language_name(task.source_locale),
            target_language=language_name(task.target.value),
            aspect_ratio=aspect_ratio_for(task.device_type),
            preserve_words=self.preserve_words,
        )

    def _translate(self, task: TranslationTask) -> Image.Image:
        payload = self.translator.translate(self._request(task))
        try:
            image = Image.open(io.BytesIO(payload))
            image.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise ValueError(f"Backend returned an unreadable image: {exc}") from exc
        return image

    def __iter__(self) -> Iterator[TranslationProgress]:
        total = len(self.tasks)
        for idx, task in enumerate(self.tasks, start=1):
            event = dict(
                current=idx,
                total=total,
                source_locale=task.source_locale,
                target=task.target,
                device_type=task.device_type,
                filename=task.filename,
            )
            yield TranslationProgress(status=ProgressStatus.TRANSLATING, **event)

            try:
                image = self._translate(task)
            except Exception as exc:
                message = str(exc) or exc.__class__.__name__
                logging.warning(
                    "Translation failed (%s -> %s, %s/%s): %s",
                    task.source_locale,
                    task.target.value,
                    task.device_type.value,
                    task.filename,
                    message,
                )
                self.summary.failed += 1
                self.summary.errors.append(FileError(Path(task.source_path), message))
                yield TranslationProgress(status=ProgressStatus.FAILED, error=message, **event)
            else:
                for path in task.output_paths:
                    save_image(image, path)
                    self.summary.written_paths.append(path)
                self.summary.successful += 1
                yield TranslationProgress(
                    status=ProgressStatus.COMPLETED,
                    written_paths=task.output_paths,
                    **event,
                )

            if self.cooldown > 0:
                self.sleep(self.cooldown)


def execute_translation_tasks(
    tasks: Sequence[TranslationTask],
    translator: ImageTranslator,
    preserve_words: Optional[Sequence[str]] = None,
    on_progress: Optional[Callable[[TranslationProgress], None]] = None,
    cooldown: float = DEFAULT_COOLDOWN_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> TranslationSummary:
    run = TranslationRun(tasks, translator, preserve_words, cooldown=cooldown, sleep=sleep)
    for progress in run:
        if on_progress:
            on_progress(progress)
    return run.summary
