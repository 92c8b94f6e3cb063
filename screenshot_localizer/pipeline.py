"""End-to-end flows: localize (single stage), translate to raw/, resize raw/."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .config import DEFAULT_COOLDOWN_SECONDS, MAX_LISTED_ERRORS
from .gemini import ImageTranslator
from .imaging import (
    RGB,
    SCREENSHOT_DIMENSIONS,
    BatchResizeResult,
    FileError,
    batch_validate_and_resize,
    parse_hex_color,
)
from .inventory import (
    DEVICE_TYPES,
    DeviceType,
    ScreenshotInventory,
    ScreenshotNumbers,
    describe_numbers,
    select_screenshots,
)
from .orchestrator import (
    ProgressStatus,
    TranslationProgress,
    TranslationRun,
    TranslationSummary,
    TranslationTask,
    build_translation_tasks,
    ensure_task_directories,
    preview_translation_tasks,
)
from .planner import LocalePlan, plan_locales
from .products import (
    NoScreenshotsError,
    NoTargetLocalesError,
    Product,
    load_product,
)
from .resizing import (
    ResizeProgress,
    ResizeRun,
    ResizeStatus,
    ResizeSummary,
    ResizeTask,
    build_resize_tasks,
)

TranslationProgressView = Callable[[TranslationRun], Iterable[TranslationProgress]]
ResizeProgressView = Callable[[ResizeRun], Iterable[ResizeProgress]]


@dataclass
class ScreenshotJob:
    slug: str
    target_locales: Optional[List[str]] = None
    device_types: Sequence[DeviceType] = DEVICE_TYPES
    screenshot_numbers: ScreenshotNumbers = None
    skip_existing: bool = True
    dry_run: bool = False
    preserve_words: Optional[List[str]] = None


@dataclass
class ResizeJob:
    slug: str
    source_locale: Optional[str] = None
    target_locales: Optional[List[str]] = None
    device_types: Sequence[DeviceType] = DEVICE_TYPES
    screenshot_numbers: ScreenshotNumbers = None
    skip_existing: bool = False
    dry_run: bool = False


@dataclass
class PipelineReport:
    lines: List[str] = field(default_factory=list)
    plan: Optional[LocalePlan] = None
    tasks: List[TranslationTask] = field(default_factory=list)
    resize_tasks: List[ResizeTask] = field(default_factory=list)
    preview: List[Tuple[str, str]] = field(default_factory=list)
    translation: Optional[TranslationSummary] = None
    validation: Optional[BatchResizeResult] = None
    resize: Optional[ResizeSummary] = None
    # Outputs left alone because they already exist.
    skipped: int = 0

    def add(self, line: str) -> None:
        self.lines.append(line)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


def format_errors(errors: Sequence[FileError], limit: int = MAX_LISTED_ERRORS) -> List[str]:
    lines = [f"   - {err.path.name}: {err.error}" for err in errors[:limit]]
    if len(errors) > limit:
        lines.append(f"   ... and {len(errors) - limit} more errors")
    return lines


def _log_translation_progress(progress: TranslationProgress) -> None:
    prefix = f"[{progress.current}/{progress.total}]"
    if progress.status is ProgressStatus.TRANSLATING:
        logging.info("%s Translating %s...", prefix, progress.label)
    elif progress.status is ProgressStatus.COMPLETED:
        logging.info("%s %s -> %d file(s)", prefix, progress.label, len(progress.written_paths))
    else:
        logging.info("%s %s failed: %s", prefix, progress.label, progress.error)


def _log_resize_progress(progress: ResizeProgress) -> None:
    prefix = f"[{progress.current}/{progress.total}]"
    if progress.status is ResizeStatus.COMPLETED:
        logging.info(
            "%s %s (%s -> %s)",
            prefix,
            progress.label,
            progress.raw_dimensions,
            progress.final_dimensions,
        )
    elif progress.status is ResizeStatus.SKIPPED:
        logging.info("%s %s (raw not found)", prefix, progress.label)
    elif progress.status is ResizeStatus.FAILED:
        logging.info("%s %s failed: %s", prefix, progress.label, progress.error)


def _identity(run):
    return run


def _product_bg_color(product: Product, report: PipelineReport) -> Optional[RGB]:
    hex_color = product.screenshot_bg_color
    if not hex_color:
        return None
    color = parse_hex_color(hex_color)
    if color is None:
        logging.warning("Invalid screenshotBgColor %r for %s", hex_color, product.slug)
        report.add(f"⚠️ Invalid screenshotBgColor: {hex_color} (using auto-detect)")
    else:
        report.add(f"🎨 Background color: {hex_color}")
    return color


def _plan_and_scan(job: ScreenshotJob, inventory: ScreenshotInventory, report: PipelineReport):
    product = load_product(inventory.products_dir, job.slug)
    report.add(f"✅ App found: {product.name} ({product.slug})")
    report.add(f"📍 Primary locale: {product.primary_locale}")
    report.add(f"🌐 Supported locales: {', '.join(product.locales)}")

    plan = plan_locales(product.locales, product.primary_locale, job.target_locales)
    report.plan = plan
    if plan.invalid:
        report.add(f"⚠️ Requested locales not in product: {', '.join(plan.invalid)}")
    if plan.is_empty:
        skipped = ""
        if plan.skipped:
            skipped = f" (Skipped due to Gemini limitation: {', '.join(plan.skipped)})"
        raise NoTargetLocalesError(
            f"No target locales to translate to. Primary locale: {product.primary_locale}, "
            f"Available: {', '.join(product.locales)}{skipped}"
        )

    report.add(f"🎯 Target locales to translate: {', '.join(t.value for t in plan.targets)}")
    if plan.grouped:
        report.add(f"📋 Grouped locales (saved together): {', '.join(plan.grouped)}")
    if plan.skipped:
        report.add(f"⚠️ Skipped locales (not supported by Gemini): {', '.join(plan.skipped)}")

    screenshots = select_screenshots(
        inventory.scan(job.slug, product.primary_locale),
        device_types=job.device_types,
        numbers=job.screenshot_numbers,
    )
    numbers_label = describe_numbers(job.screenshot_numbers)
    if numbers_label:
        report.add(f"🔢 Filtering screenshots: {numbers_label}")
    if not screenshots:
        source_dir = inventory.screenshots_dir(job.slug) / product.primary_locale
        raise NoScreenshotsError(
            f"No screenshots found in {source_dir}/\n\n"
            f"Expected structure:\n"
            f"{source_dir}/phone/1.png, 2.png, ...\n"
            f"{source_dir}/tablet/1.png, 2.png, ..."
        )

    phone = sum(1 for s in screenshots if s.device_type is DeviceType.PHONE)
    tablet = len(screenshots) - phone
    report.add(f"📸 Source screenshots: {phone} phone, {tablet} tablet")
    return product, plan, screenshots


def _add_preview(report: PipelineReport, plan: LocalePlan, tasks: Sequence[TranslationTask]) -> None:
    report.preview = preview_translation_tasks(tasks)
    report.add("\n🔍 DRY RUN - No actual translations will be performed")
    for target in plan.targets:
        target_tasks = [t for t in tasks if t.target is target]
        if not target_tasks:
            continue
        report.add(f"\n📁 {target.value} -> {', '.join(plan.locale_mapping[target])}:")
        for locale, relative in preview_translation_tasks(target_tasks):
            report.add(f"   - {locale}/{relative}")


def _run_translations(
    job: ScreenshotJob,
    inventory: ScreenshotInventory,
    translator: Optional[ImageTranslator],
    stage_raw: bool,
    progress_view: Optional[TranslationProgressView],
    cooldown: float,
    sleep: Optional[Callable[[float], None]],
) -> Tuple[PipelineReport, Optional[Product]]:
    report = PipelineReport()
    product, plan, screenshots = _plan_and_scan(job, inventory, report)

    tasks = build_translation_tasks(
        inventory.screenshots_dir(job.slug),
        screenshots,
        product.primary_locale,
        plan.targets,
        plan.locale_mapping,
        skip_existing=job.skip_existing,
        stage_raw=stage_raw,
    )
    report.tasks = tasks
    planned = len(screenshots) * len(plan.output_locales())
    report.skipped = planned - sum(len(task.output_paths) for task in tasks)
    if not tasks:
        report.add("\n✅ All screenshots already translated (skipExisting=true)")
        report.add(f"   ⏭️ Skipped (already exist): {report.skipped}")
        return report, None

    report.add(f"\n📋 Translation tasks: {len(tasks)} images to translate")
    if job.dry_run:
        _add_preview(report, plan, tasks)
        return report, None

    if translator is None:
        raise ValueError("An image translator is required unless dry_run is set.")

    report.add("\n🚀 Starting translations...")
    if job.preserve_words:
        report.add(f"🔒 Preserving words: {', '.join(job.preserve_words)}")

    ensure_task_directories(tasks)
    run_kwargs = {"cooldown": cooldown}
    if sleep is not None:
        run_kwargs["sleep"] = sleep
    run = TranslationRun(tasks, translator, job.preserve_words, **run_kwargs)
    for progress in (progress_view or _identity)(run):
        _log_translation_progress(progress)

    summary = run.summary
    report.translation = summary
    report.add("\n📊 Translation Results:")
    report.add(f"   ✅ Successful: {summary.successful}")
    report.add(f"   ❌ Failed: {summary.failed}")
    report.add(f"   ⏭️ Skipped (already exist): {report.skipped}")
    if summary.errors:
        report.add("\n⚠️ Errors:")
        report.lines.extend(format_errors(summary.errors))
    return report, product


def translate_screenshots(
    job: ScreenshotJob,
    products_dir: Path,
    translator: Optional[ImageTranslator] = None,
    progress_view: Optional[TranslationProgressView] = None,
    cooldown: float = DEFAULT_COOLDOWN_SECONDS,
    sleep: Optional[Callable[[float], None]] = None,
) -> PipelineReport:
    """Translate into ``{locale}/{device}/raw/``; finish with ``resize_screenshots``."""
    inventory = ScreenshotInventory(products_dir)
    report, product = _run_translations(
        job, inventory, translator, True, progress_view, cooldown, sleep
    )
    if product is not None:
        report.add(
            f"\n📁 Output location: {inventory.screenshots_dir(job.slug)}/{{locale}}/{{device}}/raw/"
        )
        report.add("\n✅ Screenshot translation complete!")
        report.add("\n💡 Next step: run `resize` to bring images to their final dimensions.")
    return report


def localize_screenshots(
    job: ScreenshotJob,
    products_dir: Path,
    translator: Optional[ImageTranslator] = None,
    progress_view: Optional[TranslationProgressView] = None,
    cooldown: float = DEFAULT_COOLDOWN_SECONDS,
    sleep: Optional[Callable[[float], None]] = None,
) -> PipelineReport:
    """Translate straight into the final paths, then match the source sizes."""
    inventory = ScreenshotInventory(products_dir)
    report, product = _run_translations(
        job, inventory, translator, False, progress_view, cooldown, sleep
    )
    if product is None:
        return report

    summary = report.translation
    if summary is not None and summary.successful > 0:
        report.add("\n🔍 Validating image dimensions...")
        bg_color = _product_bg_color(product, report)
        written = set(summary.written_paths)
        pairs = [
            (task.source_path, path)
            for task in report.tasks
            for path in task.output_paths
            if path in written
        ]
        validation = batch_validate_and_resize(pairs, bg_color)
        report.validation = validation
        if validation.resized:
            report.add(f"   🔧 Resized {validation.resized} images to match source dimensions")
        else:
            report.add("   ✅ All image dimensions match source")
        if validation.errors:
            report.add(f"   ⚠️ Resize errors: {len(validation.errors)}")
            report.lines.extend(format_errors(validation.errors))

    report.add(f"\n📁 Output location: {inventory.screenshots_dir(job.slug)}/")
    report.add("\n✅ Screenshot localization complete!")
    return report


def resize_screenshots(
    job: ResizeJob,
    products_dir: Path,
    progress_view: Optional[ResizeProgressView] = None,
) -> PipelineReport:
    """Resize ``raw/`` images to the canonical device size into the final paths."""
    inventory = ScreenshotInventory(products_dir)
    report = PipelineReport()

    product = load_product(products_dir, job.slug)
    report.add(f"✅ App found: {product.name} ({product.slug})")
    source_locale = job.source_locale or product.primary_locale
    report.add(f"📍 Source locale: {source_locale}")
    bg_color = _product_bg_color(product, report)

    source_screenshots = inventory.scan(job.slug, source_locale)
    if not source_screenshots:
        raise NoScreenshotsError(
            f"No source screenshots found in {inventory.screenshots_dir(job.slug) / source_locale}/"
        )
    phone = sum(1 for s in source_screenshots if s.device_type is DeviceType.PHONE)
    report.add(
        f"📸 Source screenshots: {phone} phone, {len(source_screenshots) - phone} tablet"
    )

    all_raw_locales = inventory.list_raw_locales(job.slug)
    if not all_raw_locales:
        raise NoTargetLocalesError(
            "No locales with raw/ folders found. Run `translate` first to generate raw images."
        )

    raw_locales = all_raw_locales
    if job.target_locales:
        raw_locales = [l for l in job.target_locales if l in all_raw_locales]
        missing = [l for l in job.target_locales if l not in all_raw_locales]
        if missing:
            logging.warning("No raw/ folder for: %s", ", ".join(missing))
            report.add(f"⚠️ Skipped (no raw/ folder): {', '.join(missing)}")
    if not raw_locales:
        raise NoTargetLocalesError(
            f"No target locales have raw/ folders. "
            f"Available locales with raw/: {', '.join(all_raw_locales)}"
        )
    report.add(f"🎯 Target locales: {', '.join(raw_locales)}")

    tasks = build_resize_tasks(
        inventory,
        job.slug,
        source_screenshots,
        raw_locales,
        device_types=job.device_types,
        numbers=job.screenshot_numbers,
        skip_existing=job.skip_existing,
    )
    report.resize_tasks = tasks
    if not tasks:
        report.add("\n✅ All images already resized or no matching raw images found.")
        return report

    report.add(f"\n📋 Resize tasks: {len(tasks)} images to resize")
    if job.dry_run:
        report.add("\n🔍 DRY RUN - No actual resizing will be performed")
        for locale in raw_locales:
            locale_tasks = [t for t in tasks if t.locale == locale]
            if not locale_tasks:
                continue
            report.add(f"\n📁 {locale}:")
            for task in locale_tasks:
                device = task.device_type.value
                report.preview.append((locale, f"{device}/{task.filename}"))
                report.add(f"   - {device}/raw/{task.filename} -> {device}/{task.filename}")
        return report

    report.add("\n🚀 Starting resize operations...")
    phone_dims = SCREENSHOT_DIMENSIONS[DeviceType.PHONE]
    tablet_dims = SCREENSHOT_DIMENSIONS[DeviceType.TABLET]
    report.add(f"📐 Target dimensions: phone={phone_dims}, tablet={tablet_dims}")

    for locale, device_type in dict.fromkeys((t.locale, t.device_type) for t in tasks):
        inventory.ensure_output_dir(job.slug, locale, device_type)
    run = ResizeRun(tasks, bg_color)
    for progress in (progress_view or _identity)(run):
        _log_resize_progress(progress)

    summary = run.summary
    report.resize = summary
    report.add("\n📊 Resize Results:")
    report.add(f"   ✅ Resized: {summary.resized}")
    report.add(f"   ⏭️ Skipped (raw missing): {summary.skipped}")
    if summary.errors:
        report.add(f"   ❌ Failed: {len(summary.errors)}")
        report.add("\n⚠️ Errors:")
        report.lines.extend(format_errors(summary.errors))

    report.add(f"\n📁 Output location: {inventory.screenshots_dir(job.slug)}/{{locale}}/{{device}}/")
    report.add("\n✅ Screenshot resizing complete!")
    return report
