"""Command line entry point: ``aso-screenshots <command> ...``."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from tqdm import tqdm

from .aso import aso_to_public, load_pull_data, public_to_aso
from .config import Settings, load_settings
from .gemini import GeminiImageTranslator
from .imaging import atomic_write
from .inventory import DEVICE_TYPES, DeviceType, ScreenshotNumbers
from .orchestrator import ProgressStatus, TranslationRun
from .pipeline import (
    ResizeJob,
    ScreenshotJob,
    localize_screenshots,
    resize_screenshots,
    translate_screenshots,
)
from .planner import plan_locales
from .products import load_product
from .resizing import ResizeRun, ResizeStatus


def parse_screenshot_numbers(values: Optional[Sequence[str]]) -> ScreenshotNumbers:
    """``--numbers 1 3`` applies to all devices; ``--numbers phone:1,2 tablet:3`` is per device."""
    if not values:
        return None
    per_device: Dict[str, List[int]] = {}
    flat: List[int] = []
    for value in values:
        if ":" in value:
            device, _, numbers = value.partition(":")
            DeviceType(device)
            per_device.setdefault(device, []).extend(
                int(n) for n in numbers.split(",") if n.strip()
            )
        else:
            flat.extend(int(n) for n in value.split(",") if n.strip())
    if per_device and flat:
        raise ValueError("Mix of per-device and flat screenshot numbers is not supported.")
    for number in flat + [n for nums in per_device.values() for n in nums]:
        if number <= 0:
            raise ValueError(f"Screenshot numbers must be positive, got {number}")
    return per_device or flat


def _translation_bar(run: TranslationRun):
    with tqdm(total=len(run), desc="Translating screenshots", unit="image") as bar:
        for progress in run:
            if progress.status is ProgressStatus.TRANSLATING:
                bar.set_postfix_str(progress.label)
            else:
                bar.update(1)
            yield progress


def _resize_bar(run: ResizeRun):
    with tqdm(total=len(run), desc="Resizing screenshots", unit="image") as bar:
        for progress in run:
            if progress.status is not ResizeStatus.RESIZING:
                bar.update(1)
            yield progress


def _device_types(args: argparse.Namespace) -> Sequence[DeviceType]:
    if not args.device:
        return DEVICE_TYPES
    return tuple(DeviceType(d) for d in args.device)


def _screenshot_job(args: argparse.Namespace) -> ScreenshotJob:
    return ScreenshotJob(
        slug=args.app,
        target_locales=args.locale or None,
        device_types=_device_types(args),
        screenshot_numbers=parse_screenshot_numbers(args.numbers),
        skip_existing=not args.overwrite,
        dry_run=args.dry_run,
        preserve_words=args.preserve or None,
    )


def _translator(args: argparse.Namespace, settings: Settings) -> Optional[GeminiImageTranslator]:
    if args.dry_run:
        return None
    return GeminiImageTranslator(api_key=settings.api_key, model=settings.image_model)


def cmd_localize(args: argparse.Namespace, settings: Settings) -> str:
    report = localize_screenshots(
        _screenshot_job(args),
        settings.products_dir,
        translator=_translator(args, settings),
        progress_view=_translation_bar,
        cooldown=settings.cooldown_seconds,
    )
    return report.text


def cmd_translate(args: argparse.Namespace, settings: Settings) -> str:
    report = translate_screenshots(
        _screenshot_job(args),
        settings.products_dir,
        translator=_translator(args, settings),
        progress_view=_translation_bar,
        cooldown=settings.cooldown_seconds,
    )
    return report.text


def cmd_resize(args: argparse.Namespace, settings: Settings) -> str:
    job = ResizeJob(
        slug=args.app,
        source_locale=args.source_locale,
        target_locales=args.locale or None,
        device_types=_device_types(args),
        screenshot_numbers=parse_screenshot_numbers(args.numbers),
        skip_existing=args.skip_existing,
        dry_run=args.dry_run,
    )
    return resize_screenshots(job, settings.products_dir, progress_view=_resize_bar).text


def cmd_plan(args: argparse.Namespace, settings: Settings) -> str:
    product = load_product(settings.products_dir, args.app)
    plan = plan_locales(product.locales, product.primary_locale, args.locale or None)
    lines = [f"📍 Primary locale: {product.primary_locale}"]
    for target in plan.targets:
        lines.append(f"🎯 {target.value}: {', '.join(plan.locale_mapping[target])}")
    if plan.grouped:
        lines.append(f"📋 Grouped: {', '.join(plan.grouped)}")
    if plan.skipped:
        lines.append(f"⚠️ Skipped: {', '.join(plan.skipped)}")
    if plan.invalid:
        lines.append(f"⚠️ Not in product: {', '.join(plan.invalid)}")
    return "\n".join(lines)


def _write_json(data: dict, output: Optional[Path]) -> str:
    text = json.dumps(data, ensure_ascii=False, indent=2)
    if output is None:
        return text
    output.parent.mkdir(parents=True, exist_ok=True)
    atomic_write((text + "\n").encode("utf-8"), output)
    return f"✅ Wrote {output}"


def cmd_aso_to_public(args: argparse.Namespace, settings: Settings) -> str:
    if args.input:
        data = json.loads(args.input.read_text(encoding="utf-8"))
    else:
        data = load_pull_data(settings.pull_data_dir, args.app)
        if not data:
            raise ValueError(f"No pulled ASO data for {args.app} in {settings.pull_data_dir}")
    return _write_json(aso_to_public(data), args.output)


def cmd_public_to_aso(args: argparse.Namespace, settings: Settings) -> str:
    data = json.loads(args.input.read_text(encoding="utf-8"))
    return _write_json(public_to_aso(data), args.output)


def _add_selection_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("app", help="Product slug under the products directory.")
    parser.add_argument(
        "--locale",
        action="append",
        default=[],
        help="Target unified locale (repeatable). Default: every product locale.",
    )
    parser.add_argument(
        "--device",
        action="append",
        choices=[d.value for d in DEVICE_TYPES],
        default=[],
        help="Device type to process (repeatable). Default: phone and tablet.",
    )
    parser.add_argument(
        "--numbers",
        nargs="+",
        help='Screenshot numbers: "1,3,5" for all devices or "phone:1,2 tablet:3".',
    )
    parser.add_argument("--dry-run", action="store_true", help="Only list the work.")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="aso-screenshots")
    parser.add_argument("--api-key", type=str, default=None)
    parser.add_argument("--products-dir", type=Path, default=None)
    parser.add_argument("--pull-data-dir", type=Path, default=None)
    parser.add_argument("--model", type=str, default=None)
    parser.add_argument("--cooldown", type=float, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, handler, help_text in (
        ("localize", cmd_localize, "Translate and resize in one pass."),
        ("translate", cmd_translate, "Translate into raw/ folders."),
    ):
        p = sub.add_parser(name, help=help_text)
        _add_selection_args(p)
        p.add_argument(
            "--overwrite",
            action="store_true",
            help="Translate again even when the output file already exists.",
        )
        p.add_argument(
            "--preserve",
            action="append",
            default=[],
            help='Word to keep untranslated (repeatable). Example: --preserve "Pabal"',
        )
        p.set_defaults(handler=handler)

    p = sub.add_parser("resize", help="Resize raw/ images to the final device size.")
    _add_selection_args(p)
    p.add_argument("--source-locale", default=None)
    p.add_argument("--skip-existing", action="store_true")
    p.set_defaults(handler=cmd_resize)

    p = sub.add_parser("plan", help="Show how locales group into translation calls.")
    p.add_argument("app")
    p.add_argument("--locale", action="append", default=[])
    p.set_defaults(handler=cmd_plan)

    p = sub.add_parser("aso-to-public", help="Store-keyed ASO data to unified locales.")
    p.add_argument("app")
    p.add_argument("--input", type=Path, default=None, help="Read this file instead of pull data.")
    p.add_argument("--output", type=Path, default=None)
    p.set_defaults(handler=cmd_aso_to_public)

    p = sub.add_parser("public-to-aso", help="Unified ASO data to store locale keys.")
    p.add_argument("input", type=Path)
    p.add_argument("--output", type=Path, default=None)
    p.set_defaults(handler=cmd_public_to_aso)

    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    try:
        settings = load_settings().override(
            api_key=args.api_key,
            products_dir=args.products_dir,
            pull_data_dir=args.pull_data_dir,
            image_model=args.model,
            cooldown_seconds=args.cooldown,
        )
        output = args.handler(args, settings)
    except ValueError as exc:
        raise SystemExit(f"❌ {exc}")
    print(output)


if __name__ == "__main__":
    main()
