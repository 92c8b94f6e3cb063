"""Dimension checks and aspect-preserving resize for screenshots."""

from __future__ import annotations

import io
import logging
import os
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from .inventory import DeviceType

RGB = Tuple[int, int, int]

WHITE: RGB = (255, 255, 255)

# Colour buckets used when voting for the background.
QUANTIZE_STEP = 8
# Sample every n-th pixel along the border.
SAMPLE_STRIDE = 4
# Border strip thickness, in pixels.
EDGE_DEPTH = 4
# Corner square side, as a fraction of the shorter image side.
CORNER_FRACTION = 0.05

SAVE_FORMATS = {
    ".png": "PNG",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".webp": "WEBP",
}


@dataclass(frozen=True)
class ImageDimensions:
    width: int
    height: int

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


SCREENSHOT_DIMENSIONS: Dict[DeviceType, ImageDimensions] = {
    DeviceType.PHONE: ImageDimensions(1242, 2688),
    DeviceType.TABLET: ImageDimensions(2048, 2732),
}


@dataclass(frozen=True)
class ResizeCheck:
    resized: bool
    source_dimensions: ImageDimensions
    translated_dimensions: ImageDimensions
    final_dimensions: ImageDimensions


@dataclass(frozen=True)
class FileError:
    path: Path
    error: str


@dataclass
class BatchResizeResult:
    total: int = 0
    resized: int = 0
    errors: List[FileError] = field(default_factory=list)


def get_image_dimensions(path: Path) -> ImageDimensions:
    try:
        with Image.open(path) as im:
            width, height = im.size
    except (UnidentifiedImageError, OSError) as exc:
        raise ValueError(f"Unable to read dimensions from {path}: {exc}") from exc
    if not width or not height:
        raise ValueError(f"Unable to read dimensions from {path}")
    return ImageDimensions(width, height)


def parse_hex_color(value: Optional[str]) -> Optional[RGB]:
    """``#RGB`` or ``#RRGGBB`` to an RGB tuple; None when malformed."""
    if not value:
        return None
    s = value.strip().lstrip("#")
    if len(s) == 3:
        s = "".join(c * 2 for c in s)
    if len(s) != 6:
        return None
    try:
        return (int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16))
    except ValueError:
        return None


def _quantize(color: Sequence[int]) -> RGB:
    return tuple(min(255, int(round(c / QUANTIZE_STEP)) * QUANTIZE_STEP) for c in color[:3])


def _edge_boxes(width: int, height: int) -> List[Tuple[int, int, int, int]]:
    depth = max(1, min(EDGE_DEPTH, width // 2, height // 2))
    return [
        (0, 0, width, depth),
        (0, height - depth, width, height),
        (0, 0, depth, height),
        (width - depth, 0, width, height),
    ]


def _corner_boxes(width: int, height: int) -> List[Tuple[int, int, int, int]]:
    side = max(1, int(min(width, height) * CORNER_FRACTION))
    return [
        (0, 0, side, side),
        (width - side, 0, width, side),
        (0, height - side, side, height),
        (width - side, height - side, width, height),
    ]


def _sample_colors(im: Image.Image, boxes: Iterable[Tuple[int, int, int, int]]) -> Counter:
    votes: Counter = Counter()
    pixels = im.load()
    for left, top, right, bottom in boxes:
        for y in range(top, bottom, SAMPLE_STRIDE):
            for x in range(left, right, SAMPLE_STRIDE):
                votes[_quantize(pixels[x, y])] += 1
    return votes


def dominant_border_color(im: Image.Image, mode: str = "edges") -> RGB:
    if mode not in ("edges", "corners"):
        raise ValueError(f"Unknown sampling mode: {mode}")
    rgb = im.convert("RGB")
    width, height = rgb.size
    boxes = _edge_boxes(width, height) if mode == "edges" else _corner_boxes(width, height)
    votes = _sample_colors(rgb, boxes)
    if not votes:
        return WHITE
    return votes.most_common(1)[0][0]


def detect_background_color(path: Path, mode: str = "edges") -> RGB:
    """Most frequent (quantized) colour along the border or in the corners."""
    with Image.open(path) as im:
        return dominant_border_color(im, mode=mode)


def fit_within(size: Tuple[int, int], target: Tuple[int, int]) -> Tuple[int, int]:
    """Largest size with the aspect ratio of ``size`` that fits inside ``target``."""
    width, height = size
    target_w, target_h = target
    scale = min(target_w / width, target_h / height)
    new_w = min(target_w, max(1, int(round(width * scale))))
    new_h = min(target_h, max(1, int(round(height * scale))))
    return new_w, new_h


def fit_and_pad(im: Image.Image, target: ImageDimensions, bg_color: RGB) -> Image.Image:
    im = ImageOps.exif_transpose(im)
    if im.mode not in ("RGB", "RGBA"):
        im = im.convert("RGBA" if "A" in im.getbands() else "RGB")
    new_w, new_h = fit_within(im.size, target.size)
    resized = im.resize((new_w, new_h), Image.Resampling.LANCZOS)

    canvas = Image.new("RGB", target.size, bg_color)
    offset = ((target.width - new_w) // 2, (target.height - new_h) // 2)
    if resized.mode == "RGBA":
        canvas.paste(resized, offset, resized)
    else:
        canvas.paste(resized, offset)
    return canvas


def encode_image(im: Image.Image, path: Path) -> bytes:
    """Encode in the format implied by ``path``'s suffix (PNG when unknown)."""
    fmt = SAVE_FORMATS.get(Path(path).suffix.lower(), "PNG")
    params = {}
    if fmt == "JPEG":
        params = {"quality": 95, "optimize": True}
        if im.mode != "RGB":
            im = im.convert("RGB")
    buffer = io.BytesIO()
    im.save(buffer, format=fmt, **params)
    return buffer.getvalue()


def atomic_write(data: bytes, output: Path) -> None:
    temp_path = output.with_name(output.name + ".tmp")
    try:
        with temp_path.open("wb") as fp:
            fp.write(data)
            fp.flush()
            os.fsync(fp.fileno())
        os.replace(temp_path, output)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


def save_image(im: Image.Image, output: Path) -> None:
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    atomic_write(encode_image(im, output), output)


def resize_to_target(
    input_path: Path,
    output_path: Path,
    target: ImageDimensions,
    bg_color: Optional[RGB] = None,
) -> None:
    """Fit the image inside ``target`` and pad the rest with ``bg_color``.

    The background is detected from the input's border when not given.
    ``input_path`` and ``output_path`` may be the same file.
    """
    with Image.open(input_path) as im:
        im.load()
        if bg_color is None:
            bg_color = dominant_border_color(im)
        result = fit_and_pad(im, target, bg_color)
    save_image(result, Path(output_path))


def validate_and_resize(
    source_path: Path,
    translated_path: Path,
    bg_color: Optional[RGB] = None,
) -> ResizeCheck:
    """Resize ``translated_path`` in place to the source screenshot's size."""
    source_dimensions = get_image_dimensions(source_path)
    translated_dimensions = get_image_dimensions(translated_path)

    needs_resize = source_dimensions != translated_dimensions
    if needs_resize:
        resize_to_target(translated_path, translated_path, source_dimensions, bg_color)

    return ResizeCheck(
        resized=needs_resize,
        source_dimensions=source_dimensions,
        translated_dimensions=translated_dimensions,
        final_dimensions=source_dimensions,
    )


def batch_validate_and_resize(
    pairs: Iterable[Tuple[Path, Path]],
    bg_color: Optional[RGB] = None,
) -> BatchResizeResult:
    """Run ``validate_and_resize`` over (source, translated) pairs.

    Pairs whose translated file doesn't exist are skipped; a failing file is
    recorded and the batch carries on.
    """
    result = BatchResizeResult()
    for source_path, translated_path in pairs:
        result.total += 1
        translated_path = Path(translated_path)
        if not translated_path.exists():
            continue
        try:
            check = validate_and_resize(source_path, translated_path, bg_color)
        except (ValueError, OSError) as exc:
            logging.warning("Resize failed for %s: %s", translated_path, exc)
            result.errors.append(FileError(translated_path, str(exc)))
            continue
        if check.resized:
            result.resized += 1
    return result
