from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pytest
from PIL import Image

from screenshot_localizer.gemini import ImageTranslationError, ImageTranslationRequest, ImageTranslator


def make_image(path: Path, size: Tuple[int, int], color=(255, 255, 255)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path)
    return path


def png_bytes(size: Tuple[int, int], color=(10, 20, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeTranslator(ImageTranslator):
    """Returns a solid image; fails for the target languages listed in ``fail_for``."""

    def __init__(self, size=(1536, 2752), fail_for: Iterable[str] = (), payload: Optional[bytes] = None):
        self.size = size
        self.fail_for = set(fail_for)
        self.payload = payload
        self.requests: List[ImageTranslationRequest] = []

    def translate(self, request: ImageTranslationRequest) -> bytes:
        self.requests.append(request)
        if request.target_language in self.fail_for:
            raise ImageTranslationError("No image data in Gemini response")
        if self.payload is not None:
            return self.payload
        return png_bytes(self.size)


@pytest.fixture
def fake_translator():
    return FakeTranslator()


@pytest.fixture
def products_dir(tmp_path):
    return tmp_path / "products"


@pytest.fixture
def make_product(products_dir):
    def _make(
        slug: str = "demo",
        locales: Sequence[str] = ("en-US", "ko-KR"),
        config: Optional[Dict] = None,
        screenshots: Optional[Dict[Tuple[str, str], Sequence[int]]] = None,
        size: Tuple[int, int] = (1242, 2688),
    ) -> Path:
        root = products_dir / slug
        (root / "locales").mkdir(parents=True, exist_ok=True)
        for locale in locales:
            (root / "locales" / f"{locale}.json").write_text("{}", encoding="utf-8")
        if config is not None:
            (root / "config.json").write_text(json.dumps(config), encoding="utf-8")
        if screenshots is None:
            screenshots = {("en-US", "phone"): (1, 2)}
        for (locale, device), numbers in screenshots.items():
            for number in numbers:
                make_image(root / "screenshots" / locale / device / f"{number}.png", size)
        return root

    return _make


def files_under(root: Path) -> List[Path]:
    return sorted(p for p in root.rglob("*") if p.is_file())
