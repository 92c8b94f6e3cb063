"""Product directories: ``config.json`` plus one ``locales/{locale}.json`` per locale."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .locales import DEFAULT_LOCALE


class ProductNotFoundError(ValueError):
    pass


class NoLocalesError(ValueError):
    pass


class NoScreenshotsError(ValueError):
    pass


class NoTargetLocalesError(ValueError):
    pass


@dataclass(frozen=True)
class Product:
    slug: str
    root: Path
    locales: List[str]
    primary_locale: str
    config: Dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.config.get("name") or self.slug

    @property
    def screenshot_bg_color(self) -> Optional[str]:
        metadata = self.config.get("metadata") or {}
        return metadata.get("screenshotBgColor")


def load_config(root: Path) -> Dict[str, Any]:
    path = root / "config.json"
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


def list_product_locales(root: Path) -> List[str]:
    locales_dir = root / "locales"
    if not locales_dir.is_dir():
        return []
    return sorted(p.stem for p in locales_dir.glob("*.json") if not p.name.startswith("."))


def resolve_primary_locale(config: Dict[str, Any], locales: List[str]) -> str:
    """Configured default locale, else en-US when present, else the first locale."""
    metadata = config.get("metadata") or {}
    for candidate in (config.get("defaultLocale"), metadata.get("defaultLocale")):
        if not candidate:
            continue
        if candidate in locales:
            return candidate
        logging.warning("Configured default locale %s has no locale file; ignoring.", candidate)
    if DEFAULT_LOCALE in locales:
        return DEFAULT_LOCALE
    return locales[0]


def load_product(products_dir: Path, slug: str) -> Product:
    root = Path(products_dir) / slug
    if not slug or not root.is_dir():
        raise ProductNotFoundError(f'App not found: "{slug}" (looked in {products_dir})')

    locales = list_product_locales(root)
    if not locales:
        raise NoLocalesError(f"No locale files found for {slug}")

    config = load_config(root)
    return Product(
        slug=slug,
        root=root,
        locales=locales,
        primary_locale=resolve_primary_locale(config, locales),
        config=config,
    )
