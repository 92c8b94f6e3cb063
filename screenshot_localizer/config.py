"""Runtime settings, read from the environment and overridable from the CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

# --- DEFAULTS ---
DEFAULT_IMAGE_MODEL = "gemini-3-pro-image-preview"
DEFAULT_PRODUCTS_DIR = Path("public/products")
DEFAULT_PULL_DATA_DIR = Path(".aso/pullData")

# Pause between image generation calls to stay under the rate limit.
DEFAULT_COOLDOWN_SECONDS = 0.5

# How many per-file errors a summary lists before collapsing the rest.
MAX_LISTED_ERRORS = 5


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str]
    products_dir: Path
    pull_data_dir: Path
    image_model: str = DEFAULT_IMAGE_MODEL
    cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS

    def override(self, **changes) -> "Settings":
        """Return a copy with every non-None keyword applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def load_settings() -> Settings:
    api_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
    return Settings(
        api_key=api_key or None,
        products_dir=Path(os.environ.get("ASO_PRODUCTS_DIR", DEFAULT_PRODUCTS_DIR)),
        pull_data_dir=Path(os.environ.get("ASO_PULL_DATA_DIR", DEFAULT_PULL_DATA_DIR)),
        image_model=os.environ.get("GEMINI_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
        cooldown_seconds=_float_env("SCREENSHOT_COOLDOWN_SECONDS", DEFAULT_COOLDOWN_SECONDS),
    )
