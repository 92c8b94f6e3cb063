"""Image translation backed by Gemini image generation."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

from google import genai
from google.genai import types

from .config import DEFAULT_IMAGE_MODEL
from .inventory import DeviceType

# Aspect ratios the image model accepts, with its 2K output size.
GEMINI_ASPECT_RATIOS: Dict[str, Tuple[int, int]] = {
    "1:1": (2048, 2048),
    "2:3": (1696, 2528),
    "3:2": (2528, 1696),
    "3:4": (1792, 2400),
    "4:3": (2400, 1792),
    "4:5": (1856, 2304),
    "5:4": (2304, 1856),
    "9:16": (1536, 2752),
    "16:9": (2752, 1536),
    "21:9": (1584, 672),
}

# Closest accepted ratio per device. Phone screenshots (1242x2688, 0.46) are
# narrower than anything on offer, so the output always needs a resize.
DEVICE_ASPECT_RATIOS: Dict[DeviceType, str] = {
    DeviceType.PHONE: "9:16",
    DeviceType.TABLET: "3:4",
}

MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}

PROMPT_TEMPLATE = """This is an app screenshot with text in {source_lang}.
Please translate ONLY the text/words in this image to {target_lang}.

IMPORTANT INSTRUCTIONS:
- Keep the EXACT same layout, design, colors, and visual elements
- Only translate the visible text content to {target_lang}
- Maintain the same font style and text positioning as much as possible
- Do NOT add any new elements or remove existing design elements
- The output should look identical except the text language is {target_lang}
- Preserve all icons, images, and graphical elements exactly as they are{preserve}"""


class ImageTranslationError(ValueError):
    """The backend answered without a usable image."""


@dataclass(frozen=True)
class ImageTranslationRequest:
    image_bytes: bytes
    mime_type: str
    source_language: str
    target_language: str
    aspect_ratio: str
    preserve_words: Tuple[str, ...] = field(default_factory=tuple)


class ImageTranslator(ABC):
    """Anything that turns a request into encoded image bytes."""

    @abstractmethod
    def translate(self, request: ImageTranslationRequest) -> bytes:
        ...


def mime_type_for(path: Path) -> str:
    return MIME_TYPES.get(Path(path).suffix.lower(), "image/png")


def aspect_ratio_for(device_type: DeviceType) -> str:
    return DEVICE_ASPECT_RATIOS[DeviceType(device_type)]


def build_prompt(
    source_language: str,
    target_language: str,
    preserve_words: Optional[Sequence[str]] = None,
) -> str:
    words = [w for w in (preserve_words or []) if w and w.strip()]
    preserve = ""
    if words:
        preserve = (
            "\n- Do NOT translate these words, keep them exactly as-is: "
            + ", ".join(words)
        )
    return PROMPT_TEMPLATE.format(
        source_lang=source_language,
        target_lang=target_language,
        preserve=preserve,
    )


def setup_gemini(api_key: str) -> genai.Client:
    """Create a Google GenAI client (google-genai SDK)."""
    return genai.Client(api_key=api_key)


def _normalized_finish_reason(value: object) -> str:
    if value is None:
        return ""
    name = getattr(value, "name", None)
    if isinstance(name, str):
        return name.lower()
    raw_value = getattr(value, "value", None)
    if isinstance(raw_value, str):
        return raw_value.lower()
    return str(value).lower()


def extract_image_bytes(response: object) -> bytes:
    """Pull the first inline image out of a generate_content response."""
    candidates = getattr(response, "candidates", None)
    if not candidates:
        raise ImageTranslationError("No response from Gemini API")

    first_candidate = candidates[0]
    finish_reason = _normalized_finish_reason(getattr(first_candidate, "finish_reason", None))

    content = getattr(first_candidate, "content", None)
    parts = getattr(content, "parts", None)
    if not parts:
        if finish_reason and "stop" not in finish_reason:
            raise ImageTranslationError(
                f"No content parts in response (finish_reason={finish_reason})"
            )
        raise ImageTranslationError("No content parts in response")

    for part in parts:
        inline_data = getattr(part, "inline_data", None)
        data = getattr(inline_data, "data", None)
        if data:
            return data

    raise ImageTranslationError("No image data in Gemini response")


class GeminiImageTranslator(ImageTranslator):
    """Sends one screenshot per call. Retrying is left to the caller."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_IMAGE_MODEL,
        client: Optional[genai.Client] = None,
    ):
        if client is None:
            if not api_key:
                raise ValueError(
                    "A Gemini API key is required (set GEMINI_API_KEY or GOOGLE_API_KEY)."
                )
            client = setup_gemini(api_key)
        self.client = client
        self.model = model

    def translate(self, request: ImageTranslationRequest) -> bytes:
        if request.aspect_ratio not in GEMINI_ASPECT_RATIOS:
            raise ValueError(f"Unsupported aspect ratio: {request.aspect_ratio}")
        prompt = build_prompt(
            request.source_language, request.target_language, request.preserve_words
        )
        logging.debug(
            "Requesting %s -> %s (%s) from %s",
            request.source_language,
            request.target_language,
            request.aspect_ratio,
            self.model,
        )
        response = self.client.models.generate_content(
            model=self.model,
            contents=[
                prompt,
                types.Part.from_bytes(data=request.image_bytes, mime_type=request.mime_type),
            ],
            config=types.GenerateContentConfig(
                response_modalities=["TEXT", "IMAGE"],
                image_config=types.ImageConfig(aspect_ratio=request.aspect_ratio),
            ),
        )
        return extract_image_bytes(response)
