from types import SimpleNamespace

import pytest

from screenshot_localizer.gemini import (
    GeminiImageTranslator,
    ImageTranslationError,
    ImageTranslationRequest,
    ImageTranslator,
    aspect_ratio_for,
    build_prompt,
    extract_image_bytes,
    mime_type_for,
)
from screenshot_localizer.inventory import DeviceType


def _response(*parts, finish_reason=None):
    content = SimpleNamespace(parts=list(parts))
    return SimpleNamespace(candidates=[SimpleNamespace(content=content, finish_reason=finish_reason)])


def _image_part(data: bytes):
    return SimpleNamespace(inline_data=SimpleNamespace(data=data), text=None)


def _text_part(text: str):
    return SimpleNamespace(inline_data=None, text=text)


class _RecordingModels:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        return self.response


def test_prompt_mentions_languages():
    prompt = build_prompt("English", "Korean")
    assert "text in English" in prompt
    assert "to Korean" in prompt
    assert "Do NOT translate these words" not in prompt


def test_prompt_lists_preserved_words():
    prompt = build_prompt("English", "Japanese", ["Pabal", " ", "Aurora"])
    assert prompt.endswith("keep them exactly as-is: Pabal, Aurora")


def test_device_aspect_ratios():
    assert aspect_ratio_for(DeviceType.PHONE) == "9:16"
    assert aspect_ratio_for("tablet") == "3:4"


def test_mime_types():
    assert mime_type_for("1.PNG") == "image/png"
    assert mime_type_for("2.jpeg") == "image/jpeg"
    assert mime_type_for("3.webp") == "image/webp"


def test_extract_first_inline_image():
    response = _response(_text_part("here you go"), _image_part(b"img"), _image_part(b"other"))
    assert extract_image_bytes(response) == b"img"


@pytest.mark.parametrize(
    "response,message",
    [
        (SimpleNamespace(candidates=[]), "No response from Gemini API"),
        (_response(), "No content parts in response"),
        (_response(_text_part("sorry")), "No image data in Gemini response"),
    ],
)
def test_extract_errors(response, message):
    with pytest.raises(ImageTranslationError, match=message):
        extract_image_bytes(response)


def test_extract_reports_unusual_finish_reason():
    response = _response(finish_reason=SimpleNamespace(name="SAFETY"))
    with pytest.raises(ImageTranslationError, match="finish_reason=safety"):
        extract_image_bytes(response)


def test_translator_requires_key():
    with pytest.raises(ValueError):
        GeminiImageTranslator(api_key=None)


def test_translator_sends_prompt_image_and_aspect_ratio():
    models = _RecordingModels(_response(_image_part(b"translated")))
    client = SimpleNamespace(models=models)
    translator = GeminiImageTranslator(model="test-model", client=client)

    result = translator.translate(
        ImageTranslationRequest(
            image_bytes=b"source",
            mime_type="image/png",
            source_language="English",
            target_language="Korean",
            aspect_ratio="9:16",
            preserve_words=("Pabal",),
        )
    )

    assert result == b"translated"
    (call,) = models.calls
    assert call["model"] == "test-model"
    prompt, image = call["contents"]
    assert "to Korean" in prompt and "Pabal" in prompt
    assert image.inline_data.data == b"source"
    assert image.inline_data.mime_type == "image/png"
    assert call["config"].response_modalities == ["TEXT", "IMAGE"]
    assert call["config"].image_config.aspect_ratio == "9:16"


def test_translator_rejects_unknown_aspect_ratio():
    models = _RecordingModels(_response(_image_part(b"x")))
    translator = GeminiImageTranslator(client=SimpleNamespace(models=models))

    with pytest.raises(ValueError, match="Unsupported aspect ratio"):
        translator.translate(
            ImageTranslationRequest(
                image_bytes=b"source",
                mime_type="image/png",
                source_language="English",
                target_language="Korean",
                aspect_ratio="7:3",
            )
        )
    assert models.calls == []


def test_translator_base_cannot_be_instantiated():
    with pytest.raises(TypeError):
        ImageTranslator()
