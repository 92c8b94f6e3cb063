from pathlib import Path

import pytest

from conftest import make_image

from screenshot_localizer.inventory import (
    DeviceType,
    ScreenshotInfo,
    ScreenshotInventory,
    describe_numbers,
    screenshot_number,
    select_screenshots,
)


def _shots(root: Path, locale: str, device: str, names):
    for name in names:
        make_image(root / "demo" / "screenshots" / locale / device / name, (4, 8))


def test_scan_orders_by_device_then_number(tmp_path):
    _shots(tmp_path, "en-US", "tablet", ["2.png", "1.jpg"])
    _shots(tmp_path, "en-US", "phone", ["10.png", "2.webp", "1.PNG"])

    shots = ScreenshotInventory(tmp_path).scan("demo", "en-US")

    assert [(s.device_type, s.filename) for s in shots] == [
        (DeviceType.PHONE, "1.PNG"),
        (DeviceType.PHONE, "2.webp"),
        (DeviceType.PHONE, "10.png"),
        (DeviceType.TABLET, "1.jpg"),
        (DeviceType.TABLET, "2.png"),
    ]
    assert shots[2].number == 10
    assert shots[0].full_path == tmp_path / "demo" / "screenshots" / "en-US" / "phone" / "1.PNG"


def test_scan_ignores_non_screenshot_files(tmp_path):
    _shots(tmp_path, "en-US", "phone", ["1.png", "cover.png", "0.png", "1-alt.png", "3.gif"])
    (tmp_path / "demo" / "screenshots" / "en-US" / "phone" / "4.txt").write_text("x")

    shots = ScreenshotInventory(tmp_path).scan("demo", "en-US")

    assert [s.filename for s in shots] == ["1.png"]


def test_scan_missing_locale_is_empty(tmp_path):
    assert ScreenshotInventory(tmp_path).scan("demo", "ko-KR") == []


def test_scan_respects_device_order(tmp_path):
    _shots(tmp_path, "en-US", "phone", ["1.png"])
    _shots(tmp_path, "en-US", "tablet", ["1.png"])

    shots = ScreenshotInventory(tmp_path).scan(
        "demo", "en-US", device_types=[DeviceType.TABLET, DeviceType.PHONE]
    )

    assert [s.device_type for s in shots] == [DeviceType.TABLET, DeviceType.PHONE]


def test_scan_does_not_pick_up_raw_files(tmp_path):
    _shots(tmp_path, "ko-KR", "phone", ["1.png"])
    _shots(tmp_path, "ko-KR", "phone/raw", ["1.png", "2.png"])
    inventory = ScreenshotInventory(tmp_path)

    assert [s.filename for s in inventory.scan("demo", "ko-KR")] == ["1.png"]
    raw = inventory.scan_raw("demo", "ko-KR")
    assert [s.filename for s in raw] == ["1.png", "2.png"]
    assert all(s.full_path.parent.name == "raw" for s in raw)


def test_locale_listing(tmp_path):
    _shots(tmp_path, "en-US", "phone", ["1.png"])
    _shots(tmp_path, "ko-KR", "tablet/raw", ["1.png"])
    _shots(tmp_path, ".cache", "phone", ["1.png"])
    (tmp_path / "demo" / "screenshots" / "notes.txt").write_text("x")
    inventory = ScreenshotInventory(tmp_path)

    assert inventory.list_available_locales("demo") == ["en-US", "ko-KR"]
    assert inventory.list_raw_locales("demo") == ["ko-KR"]
    assert inventory.list_available_locales("missing") == []


def test_output_paths(tmp_path):
    inventory = ScreenshotInventory(tmp_path)
    base = tmp_path / "demo" / "screenshots" / "ja-JP" / "phone"

    assert inventory.output_path("demo", "ja-JP", DeviceType.PHONE, "1.png") == base / "1.png"
    assert inventory.output_path("demo", "ja-JP", "phone", "1.png", raw=True) == base / "raw" / "1.png"
    created = inventory.ensure_output_dir("demo", "ja-JP", DeviceType.PHONE, raw=True)
    assert created == base / "raw"
    assert created.is_dir()


def test_select_by_flat_numbers(tmp_path):
    _shots(tmp_path, "en-US", "phone", ["1.png", "2.png", "3.png"])
    _shots(tmp_path, "en-US", "tablet", ["1.png", "2.png"])
    shots = ScreenshotInventory(tmp_path).scan("demo", "en-US")

    selected = select_screenshots(shots, numbers=[1, 3])

    assert [(s.device_type.value, s.number) for s in selected] == [
        ("phone", 1),
        ("phone", 3),
        ("tablet", 1),
    ]


def test_select_per_device(tmp_path):
    _shots(tmp_path, "en-US", "phone", ["1.png", "2.png"])
    _shots(tmp_path, "en-US", "tablet", ["1.png", "2.png"])
    shots = ScreenshotInventory(tmp_path).scan("demo", "en-US")

    selected = select_screenshots(shots, numbers={"phone": [2], "tablet": []})

    assert [(s.device_type.value, s.number) for s in selected] == [
        ("phone", 2),
        ("tablet", 1),
        ("tablet", 2),
    ]


def test_select_by_device_type(tmp_path):
    _shots(tmp_path, "en-US", "phone", ["1.png"])
    _shots(tmp_path, "en-US", "tablet", ["1.png"])
    shots = ScreenshotInventory(tmp_path).scan("demo", "en-US")

    assert [s.device_type for s in select_screenshots(shots, device_types=["tablet"])] == [
        DeviceType.TABLET
    ]


def test_screenshot_number():
    assert screenshot_number("12.jpeg") == 12
    assert screenshot_number("0.png") is None
    assert screenshot_number("a1.png") is None


def test_describe_numbers():
    assert describe_numbers(None) == ""
    assert describe_numbers([1, 3]) == "all: 1, 3"
    assert describe_numbers({"phone": [1, 2], "tablet": []}) == "phone: 1, 2"


def test_number_of_unnumbered_file_raises(tmp_path):
    info = ScreenshotInfo(DeviceType.PHONE, "cover.png", tmp_path / "cover.png")
    with pytest.raises(ValueError, match="cover.png"):
        info.number
