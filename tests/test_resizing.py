from PIL import Image

from conftest import make_image

from screenshot_localizer.imaging import ImageDimensions
from screenshot_localizer.inventory import DeviceType, ScreenshotInventory
from screenshot_localizer.resizing import ResizeRun, ResizeStatus, build_resize_tasks


def _layout(tmp_path):
    base = tmp_path / "demo" / "screenshots"
    for device, size in (("phone", (1242, 2688)), ("tablet", (2048, 2732))):
        make_image(base / "en-US" / device / "1.png", size)
        make_image(base / "en-US" / device / "2.png", size)
    make_image(base / "ko-KR" / "phone" / "raw" / "1.png", (1536, 2752), color=(9, 9, 9))
    make_image(base / "ko-KR" / "phone" / "raw" / "7.png", (1536, 2752))
    make_image(base / "ko-KR" / "tablet" / "raw" / "2.png", (1792, 2400))
    make_image(base / "ja-JP" / "phone" / "raw" / "2.png", (1536, 2752))
    inventory = ScreenshotInventory(tmp_path)
    return inventory, inventory.scan("demo", "en-US")


def test_tasks_only_for_raw_files_with_a_source(tmp_path):
    inventory, source = _layout(tmp_path)

    tasks = build_resize_tasks(inventory, "demo", source, ["ja-JP", "ko-KR"])

    assert [(t.locale, t.device_type.value, t.filename) for t in tasks] == [
        ("ja-JP", "phone", "2.png"),
        ("ko-KR", "phone", "1.png"),
        ("ko-KR", "tablet", "2.png"),
    ]
    assert tasks[1].output_path == tmp_path / "demo" / "screenshots" / "ko-KR" / "phone" / "1.png"


def test_tasks_filtered_by_device_and_number(tmp_path):
    inventory, source = _layout(tmp_path)

    tasks = build_resize_tasks(
        inventory, "demo", source, ["ko-KR"], device_types=[DeviceType.TABLET], numbers=[2]
    )

    assert [(t.device_type, t.filename) for t in tasks] == [(DeviceType.TABLET, "2.png")]


def test_skip_existing_final_files(tmp_path):
    inventory, source = _layout(tmp_path)
    make_image(tmp_path / "demo" / "screenshots" / "ko-KR" / "phone" / "1.png", (1242, 2688))

    tasks = build_resize_tasks(inventory, "demo", source, ["ko-KR"], skip_existing=True)

    assert [(t.device_type.value, t.filename) for t in tasks] == [("tablet", "2.png")]


def test_run_resizes_to_canonical_sizes(tmp_path):
    inventory, source = _layout(tmp_path)
    tasks = build_resize_tasks(inventory, "demo", source, ["ko-KR"])

    run = ResizeRun(tasks)
    events = list(run)

    done = [e for e in events if e.status is ResizeStatus.COMPLETED]
    assert [(e.raw_dimensions, e.final_dimensions) for e in done] == [
        (ImageDimensions(1536, 2752), ImageDimensions(1242, 2688)),
        (ImageDimensions(1792, 2400), ImageDimensions(2048, 2732)),
    ]
    assert run.summary.resized == 2
    for task in tasks:
        with Image.open(task.output_path) as im:
            assert im.size == done[tasks.index(task)].final_dimensions.size
    # raw files stay in place
    assert all(t.raw_path.exists() for t in tasks)


def test_run_records_failures_and_missing_raw(tmp_path):
    inventory, source = _layout(tmp_path)
    tasks = build_resize_tasks(inventory, "demo", source, ["ko-KR"])
    tasks[0].raw_path.write_bytes(b"not an image")
    tasks[1].raw_path.unlink()

    run = ResizeRun(tasks)
    statuses = [e.status for e in run if e.status is not ResizeStatus.RESIZING]

    assert statuses == [ResizeStatus.FAILED, ResizeStatus.SKIPPED]
    assert run.summary.resized == 0
    assert run.summary.skipped == 1
    assert [err.path for err in run.summary.errors] == [tasks[0].raw_path]
