import asyncio

import pytest

from mediadesk.core.forms import ImageForm, VideoForm
from mediadesk.core.job_controller import JobKind, JobSubmissionController
from mediadesk.core.settings_store import SettingsStore
from mediadesk.errors import CancellationIgnored, InvalidSettings, RpcError, SubmissionRejected
from mediadesk.models import ImageSettings
from mediadesk.rpc.bridge import Operation
from conftest import FakeBridge, backend, drain


def _controller(kind, bridge=None):
    bridge = bridge or backend()
    store = SettingsStore(bridge)
    asyncio.run(store.load())
    return JobSubmissionController(bridge, store, kind), bridge, store


def _image_snapshot(**overrides):
    form = ImageForm(input_directory="/in", output_directory="/out", format="png")
    form.update(**overrides)
    return form.snapshot()


def test_image_submit_sends_wire_payload_and_toggles_processing():
    controller, bridge, _ = _controller(JobKind.IMAGE)
    seen = []
    controller.add_listener(seen.append)

    assert asyncio.run(controller.submit(_image_snapshot()))

    assert seen == [True, False]
    assert not controller.processing
    (payload,) = bridge.payloads(Operation.PROCESS_IMAGES)
    assert payload["imageSettings"]["inputDirectory"] == "/in"
    assert payload["imageSettings"]["logoCorner"] == "topLeft"


def test_image_submit_does_not_merge_prior_image_settings():
    controller, bridge, store = _controller(JobKind.IMAGE)
    snapshot = _image_snapshot()
    assert store.get_image_settings().overwrite_existing_files_output_directory is True

    asyncio.run(controller.submit(snapshot))

    sent = bridge.payloads(Operation.PROCESS_IMAGES)[0]["imageSettings"]
    assert sent["overwriteExistingFilesOutputDirectory"] is False


def test_video_submit_carries_stored_favorites():
    controller, bridge, _ = _controller(JobKind.VIDEO)
    form = VideoForm(input_directory="/v/in", output_directory="/v/out", format="mp4")
    snapshot = form.snapshot()
    assert "format_favorite_list" not in snapshot

    asyncio.run(controller.submit(snapshot))

    sent = bridge.payloads(Operation.PROCESS_VIDEOS)[0]["videoSettings"]
    assert sent["formatFavoriteList"] == ["mkv", "webm"]
    assert sent["codecFavoriteList"] == ["hevc"]
    assert sent["codec"] == "h264", "the form's codec wins over the stored one"
    assert sent["inputDirectory"] == "/v/in"


def test_video_submit_sends_edited_codec():
    controller, bridge, _ = _controller(JobKind.VIDEO)
    form = VideoForm(input_directory="/v/in", output_directory="/v/out", format="mkv")
    form.update(codec="vp9", should_convert_codec=True)

    assert asyncio.run(controller.submit(form.snapshot()))

    sent = bridge.payloads(Operation.PROCESS_VIDEOS)[0]["videoSettings"]
    assert sent["codec"] == "vp9"
    assert sent["shouldConvertCodec"] is True
    assert sent["codecFavoriteList"] == ["hevc"], "favorites are still merged in"


def test_video_submit_rejects_unsupported_codec():
    controller, bridge, _ = _controller(JobKind.VIDEO)
    form = VideoForm(input_directory="/v/in", output_directory="/v/out", format="mkv", codec="divx")

    with pytest.raises(InvalidSettings) as exc:
        asyncio.run(controller.submit(form.snapshot()))
    assert "codec" in exc.value.errors
    assert bridge.count(Operation.PROCESS_VIDEOS) == 0


def test_invalid_settings_never_reach_backend():
    controller, bridge, _ = _controller(JobKind.IMAGE)
    seen = []
    controller.add_listener(seen.append)

    with pytest.raises(InvalidSettings) as exc:
        asyncio.run(controller.submit(_image_snapshot(min_pixel_count=0)))
    assert "minPixelCount" in exc.value.errors

    with pytest.raises(InvalidSettings):
        asyncio.run(controller.submit(_image_snapshot(add_logo=True, logo_path="")))

    assert bridge.count(Operation.PROCESS_IMAGES) == 0
    assert seen == []


def test_unsupported_format_is_rejected_with_capabilities():
    controller, bridge, _ = _controller(JobKind.IMAGE)
    with pytest.raises(InvalidSettings):
        asyncio.run(controller.submit(_image_snapshot(format="tiff")))
    assert bridge.count(Operation.PROCESS_IMAGES) == 0


def test_rejected_submit_clears_processing_and_records_error(caplog):
    bridge = backend(**{Operation.PROCESS_IMAGES: RpcError("process_images", "disk full")})
    controller, _, _ = _controller(JobKind.IMAGE, bridge)

    with caplog.at_level("ERROR", logger="mediadesk.job_controller"):
        ok = asyncio.run(controller.submit(_image_snapshot()))

    assert ok is False
    assert not controller.processing
    assert isinstance(controller.last_error, SubmissionRejected)
    assert "Processing failed" in caplog.text


def test_cancel_clears_processing_synchronously():
    bridge = backend(**{Operation.PROCESS_IMAGES: FakeBridge.HOLD, Operation.CANCEL_PROCESS: FakeBridge.HOLD})
    controller, _, _ = _controller(JobKind.IMAGE, bridge)

    async def scenario():
        job = asyncio.ensure_future(controller.submit(_image_snapshot()))
        await drain()
        assert controller.processing
        task = controller.cancel()
        assert not controller.processing, "cleared before the backend answers"
        await drain()
        assert bridge.count(Operation.CANCEL_PROCESS) == 1
        bridge.pending[Operation.CANCEL_PROCESS][0].set_result(None)
        await task
        # the job call finishing later must not flip anything back
        bridge.pending[Operation.PROCESS_IMAGES][0].set_result(None)
        assert await job is True
        assert not controller.processing

    asyncio.run(scenario())


def test_failed_cancel_is_only_logged(caplog):
    bridge = backend(**{Operation.CANCEL_PROCESS: RpcError("cancel_process", "no job")})
    controller, _, _ = _controller(JobKind.VIDEO, bridge)

    async def scenario():
        with caplog.at_level("WARNING", logger="mediadesk.job_controller"):
            await controller.cancel()

    asyncio.run(scenario())
    assert not controller.processing
    assert isinstance(controller.last_error, CancellationIgnored)
    assert "Failed to cancel processing" in caplog.text


def test_stale_submit_does_not_clear_newer_job():
    bridge = backend(**{Operation.PROCESS_IMAGES: FakeBridge.HOLD})
    controller, _, _ = _controller(JobKind.IMAGE, bridge)

    async def scenario():
        first = asyncio.ensure_future(controller.submit(_image_snapshot()))
        await drain()
        controller.cancel()
        second = asyncio.ensure_future(controller.submit(_image_snapshot()))
        await drain()
        assert controller.processing
        bridge.pending[Operation.PROCESS_IMAGES][0].set_result(None)
        await first
        assert controller.processing, "first job ending must not end the second"
        bridge.pending[Operation.PROCESS_IMAGES][1].set_result(None)
        await second
        assert not controller.processing

    asyncio.run(scenario())


def test_image_payload_round_trips_through_settings_model():
    controller, _, _ = _controller(JobKind.IMAGE)
    settings = controller.build_payload(_image_snapshot(logo_corner="BottomLeft"))
    assert isinstance(settings, ImageSettings)
    assert settings.to_wire()["logoCorner"] == "bottomLeft"
