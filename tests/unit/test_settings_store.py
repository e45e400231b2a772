import asyncio

import pytest

from mediadesk.core.settings_store import IMAGE_SETTINGS, INITIALIZED, VIDEO_SETTINGS, SettingsStore
from mediadesk.errors import BackendUnavailable, RpcError
from mediadesk.models import ImageSettings
from mediadesk.rpc.bridge import Operation
from conftest import FakeBridge, backend, drain


def test_load_fetches_config_and_capabilities():
    bridge = backend()
    store = SettingsStore(bridge)
    events = []
    store.subscribe(events.append)

    assert store.get_image_settings() is None, "nothing before load"
    asyncio.run(store.load())

    assert store.is_initialized
    assert store.get_video_settings().codec == "hevc"
    assert store.capabilities.video_codecs == ("h264", "hevc", "vp9")
    assert events == [INITIALIZED]
    assert {op for op, _ in bridge.calls} == {
        Operation.LOAD_CONFIG,
        Operation.GET_SUPPORTED_IMAGE_FORMATS,
        Operation.GET_SUPPORTED_VIDEO_FORMATS,
        Operation.GET_SUPPORTED_VIDEO_CODECS,
    }


def test_any_failed_call_leaves_store_uninitialized():
    bridge = backend(**{Operation.GET_SUPPORTED_VIDEO_CODECS: RpcError("codecs", "boom")})
    store = SettingsStore(bridge)

    with pytest.raises(BackendUnavailable):
        asyncio.run(store.load())
    assert not store.is_initialized
    assert store.get_image_settings() is None
    assert store.capabilities.image_formats == ()


def test_failed_reload_keeps_previous_state():
    bridge = backend()
    store = SettingsStore(bridge)
    asyncio.run(store.load())
    bridge.respond(Operation.LOAD_CONFIG, RpcError("load_config", "gone"))

    with pytest.raises(BackendUnavailable):
        asyncio.run(store.load())
    assert store.is_initialized, "initialized never reverts"
    assert store.get_image_settings().format == "webp"


def test_unreadable_config_is_backend_unavailable():
    bridge = backend(**{Operation.LOAD_CONFIG: {"imageSettings": {"minPixelCount": "lots"}}})
    with pytest.raises(BackendUnavailable):
        asyncio.run(SettingsStore(bridge).load())


def test_reload_emits_settings_events_and_skips_capabilities():
    bridge = backend()
    store = SettingsStore(bridge)
    events = []
    store.subscribe(events.append)

    async def scenario():
        await store.load()
        await store.load()

    asyncio.run(scenario())
    assert events == [INITIALIZED, IMAGE_SETTINGS, VIDEO_SETTINGS]
    assert bridge.count(Operation.LOAD_CONFIG) == 2
    assert bridge.count(Operation.GET_SUPPORTED_IMAGE_FORMATS) == 1


def test_concurrent_loads_share_one_request():
    bridge = backend(**{Operation.LOAD_CONFIG: FakeBridge.HOLD})
    store = SettingsStore(bridge)

    async def scenario():
        first = asyncio.ensure_future(store.load())
        second = asyncio.ensure_future(store.load())
        await drain()
        bridge.pending[Operation.LOAD_CONFIG][0].set_result({})
        return await asyncio.gather(first, second)

    a, b = asyncio.run(scenario())
    assert a is b
    assert bridge.count(Operation.LOAD_CONFIG) == 1


def test_updates_replace_whole_half_and_never_call_backend():
    bridge = backend()
    store = SettingsStore(bridge)
    asyncio.run(store.load())
    calls_before = len(bridge.calls)
    events = []
    store.subscribe(events.append)

    store.update_image_settings(ImageSettings(input_directory="/other"))

    assert store.get_image_settings().input_directory == "/other"
    assert store.get_image_settings().format == "png", "no field merge with the old value"
    assert store.get_video_settings().codec == "hevc"
    assert events == [IMAGE_SETTINGS]
    assert len(bridge.calls) == calls_before


def test_updates_before_load_are_dropped():
    store = SettingsStore(backend())
    store.update_image_settings(ImageSettings())
    assert store.get_image_settings() is None
    assert not store.is_initialized


def test_unsubscribed_listener_is_not_called():
    store = SettingsStore(backend())
    events = []
    sub = store.subscribe(events.append)
    sub.unsubscribe()
    sub.unsubscribe()
    asyncio.run(store.load())
    assert events == []
