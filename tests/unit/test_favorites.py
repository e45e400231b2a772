import asyncio

from mediadesk.core.settings_store import VIDEO_SETTINGS, SettingsStore
from mediadesk.favorites import order_options, toggle_favorite_codec, toggle_favorite_format
from conftest import backend


def test_favorites_come_first_in_their_own_order():
    options = ["webm", "mp4", "MOV", "mkv", "avi"]
    assert order_options(options, ["mkv", "mp4"]) == ["mkv", "mp4", "avi", "MOV", "webm"]


def test_unavailable_favorites_and_duplicates_are_dropped():
    assert order_options(["mp4", "mp4", "mkv"], ["flv", "mkv", "mkv"]) == ["mkv", "mp4"]
    assert order_options([], ["mkv"]) == []


def test_toggle_adds_and_removes_full_settings_value():
    store = SettingsStore(backend())
    asyncio.run(store.load())
    events = []
    store.subscribe(events.append)

    assert toggle_favorite_codec(store, "vp9")
    assert store.get_video_settings().codec_favorite_list == ["hevc", "vp9"]
    assert toggle_favorite_format(store, "mkv")
    assert store.get_video_settings().format_favorite_list == ["webm"]
    assert store.get_video_settings().input_directory == "/clips/in"
    assert events == [VIDEO_SETTINGS, VIDEO_SETTINGS]


def test_toggle_before_load_does_nothing():
    store = SettingsStore(backend())
    assert toggle_favorite_format(store, "mp4") is False
    assert store.get_video_settings() is None
