"""Shared fakes: a recording bridge and a manual clock."""

from __future__ import annotations

import asyncio
from collections import defaultdict, deque
from typing import Any, Callable, Optional

import pytest

from mediadesk.rpc.bridge import Operation
from mediadesk.runtime.storage import STORAGE_ENV, storage_root

BACKEND_CONFIG = {
    "imageSettings": {
        "inputDirectory": "/media/in",
        "outputDirectory": "/media/out",
        "searchChildFolders": True,
        "keepChildFoldersStructureInOutputDirectory": False,
        "minPixelCount": 720,
        "addLogo": False,
        "logoPath": None,
        "logoScale": 10,
        "logoXOffsetScale": 0,
        "logoYOffsetScale": 0,
        "logoCorner": "bottomRight",
        "shouldConvertFormat": True,
        "format": "webp",
        "clearFilesInputDirectory": False,
        "clearFilesOutputDirectory": False,
        "overwriteExistingFilesOutputDirectory": True,
    },
    "videoSettings": {
        "inputDirectory": "/clips/in",
        "outputDirectory": "/clips/out",
        "searchChildFolders": False,
        "keepChildFoldersStructureInOutputDirectory": False,
        "minPixelCount": 1080,
        "addLogo": False,
        "logoPath": None,
        "logoScale": 10,
        "logoXOffsetScale": 0,
        "logoYOffsetScale": 0,
        "logoCorner": "topLeft",
        "shouldConvertFormat": False,
        "format": "mkv",
        "codec": "hevc",
        "shouldConvertCodec": True,
        "formatFavoriteList": ["mkv", "webm"],
        "codecFavoriteList": ["hevc"],
        "clearFilesInputDirectory": False,
        "clearFilesOutputDirectory": False,
        "overwriteExistingFilesOutputDirectory": False,
    },
}

CAPABILITIES = {
    Operation.GET_SUPPORTED_IMAGE_FORMATS: ["png", "jpeg", "webp"],
    Operation.GET_SUPPORTED_VIDEO_FORMATS: ["mp4", "mkv", "mov", "webm"],
    Operation.GET_SUPPORTED_VIDEO_CODECS: ["h264", "hevc", "vp9"],
}


def progress(percentage: float, current: int = 1, total: int = 10, status: str = "Processing") -> dict:
    return {
        "status": status,
        "current": current,
        "total": total,
        "percentage": percentage,
        "itemsPerSecond": 2.0,
        "elapsedTime": 1.5,
        "estimatedRemaining": None,
    }


class FakeBridge:
    """Records calls; answers from a per-operation script.

    A scripted value that is an exception is raised; a callable is called with
    the payload; ``HOLD`` parks the call on a future the test resolves.  The
    last scripted value repeats.
    """

    HOLD = object()

    def __init__(self, responses: Optional[dict[str, Any]] = None):
        self.calls: list[tuple[str, Any]] = []
        self.pending: dict[str, list[asyncio.Future]] = defaultdict(list)
        self._script: dict[str, deque] = {}
        for operation, value in (responses or {}).items():
            self.respond(operation, value)

    def respond(self, operation: str, *values: Any) -> "FakeBridge":
        self._script[operation] = deque(values)
        return self

    def count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)

    def payloads(self, operation: str) -> list[Any]:
        return [payload for op, payload in self.calls if op == operation]

    async def call(self, operation: str, payload: Any = None) -> Any:
        self.calls.append((operation, payload))
        script = self._script.get(operation)
        if not script:
            return None
        value = script.popleft() if len(script) > 1 else script[0]
        if value is FakeBridge.HOLD:
            future = asyncio.get_running_loop().create_future()
            self.pending[operation].append(future)
            return await future
        if isinstance(value, BaseException):
            raise value
        if callable(value):
            return value(payload)
        return value


def backend(**overrides: Any) -> FakeBridge:
    responses: dict[str, Any] = {Operation.LOAD_CONFIG: BACKEND_CONFIG, **CAPABILITIES}
    responses.update(overrides)
    return FakeBridge(responses)


class ManualTimer:
    def __init__(self, when: float, callback: Callable[[], None], interval: Optional[float] = None):
        self.when = when
        self.callback = callback
        self.interval = interval
        self.cancelled = False
        self.fired = 0

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic clock: timers fire only from :meth:`advance`."""

    def __init__(self):
        self.now = 0.0
        self.timers: list[ManualTimer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    def call_every(self, interval: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.now + interval, callback, interval)
        self.timers.append(timer)
        return timer

    def active(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]

    def one_shots(self) -> list[ManualTimer]:
        return [t for t in self.active() if t.interval is None]

    def repeating(self) -> list[ManualTimer]:
        return [t for t in self.active() if t.interval is not None]

    @property
    def fired(self) -> int:
        return sum(t.fired for t in self.timers)

    async def advance(self, seconds: float) -> None:
        """Move the clock, firing due timers in order and letting the loop run after each."""
        target = self.now + seconds
        while True:
            due = [t for t in self.active() if t.when <= target + 1e-9]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self.now = max(self.now, timer.when)
            if timer.interval is None:
                timer.cancelled = True
            else:
                timer.when += timer.interval
            timer.fired += 1
            timer.callback()
            await drain()
        self.now = target


async def drain(rounds: int = 20) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture(autouse=True)
def _storage_root(tmp_path, monkeypatch):
    monkeypatch.setenv(STORAGE_ENV, str(tmp_path / "var"))
    storage_root.cache_clear()
    yield
    storage_root.cache_clear()
