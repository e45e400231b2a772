"""Tiny listener registry used by the store, forms, controller and monitor."""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, TypeVar

LOGGER = logging.getLogger("mediadesk.events")

CallbackT = TypeVar("CallbackT", bound=Callable[..., Any])


class Subscription:
    """Handle returned by ``subscribe``; ``unsubscribe`` is idempotent."""

    def __init__(self, detach: Callable[[], None]):
        self._detach: Callable[[], None] | None = detach

    @property
    def active(self) -> bool:
        return self._detach is not None

    def unsubscribe(self) -> None:
        detach, self._detach = self._detach, None
        if detach is not None:
            detach()


class Listeners(Generic[CallbackT]):
    def __init__(self, owner: str):
        self._owner = owner
        self._callbacks: list[CallbackT] = []

    def __len__(self) -> int:
        return len(self._callbacks)

    def add(self, callback: CallbackT) -> Subscription:
        self._callbacks.append(callback)

        def detach() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return Subscription(detach)

    def emit(self, *args: Any) -> None:
        for callback in list(self._callbacks):
            try:
                callback(*args)
            except Exception:
                LOGGER.exception("%s listener %r failed", self._owner, callback)

    def clear(self) -> None:
        self._callbacks.clear()
