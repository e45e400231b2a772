"""Exception types shared by the client core."""

from __future__ import annotations

from typing import Any, Mapping


class MediaDeskError(RuntimeError):
    """Base class for every error raised by mediadesk."""


class RpcError(MediaDeskError):
    def __init__(self, operation: str, message: Any, status: int | None = None):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.message = message
        self.status = status


class BackendUnavailable(MediaDeskError):
    """Persisted configuration or a capability list could not be fetched."""


class SubmissionRejected(MediaDeskError):
    """The backend refused or failed a start-job call."""


class CancellationIgnored(MediaDeskError):
    """The backend cancel call failed; local state was cleared anyway."""


class PollTransient(MediaDeskError):
    """A single progress query failed or returned something unreadable."""


class InvalidSettings(MediaDeskError, ValueError):
    """Form values rejected by the validator before reaching the backend."""

    def __init__(self, errors: Mapping[str, str]):
        self.errors = dict(errors)
        summary = "; ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(summary or "invalid settings")


__all__ = [
    "MediaDeskError",
    "RpcError",
    "BackendUnavailable",
    "SubmissionRejected",
    "CancellationIgnored",
    "PollTransient",
    "InvalidSettings",
]
