"""HTTP transport for the backend bridge.

Every operation is a JSON POST to ``{base_url}/invoke/{operation}``.  The
backend answers with an envelope::

    {"ok": true, "result": ...}
    {"ok": false, "error": "human readable reason"}

``requests`` is blocking, so each call runs on a worker thread via
:func:`asyncio.to_thread` and the event loop stays responsive.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Optional

import requests

from mediadesk.config.client_config import ClientConfig
from mediadesk.errors import RpcError
from mediadesk.rpc.bridge import Operation

log = logging.getLogger("mediadesk.rpc")

# safe to send twice; other operations are not retried after a read timeout or a 5xx
IDEMPOTENT = frozenset(
    {
        Operation.LOAD_CONFIG,
        Operation.GET_SUPPORTED_IMAGE_FORMATS,
        Operation.GET_SUPPORTED_VIDEO_FORMATS,
        Operation.GET_SUPPORTED_VIDEO_CODECS,
        Operation.GET_PROGRESS_INFO,
    }
)
LONG_RUNNING = frozenset({Operation.PROCESS_IMAGES, Operation.PROCESS_VIDEOS})


class HttpRpcBridge:
    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        max_retries: int = 2,
        backoff: float = 0.5,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff = backoff
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})

    @classmethod
    def from_config(cls, config: ClientConfig) -> "HttpRpcBridge":
        return cls(
            config.backend_url,
            timeout=config.rpc_timeout,
            max_retries=config.rpc_max_retries,
            backoff=config.rpc_backoff,
        )

    async def call(self, operation: str, payload: Optional[dict[str, Any]] = None) -> Any:
        return await asyncio.to_thread(self._post, operation, payload or {})

    def close(self) -> None:
        self._session.close()

    def _timeout(self, operation: str):
        if operation in LONG_RUNNING:
            # the call returns when the job ends; only bound the connect
            return (self.timeout, None)
        return self.timeout

    def _post(self, operation: str, payload: dict[str, Any]) -> Any:
        url = f"{self.base_url}/invoke/{operation}"
        idempotent = operation in IDEMPOTENT
        attempt = 0
        while True:
            try:
                resp = self._session.post(url, json=payload, timeout=self._timeout(operation))
            except (requests.ConnectionError, requests.Timeout) as exc:
                # a read timeout may mean the backend already acted on the request
                retryable = idempotent or not isinstance(exc, requests.ReadTimeout)
                if not retryable or attempt >= self.max_retries:
                    raise RpcError(operation, f"backend unreachable: {exc}") from exc
                attempt += 1
                log.debug("%s: %s, retry %d/%d", operation, exc, attempt, self.max_retries)
                time.sleep(self.backoff * attempt)
                continue

            if resp.status_code >= 500 and idempotent and attempt < self.max_retries:
                attempt += 1
                log.debug("%s: HTTP %s, retry %d/%d", operation, resp.status_code, attempt, self.max_retries)
                time.sleep(self.backoff * attempt)
                continue
            return self._unwrap(operation, resp)

    @staticmethod
    def _unwrap(operation: str, resp: requests.Response) -> Any:
        try:
            body = resp.json()
        except ValueError:
            body = None
        if resp.status_code >= 400:
            reason = body.get("error") if isinstance(body, dict) else resp.text[:500]
            raise RpcError(operation, reason or f"HTTP {resp.status_code}", status=resp.status_code)
        if not isinstance(body, dict) or "ok" not in body:
            raise RpcError(operation, "malformed response envelope", status=resp.status_code)
        if not body["ok"]:
            raise RpcError(operation, body.get("error") or "unknown error", status=resp.status_code)
        return body.get("result")


__all__ = ["HttpRpcBridge"]
