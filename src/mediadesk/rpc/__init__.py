"""Call-and-await bridge to the processing backend."""

from .bridge import Operation, RpcBridge  # noqa: F401
from .http_bridge import HttpRpcBridge  # noqa: F401

__all__ = ["Operation", "RpcBridge", "HttpRpcBridge"]
