"""OS link backends used by the VRF reconciler."""

from __future__ import annotations

from typing import Optional

from .base import LinkBackend  # noqa: F401
from .iproute2 import IPRoute2Backend  # noqa: F401

__all__ = ["LinkBackend", "IPRoute2Backend", "build_backend"]

DEFAULT_COMMAND_TIMEOUT = 30.0


def build_backend(name: str, *, timeout: Optional[float] = None) -> LinkBackend:
    """Return the backend registered under ``name``.

    ``timeout`` bounds each ``ip`` invocation of the iproute2 backend.  The
    netlink backend has no per-operation timeout, so passing one is an error.
    """

    if name == "iproute2":
        return IPRoute2Backend(timeout=DEFAULT_COMMAND_TIMEOUT if timeout is None else timeout)
    if name == "netlink":
        if timeout is not None:
            raise ValueError("the netlink link backend does not support a command timeout")
        # pyroute2 is only imported when the netlink backend is selected.
        from .netlink import NetlinkBackend

        return NetlinkBackend()
    raise ValueError(f"unsupported link backend '{name}'")
