"""Link backend talking rtnetlink directly through pyroute2."""

from __future__ import annotations

import logging
import socket
from typing import List, Optional

from pyroute2 import IPRoute
from pyroute2.netlink.exceptions import NetlinkError

from ..errors import LinkCommandError
from .base import LinkBackend

LOG = logging.getLogger(__name__)


def _code(exc: Exception) -> Optional[int]:
    # NetlinkError carries .code; socket failures from IPRoute() carry .errno.
    if isinstance(exc, NetlinkError):
        return exc.code
    return getattr(exc, "errno", None)


class NetlinkBackend(LinkBackend):
    """Perform link and address operations with :class:`pyroute2.IPRoute`.

    A fresh socket is opened per operation so nothing is held between passes.
    """

    def _index(self, ipr: IPRoute, name: str) -> int:
        links = ipr.link_lookup(ifname=name)
        if not links:
            raise LinkCommandError(f"netlink lookup {name}", None, "no such device")
        return links[0]

    def link_exists(self, name: str) -> bool:
        try:
            with IPRoute() as ipr:
                return bool(ipr.link_lookup(ifname=name))
        except (NetlinkError, OSError) as exc:
            raise LinkCommandError(f"netlink lookup {name}", _code(exc), str(exc)) from exc

    def add_vrf(self, name: str, table_id: int) -> None:
        LOG.debug("netlink: add vrf %s table %d", name, table_id)
        try:
            with IPRoute() as ipr:
                ipr.link("add", ifname=name, kind="vrf", vrf_table=table_id)
        except (NetlinkError, OSError) as exc:
            raise LinkCommandError(f"netlink add vrf {name}", _code(exc), str(exc)) from exc

    def set_up(self, name: str) -> None:
        LOG.debug("netlink: set %s up", name)
        try:
            with IPRoute() as ipr:
                ipr.link("set", index=self._index(ipr, name), state="up")
        except (NetlinkError, OSError) as exc:
            raise LinkCommandError(f"netlink set {name} up", _code(exc), str(exc)) from exc

    def addresses(self, name: str) -> List[str]:
        try:
            with IPRoute() as ipr:
                messages = ipr.get_addr(index=self._index(ipr, name), family=socket.AF_INET)
                return [
                    f"{msg.get_attr('IFA_ADDRESS')}/{msg['prefixlen']}" for msg in messages
                ]
        except (NetlinkError, OSError) as exc:
            raise LinkCommandError(f"netlink get addresses {name}", _code(exc), str(exc)) from exc

    def _addr(self, command: str, name: str, address: str) -> None:
        ip, _, prefixlen = address.partition("/")
        LOG.debug("netlink: addr %s %s dev %s", command, address, name)
        try:
            with IPRoute() as ipr:
                ipr.addr(
                    command,
                    index=self._index(ipr, name),
                    address=ip,
                    prefixlen=int(prefixlen or 32),
                )
        except (NetlinkError, OSError) as exc:
            raise LinkCommandError(f"netlink addr {command} {address} dev {name}", _code(exc), str(exc)) from exc

    def add_address(self, name: str, address: str) -> None:
        self._addr("add", name, address)

    def del_address(self, name: str, address: str) -> None:
        self._addr("del", name, address)
