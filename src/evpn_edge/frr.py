"""FRR configuration rendering for the fabric-edge node."""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Sequence

from .config import (
    VRF,
    Action,
    EVPNInstance,
    GlobalIntent,
    Peer,
    PrefixListEntry,
    RouteMapEntry,
    Router,
)
from .errors import ConfigWriteError, RenderError

LOG = logging.getLogger(__name__)

FRR_HEADER = "frr defaults traditional"

# Knobs applied to every BGP instance so fabric peers come up without
# explicit policy.
BGP_INSTANCE_DEFAULTS = (
    " bgp log-neighbor-changes",
    " bgp graceful-restart",
    " no bgp ebgp-requires-policy",
    " no bgp network import-check",
    " no bgp default ipv4-unicast",
)


class VRFStanzaMode(Enum):
    """How ``vrf`` stanzas are written.

    ``STATIC_ROUTES`` lists the VRF's static routes inside the stanza.
    ``VNI`` binds the VRF to its L3 VNI and omits static routes.
    """

    STATIC_ROUTES = "static-routes"
    VNI = "vni"


@dataclass
class RenderResult:
    """Result of writing a rendered configuration to disk."""

    config_text: str
    output_path: Path
    companion_path: Path


class FRRConfigRenderer:
    """Serialize a :class:`GlobalIntent` into FRR's configuration grammar.

    :meth:`render` is a pure function of the intent: objects are emitted in
    declaration order with no sorting or de-duplication, so rendering the
    same intent twice yields identical text.
    """

    def __init__(self, vrf_mode: VRFStanzaMode = VRFStanzaMode.STATIC_ROUTES) -> None:
        self._vrf_mode = vrf_mode

    @property
    def vrf_mode(self) -> VRFStanzaMode:
        return self._vrf_mode

    def render(self, intent: GlobalIntent) -> str:
        lines = [
            FRR_HEADER,
            f"hostname {intent.hostname}",
            f"log syslog {intent.log_level}",
        ]

        blocks: List[List[str]] = []
        blocks.extend(self._render_vrf(vrf) for vrf in intent.vrfs)
        if intent.prefix_lists:
            blocks.append(self._render_prefix_lists(intent.prefix_lists))
        blocks.extend(self._render_route_map(entry) for entry in intent.route_maps)
        blocks.extend(self._render_router(intent.asn, router) for router in intent.routers)
        blocks.extend(self._render_evpn(intent.asn, evpn) for evpn in intent.evpns)

        for block in blocks:
            lines.append("!")
            lines.extend(block)
        lines.append("!")
        return "\n".join(lines) + "\n"

    def write(
        self,
        intent: GlobalIntent,
        output_path: Path,
        companion_path: Path,
    ) -> RenderResult:
        """Render ``intent`` and atomically replace ``output_path``.

        ``companion_path`` (FRR's ``vtysh.conf``) is created empty when
        missing; vtysh refuses to start without it even though nothing in it
        is used.
        """

        text = self.render(intent)
        output_path = Path(output_path)
        companion_path = Path(companion_path)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=output_path.parent, prefix=f".{output_path.name}-")
            try:
                with os.fdopen(fd, "w") as fh:
                    fh.write(text)
                os.chmod(tmp, 0o644)
                os.replace(tmp, output_path)
            except OSError:
                Path(tmp).unlink(missing_ok=True)
                raise
            companion_path.parent.mkdir(parents=True, exist_ok=True)
            companion_path.touch(exist_ok=True)
        except OSError as exc:
            raise ConfigWriteError(f"cannot write FRR configuration to {output_path}: {exc}") from exc

        LOG.info("FRR configuration generated at %s", output_path)
        return RenderResult(config_text=text, output_path=output_path, companion_path=companion_path)

    @staticmethod
    def _action(action: Action) -> str:
        if not isinstance(action, Action):
            raise RenderError(f"unsupported policy action {action!r}")
        return action.value

    def _render_vrf(self, vrf: VRF) -> List[str]:
        lines = [f"vrf {vrf.name}"]
        if self._vrf_mode is VRFStanzaMode.VNI:
            lines.append(f" vni {vrf.vni}")
        else:
            for route in vrf.static_routes:
                lines.append(f" ip route {route.destination} {route.next_hop}")
        lines.append("exit-vrf")
        return lines

    def _render_prefix_lists(self, entries: Sequence[PrefixListEntry]) -> List[str]:
        return [
            f"ip prefix-list {e.name} seq {e.seq} {self._action(e.action)} {e.prefix}"
            for e in entries
        ]

    def _render_route_map(self, entry: RouteMapEntry) -> List[str]:
        lines = [f"route-map {entry.name} {self._action(entry.action)} {entry.seq}"]
        if entry.prefix_list:
            lines.append(f" match {entry.match_type.value} address {entry.prefix_list}")
        lines.append("exit")
        return lines

    def _render_router(self, asn: int, router: Router) -> List[str]:
        header = f"router bgp {asn}"
        if router.vrf:
            header += f" vrf {router.vrf}"
        lines = [header, f" bgp router-id {router.router_id}", *BGP_INSTANCE_DEFAULTS]
        for peer in router.peers:
            lines.extend(self._render_peer(peer))
        lines.append("exit")
        return lines

    def _render_peer(self, peer: Peer) -> List[str]:
        ip = peer.address
        lines = [f" neighbor {ip} remote-as {peer.remote_asn}"]
        if peer.password:
            lines.append(f" neighbor {ip} password {peer.password}")
        if peer.description:
            lines.append(f' neighbor {ip} description "{peer.description}"')
        if peer.route_map_in:
            lines.append(f" neighbor {ip} route-map {peer.route_map_in} in")
        if peer.route_map_out:
            lines.append(f" neighbor {ip} route-map {peer.route_map_out} out")
        lines.extend(
            [
                " !",
                " address-family ipv4 unicast",
                f"  neighbor {ip} activate",
                " exit-address-family",
            ]
        )
        if peer.fabric:
            lines.extend(
                [
                    " !",
                    " address-family l2vpn evpn",
                    f"  neighbor {ip} activate",
                    "  advertise-all-vni",
                    "  advertise-svi-ip",
                    " exit-address-family",
                ]
            )
        return lines

    def _render_evpn(self, asn: int, evpn: EVPNInstance) -> List[str]:
        return [
            f"router bgp {asn} vrf {evpn.vrf}",
            " address-family l2vpn evpn",
            "  advertise ipv4 unicast",
            " exit-address-family",
            "exit",
        ]
