"""Intent data structures for the fabric-edge node.

The intent describes the whole desired state of the node: BGP instances and
their peers, the VRFs that back them, routing policy objects and the VRFs for
which EVPN type-5 routes are advertised.  Every class is frozen and sequences
are stored as tuples so a single :class:`GlobalIntent` can be handed to the
reconciler, renderer and reload stages without any of them being able to
modify it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple


class Action(Enum):
    """Permit/deny verdict shared by prefix-lists and route-maps."""

    PERMIT = "permit"
    DENY = "deny"

    @classmethod
    def from_permit(cls, permit: bool) -> "Action":
        return cls.PERMIT if permit else cls.DENY


class MatchType(Enum):
    """Address family of the ``match ... address`` clause of a route-map."""

    IP = "ip"
    IPV6 = "ipv6"


@dataclass(frozen=True)
class Peer:
    """BGP neighbour description.

    Attributes
    ----------
    address:
        The neighbour IP address as a string.
    remote_asn:
        The peer Autonomous System Number.
    password:
        Optional TCP-MD5 shared secret.  Empty means no password line.
    description:
        Optional free text rendered as a quoted ``description``.
    route_map_in / route_map_out:
        Optional route-map names applied to the session.
    fabric:
        Marks an EVPN-facing underlay peer.  Fabric peers additionally get
        the ``l2vpn evpn`` address family activated.
    """

    address: str
    remote_asn: int
    password: str = ""
    description: str = ""
    route_map_in: str = ""
    route_map_out: str = ""
    fabric: bool = False


@dataclass(frozen=True)
class Router:
    """A BGP instance, either the default one or scoped to a VRF."""

    router_id: str
    vrf: str = ""
    peers: Tuple[Peer, ...] = ()

    @property
    def is_default(self) -> bool:
        return not self.vrf


@dataclass(frozen=True)
class StaticRoute:
    destination: str
    next_hop: str


@dataclass(frozen=True)
class VRF:
    """A tenant VRF.

    ``vni`` is the EVPN segment identifier.  The kernel routing table backing
    the VRF device is allocated separately by
    :class:`evpn_edge.allocator.TableAllocator`.
    """

    name: str
    vni: int
    static_routes: Tuple[StaticRoute, ...] = ()


@dataclass(frozen=True)
class PrefixListEntry:
    name: str
    seq: int
    action: Action
    prefix: str


@dataclass(frozen=True)
class RouteMapEntry:
    name: str
    action: Action
    seq: int
    prefix_list: str = ""
    match_type: MatchType = MatchType.IP


@dataclass(frozen=True)
class EVPNInstance:
    """A VRF for which a dedicated EVPN-advertising BGP instance is rendered."""

    vrf: str


@dataclass(frozen=True)
class GlobalIntent:
    """Complete desired state of the node.

    The order of every sequence is significant: the renderer emits objects
    exactly in declaration order and the reconciler walks VRFs in the same
    order.
    """

    asn: int
    log_level: str = "informational"
    routers: Tuple[Router, ...] = ()
    vrfs: Tuple[VRF, ...] = ()
    prefix_lists: Tuple[PrefixListEntry, ...] = ()
    route_maps: Tuple[RouteMapEntry, ...] = ()
    evpns: Tuple[EVPNInstance, ...] = ()
    hostname: str = "frr-k8s"

    def router_for_vrf(self, name: str) -> Optional[Router]:
        """Return the first router scoped to ``name`` if present."""

        return next((r for r in self.routers if r.vrf == name), None)

    def vrf_names(self) -> Tuple[str, ...]:
        return tuple(v.name for v in self.vrfs)

    def peers(self) -> Iterable[Tuple[Router, Peer]]:
        for router in self.routers:
            for peer in router.peers:
                yield router, peer


@dataclass
class ReconcileReport:
    """Actions issued by one run of the VRF reconciler."""

    reconciled: List[str] = field(default_factory=list)
    created: List[str] = field(default_factory=list)
    addresses_added: List[Tuple[str, str]] = field(default_factory=list)
    addresses_removed: List[Tuple[str, str]] = field(default_factory=list)
    interrupted: bool = False
