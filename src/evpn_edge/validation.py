"""Cross-reference checks run over an intent before any stage touches it."""

from __future__ import annotations

import ipaddress
from collections import Counter
from typing import List

from .config import GlobalIntent
from .errors import IntentValidationError, ValidationProblem

MAX_ASN = 4294967295


def _is_ipv4(value: str) -> bool:
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        return False
    return True


def _is_ip(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def find_problems(intent: GlobalIntent) -> List[ValidationProblem]:
    """Return every problem found in ``intent`` without raising."""

    problems: List[ValidationProblem] = []

    if not 1 <= intent.asn <= MAX_ASN:
        problems.append(ValidationProblem("asn", str(intent.asn), "out of range"))

    vrf_names = set()
    for vrf in intent.vrfs:
        if vrf.name in vrf_names:
            problems.append(ValidationProblem("duplicate-vrf", vrf.name, "declared more than once"))
        vrf_names.add(vrf.name)

    for router in intent.routers:
        if not _is_ipv4(router.router_id):
            problems.append(
                ValidationProblem("invalid-address", f"router {router.router_id}", "router-id must be an IPv4 address")
            )
        if router.vrf and router.vrf not in vrf_names:
            problems.append(
                ValidationProblem(
                    "unknown-vrf",
                    f"router {router.router_id}",
                    f"references undeclared VRF '{router.vrf}'",
                )
            )

    for evpn in intent.evpns:
        if evpn.vrf not in vrf_names:
            problems.append(
                ValidationProblem(
                    "unknown-vrf",
                    "evpn instance",
                    f"references undeclared VRF '{evpn.vrf}'",
                )
            )

    prefix_list_names = {entry.name for entry in intent.prefix_lists}
    route_map_names = {entry.name for entry in intent.route_maps}

    for entry in intent.route_maps:
        if entry.prefix_list and entry.prefix_list not in prefix_list_names:
            problems.append(
                ValidationProblem(
                    "unknown-prefix-list",
                    f"route-map {entry.name} seq {entry.seq}",
                    f"matches undeclared prefix-list '{entry.prefix_list}'",
                )
            )

    for (name, seq), count in Counter((e.name, e.seq) for e in intent.prefix_lists).items():
        if count > 1:
            problems.append(
                ValidationProblem("duplicate-seq", f"prefix-list {name}", f"seq {seq} used {count} times")
            )
    for (name, seq), count in Counter((e.name, e.seq) for e in intent.route_maps).items():
        if count > 1:
            problems.append(
                ValidationProblem("duplicate-seq", f"route-map {name}", f"seq {seq} used {count} times")
            )

    seen_peers = set()
    for router, peer in intent.peers():
        identity = (router.vrf, peer.address)
        scope = router.vrf or "default"
        if identity in seen_peers:
            problems.append(
                ValidationProblem("duplicate-peer", f"{scope}/{peer.address}", "declared more than once")
            )
        seen_peers.add(identity)
        if not _is_ip(peer.address):
            problems.append(
                ValidationProblem("invalid-address", f"peer {scope}/{peer.address}", "not an IP address")
            )
        for direction, name in (("in", peer.route_map_in), ("out", peer.route_map_out)):
            if name and name not in route_map_names:
                problems.append(
                    ValidationProblem(
                        "unknown-route-map",
                        f"peer {scope}/{peer.address}",
                        f"{direction} policy references undeclared route-map '{name}'",
                    )
                )

    return problems


def validate_intent(intent: GlobalIntent) -> None:
    """Raise :class:`IntentValidationError` if ``intent`` has any problem."""

    problems = find_problems(intent)
    if problems:
        raise IntentValidationError(problems)
