"""Build a :class:`GlobalIntent` from a YAML document."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Tuple

import yaml

from evpn_edge.config import (
    VRF,
    Action,
    EVPNInstance,
    GlobalIntent,
    MatchType,
    Peer,
    PrefixListEntry,
    RouteMapEntry,
    Router,
    StaticRoute,
)
from evpn_edge.errors import IntentLoadError


def _required(data: dict, key: str, where: str) -> Any:
    if key not in data:
        raise IntentLoadError(f"{where}: missing required key '{key}'")
    value = data[key]
    if value is None or value == "":
        raise IntentLoadError(f"{where}: '{key}' must not be empty")
    return value


def _bool(data: dict, key: str, where: str, default: bool = False) -> bool:
    value = data.get(key, default)
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise IntentLoadError(f"{where}: '{key}' must be true or false, got {value!r}")


def _list(data: dict, key: str, where: str) -> Iterable[dict]:
    entries = data.get(key) or []
    if not isinstance(entries, list):
        raise IntentLoadError(f"{where}: '{key}' must be a list")
    for entry in entries:
        if not isinstance(entry, dict):
            raise IntentLoadError(f"{where}: every '{key}' entry must be a mapping")
    return entries


def _parse_action(entry: dict, where: str) -> Action:
    if "action" in entry:
        try:
            return Action(str(entry["action"]).lower())
        except ValueError:
            raise IntentLoadError(f"{where}: action must be 'permit' or 'deny'") from None
    if "permit" in entry:
        return Action.from_permit(_bool(entry, "permit", where))
    raise IntentLoadError(f"{where}: missing 'action'")


def _parse_peer(entry: dict, where: str) -> Peer:
    return Peer(
        address=str(_required(entry, "address", where)),
        remote_asn=int(_required(entry, "remote_asn", where)),
        password=str(entry.get("password") or ""),
        description=str(entry.get("description") or ""),
        route_map_in=str(entry.get("route_map_in") or ""),
        route_map_out=str(entry.get("route_map_out") or ""),
        fabric=_bool(entry, "fabric", where),
    )


def _parse_router(entry: dict, index: int) -> Router:
    where = f"routers[{index}]"
    peers = tuple(
        _parse_peer(peer, f"{where}.peers[{i}]")
        for i, peer in enumerate(_list(entry, "peers", where))
    )
    return Router(
        router_id=str(_required(entry, "router_id", where)),
        vrf=str(entry.get("vrf") or ""),
        peers=peers,
    )


def _parse_vrf(entry: dict, index: int) -> VRF:
    where = f"vrfs[{index}]"
    routes: Tuple[StaticRoute, ...] = tuple(
        StaticRoute(
            destination=str(_required(route, "destination", f"{where}.static_routes[{i}]")),
            next_hop=str(_required(route, "next_hop", f"{where}.static_routes[{i}]")),
        )
        for i, route in enumerate(_list(entry, "static_routes", where))
    )
    return VRF(
        name=str(_required(entry, "name", where)),
        vni=int(_required(entry, "vni", where)),
        static_routes=routes,
    )


def _parse_prefix_list(entry: dict, index: int) -> PrefixListEntry:
    where = f"prefix_lists[{index}]"
    return PrefixListEntry(
        name=str(_required(entry, "name", where)),
        seq=int(_required(entry, "seq", where)),
        action=_parse_action(entry, where),
        prefix=str(_required(entry, "prefix", where)),
    )


def _parse_route_map(entry: dict, index: int) -> RouteMapEntry:
    where = f"route_maps[{index}]"
    match_type = str(entry.get("match_type") or "ip").lower()
    try:
        match = MatchType(match_type)
    except ValueError:
        raise IntentLoadError(f"{where}: unsupported match_type '{match_type}'") from None
    return RouteMapEntry(
        name=str(_required(entry, "name", where)),
        action=_parse_action(entry, where),
        seq=int(_required(entry, "seq", where)),
        prefix_list=str(entry.get("prefix_list") or ""),
        match_type=match,
    )


def parse_intent(data: Any) -> GlobalIntent:
    if not isinstance(data, dict):
        raise IntentLoadError("intent document must be a mapping")

    try:
        return GlobalIntent(
            asn=int(_required(data, "asn", "intent")),
            log_level=str(data.get("log_level", "informational")),
            hostname=str(data.get("hostname", "frr-k8s")),
            routers=tuple(_parse_router(e, i) for i, e in enumerate(_list(data, "routers", "intent"))),
            vrfs=tuple(_parse_vrf(e, i) for i, e in enumerate(_list(data, "vrfs", "intent"))),
            prefix_lists=tuple(
                _parse_prefix_list(e, i) for i, e in enumerate(_list(data, "prefix_lists", "intent"))
            ),
            route_maps=tuple(
                _parse_route_map(e, i) for i, e in enumerate(_list(data, "route_maps", "intent"))
            ),
            evpns=tuple(
                EVPNInstance(vrf=str(_required(e, "vrf", f"evpns[{i}]")))
                for i, e in enumerate(_list(data, "evpns", "intent"))
            ),
        )
    except IntentLoadError:
        raise
    except (TypeError, ValueError) as exc:
        raise IntentLoadError(f"invalid intent value: {exc}") from exc


def load_intent(path: Path) -> GlobalIntent:
    try:
        data = yaml.safe_load(Path(path).read_text())
    except OSError as exc:
        raise IntentLoadError(f"cannot read intent file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise IntentLoadError(f"cannot parse intent file {path}: {exc}") from exc
    return parse_intent(data)
