import pytest

from evpn_edge.config import (
    VRF,
    Action,
    EVPNInstance,
    GlobalIntent,
    Peer,
    PrefixListEntry,
    RouteMapEntry,
    Router,
)
from evpn_edge.errors import IntentValidationError
from evpn_edge.validation import find_problems, validate_intent


def build_intent(**overrides) -> GlobalIntent:
    values = dict(
        asn=64512,
        vrfs=(VRF("hedge", 100),),
        prefix_lists=(PrefixListEntry("test", 10, Action.PERMIT, "10.10.0.0/16"),),
        route_maps=(RouteMapEntry("test", Action.PERMIT, 10, prefix_list="test"),),
        routers=(
            Router(
                router_id="192.168.1.1",
                vrf="hedge",
                peers=(Peer("192.168.1.2", 64513, route_map_in="test"),),
            ),
        ),
        evpns=(EVPNInstance("hedge"),),
    )
    values.update(overrides)
    return GlobalIntent(**values)


def kinds(intent: GlobalIntent):
    return [p.kind for p in find_problems(intent)]


def test_valid_intent_passes():
    validate_intent(build_intent())
    assert find_problems(build_intent()) == []


def test_router_with_unknown_vrf():
    intent = build_intent(routers=(Router(router_id="10.0.0.1", vrf="missing"),))

    with pytest.raises(IntentValidationError) as excinfo:
        validate_intent(intent)

    problem = excinfo.value.problems[0]
    assert problem.kind == "unknown-vrf"
    assert "missing" in problem.detail


def test_evpn_with_unknown_vrf():
    assert kinds(build_intent(evpns=(EVPNInstance("nowhere"),))) == ["unknown-vrf"]


def test_route_map_with_unknown_prefix_list():
    intent = build_intent(route_maps=(RouteMapEntry("test", Action.PERMIT, 10, prefix_list="ghost"),))

    problems = find_problems(intent)

    assert [p.kind for p in problems] == ["unknown-prefix-list"]
    assert "ghost" in problems[0].detail


def test_peer_with_unknown_route_map():
    intent = build_intent(
        routers=(Router(router_id="10.0.0.1", peers=(Peer("10.0.0.2", 65000, route_map_out="ghost"),)),)
    )

    assert kinds(intent) == ["unknown-route-map"]


def test_duplicate_sequence_numbers():
    intent = build_intent(
        prefix_lists=(
            PrefixListEntry("test", 10, Action.PERMIT, "10.10.0.0/16"),
            PrefixListEntry("test", 10, Action.DENY, "10.20.0.0/16"),
            PrefixListEntry("other", 10, Action.DENY, "10.20.0.0/16"),
        ),
        route_maps=(
            RouteMapEntry("test", Action.PERMIT, 10),
            RouteMapEntry("test", Action.DENY, 10),
        ),
    )

    assert kinds(intent) == ["duplicate-seq", "duplicate-seq"]


def test_duplicate_peer_identity_is_scoped_by_vrf():
    peer = Peer("192.168.1.2", 64513)
    same_scope = build_intent(
        routers=(Router(router_id="10.0.0.1", peers=(peer, peer)),)
    )
    different_scope = build_intent(
        routers=(
            Router(router_id="10.0.0.1", peers=(peer,)),
            Router(router_id="192.168.1.1", vrf="hedge", peers=(peer,)),
        )
    )

    assert kinds(same_scope) == ["duplicate-peer"]
    assert kinds(different_scope) == []


def test_duplicate_vrf_and_bad_asn():
    intent = build_intent(asn=0, vrfs=(VRF("hedge", 100), VRF("hedge", 200)))

    assert kinds(intent) == ["asn", "duplicate-vrf"]


def test_router_id_must_be_ipv4():
    intent = build_intent(routers=(Router(router_id="None", vrf="hedge"),))

    assert kinds(intent) == ["invalid-address"]
    assert kinds(build_intent(routers=(Router(router_id="2001:db8::1", vrf="hedge"),))) == ["invalid-address"]


def test_peer_address_must_be_an_ip():
    bad = build_intent(routers=(Router(router_id="10.0.0.1", peers=(Peer("spine-1", 65000),)),))
    v6 = build_intent(routers=(Router(router_id="10.0.0.1", peers=(Peer("2001:db8::2", 65000),)),))

    problems = find_problems(bad)
    assert [p.kind for p in problems] == ["invalid-address"]
    assert problems[0].subject == "peer default/spine-1"
    assert find_problems(v6) == []
