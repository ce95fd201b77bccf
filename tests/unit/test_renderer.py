from pathlib import Path

import pytest

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
from evpn_edge.errors import ConfigWriteError
from evpn_edge.frr import FRRConfigRenderer, VRFStanzaMode


def build_intent() -> GlobalIntent:
    return GlobalIntent(
        asn=65000,
        log_level="debug",
        hostname="edge1",
        vrfs=(
            VRF(
                name="red",
                vni=100,
                static_routes=(StaticRoute("0.0.0.0/0", "10.0.0.254"),),
            ),
        ),
        prefix_lists=(
            PrefixListEntry("pl", 5, Action.DENY, "10.0.0.0/8"),
            PrefixListEntry("pl", 10, Action.PERMIT, "0.0.0.0/0"),
        ),
        route_maps=(RouteMapEntry("rm", Action.DENY, 5, prefix_list="pl"),),
        routers=(
            Router(
                router_id="10.0.0.1",
                peers=(Peer(address="10.0.0.2", remote_asn=65001, fabric=True),),
            ),
        ),
        evpns=(EVPNInstance("red"),),
    )


def hedge_intent() -> GlobalIntent:
    return GlobalIntent(
        asn=64512,
        vrfs=(VRF(name="hedge", vni=100),),
        routers=(
            Router(
                router_id="192.168.1.1",
                vrf="hedge",
                peers=(
                    Peer(
                        address="192.168.1.2",
                        remote_asn=64513,
                        description="hedge's friend",
                    ),
                ),
            ),
        ),
    )


EXPECTED = """\
frr defaults traditional
hostname edge1
log syslog debug
!
vrf red
 ip route 0.0.0.0/0 10.0.0.254
exit-vrf
!
ip prefix-list pl seq 5 deny 10.0.0.0/8
ip prefix-list pl seq 10 permit 0.0.0.0/0
!
route-map rm deny 5
 match ip address pl
exit
!
router bgp 65000
 bgp router-id 10.0.0.1
 bgp log-neighbor-changes
 bgp graceful-restart
 no bgp ebgp-requires-policy
 no bgp network import-check
 no bgp default ipv4-unicast
 neighbor 10.0.0.2 remote-as 65001
 !
 address-family ipv4 unicast
  neighbor 10.0.0.2 activate
 exit-address-family
 !
 address-family l2vpn evpn
  neighbor 10.0.0.2 activate
  advertise-all-vni
  advertise-svi-ip
 exit-address-family
exit
!
router bgp 65000 vrf red
 address-family l2vpn evpn
  advertise ipv4 unicast
 exit-address-family
exit
!
"""


def test_renderer_full_output():
    assert FRRConfigRenderer().render(build_intent()) == EXPECTED


def test_renderer_is_idempotent():
    renderer = FRRConfigRenderer()
    intent = build_intent()

    assert renderer.render(intent) == renderer.render(intent)


def test_renderer_hedge_scenario():
    lines = FRRConfigRenderer().render(hedge_intent()).splitlines()
    stripped = [line.strip() for line in lines]

    assert "router bgp 64512 vrf hedge" in stripped
    assert "bgp router-id 192.168.1.1" in stripped
    assert "neighbor 192.168.1.2 remote-as 64513" in stripped
    assert 'neighbor 192.168.1.2 description "hedge\'s friend"' in stripped
    assert "address-family l2vpn evpn" not in stripped
    assert "advertise-all-vni" not in stripped


def test_renderer_preserves_declaration_order():
    intent = GlobalIntent(
        asn=65000,
        prefix_lists=(
            PrefixListEntry("b", 30, Action.PERMIT, "10.3.0.0/16"),
            PrefixListEntry("a", 10, Action.PERMIT, "10.1.0.0/16"),
            PrefixListEntry("b", 20, Action.DENY, "10.2.0.0/16"),
        ),
        route_maps=(
            RouteMapEntry("z", Action.PERMIT, 20),
            RouteMapEntry("a", Action.DENY, 10),
        ),
        routers=(
            Router(
                router_id="10.0.0.1",
                peers=(
                    Peer("10.0.0.9", 65009),
                    Peer("10.0.0.3", 65003),
                    Peer("10.0.0.5", 65005),
                ),
            ),
        ),
    )

    text = FRRConfigRenderer().render(intent)

    prefix_lines = [line for line in text.splitlines() if line.startswith("ip prefix-list")]
    assert prefix_lines == [
        "ip prefix-list b seq 30 permit 10.3.0.0/16",
        "ip prefix-list a seq 10 permit 10.1.0.0/16",
        "ip prefix-list b seq 20 deny 10.2.0.0/16",
    ]
    route_map_lines = [line for line in text.splitlines() if line.startswith("route-map")]
    assert route_map_lines == ["route-map z permit 20", "route-map a deny 10"]
    remote_as = [line for line in text.splitlines() if "remote-as" in line]
    assert [line.split()[1] for line in remote_as] == ["10.0.0.9", "10.0.0.3", "10.0.0.5"]


def test_renderer_conditional_peer_lines():
    intent = GlobalIntent(
        asn=65000,
        route_maps=(RouteMapEntry("in-pol", Action.PERMIT, 10), RouteMapEntry("out-pol", Action.PERMIT, 10)),
        routers=(
            Router(
                router_id="10.0.0.1",
                peers=(
                    Peer("10.0.0.2", 65002),
                    Peer(
                        "10.0.0.3",
                        65003,
                        password="s3cret",
                        route_map_in="in-pol",
                        route_map_out="out-pol",
                    ),
                ),
            ),
        ),
    )

    text = FRRConfigRenderer().render(intent)

    assert "neighbor 10.0.0.2 password" not in text
    assert "neighbor 10.0.0.2 description" not in text
    assert "neighbor 10.0.0.2 route-map" not in text
    assert " neighbor 10.0.0.3 password s3cret" in text
    assert " neighbor 10.0.0.3 route-map in-pol in" in text
    assert " neighbor 10.0.0.3 route-map out-pol out" in text


def test_renderer_route_map_without_prefix_list_has_no_match():
    intent = GlobalIntent(
        asn=65000,
        prefix_lists=(PrefixListEntry("v6", 10, Action.PERMIT, "2001:db8::/32"),),
        route_maps=(
            RouteMapEntry("plain", Action.PERMIT, 10),
            RouteMapEntry("six", Action.PERMIT, 20, prefix_list="v6", match_type=MatchType.IPV6),
        ),
    )

    text = FRRConfigRenderer().render(intent)

    assert "route-map plain permit 10\nexit\n" in text
    assert "route-map six permit 20\n match ipv6 address v6\nexit\n" in text


def test_renderer_vni_mode():
    renderer = FRRConfigRenderer(vrf_mode=VRFStanzaMode.VNI)

    text = renderer.render(build_intent())

    assert "vrf red\n vni 100\nexit-vrf\n" in text
    assert "ip route" not in text


def test_renderer_writes_file_and_companion(tmp_path: Path):
    renderer = FRRConfigRenderer()
    output = tmp_path / "frr" / "frr.conf"
    companion = tmp_path / "frr" / "vtysh.conf"

    result = renderer.write(build_intent(), output, companion)

    assert result.output_path == output
    assert output.read_text() == EXPECTED
    assert companion.exists()
    assert list(output.parent.glob(".frr.conf-*")) == []


def test_renderer_does_not_truncate_companion(tmp_path: Path):
    companion = tmp_path / "vtysh.conf"
    companion.write_text("service integrated-vtysh-config\n")

    FRRConfigRenderer().write(build_intent(), tmp_path / "frr.conf", companion)

    assert companion.read_text() == "service integrated-vtysh-config\n"


def test_renderer_overwrites_previous_output(tmp_path: Path):
    output = tmp_path / "frr.conf"
    output.write_text("stale\n")

    FRRConfigRenderer().write(hedge_intent(), output, tmp_path / "vtysh.conf")

    assert "stale" not in output.read_text()


def test_renderer_write_error(tmp_path: Path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")

    with pytest.raises(ConfigWriteError):
        FRRConfigRenderer().write(build_intent(), blocker / "frr.conf", tmp_path / "vtysh.conf")
