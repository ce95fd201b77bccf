from pathlib import Path

from evpn_edge.links.base import LinkBackend
from evpn_edge_agent import main as main_module


class MemoryBackend(LinkBackend):
    def __init__(self):
        self.links = {}

    def link_exists(self, name):
        return name in self.links

    def add_vrf(self, name, table_id):
        self.links[name] = []

    def set_up(self, name):
        pass

    def addresses(self, name):
        return list(self.links[name])

    def add_address(self, name, address):
        self.links[name].append(address)

    def del_address(self, name, address):
        self.links[name].remove(address)


class NoopReloader:
    applied = []

    def __init__(self, tool, timeout):
        self.tool = tool

    def reload(self, config_path):
        NoopReloader.applied.append(config_path)
        return ""


def write_agent_config(tmp_path: Path) -> Path:
    intent = tmp_path / "intent.yaml"
    intent.write_text(
        "asn: 64512\n"
        "vrfs:\n  - name: hedge\n    vni: 100\n"
        "routers:\n  - vrf: hedge\n    router_id: 192.168.1.1\n"
    )
    config = tmp_path / "agent.yaml"
    config.write_text(
        f"intent_file: {intent}\n"
        "frr:\n"
        f"  config_path: {tmp_path / 'frr' / 'frr.conf'}\n"
        f"  vtysh_path: {tmp_path / 'frr' / 'vtysh.conf'}\n"
        "tables:\n"
        f"  state_file: {tmp_path / 'tables.json'}\n"
    )
    return config


def test_main_once(tmp_path: Path, monkeypatch):
    backend = MemoryBackend()
    NoopReloader.applied = []
    monkeypatch.setattr(main_module, "build_backend", lambda name, timeout: backend)
    monkeypatch.setattr(main_module, "FRRReloader", NoopReloader)

    rc = main_module.main(["--config", str(write_agent_config(tmp_path)), "--once"])

    assert rc == 0
    assert backend.links == {"hedge": ["192.168.1.1/24"]}
    assert "router bgp 64512 vrf hedge" in (tmp_path / "frr" / "frr.conf").read_text()
    assert NoopReloader.applied == [tmp_path / "frr" / "frr.conf"]
    assert (tmp_path / "tables.json").exists()


def test_main_once_reports_failure(tmp_path: Path, monkeypatch):
    config = write_agent_config(tmp_path)
    (tmp_path / "intent.yaml").write_text("asn: 64512\nevpns:\n  - vrf: ghost\n")
    monkeypatch.setattr(main_module, "build_backend", lambda name, timeout: MemoryBackend())
    monkeypatch.setattr(main_module, "FRRReloader", NoopReloader)

    assert main_module.main(["--config", str(config), "--once"]) == 1
