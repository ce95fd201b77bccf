"""YAML configuration loader for the evpn-edge agent."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from evpn_edge.frr import VRFStanzaMode
from evpn_edge.reload import FRR_RELOAD


@dataclass
class FRRConfig:
    config_path: Path = Path("/etc/frr/frr.conf")
    vtysh_path: Path = Path("/etc/frr/vtysh.conf")
    reload_tool: Path = FRR_RELOAD
    reload_timeout: float = 60.0
    vrf_mode: VRFStanzaMode = VRFStanzaMode.STATIC_ROUTES


@dataclass
class OSConfig:
    backend: str = "iproute2"
    # None lets the backend pick its default; only iproute2 accepts a value.
    command_timeout: Optional[float] = None
    address_prefix_len: int = 24


@dataclass
class TablesConfig:
    state_file: Path = Path("/var/lib/evpn-edge/tables.json")
    base: int = 1000
    size: int = 1000


@dataclass
class AgentConfig:
    intent_file: Path
    interval: float = 30.0
    frr: FRRConfig = field(default_factory=FRRConfig)
    os: OSConfig = field(default_factory=OSConfig)
    tables: TablesConfig = field(default_factory=TablesConfig)


def _section(data: dict, key: str) -> dict:
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{key}' section must be a mapping")
    return section


def _parse_vrf_mode(value: str) -> VRFStanzaMode:
    try:
        return VRFStanzaMode(str(value))
    except ValueError:
        choices = ", ".join(m.value for m in VRFStanzaMode)
        raise ValueError(f"Unsupported vrf_mode '{value}' (expected one of: {choices})") from None


def _parse_frr(section: dict) -> FRRConfig:
    defaults = FRRConfig()
    return FRRConfig(
        config_path=Path(section.get("config_path", defaults.config_path)),
        vtysh_path=Path(section.get("vtysh_path", defaults.vtysh_path)),
        reload_tool=Path(section.get("reload_tool", defaults.reload_tool)),
        reload_timeout=float(section.get("reload_timeout", defaults.reload_timeout)),
        vrf_mode=_parse_vrf_mode(section.get("vrf_mode", defaults.vrf_mode.value)),
    )


def _parse_os(section: dict) -> OSConfig:
    backend = str(section.get("backend", "iproute2"))
    if backend not in ("iproute2", "netlink"):
        raise ValueError(f"Unsupported OS backend '{backend}'")
    prefix_len = int(section.get("address_prefix_len", 24))
    if not 0 <= prefix_len <= 32:
        raise ValueError("'address_prefix_len' must be between 0 and 32")
    command_timeout = section.get("command_timeout")
    if command_timeout is not None:
        if backend == "netlink":
            raise ValueError("'command_timeout' is not supported by the netlink backend")
        command_timeout = float(command_timeout)
        if command_timeout <= 0:
            raise ValueError("'command_timeout' must be positive")
    return OSConfig(
        backend=backend,
        command_timeout=command_timeout,
        address_prefix_len=prefix_len,
    )


def _parse_tables(section: dict) -> TablesConfig:
    defaults = TablesConfig()
    return TablesConfig(
        state_file=Path(section.get("state_file", defaults.state_file)),
        base=int(section.get("base", defaults.base)),
        size=int(section.get("size", defaults.size)),
    )


def load_config(path: Path) -> AgentConfig:
    data = yaml.safe_load(Path(path).read_text())
    if not isinstance(data, dict):
        raise ValueError("Agent configuration must be a mapping")

    intent_file = data.get("intent_file")
    if intent_file is None:
        raise ValueError("Configuration missing 'intent_file'")

    interval = float(data.get("interval", 30.0))
    if interval <= 0:
        raise ValueError("'interval' must be positive")

    return AgentConfig(
        intent_file=Path(intent_file),
        interval=interval,
        frr=_parse_frr(_section(data, "frr")),
        os=_parse_os(_section(data, "os")),
        tables=_parse_tables(_section(data, "tables")),
    )
