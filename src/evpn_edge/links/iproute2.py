"""Link backend driving the ``ip`` command from iproute2."""

from __future__ import annotations

import json
import logging
import subprocess
from typing import List, Sequence

from ..errors import CommandTimeout, LinkCommandError
from .base import LinkBackend

LOG = logging.getLogger(__name__)


class IPRoute2Backend(LinkBackend):
    """Run ``ip`` subcommands with a timeout and inspect exit status/output."""

    def __init__(self, timeout: float = 30.0, ip_binary: str = "ip") -> None:
        self._timeout = timeout
        self._ip = ip_binary

    def _run(self, args: Sequence[str]) -> subprocess.CompletedProcess[str]:
        cmd = [self._ip, *args]
        LOG.debug("Executing: %s", " ".join(cmd))
        try:
            return subprocess.run(
                cmd,
                check=False,
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise CommandTimeout(cmd, self._timeout) from exc
        except OSError as exc:
            raise LinkCommandError(cmd, None, str(exc)) from exc

    def _check(self, args: Sequence[str]) -> str:
        result = self._run(args)
        if result.returncode != 0:
            raise LinkCommandError([self._ip, *args], result.returncode, result.stdout or "")
        return result.stdout or ""

    def link_exists(self, name: str) -> bool:
        result = self._run(["link", "show", name])
        return result.returncode == 0 and name in (result.stdout or "")

    def add_vrf(self, name: str, table_id: int) -> None:
        self._check(["link", "add", name, "type", "vrf", "table", str(table_id)])

    def set_up(self, name: str) -> None:
        self._check(["link", "set", name, "up"])

    def addresses(self, name: str) -> List[str]:
        output = self._check(["-j", "-4", "addr", "show", "dev", name])
        try:
            links = json.loads(output or "[]")
        except json.JSONDecodeError as exc:
            raise LinkCommandError([self._ip, "-j", "-4", "addr", "show", "dev", name], 0, output) from exc
        found: List[str] = []
        for link in links:
            for info in link.get("addr_info", []):
                if info.get("family", "inet") != "inet":
                    continue
                found.append(f"{info['local']}/{info['prefixlen']}")
        return found

    def add_address(self, name: str, address: str) -> None:
        self._check(["addr", "add", address, "dev", name])

    def del_address(self, name: str, address: str) -> None:
        self._check(["addr", "del", address, "dev", name])
