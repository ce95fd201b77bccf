"""Abstract interface for the OS link/address surface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List


class LinkBackend(ABC):
    """Operations the VRF reconciler needs from the OS network stack.

    Implementations raise :class:`evpn_edge.errors.LinkCommandError` when an
    operation fails.  Addresses are exchanged as ``<address>/<prefixlen>``
    strings.
    """

    @abstractmethod
    def link_exists(self, name: str) -> bool:
        """Return ``True`` when a link called ``name`` exists."""

    @abstractmethod
    def add_vrf(self, name: str, table_id: int) -> None:
        """Create a VRF device ``name`` bound to kernel table ``table_id``."""

    @abstractmethod
    def set_up(self, name: str) -> None:
        """Set the administrative state of ``name`` to up."""

    @abstractmethod
    def addresses(self, name: str) -> List[str]:
        """Return the IPv4 addresses currently assigned to ``name``."""

    @abstractmethod
    def add_address(self, name: str, address: str) -> None:
        """Assign ``address`` to ``name``."""

    @abstractmethod
    def del_address(self, name: str, address: str) -> None:
        """Remove ``address`` from ``name``."""
