"""Bring kernel VRF devices in line with the VRF portion of an intent."""

from __future__ import annotations

import logging
from threading import Event
from typing import List, Optional

from .allocator import TableAllocator
from .config import VRF, GlobalIntent, ReconcileReport
from .errors import AllocationError, LinkCommandError, ReconcileError
from .links.base import LinkBackend

LOG = logging.getLogger(__name__)


class VRFReconciler:
    """Create, enable and address one VRF device per intent VRF.

    VRFs are processed in declaration order.  The first failing operation
    aborts the remaining VRFs and is raised as :class:`ReconcileError`; VRFs
    handled before the failure are left as they are.  Every step is safe to
    repeat, so the next pass simply starts over.
    """

    def __init__(
        self,
        backend: LinkBackend,
        allocator: TableAllocator,
        *,
        prefix_len: int = 24,
    ) -> None:
        self._backend = backend
        self._allocator = allocator
        self._prefix_len = prefix_len

    def desired_addresses(self, intent: GlobalIntent, vrf: VRF) -> List[str]:
        router = intent.router_for_vrf(vrf.name)
        if router is None or not router.router_id:
            return []
        return [f"{router.router_id}/{self._prefix_len}"]

    def reconcile(
        self,
        intent: GlobalIntent,
        stop_event: Optional[Event] = None,
    ) -> ReconcileReport:
        report = ReconcileReport()
        for vrf in intent.vrfs:
            if stop_event is not None and stop_event.is_set():
                LOG.info("Stop requested, leaving remaining VRFs for later")
                report.interrupted = True
                break
            try:
                self._reconcile_vrf(intent, vrf, report)
            except (LinkCommandError, AllocationError) as exc:
                LOG.error("Error reconciling VRF %s: %s", vrf.name, exc)
                raise ReconcileError(vrf.name, exc) from exc
            report.reconciled.append(vrf.name)
        return report

    def _reconcile_vrf(self, intent: GlobalIntent, vrf: VRF, report: ReconcileReport) -> None:
        LOG.info("Configuring VRF %s (VNI %d)", vrf.name, vrf.vni)

        if self._backend.link_exists(vrf.name):
            LOG.debug("VRF %s already exists, bringing it up", vrf.name)
            self._backend.set_up(vrf.name)
        else:
            table_id = self._allocator.allocate(vrf.name)
            LOG.info("Creating VRF %s (table %d)", vrf.name, table_id)
            self._backend.add_vrf(vrf.name, table_id)
            self._backend.set_up(vrf.name)
            report.created.append(vrf.name)

        desired = self.desired_addresses(intent, vrf)
        current = self._backend.addresses(vrf.name)

        for address in desired:
            if address not in current:
                LOG.info("Assigning %s to VRF %s", address, vrf.name)
                self._backend.add_address(vrf.name, address)
                report.addresses_added.append((vrf.name, address))

        for address in current:
            if address not in desired:
                LOG.info("Removing stale address %s from VRF %s", address, vrf.name)
                self._backend.del_address(vrf.name, address)
                report.addresses_removed.append((vrf.name, address))
