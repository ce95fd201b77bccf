"""Reconcile-and-render engine for a BGP/EVPN fabric-edge node.

An intent (:class:`evpn_edge.config.GlobalIntent`) describes the node's BGP
instances, VRFs, routing policy and EVPN instances.  On every pass the
package:

* validates cross references inside the intent;
* makes the kernel VRF devices, their tables and addresses match it;
* renders the FRR configuration deterministically and writes it atomically;
* hands the file to ``frr-reload.py``.

The driver exposed via :class:`evpn_edge.driver.EdgeDriver` sequences those
stages for a single pass; scheduling lives in the ``evpn_edge_agent``
package.
"""

from .driver import EdgeDriver, PassResult  # noqa: F401

__all__ = ["EdgeDriver", "PassResult"]
