"""Fixed-interval control loop."""

from __future__ import annotations

import logging
from threading import Event
from typing import Optional

from evpn_edge.driver import EdgeDriver, PassResult

from .sources import FileIntentSource

LOG = logging.getLogger(__name__)


class ControlLoop:
    """Run one full pass every ``interval`` seconds until ``stop_event`` is set.

    Passes run unconditionally whether or not the intent changed; each stage
    is idempotent so repeating a pass is safe.  Passes never overlap because
    the loop waits for the previous pass before sleeping.
    """

    def __init__(
        self,
        driver: EdgeDriver,
        source: FileIntentSource,
        interval: float,
        stop_event: Event,
    ) -> None:
        self._driver = driver
        self._source = source
        self._interval = interval
        self._stop_event = stop_event

    def run_once(self) -> Optional[PassResult]:
        intent = self._source.poll()
        if intent is None:
            LOG.warning("no usable intent from %s, skipping pass", self._source.path)
            return None
        result = self._driver.run_pass(intent, self._stop_event)
        if result.ok:
            LOG.debug("pass completed")
        return result

    def run(self) -> None:
        LOG.info("control loop started (interval=%ss)", self._interval)
        while not self._stop_event.is_set():
            try:
                self.run_once()
            except Exception:  # pragma: no cover - stage errors are handled by the driver
                LOG.exception("unexpected error during pass")
            self._stop_event.wait(self._interval)
        LOG.info("control loop stopped")
