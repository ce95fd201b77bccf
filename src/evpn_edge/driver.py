"""One reconciliation pass over an intent.

The driver sequences the stages of a pass: validation, kernel VRF
reconciliation, FRR rendering and the FRR reload.  It owns no intent of its
own; the caller supplies an immutable :class:`GlobalIntent` for every pass.
Each stage failure is contained and recorded on the returned
:class:`PassResult` instead of being raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from threading import Event
from typing import Optional

from .config import GlobalIntent, ReconcileReport
from .errors import IntentValidationError, ReconcileError, ReloadError, RenderError
from .frr import FRRConfigRenderer, RenderResult
from .reconciler import VRFReconciler
from .reload import FRRReloader
from .validation import validate_intent

LOG = logging.getLogger(__name__)


@dataclass
class PassResult:
    """Outcome of each stage of a pass."""

    validation_error: Optional[IntentValidationError] = None
    reconcile: Optional[ReconcileReport] = None
    reconcile_error: Optional[ReconcileError] = None
    render: Optional[RenderResult] = None
    render_error: Optional[RenderError] = None
    reloaded: bool = False
    reload_error: Optional[ReloadError] = None
    stopped: bool = False

    @property
    def ok(self) -> bool:
        return (
            self.validation_error is None
            and self.reconcile_error is None
            and self.render_error is None
            and self.reload_error is None
            and self.reloaded
        )


class EdgeDriver:
    """Run Reconciler -> Renderer -> Reloader for an intent."""

    def __init__(
        self,
        reconciler: VRFReconciler,
        renderer: FRRConfigRenderer,
        reloader: FRRReloader,
        config_path: Path,
        companion_path: Path,
    ) -> None:
        self._reconciler = reconciler
        self._renderer = renderer
        self._reloader = reloader
        self._config_path = Path(config_path)
        self._companion_path = Path(companion_path)
        self._last_render: Optional[RenderResult] = None

    def run_pass(self, intent: GlobalIntent, stop_event: Optional[Event] = None) -> PassResult:
        result = PassResult()

        try:
            validate_intent(intent)
        except IntentValidationError as exc:
            LOG.error("Intent rejected, skipping pass: %s", exc)
            result.validation_error = exc
            return result

        # A failed reconcile does not stop rendering; OS and FRR state may
        # disagree until a later pass succeeds.
        try:
            result.reconcile = self._reconciler.reconcile(intent, stop_event)
        except ReconcileError as exc:
            LOG.error("Error updating VRFs: %s", exc)
            result.reconcile_error = exc

        if self._stopped(stop_event, result):
            return result

        try:
            result.render = self.render(intent)
        except RenderError as exc:
            LOG.error("Error generating FRR config: %s", exc)
            result.render_error = exc
            return result

        if self._stopped(stop_event, result):
            return result

        try:
            self._reloader.reload(result.render.output_path)
            result.reloaded = True
        except ReloadError as exc:
            LOG.error("Failed to reload FRR: %s", exc)
            result.reload_error = exc

        return result

    @staticmethod
    def _stopped(stop_event: Optional[Event], result: PassResult) -> bool:
        if stop_event is not None and stop_event.is_set():
            LOG.info("Stop requested, abandoning pass")
            result.stopped = True
        return result.stopped

    def render(self, intent: GlobalIntent) -> RenderResult:
        result = self._renderer.write(intent, self._config_path, self._companion_path)
        self._last_render = result
        return result

    def get_rendered_config(self) -> Optional[str]:
        if self._last_render:
            return self._last_render.config_text
        return None
