"""File-based intent source."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from evpn_edge.config import GlobalIntent
from evpn_edge.errors import IntentLoadError

from ..intent import load_intent

LOG = logging.getLogger(__name__)


class FileIntentSource:
    """Read the intent YAML file on every poll.

    A file that is missing or fails to parse leaves the previously loaded
    intent in place, so a half-written edit never empties the node.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._intent: Optional[GlobalIntent] = None

    @property
    def path(self) -> Path:
        return self._path

    def poll(self) -> Optional[GlobalIntent]:
        if not self._path.exists():
            LOG.warning("intent file %s does not exist", self._path)
            return self._intent

        try:
            intent = load_intent(self._path)
        except IntentLoadError as exc:
            if self._intent is None:
                LOG.warning("invalid intent file %s: %s", self._path, exc)
            else:
                LOG.warning("invalid intent file %s, keeping previous intent: %s", self._path, exc)
            return self._intent

        if intent != self._intent:
            LOG.info("loaded intent from %s", self._path)
        self._intent = intent
        return intent
