"""Apply a rendered configuration to the running FRR daemons."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List

from .errors import ReloadError

LOG = logging.getLogger(__name__)

FRR_RELOAD = Path("/usr/lib/frr/frr-reload.py")


class FRRReloader:
    """Invoke ``frr-reload.py`` on a configuration file.

    Standard output and error are captured together so a failure carries the
    tool's full diagnostics.  There is no retry; the next pass tries again.
    """

    def __init__(self, tool: Path = FRR_RELOAD, timeout: float = 60.0) -> None:
        self._tool = Path(tool)
        self._timeout = timeout

    def _invoke(self, args: List[str]) -> str:
        cmd = [str(self._tool), *args]
        LOG.debug("Executing: %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                check=False,
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise ReloadError(f"{self._tool} timed out after {self._timeout}s") from exc
        except OSError as exc:
            raise ReloadError(f"cannot execute {self._tool}: {exc}") from exc

        output = result.stdout or ""
        if result.returncode != 0:
            raise ReloadError(
                f"{self._tool} exited with status {result.returncode}",
                returncode=result.returncode,
                output=output,
            )
        return output

    def reload(self, config_path: Path) -> str:
        """Reload FRR from ``config_path``, replacing the running state."""

        LOG.info("Reloading FRR configuration from %s", config_path)
        output = self._invoke(["--reload", "--overwrite", str(config_path)])
        LOG.info("FRR successfully reloaded")
        return output

    def validate(self, config_path: Path) -> str:
        """Ask frr-reload.py to check ``config_path`` without applying it."""

        return self._invoke(["--test", str(config_path)])
