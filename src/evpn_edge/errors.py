"""Exception types raised by the reconciliation pipeline.

Each stage of a pass raises its own error type so the control loop can decide
what to skip.  A failed reconcile still lets the renderer run, a failed render
suppresses the reload, and an invalid intent blocks the whole pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence


class EdgeError(Exception):
    """Base class for all evpn-edge errors."""


@dataclass(frozen=True)
class ValidationProblem:
    """A single dangling reference or duplicate found in an intent."""

    kind: str
    subject: str
    detail: str

    def __str__(self) -> str:
        return f"{self.kind}: {self.subject}: {self.detail}"


class IntentValidationError(EdgeError, ValueError):
    """Raised when an intent fails cross-reference validation."""

    def __init__(self, problems: Sequence[ValidationProblem]) -> None:
        self.problems = list(problems)
        summary = "; ".join(str(p) for p in self.problems)
        super().__init__(f"intent has {len(self.problems)} problem(s): {summary}")


class IntentLoadError(EdgeError, ValueError):
    """Raised when an intent document cannot be parsed."""


class AllocationError(EdgeError, RuntimeError):
    """Raised when the table allocator cannot hand out an identifier."""


class LinkCommandError(EdgeError):
    """An OS-level link or address operation failed."""

    def __init__(
        self,
        command: Sequence[str] | str,
        returncode: Optional[int] = None,
        output: str = "",
    ) -> None:
        if isinstance(command, str):
            self.command = command
        else:
            self.command = " ".join(command)
        self.returncode = returncode
        self.output = output
        message = f"'{self.command}' failed"
        if returncode is not None:
            message += f" with exit status {returncode}"
        if output:
            message += f": {output.strip()}"
        super().__init__(message)


class CommandTimeout(LinkCommandError):
    """An OS-level command did not finish within its timeout."""

    def __init__(self, command: Sequence[str] | str, timeout: float) -> None:
        super().__init__(command, None, f"timed out after {timeout}s")
        self.timeout = timeout


class ReconcileError(EdgeError):
    """Reconciling a VRF failed; the remaining VRFs were not processed."""

    def __init__(self, vrf: str, reason: Exception) -> None:
        self.vrf = vrf
        self.reason = reason
        super().__init__(f"failed to reconcile VRF '{vrf}': {reason}")


class RenderError(EdgeError):
    """The FRR configuration could not be produced."""


class ConfigWriteError(RenderError):
    """The rendered configuration or its companion file could not be written."""


class ReloadError(EdgeError):
    """frr-reload.py returned a failure."""

    def __init__(self, message: str, returncode: Optional[int] = None, output: str = "") -> None:
        self.returncode = returncode
        self.output = output
        if output:
            message = f"{message}: {output.strip()}"
        super().__init__(message)
