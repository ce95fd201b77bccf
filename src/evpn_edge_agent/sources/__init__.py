"""Intent sources polled by the control loop."""

from .file import FileIntentSource  # noqa: F401

__all__ = ["FileIntentSource"]
