"""Error taxonomy for detection sessions."""

from __future__ import annotations


class OverlayError(RuntimeError):
    """Base class for detection overlay failures."""


class ModelLoadFailure(OverlayError):
    """Raised when the inference backend cannot be initialized."""


class CaptureAcquisitionFailure(OverlayError):
    """Raised when the frame source cannot be opened."""


class MalformedOutput(OverlayError, ValueError):
    """Raised when a raw model output does not match the configured layout."""

    def __init__(self, expected: int, actual: int) -> None:
        """Record the expected and actual output lengths."""
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Model output has {actual} values, expected {expected} "
            "(check num_classes / num_candidates)"
        )


class InvalidTransition(OverlayError):
    """Raised when a command is issued from the wrong session phase."""
