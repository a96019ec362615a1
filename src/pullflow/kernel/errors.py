"""Error types for machine construction and driving."""

from __future__ import annotations


class MachineError(Exception):
    """Base class for pullflow errors."""


class ChannelMismatchError(MachineError, TypeError):
    """A machine awaited on a channel its composition slot cannot serve.

    Keeps the offending channel for debugging.
    """

    def __init__(self, message: str, channel: object) -> None:
        self.channel = channel
        super().__init__(message)

    def __repr__(self) -> str:
        return f"ChannelMismatchError({super().__repr__()}, channel={self.channel!r})"


class PlanLoopError(MachineError):
    """A repeated plan completed without emitting or awaiting."""


class StepLimitExceeded(MachineError):
    """The driver visited more machine nodes than its config allows."""

    def __init__(self, steps: int) -> None:
        self.steps = steps
        super().__init__(f"Machine exceeded step limit after {steps} steps")


class Exhausted(Exception):
    """Raised by a provider when a channel has no more input.

    This is a signal, not a failure: the driver resolves it through the
    awaiting node's fallback machine.
    """

    def __init__(self, channel: object = None) -> None:
        self.channel = channel
        super().__init__(f"Channel exhausted: {channel!r}")
