"""Kernel layer - machines, plans and their compilers."""

from pullflow.kernel.channel import Channel, capped
from pullflow.kernel.errors import (
    ChannelMismatchError,
    Exhausted,
    MachineError,
    PlanLoopError,
    StepLimitExceeded,
)
from pullflow.kernel.lazy import Lazy
from pullflow.kernel.machine import HALT, Await, Emit, Halt, Machine
from pullflow.kernel.plan import (
    Plan,
    await_,
    awaits,
    before,
    construct,
    emit,
    emit_all,
    fail,
    pure,
    repeatedly,
    replicate,
    sink,
    stop,
    when,
    yield_,
)
from pullflow.kernel.trace import Evidence, Trace

__all__ = [
    # Machines
    "Machine",
    "Emit",
    "Await",
    "Halt",
    "HALT",
    "Lazy",
    "Channel",
    "capped",
    # Plans
    "Plan",
    "pure",
    "emit",
    "yield_",
    "emit_all",
    "await_",
    "awaits",
    "stop",
    "fail",
    "when",
    "replicate",
    # Compilers
    "construct",
    "repeatedly",
    "before",
    "sink",
    # Tracing
    "Evidence",
    "Trace",
    # Errors
    "MachineError",
    "ChannelMismatchError",
    "PlanLoopError",
    "StepLimitExceeded",
    "Exhausted",
]
