from .combinators import (
    Automaton,
    Mealy,
    Moore,
    add_left,
    add_right,
    auto,
    buffered,
    cap,
    cap_left,
    cap_right,
    compose,
    cycled,
    dropping,
    dropping_while,
    filtered,
    identity,
    interleave,
    mapped,
    pass_through,
    prepended,
    repeated,
    source,
    supply,
    taking,
    taking_while,
    tee,
    zip_with,
)
from .kernel import (
    HALT,
    Await,
    Channel,
    ChannelMismatchError,
    Emit,
    Evidence,
    Exhausted,
    Halt,
    Machine,
    MachineError,
    Plan,
    PlanLoopError,
    StepLimitExceeded,
    Trace,
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
)
from .runtime import (
    AsyncIterableProvider,
    DriveConfig,
    IterableProvider,
    adrive,
    drive,
)

__all__ = [
    # Kernel
    "Machine",
    "Emit",
    "Await",
    "Halt",
    "HALT",
    "Channel",
    "Plan",
    "pure",
    "emit",
    "emit_all",
    "await_",
    "awaits",
    "stop",
    "fail",
    "when",
    "replicate",
    "construct",
    "repeatedly",
    "before",
    "sink",
    # Combinators
    "compose",
    "identity",
    "pass_through",
    "cap",
    "filtered",
    "mapped",
    "dropping",
    "taking",
    "dropping_while",
    "taking_while",
    "buffered",
    "prepended",
    "supply",
    "source",
    "repeated",
    "cycled",
    "tee",
    "add_left",
    "add_right",
    "cap_left",
    "cap_right",
    "zip_with",
    "interleave",
    "Automaton",
    "Moore",
    "Mealy",
    "auto",
    # Runtime
    "drive",
    "adrive",
    "DriveConfig",
    "IterableProvider",
    "AsyncIterableProvider",
    # Tracing
    "Trace",
    "Evidence",
    # Errors
    "MachineError",
    "ChannelMismatchError",
    "PlanLoopError",
    "StepLimitExceeded",
    "Exhausted",
]
