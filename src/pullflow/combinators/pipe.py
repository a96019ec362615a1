"""Sequential composition - feeding one machine's outputs into a Process."""

from __future__ import annotations

from functools import cache
from typing import Any, TypeVar

from pullflow.kernel import HALT, Await, Channel, ChannelMismatchError, Emit, Halt, Lazy, Machine
from pullflow.kernel.plan import awaits, emit, repeatedly

A = TypeVar("A")
B = TypeVar("B")
C = TypeVar("C")


@cache
def pass_through(channel: Channel = Channel.IN) -> Machine[Any]:
    """Forward every value read from channel unchanged.

    pass_through(Channel.IN) is the Process identity; LEFT and RIGHT give
    the Tees that echo one side. Machines are immutable, so one instance
    per channel is shared by every caller.
    """
    return repeatedly(awaits(channel).then(emit))


def identity() -> Machine[Any]:
    """The identity of compose."""
    return pass_through(Channel.IN)


def compose(upstream: Machine[B], downstream: Machine[C]) -> Machine[C]:
    """Run downstream, answering its reads with upstream's outputs.

    Semantics:
        - downstream halts -> the result halts, upstream is dropped
        - downstream emits -> the result emits the same value
        - downstream awaits, upstream emits -> feed the value in
        - downstream awaits, upstream halted -> downstream's fallback runs
        - downstream awaits, upstream awaits -> the result awaits on
          upstream's channel and resumes the composition with the answer

    upstream is only stepped when downstream asks for a value. The result
    keeps upstream's input shape, so a Tee upstream gives a Tee.

    Raises:
        ChannelMismatchError: downstream reads from a channel other than IN
    """
    return _pipe(Lazy.now(upstream), downstream)


def cap(process: Machine[C], source: Machine[B]) -> Machine[C]:
    """Attach a source to the input of a process, giving a source."""
    return compose(source, process)


def _pipe(upstream: Lazy[Machine[B]], downstream: Machine[C]) -> Machine[C]:
    while True:
        if isinstance(downstream, Halt):
            return HALT
        if isinstance(downstream, Emit):
            return _emit_downstream(upstream, downstream)

        assert isinstance(downstream, Await)
        if downstream.channel is not Channel.IN:
            raise ChannelMismatchError(
                f"Downstream of a pipe must read {Channel.IN!r}, got {downstream.channel!r}",
                downstream.channel,
            )

        up = upstream.force()
        if isinstance(up, Emit):
            downstream = downstream.resume(up.output)
            upstream = up._next
        elif isinstance(up, Halt):
            downstream = downstream.on_exhausted
        else:
            assert isinstance(up, Await)
            return _await_upstream(up, downstream)


def _emit_downstream(upstream: Lazy[Machine[B]], downstream: Emit[C]) -> Machine[C]:
    return Emit.defer(downstream.output, lambda: _pipe(upstream, downstream.next))


def _await_upstream(upstream: Await[B], downstream: Machine[C]) -> Machine[C]:
    return Await.defer(
        lambda value: _pipe(Lazy.now(upstream.resume(value)), downstream),
        upstream.channel,
        lambda: _pipe(upstream._on_exhausted, downstream),
    )
