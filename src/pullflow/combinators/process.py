"""Process combinators: filtering, take/drop, buffering and supplying input.

Every combinator takes a channel keyword, defaulting to Channel.IN. The
same code then builds the Tee variant that works on one side, e.g.
taking(3, channel=Channel.LEFT).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from pullflow.kernel import HALT, Await, Channel, ChannelMismatchError, Emit, Halt, Machine
from pullflow.kernel.plan import (
    Plan,
    awaits,
    before,
    construct,
    emit,
    emit_all,
    repeatedly,
    replicate,
    stop,
    when,
)

from .pipe import pass_through

A = TypeVar("A")
B = TypeVar("B")


def _check_count(count: int) -> None:
    if count < 0:
        raise ValueError("count must be non-negative")


def filtered(predicate: Callable[[A], bool], *, channel: Channel = Channel.IN) -> Machine[A]:
    """Forward only the values for which predicate holds."""
    return repeatedly(awaits(channel).then(lambda value: when(predicate(value), emit(value))))


def mapped(fn: Callable[[A], B], *, channel: Channel = Channel.IN) -> Machine[B]:
    """Apply fn to every value read."""
    return repeatedly(awaits(channel).then(lambda value: emit(fn(value))))


def dropping(count: int, *, channel: Channel = Channel.IN) -> Machine[A]:
    """Discard the first count values, then forward the rest."""
    _check_count(count)
    return before(pass_through(channel), replicate(count, awaits(channel)))


def taking(count: int, *, channel: Channel = Channel.IN) -> Machine[A]:
    """Forward the first count values, then halt."""
    _check_count(count)
    return construct(replicate(count, awaits(channel).then(emit)))


def taking_while(predicate: Callable[[A], bool], *, channel: Channel = Channel.IN) -> Machine[A]:
    """Forward values until predicate fails, then halt.

    The first failing value is read but not forwarded.
    """
    return repeatedly(
        awaits(channel).then(lambda value: emit(value) if predicate(value) else stop())
    )


def dropping_while(predicate: Callable[[A], bool], *, channel: Channel = Channel.IN) -> Machine[A]:
    """Discard values while predicate holds, then forward everything from there."""

    def skip() -> Plan[A, None]:
        return awaits(channel).then(lambda value: skip() if predicate(value) else emit(value))

    return before(pass_through(channel), skip())


def buffered(size: int, *, channel: Channel = Channel.IN) -> Machine[list[A]]:
    """Chunk the input into lists of size values.

    When the input runs out part way through a chunk, the partial chunk is
    emitted before halting. An empty chunk is never emitted.
    """
    if size < 1:
        raise ValueError("size must be positive")

    def flush(acc: tuple[A, ...]) -> Plan[list[A], Any]:
        if acc:
            return emit(list(acc)).and_then(stop())
        return stop()

    def fill(acc: tuple[A, ...], remaining: int) -> Plan[list[A], None]:
        if remaining == 0:
            return emit(list(acc))
        return (
            awaits(channel)
            .or_else(flush(acc))
            .then(lambda value: fill(acc + (value,), remaining - 1))
        )

    return repeatedly(fill((), size))


def prepended(values: Iterable[A], *, channel: Channel = Channel.IN) -> Machine[A]:
    """Emit values first, then forward the input unchanged."""
    return before(pass_through(channel), emit_all(values))


def supply(values: Iterable[Any], machine: Machine[B]) -> Machine[B]:
    """Answer a Process's reads from a finite sequence.

    Emit nodes pass through unchanged. Once the sequence runs out every
    further read resolves through its node's fallback, so the result never
    awaits.

    Raises:
        ChannelMismatchError: the machine reads from a channel other than IN
    """
    return _supply(tuple(values), 0, machine)


def _supply(items: tuple[Any, ...], index: int, machine: Machine[B]) -> Machine[B]:
    while True:
        if isinstance(machine, Halt):
            return HALT
        if isinstance(machine, Emit):
            return _emit_supplied(items, index, machine)

        assert isinstance(machine, Await)
        if machine.channel is not Channel.IN:
            raise ChannelMismatchError(
                f"supply can only feed {Channel.IN!r}, got {machine.channel!r}",
                machine.channel,
            )
        if index < len(items):
            machine = machine.resume(items[index])
            index += 1
        else:
            machine = machine.on_exhausted


def _emit_supplied(items: tuple[Any, ...], index: int, machine: Emit[B]) -> Machine[B]:
    return Emit.defer(machine.output, lambda: _supply(items, index, machine.next))

