"""Merge composition - two Processes feeding the sides of a Tee."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from pullflow.kernel import (
    HALT,
    Await,
    Channel,
    ChannelMismatchError,
    Emit,
    Halt,
    Lazy,
    Machine,
    capped,
)
from pullflow.kernel.plan import awaits, emit, repeatedly

from .pipe import identity

A = TypeVar("A")
B = TypeVar("B")
C = TypeVar("C")


def tee(left: Machine[A], right: Machine[B], body: Machine[C]) -> Machine[C]:
    """Compose a pair of Processes onto the front of a Tee.

    Semantics:
        - body emits -> passed through unchanged
        - body halts -> the whole tee halts
        - body reads LEFT, left emits -> feed the value, right untouched
        - body reads LEFT, left halted -> body's fallback runs
        - body reads LEFT, left awaits -> the result awaits on LEFT and
          resumes inside left with the answer
        - RIGHT is symmetric

    Only the side body is currently reading is ever stepped.

    Raises:
        ChannelMismatchError: body reads IN, or a side reads anything but IN
    """
    return _tee(Lazy.now(left), Lazy.now(right), body)


def add_left(process: Machine[A], body: Machine[C]) -> Machine[C]:
    """Precompose a Process onto the left input of a Tee."""
    return tee(process, identity(), body)


def add_right(process: Machine[B], body: Machine[C]) -> Machine[C]:
    """Precompose a Process onto the right input of a Tee."""
    return tee(identity(), process, body)


def cap_left(source: Machine[A], body: Machine[C]) -> Machine[C]:
    """Tie off the left input with a source, leaving a Process over the right."""
    return add_left(source, body).fit(capped)


def cap_right(source: Machine[B], body: Machine[C]) -> Machine[C]:
    """Tie off the right input with a source, leaving a Process over the left."""
    return add_right(source, body).fit(capped)


def zip_with(fn: Callable[[Any, Any], C]) -> Machine[C]:
    """Tee reading one value from each side per output."""
    return repeatedly(
        awaits(Channel.LEFT).then(
            lambda left: awaits(Channel.RIGHT).then(lambda right: emit(fn(left, right)))
        )
    )


def interleave() -> Machine[Any]:
    """Tee echoing LEFT then RIGHT, alternating, until either side runs out."""
    return repeatedly(
        awaits(Channel.LEFT).then(emit).and_then(awaits(Channel.RIGHT).then(emit))
    )


def _tee(left: Lazy[Machine[A]], right: Lazy[Machine[B]], body: Machine[C]) -> Machine[C]:
    while True:
        if isinstance(body, Halt):
            return HALT
        if isinstance(body, Emit):
            return _emit_body(left, right, body)

        assert isinstance(body, Await)
        if body.channel is Channel.LEFT:
            side = left.force()
            if isinstance(side, Emit):
                body = body.resume(side.output)
                left = side._next
            elif isinstance(side, Halt):
                body = body.on_exhausted
            else:
                return _await_left(_require_process(side), right, body)
        elif body.channel is Channel.RIGHT:
            side = right.force()
            if isinstance(side, Emit):
                body = body.resume(side.output)
                right = side._next
            elif isinstance(side, Halt):
                body = body.on_exhausted
            else:
                return _await_right(left, _require_process(side), body)
        else:
            raise ChannelMismatchError(
                f"Tee body must read {Channel.LEFT!r} or {Channel.RIGHT!r}, got {body.channel!r}",
                body.channel,
            )


def _require_process(side: Machine[Any]) -> Await[Any]:
    assert isinstance(side, Await)
    if side.channel is not Channel.IN:
        raise ChannelMismatchError(
            f"Tee inputs must be Processes reading {Channel.IN!r}, got {side.channel!r}",
            side.channel,
        )
    return side


def _emit_body(left: Lazy[Machine[A]], right: Lazy[Machine[B]], body: Emit[C]) -> Machine[C]:
    return Emit.defer(body.output, lambda: _tee(left, right, body.next))


def _await_left(side: Await[A], right: Lazy[Machine[B]], body: Await[C]) -> Machine[C]:
    return Await.defer(
        lambda value: _tee(Lazy.now(side.resume(value)), right, body),
        Channel.LEFT,
        lambda: _tee(side._on_exhausted, right, body),
    )


def _await_right(left: Lazy[Machine[A]], side: Await[B], body: Await[C]) -> Machine[C]:
    return Await.defer(
        lambda value: _tee(left, Lazy.now(side.resume(value)), body),
        Channel.RIGHT,
        lambda: _tee(left, side._on_exhausted, body),
    )
