"""Plan monad - a linear description of one stream computation.

A Plan is run in continuation passing style against four continuations:

    done(value)                     the plan completed with value
    emit(output, rest)              produce output, rest() continues
    await_(channel, resume, else_)  ask channel, resume(value) or else_()
    fail()                          stop this branch

Compiling a plan picks continuations that build Machine nodes. Every
continuation after the first step sits behind a thunk, so compiling never
runs ahead of demand.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pullflow.kernel.channel import Channel
from pullflow.kernel.lazy import Lazy
from pullflow.kernel.machine import HALT, Await, Emit, Machine

O = TypeVar("O")
A = TypeVar("A")
B = TypeVar("B")
R = TypeVar("R")

Done = Callable[[A], R]
EmitK = Callable[[Any, Callable[[], R]], R]
AwaitK = Callable[[Channel, Callable[[Any], R], Callable[[], R]], R]
Fail = Callable[[], R]

Run = Callable[[Done, EmitK, AwaitK, Fail], Any]


@dataclass(frozen=True)
class Plan(Generic[O, A]):
    """A computation that may emit O values and completes with an A.

    Plans are pure descriptions: running one twice gives the same machine,
    which is what lets or_else replay its alternative from scratch.
    """

    _run: Run

    def run(self, done: Done, emit_k: EmitK, await_k: AwaitK, fail: Fail) -> Any:
        """Interpret the plan against the given continuations."""
        return self._run(done, emit_k, await_k, fail)

    def then(self, fn: Callable[[A], Plan[O, B]]) -> Plan[O, B]:
        """Feed this plan's result into fn and continue with the plan it returns."""

        def _then(done: Done, emit_k: EmitK, await_k: AwaitK, fail: Fail) -> Any:
            return self._run(
                lambda value: fn(value)._run(done, emit_k, await_k, fail),
                emit_k,
                await_k,
                fail,
            )

        return Plan(_then)

    def and_then(self, other: Plan[O, B]) -> Plan[O, B]:
        """Run other after this plan, discarding this plan's result."""
        return self.then(lambda _: other)

    def map(self, fn: Callable[[A], B]) -> Plan[O, B]:
        def _map(done: Done, emit_k: EmitK, await_k: AwaitK, fail: Fail) -> Any:
            return self._run(lambda value: done(fn(value)), emit_k, await_k, fail)

        return Plan(_map)

    def or_else(self, other: Plan[O, A]) -> Plan[O, A]:
        """Run this plan; if it stops, fails or runs out of input, run other.

        The alternative becomes this plan's failure continuation, so it also
        serves as the fallback of every await that has no closer one.
        Outputs already emitted by this plan are kept.
        """

        def _or_else(done: Done, emit_k: EmitK, await_k: AwaitK, fail: Fail) -> Any:
            return self._run(
                done,
                emit_k,
                await_k,
                lambda: other._run(done, emit_k, await_k, fail),
            )

        return Plan(_or_else)

    @staticmethod
    def pure(value: A) -> Plan[Any, A]:
        """Create a Plan that completes immediately with value."""
        return Plan(lambda done, _e, _a, _f: done(value))


def pure(value: A) -> Plan[Any, A]:
    return Plan.pure(value)


def emit(output: O) -> Plan[O, None]:
    """Output a value."""
    return Plan(lambda done, emit_k, _a, _f: emit_k(output, lambda: done(None)))


yield_ = emit


def emit_all(values: Iterable[O]) -> Plan[O, None]:
    """Output every element of values in order.

    The values are materialised once, so the plan stays replayable.
    """
    items = tuple(values)

    def _emit_all(done: Done, emit_k: EmitK, _a: AwaitK, _f: Fail) -> Any:
        def go(index: int) -> Any:
            if index == len(items):
                return done(None)
            return emit_k(items[index], lambda: go(index + 1))

        return go(0)

    return Plan(_emit_all)


def awaits(channel: Channel) -> Plan[Any, Any]:
    """Wait for a value from a particular channel.

    awaits(Channel.IN) reads a Process input; awaits(Channel.LEFT) and
    awaits(Channel.RIGHT) read the sides of a Tee.
    """
    return Plan(lambda done, _e, await_k, fail: await_k(channel, done, fail))


def await_() -> Plan[Any, Any]:
    """Wait for the next Process input."""
    return awaits(Channel.IN)


def stop() -> Plan[Any, Any]:
    """End this branch; an enclosing or_else takes over."""
    return Plan(lambda _d, _e, _a, fail: fail())


def fail() -> Plan[Any, Any]:
    """End this branch abruptly.

    Observably the same as stop(): failures carry no payload and are only
    recovered through or_else.
    """
    return Plan(lambda _d, _e, _a, fail_k: fail_k())


def when(condition: bool, plan: Plan[O, Any]) -> Plan[O, None]:
    """Run plan only if condition holds."""
    if condition:
        return plan.map(lambda _: None)
    return pure(None)


def replicate(count: int, plan: Plan[O, Any]) -> Plan[O, None]:
    """Run plan count times in sequence."""
    if count < 0:
        raise ValueError("count must be non-negative")

    def _replicate(done: Done, emit_k: EmitK, await_k: AwaitK, fail_k: Fail) -> Any:
        def go(remaining: int) -> Any:
            if remaining == 0:
                return done(None)
            return plan._run(lambda _: go(remaining - 1), emit_k, await_k, fail_k)

        return go(count)

    return Plan(_replicate)


# Compilers -------------------------------------------------------------------


def _emit_node(output: Any, rest: Callable[[], Machine[Any]]) -> Machine[Any]:
    return Emit.defer(output, rest)


def _await_node(
    channel: Channel,
    resume: Callable[[Any], Machine[Any]],
    fallback: Callable[[], Machine[Any]],
) -> Machine[Any]:
    return Await.defer(resume, channel, fallback)


def _halt() -> Machine[Any]:
    return HALT


def construct(plan: Plan[O, Any]) -> Machine[O]:
    """Compile a plan into a machine that halts when the plan completes."""
    return plan._run(lambda _: HALT, _emit_node, _await_node, _halt)


def repeatedly(plan: Plan[O, Any]) -> Machine[O]:
    """Compile a plan into a machine that restarts it each time it completes.

    The machine is its own fixed point: completion continues at the shared
    start node rather than compiling the plan again. A plan that completes
    before emitting or awaiting anything raises PlanLoopError.
    """
    start: Lazy[Machine[O]] = Lazy(
        lambda: plan._run(lambda _: start.force(), _emit_node, _await_node, _halt)
    )
    return start.force()


def before(machine: Machine[O], plan: Plan[O, Any]) -> Machine[O]:
    """Run plan, then continue as machine once it completes."""
    return plan._run(lambda _: machine, _emit_node, _await_node, _halt)


class _Discarded:
    """An output sink dropped; rest() continues the plan after it."""

    __slots__ = ("rest",)

    def __init__(self, rest: Callable[[], Any]) -> None:
        self.rest = rest


def _settle(step: Any) -> Machine[Any]:
    while isinstance(step, _Discarded):
        step = step.rest()
    return step


def _sink_await(
    channel: Channel,
    resume: Callable[[Any], Any],
    fallback: Callable[[], Any],
) -> Machine[Any]:
    return Await.defer(lambda value: _settle(resume(value)), channel, lambda: _settle(fallback()))


def sink(plan: Plan[Any, A]) -> Machine[A]:
    """Compile a plan that only reads into a machine emitting its result once.

    Anything the plan itself emits is discarded. Discarded outputs are
    skipped in a loop, so a plan may emit any number of them.
    """
    return _settle(
        plan._run(
            lambda value: Emit(value, Lazy.now(HALT)),
            lambda _output, rest: _Discarded(rest),
            _sink_await,
            _halt,
        )
    )
