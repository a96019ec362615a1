"""Automaton adapters - state machines compiled into Processes."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from pullflow.kernel import Machine
from pullflow.kernel.plan import Plan, await_, construct, emit

from .process import mapped

A = TypeVar("A")
B = TypeVar("B")
S = TypeVar("S")


@runtime_checkable
class Automaton(Protocol):
    """Anything that can be turned into a Process."""

    def auto(self) -> Machine[Any]: ...


@dataclass(frozen=True)
class Moore(Generic[A, B]):
    """Output-first automaton.

    Each state emits output straight away, then reads an input to pick the
    next state.
    """

    output: B
    step: Callable[[A], Moore[A, B]]

    @staticmethod
    def unfold(
        output_fn: Callable[[S], B],
        step_fn: Callable[[S, A], S],
        state: S,
    ) -> Moore[A, B]:
        """Build a Moore machine from a state type and its transitions."""
        return Moore(
            output_fn(state),
            lambda value: Moore.unfold(output_fn, step_fn, step_fn(state, value)),
        )

    def auto(self) -> Machine[B]:
        return construct(_moore_plan(self))


@dataclass(frozen=True)
class Mealy(Generic[A, B]):
    """Input-first automaton.

    Each state reads an input and answers with an output and the next state.
    """

    step: Callable[[A], tuple[B, Mealy[A, B]]]

    @staticmethod
    def unfold(fn: Callable[[S, A], tuple[B, S]], state: S) -> Mealy[A, B]:
        """Build a Mealy machine from a state type and its transitions."""

        def step(value: A) -> tuple[B, Mealy[A, B]]:
            output, next_state = fn(state, value)
            return output, Mealy.unfold(fn, next_state)

        return Mealy(step)

    def auto(self) -> Machine[B]:
        return construct(_mealy_plan(self))


def _moore_plan(machine: Moore[A, B]) -> Plan[B, None]:
    return emit(machine.output).and_then(
        await_().then(lambda value: _moore_plan(machine.step(value)))
    )


def _mealy_plan(machine: Mealy[A, B]) -> Plan[B, None]:
    def react(value: A) -> Plan[B, None]:
        output, next_machine = machine.step(value)
        return emit(output).and_then(_mealy_plan(next_machine))

    return await_().then(react)


def auto(automaton: Automaton | Callable[[Any], Any]) -> Machine[Any]:
    """Compile an automaton, or a plain function applied to every input, into a Process."""
    if isinstance(automaton, Automaton):
        return automaton.auto()
    if callable(automaton):
        return mapped(automaton)
    raise TypeError(f"Cannot build a Process from {type(automaton).__name__}")
