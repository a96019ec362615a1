"""Tests for automaton adapters."""

import pytest

from pullflow.combinators import Automaton, Mealy, Moore, auto, supply


def running_total_moore() -> Moore[int, int]:
    return Moore.unfold(lambda total: total, lambda total, value: total + value, 0)


def test_moore_emits_before_reading() -> None:
    assert supply([1, 2, 3], running_total_moore().auto()).evaluate() == [0, 1, 3, 6]


def test_moore_direct_construction() -> None:
    def toggle(on: bool) -> Moore[object, bool]:
        return Moore(on, lambda _: toggle(not on))

    assert supply([None, None], toggle(True).auto()).evaluate() == [True, False, True]


def test_mealy_emits_per_input() -> None:
    totals = Mealy.unfold(lambda total, value: (total + value, total + value), 0)

    assert supply([1, 2, 3], totals.auto()).evaluate() == [1, 3, 6]


def test_mealy_without_input_emits_nothing() -> None:
    echo = Mealy.unfold(lambda state, value: (value, state), None)

    assert echo.auto().evaluate() == []


def test_auto_dispatch() -> None:
    assert isinstance(running_total_moore(), Automaton)
    assert supply([1, 2], auto(running_total_moore())).evaluate() == [0, 1, 3]
    assert supply([1, 2], auto(lambda value: value * 10)).evaluate() == [10, 20]


def test_auto_rejects_non_automata() -> None:
    with pytest.raises(TypeError, match="Cannot build a Process"):
        auto(5)  # type: ignore[arg-type]
