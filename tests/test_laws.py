"""Tests for the composition laws."""

import pytest

from pullflow.combinators import buffered, dropping_while, filtered, mapped, taking, taking_while
from pullflow.combinators.laws import (
    associativity_law_holds,
    buffer_law_holds,
    filter_idempotent,
    identity_law_holds,
    take_drop_law_holds,
)

VALUES = [5, 1, 4, 1, 5, 9, 2, 6, 5, 3]


@pytest.mark.parametrize(
    "process",
    [
        mapped(lambda v: v + 1),
        filtered(lambda v: v > 3),
        taking(4),
        buffered(3),
        dropping_while(lambda v: v != 9),
    ],
)
def test_identity_law(process) -> None:
    assert identity_law_holds(process, VALUES)
    assert identity_law_holds(process, [])


def test_associativity_law() -> None:
    first = filtered(lambda v: v % 2 == 1)
    second = mapped(lambda v: v * 3)
    third = taking_while(lambda v: v < 20)

    assert associativity_law_holds(first, second, third, VALUES)
    assert associativity_law_holds(buffered(2), mapped(sum), taking(3), VALUES)


@pytest.mark.parametrize("count", [0, 1, 3, len(VALUES), len(VALUES) + 2])
def test_take_drop_law(count: int) -> None:
    assert take_drop_law_holds(count, VALUES)


@pytest.mark.parametrize("size", [1, 2, 3, 5, 10, 11])
def test_buffer_law(size: int) -> None:
    assert buffer_law_holds(size, VALUES)
    assert buffer_law_holds(size, [])


def test_filter_idempotent() -> None:
    assert filter_idempotent(lambda v: v > 2, VALUES)
    assert filter_idempotent(lambda v: False, VALUES)
