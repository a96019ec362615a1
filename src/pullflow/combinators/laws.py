"""Combinator laws, as executable checks over finite inputs.

Processes satisfy the following algebraic laws:

1. Identity: compose(identity(), p) == p == compose(p, identity())
2. Associativity: compose(compose(a, b), c) == compose(a, compose(b, c))
3. Take/drop split: taking(n) ++ dropping(n) reconstructs the input
4. Buffering: concatenating the chunks of buffered(k) gives the input back
5. Filter is idempotent: compose(filtered(p), filtered(p)) == filtered(p)

Equality here means equal output lists when each side is supplied the
same input.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from typing import Any

from pullflow.kernel import Machine

from .pipe import compose, identity
from .process import buffered, dropping, filtered, supply, taking


def outputs(process: Machine[Any], values: Sequence[Any]) -> list[Any]:
    """Run a Process over values and collect everything it emits."""
    return supply(values, process).evaluate()


def identity_law_holds(process: Machine[Any], values: Sequence[Any]) -> bool:
    expected = outputs(process, values)
    return (
        outputs(compose(identity(), process), values) == expected
        and outputs(compose(process, identity()), values) == expected
    )


def associativity_law_holds(
    first: Machine[Any],
    second: Machine[Any],
    third: Machine[Any],
    values: Sequence[Any],
) -> bool:
    grouped_left = compose(compose(first, second), third)
    grouped_right = compose(first, compose(second, third))
    return outputs(grouped_left, values) == outputs(grouped_right, values)


def take_drop_law_holds(count: int, values: Sequence[Any]) -> bool:
    taken = outputs(taking(count), values)
    dropped = outputs(dropping(count), values)
    return taken + dropped == list(values)


def buffer_law_holds(size: int, values: Sequence[Any]) -> bool:
    chunks = outputs(buffered(size), values)
    if len(chunks) != math.ceil(len(values) / size):
        return False
    if any(len(chunk) != size for chunk in chunks[:-1]):
        return False
    if chunks and not 0 < len(chunks[-1]) <= size:
        return False
    return [value for chunk in chunks for value in chunk] == list(values)


def filter_idempotent(predicate: Callable[[Any], bool], values: Sequence[Any]) -> bool:
    once = outputs(filtered(predicate), values)
    twice = outputs(compose(filtered(predicate), filtered(predicate)), values)
    return once == twice
