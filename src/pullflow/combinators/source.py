"""Sources - machines that never read input.

A source has no Await node, so the same value serves as a Process or a
Tee wherever a source is expected.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TypeVar

from pullflow.kernel import HALT, Machine
from pullflow.kernel.plan import construct, emit, emit_all, repeatedly

O = TypeVar("O")


def source(values: Iterable[O]) -> Machine[O]:
    """Emit each element of values once, then halt."""
    return construct(emit_all(values))


def repeated(value: O) -> Machine[O]:
    """Emit the same value forever."""
    return repeatedly(emit(value))


def cycled(values: Iterable[O]) -> Machine[O]:
    """Loop through values forever. An empty collection halts at once."""
    items = tuple(values)
    if not items:
        return HALT
    return repeatedly(emit_all(items))
