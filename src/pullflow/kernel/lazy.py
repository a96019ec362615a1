"""Memoizing thunks - the deferred edges of the machine tree."""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

from pullflow.kernel.errors import PlanLoopError

T = TypeVar("T")

_PENDING = object()
_FORCING = object()


class Lazy(Generic[T]):
    """A value computed on first use and cached afterwards.

    The thunk is dropped once forced so that whatever it closed over can be
    collected. Forcing a thunk from inside its own evaluation means the
    definition has no productive step, which raises PlanLoopError.
    """

    __slots__ = ("_thunk", "_value")

    def __init__(self, thunk: Callable[[], T]) -> None:
        self._thunk: Callable[[], T] | None = thunk
        self._value: object = _PENDING

    @classmethod
    def now(cls, value: T) -> Lazy[T]:
        """Wrap an already computed value."""
        lazy: Lazy[T] = cls.__new__(cls)
        lazy._thunk = None
        lazy._value = value
        return lazy

    @property
    def forced(self) -> bool:
        return self._value is not _PENDING and self._value is not _FORCING

    def force(self) -> T:
        value = self._value
        if value is _FORCING:
            raise PlanLoopError("Deferred value depends on itself before producing a node")
        if value is _PENDING:
            thunk = self._thunk
            assert thunk is not None
            self._value = _FORCING
            try:
                value = thunk()
            except BaseException:
                self._value = _PENDING
                raise
            self._value = value
            self._thunk = None
        return value  # type: ignore[return-value]

    def __repr__(self) -> str:
        return "Lazy(<forced>)" if self.forced else "Lazy(<pending>)"
