"""Machine tree - the compiled, lazily unfolded form of a stream computation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, Literal, TypeVar

from pullflow.kernel.channel import Channel
from pullflow.kernel.lazy import Lazy

O = TypeVar("O")
P = TypeVar("P")


# Extension registry - operations contributed by the combinator and runtime layers
_extensions_registry: dict[str, Callable[..., Any]] = {}


class Machine(ABC, Generic[O]):
    """A possibly infinite tree of Emit, Await and Halt nodes.

    Machines are immutable. Stepping a machine hands back the continuation
    machine; nothing is evaluated before it is demanded.

    Capabilities can be registered via register_op() for extensibility.
    """

    kind: ClassVar[Literal["emit", "await", "halt"]]

    @classmethod
    def register_op(cls, name: str, fn: Callable[..., Any]) -> None:
        """Register an operation capability on the Machine class.

        Args:
            name: The operation name (e.g., "pipe")
            fn: The function to register, called with the machine first
        """
        _extensions_registry[name] = fn

    def __getattr__(self, name: str) -> Any:
        """Allow calling registered extension methods."""
        if name in _extensions_registry:
            fn = _extensions_registry[name]
            return lambda *args, **kwargs: fn(self, *args, **kwargs)
        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")

    @abstractmethod
    def map(self, fn: Callable[[O], P]) -> Machine[P]:
        """Transform every output with fn."""

    @abstractmethod
    def fit(self, mapping: Callable[[Channel], Channel]) -> Machine[O]:
        """Relabel the channel of every Await node through mapping."""

    def evaluate(self) -> list[O]:
        """Stop feeding input and collect the remaining outputs.

        Every Await resolves through its fallback, so this only terminates
        for machines that eventually halt once starved of input.
        """
        outputs: list[O] = []
        machine: Machine[O] = self
        while not isinstance(machine, Halt):
            if isinstance(machine, Emit):
                outputs.append(machine.output)
                machine = machine.next
            else:
                machine = machine.on_exhausted  # type: ignore[attr-defined]
        return outputs


@dataclass(frozen=True, eq=False, repr=False)
class Emit(Machine[O]):
    """Produce one output, then continue as next."""

    output: O
    _next: Lazy[Machine[O]]

    kind: ClassVar[Literal["emit"]] = "emit"

    @classmethod
    def defer(cls, output: O, thunk: Callable[[], Machine[O]]) -> Emit[O]:
        return cls(output, Lazy(thunk))

    @property
    def next(self) -> Machine[O]:
        return self._next.force()

    def map(self, fn: Callable[[O], P]) -> Machine[P]:
        return Emit.defer(fn(self.output), lambda: self.next.map(fn))

    def fit(self, mapping: Callable[[Channel], Channel]) -> Machine[O]:
        return Emit.defer(self.output, lambda: self.next.fit(mapping))

    def __repr__(self) -> str:
        return f"Emit({self.output!r}, {self._next!r})"


@dataclass(frozen=True, eq=False, repr=False)
class Await(Machine[O]):
    """Request one value from channel.

    resume accepts whatever that channel answers with; the value type is
    known only to the code that built the node. on_exhausted is the machine
    to continue as when the channel has nothing left.
    """

    resume: Callable[[Any], Machine[O]]
    channel: Channel
    _on_exhausted: Lazy[Machine[O]]

    kind: ClassVar[Literal["await"]] = "await"

    @classmethod
    def defer(
        cls,
        resume: Callable[[Any], Machine[O]],
        channel: Channel,
        fallback: Callable[[], Machine[O]] | None = None,
    ) -> Await[O]:
        if fallback is None:
            return cls(resume, channel, Lazy.now(HALT))
        return cls(resume, channel, Lazy(fallback))

    @property
    def on_exhausted(self) -> Machine[O]:
        return self._on_exhausted.force()

    def map(self, fn: Callable[[O], P]) -> Machine[P]:
        resume = self.resume
        return Await.defer(
            lambda value: resume(value).map(fn),
            self.channel,
            lambda: self.on_exhausted.map(fn),
        )

    def fit(self, mapping: Callable[[Channel], Channel]) -> Machine[O]:
        resume = self.resume
        return Await.defer(
            lambda value: resume(value).fit(mapping),
            mapping(self.channel),
            lambda: self.on_exhausted.fit(mapping),
        )

    def __repr__(self) -> str:
        return f"Await({self.channel!r}, {self._on_exhausted!r})"


class Halt(Machine[Any]):
    """Terminal node. There is exactly one instance, HALT."""

    kind: ClassVar[Literal["halt"]] = "halt"

    _instance: ClassVar[Halt | None] = None

    def __new__(cls) -> Halt:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def map(self, fn: Callable[[Any], P]) -> Machine[P]:
        return self

    def fit(self, mapping: Callable[[Channel], Channel]) -> Machine[Any]:
        return self

    def __repr__(self) -> str:
        return "HALT"


HALT: Halt = Halt()
