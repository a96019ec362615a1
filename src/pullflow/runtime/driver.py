"""Driving machines - turning demand for outputs into reads from a provider."""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator, Iterator
from typing import Any, TypeVar

from pullflow.kernel import Await, Channel, Emit, Exhausted, Halt, Machine, StepLimitExceeded
from pullflow.kernel.trace import Trace

from .config import DriveConfig
from .provider import AsyncProvider, Provider, starved

O = TypeVar("O")

logger = logging.getLogger(__name__)


class _Session:
    """Step accounting and trace bookkeeping for one drive."""

    def __init__(self, config: DriveConfig | None, trace: Trace | None) -> None:
        self.config = config or DriveConfig()
        self.trace = trace
        self.steps = 0
        self._drive_id: int | None = None
        self._start = 0.0

    def begin(self, machine: Machine[Any]) -> None:
        self._start = time.perf_counter()
        if self.trace is not None:
            self._drive_id = self.trace.record("drive_begin", info={"root": machine.kind})
            if self._drive_id is not None:
                self.trace.push(self._drive_id)

    def step(self) -> None:
        limit = self.config.max_steps
        if limit is not None and self.steps >= limit:
            logger.debug("step limit %d reached", limit)
            raise StepLimitExceeded(self.steps)
        self.steps += 1

    def note(
        self,
        action: str,
        value: Any = None,
        *,
        channel: Channel | None = None,
        **info: Any,
    ) -> None:
        if self.trace is None:
            return
        if self.config.record_values and value is not None:
            info["value"] = repr(value)
        self.trace.record(
            action,
            info=info,
            step=self.steps,
            channel=channel.value if channel is not None else None,
        )

    def end(self) -> None:
        duration_ms = (time.perf_counter() - self._start) * 1000
        logger.debug("drive finished after %d steps", self.steps)
        if self.trace is not None:
            self.trace.record(
                "drive_end",
                step=self.steps,
                parent_id=self._drive_id,
                duration_ms=duration_ms,
            )
            if self._drive_id is not None:
                self.trace.pop()


def drive(
    machine: Machine[O],
    provider: Provider | None = None,
    *,
    config: DriveConfig | None = None,
    trace: Trace | None = None,
) -> Iterator[O]:
    """Lazily produce a machine's outputs, reading input from provider.

    Semantics:
        - Emit -> yield the output, continue with the rest
        - Await -> ask provider for the node's channel; Exhausted switches
          to the node's fallback machine
        - Halt -> stop iterating

    Nothing runs until the first output is requested, and closing the
    iterator drops the machine. Without a provider every read is exhausted.

    Raises:
        StepLimitExceeded: more than config.max_steps nodes were visited
        Exception: anything the provider raises other than Exhausted
    """
    read = provider if provider is not None else starved
    session = _Session(config, trace)
    current: Machine[O] = machine
    # the root would pin every memoized node forced from it
    del machine
    session.begin(current)
    try:
        while True:
            session.step()
            if isinstance(current, Halt):
                session.note("halt")
                return
            if isinstance(current, Emit):
                session.note("emit", current.output)
                yield current.output
                current = current.next
                continue

            assert isinstance(current, Await)
            channel = current.channel
            session.note("await", channel=channel)
            try:
                value = read(channel)
            except Exhausted:
                session.note("exhausted", channel=channel)
                current = current.on_exhausted
                continue
            except Exception as exc:
                session.note("provider_error", channel=channel, error=str(exc))
                raise
            session.note("input", value, channel=channel)
            current = current.resume(value)
    finally:
        session.end()


async def adrive(
    machine: Machine[O],
    provider: AsyncProvider,
    *,
    config: DriveConfig | None = None,
    trace: Trace | None = None,
) -> AsyncIterator[O]:
    """Async counterpart of drive() for providers that await their input.

    The machine itself is still stepped synchronously; only reads suspend.
    """
    session = _Session(config, trace)
    current: Machine[O] = machine
    # the root would pin every memoized node forced from it
    del machine
    session.begin(current)
    try:
        while True:
            session.step()
            if isinstance(current, Halt):
                session.note("halt")
                return
            if isinstance(current, Emit):
                session.note("emit", current.output)
                yield current.output
                current = current.next
                continue

            assert isinstance(current, Await)
            channel = current.channel
            session.note("await", channel=channel)
            try:
                value = await provider(channel)
            except Exhausted:
                session.note("exhausted", channel=channel)
                current = current.on_exhausted
                continue
            except Exception as exc:
                session.note("provider_error", channel=channel, error=str(exc))
                raise
            session.note("input", value, channel=channel)
            current = current.resume(value)
    finally:
        session.end()
