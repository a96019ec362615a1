"""Input providers - where a driven machine's reads are answered from.

A provider is called with the channel an Await node is reading and either
returns the next value for it or raises Exhausted. Anything else a provider
raises is the caller's problem and propagates out of the driver.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator, Mapping
from typing import Any, Protocol

from pullflow.kernel import Channel, Exhausted


class Provider(Protocol):
    """Synchronous input port."""

    def __call__(self, channel: Channel) -> Any: ...


class AsyncProvider(Protocol):
    """Asynchronous input port."""

    async def __call__(self, channel: Channel) -> Any: ...


def starved(channel: Channel) -> Any:
    """Provider with no input on any channel."""
    raise Exhausted(channel)


class IterableProvider:
    """Answer each channel from its own iterable.

    Attributes:
        consumed: How many values each channel has handed out.
    """

    def __init__(self, channels: Mapping[Channel, Iterable[Any]] | None = None) -> None:
        self._iterators: dict[Channel, Iterator[Any]] = {
            channel: iter(values) for channel, values in (channels or {}).items()
        }
        self.consumed: dict[Channel, int] = {channel: 0 for channel in self._iterators}

    @classmethod
    def of(cls, *values: Any) -> IterableProvider:
        """Provider for a Process reading the given values."""
        return cls({Channel.IN: values})

    @classmethod
    def sides(cls, left: Iterable[Any], right: Iterable[Any]) -> IterableProvider:
        """Provider for a Tee reading left and right."""
        return cls({Channel.LEFT: left, Channel.RIGHT: right})

    def __call__(self, channel: Channel) -> Any:
        iterator = self._iterators.get(channel)
        if iterator is None:
            raise Exhausted(channel)
        try:
            value = next(iterator)
        except StopIteration:
            raise Exhausted(channel) from None
        self.consumed[channel] += 1
        return value


class AsyncIterableProvider:
    """Answer each channel from its own async iterable."""

    def __init__(self, channels: Mapping[Channel, AsyncIterable[Any]] | None = None) -> None:
        self._iterators: dict[Channel, AsyncIterator[Any]] = {
            channel: aiter(values) for channel, values in (channels or {}).items()
        }

    async def __call__(self, channel: Channel) -> Any:
        iterator = self._iterators.get(channel)
        if iterator is None:
            raise Exhausted(channel)
        try:
            return await anext(iterator)
        except StopAsyncIteration:
            raise Exhausted(channel) from None
