"""Channel tags - which input stream an Await node is asking."""

from __future__ import annotations

from enum import Enum


class Channel(Enum):
    """Input selector carried by every Await node.

    Kinds:
    - IN: the single implicit input of a Process
    - LEFT: first input of a Tee
    - RIGHT: second input of a Tee
    """

    IN = "in"
    LEFT = "left"
    RIGHT = "right"

    def __repr__(self) -> str:
        return f"Channel.{self.name}"


def capped(channel: Channel) -> Channel:
    """Collapse both sides of a Tee onto the single Process input."""
    return Channel.IN
