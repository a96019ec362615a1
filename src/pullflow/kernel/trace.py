"""Runtime trace infrastructure - separate from the machines being driven.

The driver records what happened while stepping a machine: outputs,
input requests, exhaustion and provider errors. Machines never see the
trace. Tree relationships are reconstructed only on demand via as_tree().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True)
class Evidence:
    """One event captured while driving a machine.

    This is runtime infrastructure, not stream data.
    """

    action: str
    id: int = 0
    parent_id: int | None = None
    step: int | None = None
    channel: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    info: dict[str, Any] = field(default_factory=dict)
    duration_ms: float | None = None


class Trace:
    """Runtime trace context for capturing drive events.

    Uses stack-based nesting via push/pop for parent-child relationships.
    Meant for single-threaded use, like the machines it observes.

    Performance guarantees:
    - Trace disabled -> single check overhead per event
    - Evidence append is O(1)
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._events: list[Evidence] = []
        self._next_id: int = 0
        self._stack: list[int] = []

    def push(self, event_id: int) -> None:
        """Make event_id the parent of subsequently recorded events."""
        self._stack.append(event_id)

    def pop(self) -> int | None:
        """Pop the current parent, or return None if there is none."""
        if self._stack:
            return self._stack.pop()
        return None

    def record(
        self,
        action: str,
        info: dict[str, Any] | None = None,
        parent_id: int | None = None,
        duration_ms: float | None = None,
        *,
        step: int | None = None,
        channel: str | None = None,
    ) -> int | None:
        """Record an evidence event.

        Args:
            action: What happened (e.g., "emit", "exhausted")
            info: Additional context
            parent_id: Explicit parent event ID for tree relationships
            duration_ms: Execution duration
            step: Driver step count when the event happened
            channel: Channel value the event concerns, if any

        Returns:
            Event ID for linking child events, or None if tracing disabled
        """
        if not self.enabled:
            return None

        if parent_id is not None:
            effective_parent = parent_id
        elif self._stack:
            effective_parent = self._stack[-1]
        else:
            effective_parent = None

        event_id = self._next_id
        self._next_id += 1

        self._events.append(
            Evidence(
                action=action,
                id=event_id,
                parent_id=effective_parent,
                step=step,
                channel=channel,
                timestamp=datetime.now(UTC),
                info=info or {},
                duration_ms=duration_ms,
            )
        )
        return event_id

    def get_events(self) -> list[Evidence]:
        """Get all recorded events (for visualization)."""
        return list(self._events)

    def find_all(self, action: str, channel: str | None = None) -> list[Evidence]:
        """Get every recorded event with the given action, optionally on one channel."""
        return [
            ev
            for ev in self._events
            if ev.action == action and (channel is None or ev.channel == channel)
        ]

    def actions(self) -> list[str]:
        return [ev.action for ev in self._events]

    def as_tree(self) -> dict[int | None, list[int]]:
        """Reconstruct parent-child relationships for visualization.

        Returns:
            Dict mapping parent_id to list of child_ids
        """
        tree: dict[int | None, list[int]] = {}
        for ev in self._events:
            tree.setdefault(ev.parent_id, []).append(ev.id)
        return tree

    def __len__(self) -> int:
        return len(self._events)

    def clear(self) -> None:
        """Clear all events (for reuse)."""
        self._events.clear()
        self._next_id = 0
        self._stack.clear()
