"""Tests for the Process combinators."""

import operator

import pytest

from fakes import inputs
from pullflow import HALT, Await, Channel, ChannelMismatchError, Emit, drive
from pullflow.combinators import (
    buffered,
    cap_right,
    dropping,
    dropping_while,
    filtered,
    identity,
    mapped,
    prepended,
    repeated,
    supply,
    taking,
    taking_while,
    zip_with,
)
from pullflow.kernel.plan import await_, construct, emit


def run(process, values):
    return supply(values, process).evaluate()


class TestFiltering:
    def test_filtered_keeps_matching_values(self):
        assert run(filtered(lambda v: v % 2 == 0), [1, 2, 3, 4, 5, 6]) == [2, 4, 6]

    def test_mapped(self):
        assert run(mapped(str.upper), ["a", "b"]) == ["A", "B"]


class TestTakeDrop:
    @pytest.mark.parametrize(
        ("count", "expected"),
        [(0, [1, 2, 3, 4]), (2, [3, 4]), (5, [])],
    )
    def test_dropping(self, count, expected):
        assert run(dropping(count), [1, 2, 3, 4]) == expected

    @pytest.mark.parametrize(
        ("count", "expected"),
        [(0, []), (2, [1, 2]), (5, [1, 2, 3, 4])],
    )
    def test_taking(self, count, expected):
        assert run(taking(count), [1, 2, 3, 4]) == expected

    def test_negative_counts_rejected(self):
        with pytest.raises(ValueError):
            taking(-1)
        with pytest.raises(ValueError):
            dropping(-1)

    def test_taking_stops_reading_after_count(self):
        provider = inputs(1, 2, 3, 4, 5)

        assert list(drive(taking(2), provider)) == [1, 2]
        assert provider.consumed[Channel.IN] == 2

    def test_taking_while(self):
        provider = inputs(1, 3, 5, 2, 9)

        assert list(drive(taking_while(lambda v: v < 5), provider)) == [1, 3]
        assert provider.consumed[Channel.IN] == 3

    def test_dropping_while(self):
        assert run(dropping_while(lambda v: v < 3), [1, 2, 3, 1, 4]) == [3, 1, 4]

    def test_dropping_while_everything(self):
        assert run(dropping_while(lambda v: v < 10), [1, 2, 3]) == []


class TestBuffered:
    def test_partial_last_chunk(self):
        assert run(buffered(2), [1, 2, 3, 4, 5]) == [[1, 2], [3, 4], [5]]

    def test_no_empty_trailing_chunk(self):
        assert run(buffered(2), [1, 2, 3, 4]) == [[1, 2], [3, 4]]

    def test_empty_input(self):
        assert run(buffered(3), []) == []

    def test_size_must_be_positive(self):
        with pytest.raises(ValueError, match="positive"):
            buffered(0)

    def test_chunks_emitted_as_soon_as_full(self):
        machine = supply([1, 2], buffered(2))

        assert isinstance(machine, Emit)
        assert machine.output == [1, 2]


class TestPrepended:
    def test_prepended_values_come_first(self):
        assert run(prepended([0, "x"]), [1, 2]) == [0, "x", 1, 2]


class TestSupply:
    def test_fallback_runs_once_values_run_out(self):
        plan = await_().then(emit).and_then(await_().then(emit)).or_else(emit("out"))

        assert run(construct(plan), [1]) == [1, "out"]

    def test_result_never_awaits(self):
        machine = supply([1], identity())

        assert isinstance(machine, Emit)
        assert machine.next is HALT

    def test_result_is_replayable(self):
        machine = supply([1, 2, 3], mapped(lambda v: v * v))

        assert machine.evaluate() == machine.evaluate() == [1, 4, 9]

    def test_supply_extension_method(self):
        assert taking(1).supply([8, 9]).evaluate() == [8]

    def test_rejects_tee(self):
        with pytest.raises(ChannelMismatchError):
            supply([1], zip_with(operator.add))


class TestChannelKeyword:
    def test_combinator_reads_requested_channel(self):
        machine = taking(2, channel=Channel.LEFT)

        assert isinstance(machine, Await)
        assert machine.channel is Channel.LEFT

    def test_tee_side_combinator(self):
        machine = cap_right(repeated(0), taking(2, channel=Channel.LEFT))

        assert run(machine, [7, 8, 9]) == [7, 8]
