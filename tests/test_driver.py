"""Tests for driving machines against providers."""

import gc
from itertools import islice

import pytest

from fakes import FailingProvider, RecordingProvider, inputs, sides
from pullflow import (
    AsyncIterableProvider,
    Channel,
    DriveConfig,
    Emit,
    StepLimitExceeded,
    Trace,
    adrive,
    drive,
)
from pullflow.combinators import (
    buffered,
    compose,
    filtered,
    identity,
    mapped,
    prepended,
    repeated,
    source,
    taking_while,
    zip_with,
)


class TestDrive:
    def test_nothing_runs_before_first_output_is_requested(self):
        provider = RecordingProvider({Channel.IN: [1]})

        outputs = drive(identity(), provider)
        assert provider.requests == []

        assert next(outputs) == 1
        assert provider.requests == [Channel.IN]

    def test_filter_then_buffer(self):
        pipeline = compose(filtered(lambda v: v % 2 == 0), buffered(2))

        assert list(drive(pipeline, inputs(1, 2, 3, 4, 5, 6, 7))) == [[2, 4], [6]]

    def test_take_while_end_to_end(self):
        provider = inputs(1, 3, 5, 2, 9)

        assert list(drive(taking_while(lambda v: v < 5), provider)) == [1, 3]
        assert provider.consumed[Channel.IN] == 3

    def test_without_provider_every_read_is_exhausted(self):
        assert list(drive(prepended([1], channel=Channel.IN))) == [1]

    def test_missing_channel_is_exhausted(self):
        machine = zip_with(lambda left, right: (left, right))

        assert list(drive(machine, inputs(1, 2))) == []

    def test_provider_errors_propagate(self):
        provider = FailingProvider([1, 2])
        outputs = drive(mapped(lambda v: v + 1), provider)

        assert next(outputs) == 2
        assert next(outputs) == 3
        with pytest.raises(RuntimeError, match="source broken"):
            next(outputs)

    def test_run_extension_method(self):
        assert list(source([1, 2]).run()) == [1, 2]
        assert list(mapped(str).run(inputs(3))) == ["3"]


class TestStepLimit:
    def test_limit_allows_steps_up_to_max(self):
        config = DriveConfig(max_steps=3)

        assert list(islice(drive(repeated(1), config=config), 3)) == [1, 1, 1]

    def test_limit_exceeded(self):
        config = DriveConfig(max_steps=3)

        with pytest.raises(StepLimitExceeded) as exc_info:
            list(islice(drive(repeated(1), config=config), 4))

        assert exc_info.value.steps == 3


class TestDriveTrace:
    def test_records_each_step(self):
        trace = Trace()

        list(drive(identity(), inputs(1), trace=trace))

        assert trace.actions() == [
            "drive_begin",
            "await",
            "input",
            "emit",
            "await",
            "exhausted",
            "halt",
            "drive_end",
        ]

    def test_events_nest_under_drive_begin(self):
        trace = Trace()

        list(drive(source([1]), trace=trace))

        begin = trace.find_all("drive_begin")[0]
        assert all(ev.parent_id == begin.id for ev in trace.get_events()[1:])
        assert trace.find_all("drive_end")[0].step == 2

    def test_records_values_when_configured(self):
        trace = Trace()
        config = DriveConfig(record_values=True)

        list(drive(source([1]), trace=trace, config=config))

        assert trace.find_all("emit")[0].info["value"] == "1"

    def test_values_omitted_by_default(self):
        trace = Trace()

        list(drive(source([1]), trace=trace))

        assert "value" not in trace.find_all("emit")[0].info

    def test_closing_early_still_ends_trace(self):
        trace = Trace()
        outputs = drive(repeated(1), trace=trace)

        next(outputs)
        outputs.close()

        assert trace.actions()[-1] == "drive_end"

    def test_provider_error_recorded(self):
        trace = Trace()

        with pytest.raises(RuntimeError):
            list(drive(identity(), FailingProvider([]), trace=trace))

        error = trace.find_all("provider_error")[0]
        assert error.channel == "in"
        assert error.info["error"] == "source broken"

    def test_events_carry_step_and_channel(self):
        trace = Trace()

        list(drive(identity(), inputs(7), trace=trace))

        assert [ev.step for ev in trace.find_all("await")] == [1, 3]
        assert [ev.channel for ev in trace.find_all("input")] == ["in"]
        assert trace.find_all("emit")[0].channel is None
        assert len(trace.find_all("exhausted", channel="in")) == 1
        assert trace.find_all("exhausted", channel="left") == []

    def test_disabled_trace_records_nothing(self):
        trace = Trace(enabled=False)

        list(drive(source([1, 2]), trace=trace))

        assert len(trace) == 0


def live_emits():
    gc.collect()
    return sum(1 for obj in gc.get_objects() if isinstance(obj, Emit))


class TestBoundedMemory:
    def test_long_run_does_not_retain_passed_nodes(self):
        outputs = drive(compose(repeated(1), mapped(lambda v: v + 1)))

        for _ in islice(outputs, 1_000):
            pass
        before = live_emits()
        for _ in islice(outputs, 50_000):
            pass
        after = live_emits()

        assert after - before < 100

    @pytest.mark.asyncio
    async def test_async_long_run_does_not_retain_passed_nodes(self):
        outputs = adrive(compose(repeated(1), mapped(lambda v: v + 1)), AsyncIterableProvider())

        async def advance(count):
            for _ in range(count):
                await anext(outputs)

        await advance(1_000)
        before = live_emits()
        await advance(50_000)
        after = live_emits()
        await outputs.aclose()

        assert after - before < 100


async def numbers(*values):
    for value in values:
        yield value


class TestAsyncDrive:
    @pytest.mark.asyncio
    async def test_adrive_process(self):
        provider = AsyncIterableProvider({Channel.IN: numbers(1, 2, 3)})

        outputs = [value async for value in adrive(mapped(lambda v: v * 2), provider)]

        assert outputs == [2, 4, 6]

    @pytest.mark.asyncio
    async def test_adrive_tee(self):
        provider = AsyncIterableProvider(
            {Channel.LEFT: numbers(1, 2), Channel.RIGHT: numbers(10, 20, 30)}
        )

        outputs = [value async for value in adrive(zip_with(lambda a, b: a + b), provider)]

        assert outputs == [11, 22]

    @pytest.mark.asyncio
    async def test_adrive_records_trace(self):
        trace = Trace()
        provider = AsyncIterableProvider({Channel.IN: numbers(1)})

        outputs = [value async for value in adrive(identity(), provider, trace=trace)]

        assert outputs == [1]
        assert trace.actions()[0] == "drive_begin"
        assert trace.actions()[-1] == "drive_end"
        assert "exhausted" in trace.actions()


def test_sides_helper_feeds_both_channels() -> None:
    assert list(drive(zip_with(max), sides([1, 5], [3, 2]))) == [3, 5]
