import asyncio
from datetime import timedelta

import pytest

from reifykit.traced import PollEvent, PollResult, Trace, TracedFuture


async def _value(v):
    return v


class YieldOnce:
    def __await__(self):
        yield None
        return None


@pytest.mark.asyncio
async def test_trace_immediate_future():
    val, trace = await TracedFuture.run(_value(42))
    assert val == 42
    assert len(trace.events) == 1
    assert trace.events[0].result is PollResult.READY
    assert trace.events[0].step == 0


@pytest.mark.asyncio
async def test_trace_multi_step():
    async def work():
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        return 99

    val, trace = await TracedFuture.run(work())
    assert val == 99
    assert len(trace.events) >= 3
    assert trace.events[-1].result is PollResult.READY
    assert [e.step for e in trace.events] == list(range(len(trace.events)))


@pytest.mark.asyncio
async def test_with_label():
    traced = TracedFuture.with_label(_value(1), "test_step")
    assert await traced == 1
    assert traced.trace.events[0].label == "test_step"


def test_dropped_pending_future_is_cancelled():
    traced = TracedFuture.with_label(YieldOnce(), "drop_me")
    iterator = traced.__await__()
    next(iterator)
    iterator.close()
    results = [e.result for e in traced.trace.events]
    assert PollResult.PENDING in results
    assert results[-1] is PollResult.CANCELLED
    assert all(e.label == "drop_me" for e in traced.trace.events)


@pytest.mark.asyncio
async def test_cancelled_task_records_cancellation():
    traced = TracedFuture(asyncio.sleep(10))
    task = asyncio.ensure_future(traced)
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert traced.trace.events[-1].result is PollResult.CANCELLED


@pytest.mark.asyncio
async def test_exception_propagates_without_events():
    async def boom():
        raise KeyError("missing")

    traced = TracedFuture(boom())
    with pytest.raises(KeyError):
        await traced
    assert traced.trace.events == []


@pytest.mark.asyncio
async def test_awaiting_twice_is_an_error():
    traced = TracedFuture(_value(3))
    assert await traced == 3
    with pytest.raises(RuntimeError):
        await traced


@pytest.mark.asyncio
async def test_trace_round_trip_json():
    async def work():
        await asyncio.sleep(0)
        return 7

    _, trace = await TracedFuture.run(work())
    restored = Trace.from_json(trace.to_json())
    assert len(restored.events) == len(trace.events)
    for a, b in zip(trace.events, restored.events):
        assert a.step == b.step
        assert a.offset == b.offset
        assert a.result == b.result
        assert a.label == b.label


def test_poll_event_to_dict_matches_format():
    event = PollEvent(
        step=0, offset=timedelta(microseconds=150), result=PollResult.READY, label=None
    )
    assert event.to_dict() == {
        "step": 0,
        "offset": {"secs": 0, "nanos": 150000},
        "result": "Ready",
        "label": None,
    }
    assert PollEvent.from_dict(event.to_dict()) == event


def test_poll_event_from_dict_rejects_bad_result():
    with pytest.raises(ValueError):
        PollEvent.from_dict(
            {"step": 0, "offset": {"secs": 0, "nanos": 0}, "result": "Done", "label": None}
        )


def test_from_json_rejects_missing_events():
    with pytest.raises(ValueError):
        Trace.from_json("{}")


def test_push_assigns_steps_and_monotonic_offsets():
    trace = Trace.shared()
    assert trace.events == []
    trace.push(PollResult.PENDING, "a")
    trace.push(PollResult.READY, "a")
    trace.push(PollResult.READY)
    assert [e.step for e in trace.events] == [0, 1, 2]
    assert [e.label for e in trace.events] == ["a", "a", None]
    offsets = [e.offset for e in trace.events]
    assert offsets == sorted(offsets)
    assert all(o >= timedelta(0) for o in offsets)


def test_poll_result_values():
    assert PollResult.READY != PollResult.PENDING
    assert PollResult("Cancelled") is PollResult.CANCELLED