"""Wrap awaitables so that every time they are driven a poll event is recorded."""

from __future__ import annotations

import enum
import json
import threading
import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Awaitable, Generator, Generic, Iterator, TypeVar

T = TypeVar("T")

__all__ = ["PollResult", "PollEvent", "Trace", "TracedFuture"]

_ONE_SECOND = timedelta(seconds=1)


class PollResult(enum.Enum):
    """The outcome of a single poll."""

    PENDING = "Pending"
    READY = "Ready"
    CANCELLED = "Cancelled"


@dataclass(frozen=True)
class PollEvent:
    """One recorded poll; ``offset`` is measured from the start of its trace."""

    step: int
    offset: timedelta
    result: PollResult
    label: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping of this event."""
        secs = self.offset // _ONE_SECOND
        nanos = (self.offset % _ONE_SECOND).microseconds * 1000
        return {
            "step": self.step,
            "offset": {"secs": secs, "nanos": nanos},
            "result": self.result.value,
            "label": self.label,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PollEvent:
        """Build an event from the mapping produced by :meth:`to_dict`."""
        try:
            offset = data["offset"]
            return cls(
                step=int(data["step"]),
                offset=timedelta(
                    seconds=int(offset["secs"]),
                    microseconds=int(offset["nanos"]) // 1000,
                ),
                result=PollResult(data["result"]),
                label=data.get("label"),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"malformed poll event: {data!r}") from exc


@dataclass
class Trace:
    """Poll events in order, with the reference instant their offsets count from.

    The reference instant is not serialized; a trace loaded from JSON is
    anchored at load time and only the event offsets are authoritative.
    """

    events: list[PollEvent] = field(default_factory=list)
    start: int = field(default_factory=time.perf_counter_ns, compare=False)
    _lock: Any = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    @classmethod
    def shared(cls) -> Trace:
        """Return a fresh trace, safe to hand to several recording futures."""
        return cls()

    def _append(self, result: PollResult, label: str | None) -> None:
        elapsed_ns = max(0, time.perf_counter_ns() - self.start)
        self.events.append(
            PollEvent(
                step=len(self.events),
                offset=timedelta(microseconds=elapsed_ns // 1000),
                result=result,
                label=label,
            )
        )

    def push(self, result: PollResult, label: str | None = None) -> None:
        """Append an event, measuring its offset from the trace's start."""
        with self._lock:
            self._append(result, label)

    def _cancel_if_pending(self, label: str | None) -> None:
        with self._lock:
            if self.events and self.events[-1].result is PollResult.PENDING:
                self._append(PollResult.CANCELLED, label)

    def to_json(self) -> str:
        """Serialize the events as JSON."""
        with self._lock:
            events = [event.to_dict() for event in self.events]
        return json.dumps({"events": events})

    @classmethod
    def from_json(cls, text: str) -> Trace:
        """Load a trace from :meth:`to_json` output, anchored at the current instant."""
        data = json.loads(text)
        if not isinstance(data, dict) or not isinstance(data.get("events"), list):
            raise ValueError("trace JSON must be an object with an 'events' list")
        return cls(events=[PollEvent.from_dict(item) for item in data["events"]])


def _await_iter(awaitable: Awaitable[T]) -> Iterator[Any]:
    await_method = getattr(awaitable, "__await__", None)
    if await_method is None:
        raise TypeError(f"{type(awaitable).__name__} object is not awaitable")
    return await_method()


def _poll_loop(
    awaitable: Awaitable[T], trace: Trace, label: str | None
) -> Generator[Any, Any, T]:
    """Drive ``awaitable``, recording one event per resumption into ``trace``.

    If the awaitable is abandoned before it completes and the trace's last
    event is pending, a cancellation event is recorded.
    """
    iterator = _await_iter(awaitable)
    completed = False
    send_value: Any = None
    thrown: BaseException | None = None
    try:
        while True:
            try:
                if thrown is None:
                    yielded = iterator.send(send_value)  # type: ignore[attr-defined]
                else:
                    exc, thrown = thrown, None
                    yielded = iterator.throw(exc)  # type: ignore[attr-defined]
            except StopIteration as stop:
                completed = True
                trace.push(PollResult.READY, label)
                return stop.value
            trace.push(PollResult.PENDING, label)
            try:
                send_value = yield yielded
            except GeneratorExit:
                raise
            except BaseException as exc:
                thrown = exc
                send_value = None
    finally:
        if not completed:
            close = getattr(iterator, "close", None)
            if close is not None:
                close()
            trace._cancel_if_pending(label)


class TracedFuture(Generic[T]):
    """An awaitable that records each poll of ``inner`` into its own trace.

    If it is abandoned after a pending poll, a cancellation event is added.
    """

    def __init__(self, inner: Awaitable[T], label: str | None = None) -> None:
        self._inner = inner
        self._label = label
        self._trace = Trace.shared()
        self._awaited = False

    @property
    def trace(self) -> Trace:
        """The trace this future records into."""
        return self._trace

    @property
    def label(self) -> str | None:
        """The label attached to every recorded event."""
        return self._label

    @classmethod
    def with_label(cls, inner: Awaitable[T], label: str) -> TracedFuture[T]:
        """Create a traced future whose events carry ``label``."""
        return cls(inner, label)

    @classmethod
    async def run(cls, inner: Awaitable[T]) -> tuple[T, Trace]:
        """Await ``inner`` and return its result together with the trace."""
        traced = cls(inner)
        result = await traced
        return result, traced.trace

    def __await__(self) -> Generator[Any, Any, T]:
        if self._awaited:
            raise RuntimeError("a TracedFuture can only be awaited once")
        self._awaited = True
        return _poll_loop(self._inner, self._trace, self._label)