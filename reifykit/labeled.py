"""Awaitables that record labelled poll events into a shared trace."""

from __future__ import annotations

import inspect
import os
from typing import Any, Awaitable, Generator, Generic, TypeVar

from reifykit.traced import Trace, _poll_loop

T = TypeVar("T")

__all__ = ["LabeledFuture", "labeled_await"]


class LabeledFuture(Generic[T]):
    """An awaitable that records each poll of ``inner`` into a caller-supplied trace.

    Several labelled futures may share one trace, so their events have a
    common time origin. If it is abandoned after a pending poll, a
    cancellation event is added.
    """

    def __init__(self, inner: Awaitable[T], label: str, trace: Trace) -> None:
        if not isinstance(trace, Trace):
            raise TypeError(f"trace must be a Trace, not {type(trace).__name__}")
        self._inner = inner
        self._label = str(label)
        self._trace = trace
        self._awaited = False

    @property
    def label(self) -> str:
        """The label attached to every recorded event."""
        return self._label

    @property
    def trace(self) -> Trace:
        """The shared trace this future records into."""
        return self._trace

    def __await__(self) -> Generator[Any, Any, T]:
        if self._awaited:
            raise RuntimeError("a LabeledFuture can only be awaited once")
        self._awaited = True
        return _poll_loop(self._inner, self._trace, self._label)


def _describe(inner: Any) -> str:
    name = getattr(inner, "__qualname__", None)
    if inspect.iscoroutine(inner) and name:
        return f"{name}()"
    if name:
        return str(name)
    return type(inner).__name__


def labeled_await(inner: Awaitable[T], trace: Trace) -> LabeledFuture[T]:
    """Wrap ``inner`` in a :class:`LabeledFuture` labelled ``"<expr> @ <file>:<line>"``.

    The file and line are those of the caller.
    """
    frame = inspect.currentframe()
    caller = frame.f_back if frame is not None else None
    try:
        if caller is not None:
            location = f"{os.path.basename(caller.f_code.co_filename)}:{caller.f_lineno}"
        else:
            location = "<unknown>:0"
    finally:
        del frame, caller
    return LabeledFuture(inner, f"{_describe(inner)} @ {location}", trace)