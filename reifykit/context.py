"""Pair a value with a context that supplies ordering, hashing or display."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")

__all__ = ["WithContext", "OrdContext", "HashContext", "DisplayContext"]


def _callable_name(func: Callable[..., Any]) -> str:
    return getattr(func, "__qualname__", None) or repr(func)


@dataclass(frozen=True)
class OrdContext(Generic[T]):
    """Supplies a three-way comparator: negative, zero or positive."""

    compare: Callable[[T, T], int]

    def __repr__(self) -> str:
        return f"OrdContext(compare={_callable_name(self.compare)})"


@dataclass(frozen=True)
class HashContext(Generic[T]):
    """Supplies a function mapping a value to the hashable key that stands for it."""

    hash: Callable[[T], Any]

    def __repr__(self) -> str:
        return f"HashContext(hash={_callable_name(self.hash)})"


@dataclass(frozen=True)
class DisplayContext(Generic[T]):
    """Supplies a function rendering a value as text."""

    display: Callable[[T], str]

    def __repr__(self) -> str:
        return f"DisplayContext(display={_callable_name(self.display)})"


@dataclass(frozen=True, eq=False)
class WithContext(Generic[T]):
    """A value whose comparison, hashing or display is decided by its context."""

    inner: T
    ctx: Any

    def _ord_context(self) -> OrdContext:
        if not isinstance(self.ctx, OrdContext):
            raise TypeError(f"{type(self.ctx).__name__} does not provide an ordering")
        return self.ctx

    def compare(self, other: WithContext) -> int:
        """Compare with another wrapped value through this value's comparator."""
        if not isinstance(other, WithContext):
            raise TypeError(f"cannot compare WithContext with {type(other).__name__}")
        return self._ord_context().compare(self.inner, other.inner)

    def _ordered(self, other: object) -> bool:
        return isinstance(other, WithContext) and isinstance(self.ctx, OrdContext)

    def __eq__(self, other: object) -> bool:
        if not self._ordered(other):
            return NotImplemented
        return self.compare(other) == 0  # type: ignore[arg-type]

    def __lt__(self, other: object) -> bool:
        if not self._ordered(other):
            return NotImplemented
        return self.compare(other) < 0  # type: ignore[arg-type]

    def __le__(self, other: object) -> bool:
        if not self._ordered(other):
            return NotImplemented
        return self.compare(other) <= 0  # type: ignore[arg-type]

    def __gt__(self, other: object) -> bool:
        if not self._ordered(other):
            return NotImplemented
        return self.compare(other) > 0  # type: ignore[arg-type]

    def __ge__(self, other: object) -> bool:
        if not self._ordered(other):
            return NotImplemented
        return self.compare(other) >= 0  # type: ignore[arg-type]

    def __hash__(self) -> int:
        if not isinstance(self.ctx, HashContext):
            raise TypeError(f"{type(self.ctx).__name__} does not provide a hash")
        return hash(self.ctx.hash(self.inner))

    def __str__(self) -> str:
        if isinstance(self.ctx, DisplayContext):
            return self.ctx.display(self.inner)
        return repr(self)