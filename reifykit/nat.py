"""Lift runtime naturals in 0..=255 into callbacks that receive them as parameters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from reifykit.dispatch import MAX_REIFY_VALUE

R = TypeVar("R")

__all__ = [
    "NatCallback",
    "Nat2Callback",
    "FnNat",
    "FnNat2",
    "reify_nat",
    "reify_nat2",
    "reify_nat_fn",
    "reify_nat2_fn",
]


class NatCallback(ABC, Generic[R]):
    """A computation parameterised by one natural number."""

    @abstractmethod
    def call(self, n: int) -> R:
        """Run the computation for the reified value ``n``."""


class Nat2Callback(ABC, Generic[R]):
    """A computation parameterised by two natural numbers."""

    @abstractmethod
    def call(self, a: int, b: int) -> R:
        """Run the computation for the reified values ``a`` and ``b``."""


@dataclass(frozen=True)
class FnNat(NatCallback[R]):
    """Adapts a one-argument function into a :class:`NatCallback`."""

    f: Callable[[int], R]

    def call(self, n: int) -> R:
        return self.f(n)


@dataclass(frozen=True)
class FnNat2(Nat2Callback[R]):
    """Adapts a two-argument function into a :class:`Nat2Callback`."""

    f: Callable[[int, int], R]

    def call(self, a: int, b: int) -> R:
        return self.f(a, b)


def _check(val: int) -> int:
    if isinstance(val, bool) or not isinstance(val, int):
        raise TypeError(f"value must be an int, not {type(val).__name__}")
    if not 0 <= val <= MAX_REIFY_VALUE:
        raise ValueError(
            f"const-reify: value {val} is out of supported range 0..={MAX_REIFY_VALUE}"
        )
    return val


def reify_nat(val: int, callback: NatCallback[R]) -> R:
    """Run ``callback`` for ``val``, which must lie in 0..=255."""
    return callback.call(_check(val))


def reify_nat2(a: int, b: int, callback: Nat2Callback[R]) -> R:
    """Run ``callback`` for ``a`` and ``b``, each of which must lie in 0..=255."""
    first = _check(a)
    second = _check(b)
    return callback.call(first, second)


def reify_nat_fn(val: int, f: Callable[[int], R]) -> R:
    """Run the plain function ``f`` for ``val``, which must lie in 0..=255."""
    return reify_nat(val, FnNat(f))


def reify_nat2_fn(a: int, b: int, f: Callable[[int, int], R]) -> R:
    """Run the plain function ``f`` for ``a`` and ``b``, each in 0..=255."""
    return reify_nat2(a, b, FnNat2(f))