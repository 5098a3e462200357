"""Dispatch a runtime value to one entry of a fixed table of modulus objects."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, TypeVar

R = TypeVar("R")

__all__ = ["HasModulus", "Modular", "MAX_REIFY_VALUE", "reify_const", "reify"]

MAX_REIFY_VALUE = 255
"""Largest value supported by :func:`reify_const`."""

_U64_MAX = 2**64 - 1


class HasModulus(ABC):
    """Anything that can report a modulus value."""

    @abstractmethod
    def modulus(self) -> int:
        """Return the modulus value."""


class Modular(HasModulus):
    """A value-free marker carrying a fixed unsigned 64-bit modulus."""

    __slots__ = ("_n",)

    def __init__(self, n: int) -> None:
        if isinstance(n, bool) or not isinstance(n, int):
            raise TypeError(f"modulus must be an int, not {type(n).__name__}")
        if not 0 <= n <= _U64_MAX:
            raise ValueError(f"modulus {n} does not fit in an unsigned 64-bit integer")
        self._n = n

    def modulus(self) -> int:
        return self._n

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Modular):
            return NotImplemented
        return self._n == other._n

    def __hash__(self) -> int:
        return hash((Modular, self._n))

    def __repr__(self) -> str:
        return f"Modular({self._n})"


_TABLE: tuple[Modular, ...] = tuple(Modular(n) for n in range(MAX_REIFY_VALUE + 1))


def reify_const(val: int, f: Callable[[HasModulus], R]) -> R:
    """Call ``f`` with the :class:`Modular` for ``val``, which must lie in 0..=255."""
    if isinstance(val, bool) or not isinstance(val, int):
        raise TypeError(f"value must be an int, not {type(val).__name__}")
    if not 0 <= val <= MAX_REIFY_VALUE:
        raise ValueError(
            f"const-reify: value {val} is out of supported range 0..={MAX_REIFY_VALUE}"
        )
    return f(_TABLE[val])


def reify(val: int, f: Callable[[HasModulus], R]) -> R:
    """Shorthand for :func:`reify_const`."""
    return reify_const(val, f)