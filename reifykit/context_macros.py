"""Scoped helpers that wrap a batch of values in a context, plus custom contexts."""

from __future__ import annotations

from dataclasses import make_dataclass
from typing import Any, Callable, Iterable, Mapping, TypeVar

from reifykit.context import DisplayContext, HashContext, OrdContext, WithContext

T = TypeVar("T")
R = TypeVar("R")

__all__ = ["with_ord", "with_hash", "with_display", "define_context"]


def _wrap_all(items: Iterable[T], ctx: Any) -> list[WithContext[T]]:
    return [WithContext(inner=item, ctx=ctx) for item in items]


def with_ord(
    items: Iterable[T],
    compare: Callable[[T, T], int],
    body: Callable[[list[WithContext[T]]], R],
) -> R:
    """Wrap ``items`` with a comparator and return what ``body`` makes of them."""
    return body(_wrap_all(items, OrdContext(compare)))


def with_hash(
    items: Iterable[T],
    hash_fn: Callable[[T], Any],
    body: Callable[[list[WithContext[T]]], R],
) -> R:
    """Wrap ``items`` with a hash-key function and return what ``body`` makes of them."""
    return body(_wrap_all(items, HashContext(hash_fn)))


def with_display(
    items: Iterable[T],
    display_fn: Callable[[T], str],
    body: Callable[[list[WithContext[T]]], R],
) -> R:
    """Wrap ``items`` with a display function and return what ``body`` makes of them."""
    return body(_wrap_all(items, DisplayContext(display_fn)))


def _bind(func: Callable[..., Any]) -> Callable[..., Any]:
    def method(self: WithContext, *args: Any, **kwargs: Any) -> Any:
        return func(self, *args, **kwargs)

    method.__name__ = getattr(func, "__name__", "method")
    method.__doc__ = getattr(func, "__doc__", None)
    return method


def define_context(
    name: str,
    field: str,
    methods: Mapping[str, Callable[..., Any]],
) -> type:
    """Create a context class holding one function field, with extra wrapped methods.

    The returned class is a frozen dataclass with the single attribute
    ``field``. Its ``wrap(inner)`` method pairs a value with the context in
    a :class:`WithContext` subclass that carries every entry of ``methods``
    as a method; each function receives the wrapped value first.
    """
    if not name.isidentifier():
        raise ValueError(f"context name {name!r} is not a valid identifier")
    if not field.isidentifier():
        raise ValueError(f"field name {field!r} is not a valid identifier")
    if field in ("wrap", "wrapper"):
        raise ValueError(f"field name {field!r} is reserved")
    if not methods:
        raise ValueError("a context needs at least one method")

    namespace: dict[str, Any] = {}
    for method_name, func in methods.items():
        if not method_name.isidentifier():
            raise ValueError(f"method name {method_name!r} is not a valid identifier")
        if hasattr(WithContext, method_name):
            raise ValueError(f"method name {method_name!r} clashes with WithContext")
        if not callable(func):
            raise TypeError(f"method {method_name!r} is not callable")
        namespace[method_name] = _bind(func)

    wrapper_name = f"{name}WithContext"
    namespace["__qualname__"] = wrapper_name
    namespace["__doc__"] = f"A value paired with a {name}."
    wrapper = type(wrapper_name, (WithContext,), namespace)

    def wrap(self: Any, inner: Any) -> WithContext:
        return wrapper(inner=inner, ctx=self)

    return make_dataclass(
        name,
        [(field, Callable[..., Any])],
        frozen=True,
        namespace={
            "wrap": wrap,
            "wrapper": wrapper,
            "__doc__": f"Context supplying {field} for {', '.join(methods)}.",
        },
    )