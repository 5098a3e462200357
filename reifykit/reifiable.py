"""Turn a class with value-parameterised methods into runtime dispatch functions.

A method marked with :func:`const_generic` takes the reified value as its
first argument after ``self``. Decorating the class with :func:`reifiable`
generates, for every such method, a ``reify_<method>`` dispatch function
that checks the runtime value against the declared range and forwards it to
the method. It also generates a :class:`~reifykit.nat.NatCallback` wrapper
class named ``<Class><Method>Callback`` for use with
:func:`~reifykit.nat.reify_nat`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from reifykit.nat import NatCallback

F = TypeVar("F", bound=Callable[..., Any])

__all__ = [
    "MAX_RANGE_END",
    "const_generic",
    "reifiable",
    "dispatch_function",
    "callback_wrapper",
    "pascal_case",
]

MAX_RANGE_END = 1023
"""Largest allowed upper bound of a :func:`reifiable` range."""

_U64_MAX = 2**64 - 1
_MARKER = "__const_generic__"
_INFO = "__reifiable__"
_CO_VARARGS = 0x04


@dataclass(frozen=True)
class _ReifyInfo:
    trait: type
    range_start: int
    range_end: int
    dispatchers: dict[str, Callable[..., Any]] = field(default_factory=dict)
    wrappers: dict[str, type] = field(default_factory=dict)


def pascal_case(name: str) -> str:
    """Convert ``snake_case`` to ``PascalCase``, dropping the underscores."""
    pieces = []
    capitalize_next = True
    for char in name:
        if char == "_":
            capitalize_next = True
        elif capitalize_next:
            pieces.append(char.upper() if char.isascii() else char)
            capitalize_next = False
        else:
            pieces.append(char)
    return "".join(pieces)


def const_generic(method: F) -> F:
    """Mark an instance method whose first argument after ``self`` is the reified value."""
    if isinstance(method, (staticmethod, classmethod)):
        raise TypeError("@const_generic requires methods with a self receiver")
    code = getattr(method, "__code__", None)
    if not callable(method) or code is None:
        raise TypeError("@const_generic can only decorate a function")
    has_varargs = bool(code.co_flags & _CO_VARARGS)
    if code.co_argcount < 2 and not has_varargs:
        raise TypeError(
            f"@const_generic method {method.__name__!r} must take self and the reified value"
        )
    setattr(method, _MARKER, True)
    return method


def _check_bound(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, not {type(value).__name__}")
    if not 0 <= value <= _U64_MAX:
        raise ValueError(f"{name} {value} does not fit in an unsigned 64-bit integer")
    return value


def _make_dispatcher(info: _ReifyInfo, method_name: str) -> Callable[..., Any]:
    trait = info.trait
    start, end = info.range_start, info.range_end

    def dispatch(val: int, obj: Any, *args: Any, **kwargs: Any) -> Any:
        if isinstance(val, bool) or not isinstance(val, int):
            raise TypeError(f"value must be an int, not {type(val).__name__}")
        if not start <= val <= end:
            raise ValueError(
                f"#[reifiable] dispatch for {trait.__name__}::{method_name}: "
                f"value {val} out of range {start}..={end}"
            )
        if not isinstance(obj, trait):
            raise TypeError(
                f"{type(obj).__name__} does not implement {trait.__name__}"
            )
        return getattr(obj, method_name)(val, *args, **kwargs)

    dispatch.__name__ = f"reify_{method_name}"
    dispatch.__qualname__ = f"{trait.__qualname__}.reify_{method_name}"
    dispatch.__module__ = trait.__module__
    dispatch.__doc__ = (
        f"Dispatch a runtime value to {trait.__name__}.{method_name}, "
        f"which accepts values in {start}..={end}."
    )
    return dispatch


def _make_wrapper(trait: type, method_name: str) -> type:
    wrapper_name = f"{trait.__name__}{pascal_case(method_name)}Callback"

    def __init__(self: Any, obj: Any, *args: Any) -> None:
        if not isinstance(obj, trait):
            raise TypeError(
                f"{type(obj).__name__} does not implement {trait.__name__}"
            )
        self.obj = obj
        self.args = args

    def call(self: Any, n: int) -> Any:
        return getattr(self.obj, method_name)(n, *self.args)

    def __repr__(self: Any) -> str:
        return f"{wrapper_name}(obj={self.obj!r}, args={self.args!r})"

    return type(
        wrapper_name,
        (NatCallback,),
        {
            "__init__": __init__,
            "call": call,
            "__repr__": __repr__,
            "__module__": trait.__module__,
            "__qualname__": wrapper_name,
            "__doc__": f"Callback wrapper for {trait.__name__}.{method_name}.",
        },
    )


def reifiable(range_start: int, range_end: int) -> Callable[[type], type]:
    """Class decorator generating dispatch functions for ``@const_generic`` methods.

    Each dispatcher is attached to the class as the static method
    ``reify_<method>`` and accepts values in ``range_start..=range_end``.
    """
    _check_bound("range_start", range_start)
    _check_bound("range_end", range_end)
    if range_end > MAX_RANGE_END:
        raise ValueError(
            f"#[reifiable] range 0..={range_end} would generate {range_end + 1} "
            f"monomorphizations per method. Maximum is {MAX_RANGE_END + 1}. "
            "Use a smaller range."
        )

    def decorate(cls: type) -> type:
        if not isinstance(cls, type):
            raise TypeError("@reifiable can only decorate a class")
        info = _ReifyInfo(trait=cls, range_start=range_start, range_end=range_end)
        for name, attr in list(vars(cls).items()):
            if isinstance(attr, (staticmethod, classmethod)):
                if getattr(attr.__func__, _MARKER, False):
                    raise TypeError(
                        "#[reifiable] requires methods with a self receiver"
                    )
                continue
            if not getattr(attr, _MARKER, False):
                continue
            dispatch_name = f"reify_{name}"
            if dispatch_name in vars(cls):
                raise TypeError(
                    f"{cls.__name__} already defines {dispatch_name!r}"
                )
            dispatcher = _make_dispatcher(info, name)
            info.dispatchers[name] = dispatcher
            info.wrappers[name] = _make_wrapper(cls, name)
            setattr(cls, dispatch_name, staticmethod(dispatcher))
        setattr(cls, _INFO, info)
        return cls

    return decorate


def _info(trait: type) -> _ReifyInfo:
    info = getattr(trait, _INFO, None)
    if not isinstance(info, _ReifyInfo):
        raise TypeError(f"{getattr(trait, '__name__', trait)!r} is not @reifiable")
    return info


def dispatch_function(trait: type, method_name: str) -> Callable[..., Any]:
    """Return the generated dispatch function for ``method_name`` of ``trait``."""
    info = _info(trait)
    try:
        return info.dispatchers[method_name]
    except KeyError:
        raise AttributeError(
            f"{info.trait.__name__}.{method_name} is not a const-generic method"
        ) from None


def callback_wrapper(trait: type, method_name: str, obj: Any, *args: Any) -> NatCallback:
    """Build the generated :class:`NatCallback` wrapper binding ``obj`` and ``args``."""
    info = _info(trait)
    try:
        wrapper_cls = info.wrappers[method_name]
    except KeyError:
        raise AttributeError(
            f"{info.trait.__name__}.{method_name} is not a const-generic method"
        ) from None
    return wrapper_cls(obj, *args)