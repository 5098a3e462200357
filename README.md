# reifykit

Small, dependency-free helpers for three related jobs:

1. **Context-supplied behaviour**: wrap a value together with a context that
   decides how it is compared, hashed or printed, without writing a new class
   for it.
2. **Bounded value dispatch**: hand a runtime number to a callback after
   checking that it lies in a fixed range. Out-of-range values raise
   `ValueError`, and values that are not `int` raise `TypeError`.
3. **Async step tracing**: wrap awaitables so that a poll event is recorded
   every time they are driven, then group the events into a step graph and
   render it as Graphviz DOT text.

Requires Python 3.10 or later. There are no runtime dependencies.

## Installation

```
pip install reifykit
```

To run the test suite:

```
pip install "reifykit[test]"
pytest
```

## Context-supplied ordering, hashing and display (`reifykit.context`)

`WithContext(inner, ctx)` pairs a value with a context. The kind of context
decides which behaviour the wrapper gets:

- `OrdContext(compare)` takes a three-way comparator that returns a negative
  number, zero or a positive number. That comparator drives `==`, `<`, `<=`,
  `>`, `>=` and `WithContext.compare`. Wrappers with any other context do not
  compare by value.
- `HashContext(hash)` takes a function that maps a value to a hashable key.
  `hash()` of the wrapper is the hash of that key. Calling `hash()` on a
  wrapper with any other context raises `TypeError`.
- `DisplayContext(display)` takes a function that returns a string. `str()`
  of the wrapper is what that function returns. Any other context falls back
  to the wrapper's `repr`.

```python
from reifykit.context import WithContext, OrdContext

descending = OrdContext(compare=lambda a, b: (b > a) - (b < a))
items = [WithContext(v, descending) for v in [3, 1, 4, 1, 5]]
print([w.inner for w in sorted(items)])   # [5, 4, 3, 1, 1]
```

### Scoped helpers (`reifykit.context_macros`)

Each of these helpers wraps every item in the matching context, calls `body`
with the list of wrappers, and returns what `body` returns:

- `with_ord(items, compare, body)`
- `with_hash(items, hash_fn, body)`
- `with_display(items, display_fn, body)`

`define_context(name, field, methods)` builds a new context type for a
behaviour of your own. The result is a frozen dataclass with the single
attribute `field`. Its `wrap(inner)` method returns a `WithContext` subclass
that carries every function in `methods` as a method, and each of those
functions receives the wrapped value as its first argument.

```python
from reifykit.context_macros import define_context

Summary = define_context(
    "SummaryContext",
    "summarize_fn",
    {"summarize": lambda w: w.ctx.summarize_fn(w.inner)},
)
ctx = Summary(summarize_fn=lambda title: f"Title: {title}")
print(ctx.wrap("Hello").summarize())   # Title: Hello
```

## Value dispatch

### `reifykit.dispatch`

`reify_const(val, f)` calls `f` with the `Modular` object for `val`. `val`
must lie in `0..=255` (`MAX_REIFY_VALUE`). `Modular.modulus()` returns the
value, and `HasModulus` is the abstract interface that `Modular` implements.
`reify(val, f)` is a shorthand for `reify_const`.

```python
from reifykit.dispatch import reify_const

reify_const(17, lambda m: m.modulus())        # 17
reify_const(21, lambda m: m.modulus() * 2)    # 42
```

### `reifykit.nat`

- `reify_nat(val, callback)` calls `callback.call(val)`. Subclass
  `NatCallback` to write the callback.
- `reify_nat2(a, b, callback)` calls `callback.call(a, b)`. Subclass
  `Nat2Callback` to write the callback.
- `reify_nat_fn(val, f)` and `reify_nat2_fn(a, b, f)` take plain functions.
  They adapt them through `FnNat` and `FnNat2`.

Every value must lie in `0..=255`.

```python
from reifykit.nat import reify_nat_fn, reify_nat2_fn

reify_nat_fn(12, lambda n: n * n)             # 144
reify_nat2_fn(5, 3, lambda a, b: a + b)       # 8
```

### Dispatch for whole classes (`reifykit.reifiable`)

1. Mark instance methods with `@const_generic`. Such a method takes the
   dispatched value as its first argument after `self`.
2. Decorate the class with `@reifiable(range_start, range_end)`.

For each marked method, the decorator attaches a static method
`reify_<method>(val, obj, *args, **kwargs)` to the class. That dispatcher:

- checks that `val` lies in `range_start..=range_end`;
- checks that `obj` is an instance of the class;
- forwards the call to `obj.<method>(val, *args, **kwargs)`.

A value out of range raises `ValueError`. A `range_end` above 1023
(`MAX_RANGE_END`) is refused when the class is decorated.

```python
from reifykit.reifiable import reifiable, const_generic

@reifiable(0, 255)
class ModArith:
    @const_generic
    def mul_mod(self, n, a, b):
        return 0 if n == 0 else (a % n) * (b % n) % n

ModArith.reify_mul_mod(7, ModArith(), 10, 20)   # 4
```

Other helpers in this module:

- `dispatch_function(trait, method_name)` returns the same dispatcher as the
  attached static method.
- `callback_wrapper(trait, method_name, obj, *args)` binds an object and
  arguments into a `NatCallback` that can be passed to `reify_nat`. The class
  of that callback is named `<Class><Method>Callback`, where the method part
  comes from `pascal_case(name)`.

## Async step tracing

### `reifykit.traced`

- `PollResult` is `PENDING`, `READY` or `CANCELLED`.
- `PollEvent` holds:
  - `step`;
  - `offset`, a `timedelta` since the trace started;
  - `result`;
  - an optional `label`.
- `Trace` holds the events in order. It is guarded by a lock, so several
  futures can record into one trace. `Trace.shared()` returns a fresh trace,
  and `push(result, label)` appends an event.
- `Trace.to_json()` and `Trace.from_json(text)` serialise the events. A loaded
  trace is anchored at load time, and only the event offsets are kept.
  `PollEvent.to_dict` and `PollEvent.from_dict` do the same for one event.
- `TracedFuture(inner, label=None)` records into its own `trace`.
  `TracedFuture.with_label(inner, label)` creates one with a label.
  `await TracedFuture.run(inner)` returns `(result, trace)`.

### `reifykit.labeled`

- `LabeledFuture(inner, label, trace)` records into a trace you supply, so
  several awaits share one time origin.
- `labeled_await(inner, trace)` builds a `LabeledFuture` labelled
  `"<name> @ <file>:<line>"` from the caller's location. For a coroutine,
  `<name>` is its qualified name followed by `()`.

Rules that apply to both `TracedFuture` and `LabeledFuture`:

- Each can be awaited only once; a second await raises `RuntimeError`.
- If one is abandoned before it completes and the trace's last event is
  pending, a final `CANCELLED` event is recorded.

### `reifykit.graph`

`reify_execution(events)` builds an `AsyncStepGraph` from a list of events:

- Consecutive events with the same label become one `StepNode`.
- A step's `duration_us` is the time from its first event to its last.
- A step's `outcome` is a `StepOutcome` (`COMPLETED`, `PENDING` or
  `CANCELLED`) taken from its last event.
- Steps without a label are named `step_<id>`.
- Steps are joined by sequential edges.

`to_dot(graph)` renders the graph as DOT text. Completed steps are green,
pending steps yellow and cancelled steps red. `AsyncStepGraph.to_dict` and
`AsyncStepGraph.from_dict` convert the graph to and from JSON-ready mappings.

```python
import asyncio
from reifykit.traced import TracedFuture, Trace
from reifykit.labeled import labeled_await
from reifykit.graph import reify_execution, to_dot

async def work():
    await asyncio.sleep(0)
    return 42

async def main():
    value, trace = await TracedFuture.run(work())

    shared = Trace.shared()
    await labeled_await(work(), shared)
    print(to_dot(reify_execution(shared.events)))

asyncio.run(main())
```

## Demo

This command runs a three-step traced workflow. It prints the number of
events, the steps, the DOT output and the graph as JSON:

```
reifykit-demo
```

The same workflow can be run from code: `reifykit.demo.run_workflow()` is a
coroutine that returns its `Trace`.

## What it does not do

- Awaits are not labelled automatically. There is no decorator that rewrites
  a function, so each await you want to trace must be wrapped with
  `LabeledFuture` or `labeled_await`.
- Graphs are not drawn. `to_dot` produces DOT text only, and you need
  Graphviz or a similar tool to make an image from it.