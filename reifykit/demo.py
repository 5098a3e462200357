"""Trace a small async workflow, extract its step graph and print it."""

from __future__ import annotations

import argparse
import asyncio
import json
from typing import Sequence

from reifykit.graph import reify_execution, to_dot
from reifykit.labeled import labeled_await
from reifykit.traced import Trace

__all__ = ["run_workflow", "main"]


async def _simulate_work() -> None:
    await asyncio.sleep(0)


async def _answer() -> int:
    return 42


async def run_workflow() -> Trace:
    """Run three labelled steps (fetch, transform, store) and return their trace."""
    trace = Trace.shared()
    await labeled_await(_simulate_work(), trace)
    await labeled_await(_simulate_work(), trace)
    await labeled_await(_answer(), trace)
    return trace


def main(argv: Sequence[str] | None = None) -> int:
    """Run the workflow and print its events, steps, DOT rendering and JSON."""
    parser = argparse.ArgumentParser(
        prog="reifykit-demo",
        description="Trace an async workflow and print its step graph.",
    )
    parser.parse_args(argv)

    trace = asyncio.run(run_workflow())
    print(f"Collected {len(trace.events)} poll events")

    graph = reify_execution(trace.events)
    print(f"Step graph: {len(graph.steps)} steps, {len(graph.edges)} edges")
    for step in graph.steps:
        print(
            f"  Step {step.id}: {step.label} ({step.outcome.value}, {step.duration_us}us)"
        )

    print(f"\nDOT output:\n{to_dot(graph)}")
    print(f"\nJSON:\n{json.dumps(graph.to_dict(), indent=2)}")
    return 0