"""Group poll events into a step graph and render it as Graphviz DOT."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import timedelta
from itertools import groupby
from typing import Any, Iterable

from reifykit.traced import PollEvent, PollResult

__all__ = ["StepOutcome", "StepNode", "AsyncStepGraph", "reify_execution", "to_dot"]

_ONE_MICROSECOND = timedelta(microseconds=1)
_U64_MAX = 2**64 - 1


class StepOutcome(enum.Enum):
    """How an async step concluded."""

    COMPLETED = "Completed"
    PENDING = "Pending"
    CANCELLED = "Cancelled"


_OUTCOMES = {
    PollResult.READY: StepOutcome.COMPLETED,
    PollResult.PENDING: StepOutcome.PENDING,
    PollResult.CANCELLED: StepOutcome.CANCELLED,
}

_COLORS = {
    StepOutcome.COMPLETED: "green",
    StepOutcome.PENDING: "yellow",
    StepOutcome.CANCELLED: "red",
}


@dataclass(frozen=True)
class StepNode:
    """A node of the step graph."""

    id: int
    label: str
    duration_us: int
    outcome: StepOutcome


@dataclass
class AsyncStepGraph:
    """Steps connected by directed edges in execution order."""

    steps: list[StepNode] = field(default_factory=list)
    edges: list[tuple[int, int]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping of the graph."""
        return {
            "steps": [
                {
                    "id": step.id,
                    "label": step.label,
                    "duration_us": step.duration_us,
                    "outcome": step.outcome.value,
                }
                for step in self.steps
            ],
            "edges": [[src, dst] for src, dst in self.edges],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AsyncStepGraph:
        """Build a graph from the mapping produced by :meth:`to_dict`."""
        try:
            steps = [
                StepNode(
                    id=int(item["id"]),
                    label=str(item["label"]),
                    duration_us=int(item["duration_us"]),
                    outcome=StepOutcome(item["outcome"]),
                )
                for item in data["steps"]
            ]
            edges = [(int(src), int(dst)) for src, dst in data["edges"]]
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"malformed step graph: {data!r}") from exc
        return cls(steps=steps, edges=edges)


def reify_execution(events: Iterable[PollEvent]) -> AsyncStepGraph:
    """Group consecutive events with the same label into steps, chained in order.

    A step's outcome is that of the last event in its group; unlabelled
    steps are named ``step_<id>``.
    """
    graph = AsyncStepGraph()
    for label, group in groupby(events, key=lambda event: event.label):
        members = list(group)
        first, last = members[0], members[-1]
        step_id = len(graph.steps)
        elapsed = max(last.offset - first.offset, timedelta(0))
        graph.steps.append(
            StepNode(
                id=step_id,
                label=label if label is not None else f"step_{step_id}",
                duration_us=min(elapsed // _ONE_MICROSECOND, _U64_MAX),
                outcome=_OUTCOMES[last.result],
            )
        )
        if step_id > 0:
            graph.edges.append((step_id - 1, step_id))
    return graph


def to_dot(graph: AsyncStepGraph) -> str:
    """Render ``graph`` as a Graphviz DOT document."""
    lines = ["digraph async_trace {", "    rankdir=TB;", "    node [shape=box];", ""]
    lines.extend(
        f'    n{step.id} [label="{step.label}\\n({step.duration_us}us)" '
        f"style=filled fillcolor={_COLORS[step.outcome]}];"
        for step in graph.steps
    )
    lines.append("")
    lines.extend(f"    n{src} -> n{dst};" for src, dst in graph.edges)
    lines.append("}")
    return "\n".join(lines) + "\n"