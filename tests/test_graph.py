import json
from datetime import timedelta

import pytest

from reifykit.graph import (
    AsyncStepGraph,
    StepNode,
    StepOutcome,
    reify_execution,
    to_dot,
)
from reifykit.traced import PollEvent, PollResult


def make_event(step, result, label):
    return PollEvent(
        step=step,
        offset=timedelta(microseconds=step * 10),
        result=result,
        label=label,
    )


def sample_graph(second_outcome=StepOutcome.PENDING):
    return AsyncStepGraph(
        steps=[
            StepNode(id=0, label="start", duration_us=100, outcome=StepOutcome.COMPLETED),
            StepNode(id=1, label="end", duration_us=50, outcome=second_outcome),
        ],
        edges=[(0, 1)],
    )


def test_empty_trace():
    graph = reify_execution([])
    assert graph.steps == []
    assert graph.edges == []


def test_single_event():
    graph = reify_execution([make_event(0, PollResult.READY, "only")])
    assert len(graph.steps) == 1
    assert graph.steps[0].label == "only"
    assert graph.steps[0].outcome is StepOutcome.COMPLETED
    assert graph.edges == []


def test_two_steps():
    graph = reify_execution(
        [
            make_event(0, PollResult.PENDING, "a"),
            make_event(1, PollResult.READY, "a"),
            make_event(2, PollResult.READY, "b"),
        ]
    )
    assert len(graph.steps) == 2
    assert graph.steps[0].label == "a"
    assert graph.steps[0].outcome is StepOutcome.COMPLETED
    assert graph.steps[1].label == "b"
    assert graph.edges == [(0, 1)]


def test_three_steps_chain():
    graph = reify_execution(
        [
            make_event(0, PollResult.READY, "x"),
            make_event(1, PollResult.PENDING, "y"),
            make_event(2, PollResult.READY, "y"),
            make_event(3, PollResult.READY, "z"),
        ]
    )
    assert len(graph.steps) == 3
    assert graph.edges == [(0, 1), (1, 2)]
    assert [s.id for s in graph.steps] == [0, 1, 2]


def test_unlabeled_steps():
    graph = reify_execution(
        [
            make_event(0, PollResult.READY, None),
            make_event(1, PollResult.READY, "b"),
        ]
    )
    assert len(graph.steps) == 2
    assert graph.steps[0].label == "step_0"
    assert graph.steps[1].label == "b"


def test_cancelled_outcome_propagates():
    graph = reify_execution(
        [
            make_event(0, PollResult.PENDING, "dropped_step"),
            make_event(1, PollResult.CANCELLED, "dropped_step"),
        ]
    )
    assert len(graph.steps) == 1
    assert graph.steps[0].outcome is StepOutcome.CANCELLED


def test_last_pending_gives_pending_outcome():
    graph = reify_execution([make_event(0, PollResult.PENDING, "waiting")])
    assert graph.steps[0].outcome is StepOutcome.PENDING


def test_duration_spans_group():
    events = [
        PollEvent(step=0, offset=timedelta(0), result=PollResult.PENDING, label="a"),
        PollEvent(step=1, offset=timedelta(microseconds=50), result=PollResult.READY, label="a"),
        PollEvent(step=2, offset=timedelta(microseconds=75), result=PollResult.READY, label="b"),
    ]
    graph = reify_execution(events)
    assert graph.steps[0].duration_us == 50
    assert graph.steps[1].duration_us == 0


def test_non_consecutive_labels_form_separate_steps():
    graph = reify_execution(
        [
            make_event(0, PollResult.READY, "a"),
            make_event(1, PollResult.READY, "b"),
            make_event(2, PollResult.READY, "a"),
        ]
    )
    assert [s.label for s in graph.steps] == ["a", "b", "a"]
    assert len(graph.edges) == len(graph.steps) - 1


def test_dot_output():
    dot = to_dot(sample_graph())
    assert "digraph async_trace" in dot
    assert "start" in dot
    assert "end" in dot
    assert "n0 -> n1" in dot
    assert "green" in dot
    assert "yellow" in dot


def test_dot_cancelled_is_red():
    dot = to_dot(sample_graph(StepOutcome.CANCELLED))
    assert "fillcolor=red" in dot


def test_dot_exact_layout():
    dot = to_dot(sample_graph())
    expected = (
        "digraph async_trace {\n"
        "    rankdir=TB;\n"
        "    node [shape=box];\n"
        "\n"
        '    n0 [label="start\\n(100us)" style=filled fillcolor=green];\n'
        '    n1 [label="end\\n(50us)" style=filled fillcolor=yellow];\n'
        "\n"
        "    n0 -> n1;\n"
        "}\n"
    )
    assert dot == expected


def test_dict_round_trip():
    graph = sample_graph()
    restored = AsyncStepGraph.from_dict(json.loads(json.dumps(graph.to_dict())))
    assert restored == graph


def test_outcome_serialized_by_name():
    data = sample_graph().to_dict()
    assert data["steps"][0]["outcome"] == "Completed"
    assert data["steps"][1]["outcome"] == "Pending"


def test_from_dict_rejects_malformed():
    with pytest.raises(ValueError):
        AsyncStepGraph.from_dict({"steps": [{"id": 0}], "edges": []})