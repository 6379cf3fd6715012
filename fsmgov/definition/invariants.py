from __future__ import annotations

from typing import Callable

from ..errors import InvalidInput
from .graph import TransitionGraph
from .schema import FsmDefinition, FsmInvariant


InvariantCheck = Callable[[FsmInvariant, FsmDefinition, TransitionGraph], None]


def _violation(invariant: FsmInvariant, detail: str) -> InvalidInput:
    msg = f"invariant {invariant.kind} violated: {detail}"
    if invariant.description:
        msg = f"{msg} ({invariant.description})"
    return InvalidInput(msg)


def check_terminal_states(invariant: FsmInvariant, definition: FsmDefinition, graph: TransitionGraph) -> None:
    for state in invariant.states:
        outbound = graph.successors(state)
        # A state that is never a source satisfies this trivially.
        if outbound:
            raise _violation(invariant, f"{state!r} has outgoing transitions to {', '.join(outbound)}")


def check_required_transitions(invariant: FsmInvariant, definition: FsmDefinition, graph: TransitionGraph) -> None:
    for ref in invariant.transitions:
        if not graph.has_edge(*ref.as_pair()):
            raise _violation(invariant, f"missing {ref.from_state} -> {ref.to_state}")


def check_forbidden_transitions(invariant: FsmInvariant, definition: FsmDefinition, graph: TransitionGraph) -> None:
    for ref in invariant.transitions:
        if graph.has_edge(*ref.as_pair()):
            raise _violation(invariant, f"found {ref.from_state} -> {ref.to_state}")


def check_forbidden_cycles(invariant: FsmInvariant, definition: FsmDefinition, graph: TransitionGraph) -> None:
    for state in invariant.states:
        if graph.has_cycle_from(state):
            raise _violation(invariant, f"{state!r} can return to itself")


def check_self_transitions_required(
    invariant: FsmInvariant, definition: FsmDefinition, graph: TransitionGraph
) -> None:
    states = invariant.states or definition.states
    for state in states:
        if not graph.has_edge(state, state):
            raise _violation(invariant, f"missing {state} -> {state}")


INVARIANT_CHECKERS: dict[str, InvariantCheck] = {
    "terminal_states": check_terminal_states,
    "required_transitions": check_required_transitions,
    "forbidden_transitions": check_forbidden_transitions,
    "forbidden_cycles": check_forbidden_cycles,
    "self_transitions_required": check_self_transitions_required,
}

INVARIANT_KINDS: tuple[str, ...] = tuple(INVARIANT_CHECKERS)
