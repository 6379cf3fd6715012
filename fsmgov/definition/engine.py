"""Validation entry points for declarative definitions.

Structure is checked before invariants, and the first failure is raised as
`InvalidInput`. Nothing is aggregated.
"""

from __future__ import annotations

from ..errors import InvalidInput
from .graph import TransitionGraph
from .invariants import INVARIANT_CHECKERS
from .schema import FsmDefinition


def validate(definition: FsmDefinition) -> None:
    validate_structure(definition)
    validate_invariants(definition)


def validate_structure(definition: FsmDefinition) -> None:
    if not definition.states:
        raise InvalidInput("definition declares no states")
    if not definition.transitions:
        raise InvalidInput("definition declares no transitions")

    declared = set(definition.states)

    for i, transition in enumerate(definition.transitions):
        for name, value in (
            ("from", transition.from_state),
            ("to", transition.to_state),
            ("action", transition.action),
        ):
            if not value.strip():
                raise InvalidInput(f"transitions[{i}]: {name} is empty")

        for name, value in (("from", transition.from_state), ("to", transition.to_state)):
            if value not in declared:
                raise InvalidInput(f"transitions[{i}]: {name} state {value!r} is not declared")

    initial = definition.initial_state
    if initial is not None and initial not in declared:
        raise InvalidInput(f"defaults.initialState {initial!r} is not declared")


def validate_invariants(definition: FsmDefinition) -> None:
    if not definition.invariants:
        return

    graph = TransitionGraph.from_transitions(definition.transitions)

    for invariant in definition.invariants:
        check = INVARIANT_CHECKERS.get(invariant.kind)
        if check is None:
            raise InvalidInput(f"unknown invariant kind {invariant.kind!r}")
        check(invariant, definition, graph)


def validate_strict(definition: FsmDefinition) -> None:
    """Validate, then also require declared invariants and an initial state."""
    validate(definition)

    if not definition.invariants:
        raise InvalidInput("strict mode: definition declares no invariants")
    if definition.initial_state is None:
        raise InvalidInput("strict mode: defaults.initialState is required")
