"""
Fixed transition tables for the built-in entity kinds.

Each kind is a closed enumeration of states plus a total table from a state
to the states reachable by one legal step. The tables are static; staying in
the same state is always legal and is handled by the predicate, not stored
in the table rows.
"""

from __future__ import annotations

import re
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Union

from .errors import InvalidInput, InvalidStateTransition


class _LifecycleStatus(str, Enum):
    """Shared transition predicate for the status enumerations below."""

    def next_states(self) -> tuple:
        return TRANSITION_TABLES[type(self)][self]

    def can_transition_to(self, target: "_LifecycleStatus") -> bool:
        # str-valued members of different kinds compare equal by value
        if type(target) is not type(self):
            return False
        # Same state is always valid (no-op)
        if target is self:
            return True
        return target in self.next_states()

    def validate_transition(self, target: "_LifecycleStatus") -> None:
        if not self.can_transition_to(target):
            raise InvalidStateTransition(
                f"{type(self).__name__}: {self.value} -> {getattr(target, 'value', target)} is not a legal transition"
            )

    def is_terminal(self) -> bool:
        return not self.next_states()


class IdeaStatus(_LifecycleStatus):
    DRAFT = "Draft"
    UNDER_REVIEW = "UnderReview"
    APPROVED = "Approved"  # Approved, ready for execution
    REJECTED = "Rejected"
    IN_PROGRESS = "InProgress"  # In development
    PAUSED = "Paused"
    COMPLETED = "Completed"
    EXECUTED = "Executed"
    COMMERCIALIZATION = "Commercialization"  # Handed over to a commercial entity
    ARCHIVED = "Archived"
    RESUBMITTED = "Resubmitted"  # Resubmitted after rejection
    VOTING = "Voting"
    EXPIRED = "Expired"


class GrantStatus(_LifecycleStatus):
    PENDING = "Pending"
    APPROVED = "Approved"
    ACTIVE = "Active"
    SUSPENDED = "Suspended"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    REJECTED = "Rejected"
    EXPIRED = "Expired"
    ARCHIVED = "Archived"


Status = Union[IdeaStatus, GrantStatus]

_I = IdeaStatus
_G = GrantStatus

IDEA_TRANSITIONS: Mapping[IdeaStatus, tuple[IdeaStatus, ...]] = MappingProxyType(
    {
        _I.DRAFT: (_I.UNDER_REVIEW, _I.VOTING),
        _I.UNDER_REVIEW: (_I.APPROVED, _I.REJECTED, _I.VOTING),
        _I.VOTING: (_I.APPROVED, _I.REJECTED),
        _I.APPROVED: (_I.IN_PROGRESS, _I.PAUSED),
        _I.REJECTED: (_I.ARCHIVED, _I.RESUBMITTED),
        _I.IN_PROGRESS: (_I.COMPLETED, _I.PAUSED, _I.EXPIRED),
        _I.PAUSED: (_I.IN_PROGRESS, _I.ARCHIVED),
        _I.COMPLETED: (_I.EXECUTED, _I.ARCHIVED),
        _I.EXECUTED: (_I.COMMERCIALIZATION, _I.ARCHIVED),
        _I.COMMERCIALIZATION: (_I.ARCHIVED,),
        _I.ARCHIVED: (_I.RESUBMITTED,),
        _I.RESUBMITTED: (_I.UNDER_REVIEW, _I.VOTING),
        _I.EXPIRED: (_I.ARCHIVED,),
    }
)

GRANT_TRANSITIONS: Mapping[GrantStatus, tuple[GrantStatus, ...]] = MappingProxyType(
    {
        _G.PENDING: (_G.APPROVED, _G.REJECTED),
        _G.APPROVED: (_G.ACTIVE, _G.SUSPENDED),
        _G.ACTIVE: (_G.COMPLETED, _G.CANCELLED, _G.SUSPENDED, _G.EXPIRED),
        _G.SUSPENDED: (_G.ACTIVE, _G.CANCELLED),
        _G.COMPLETED: (_G.ARCHIVED,),
        _G.CANCELLED: (_G.ARCHIVED,),
        _G.REJECTED: (_G.ARCHIVED,),
        _G.EXPIRED: (_G.ARCHIVED,),
        _G.ARCHIVED: (),  # Terminal state
    }
)

TRANSITION_TABLES: Mapping[type, Mapping] = MappingProxyType(
    {
        IdeaStatus: IDEA_TRANSITIONS,
        GrantStatus: GRANT_TRANSITIONS,
    }
)

ENTITY_KINDS: Mapping[str, type] = MappingProxyType(
    {
        "idea": IdeaStatus,
        "grant": GrantStatus,
    }
)


def status_type_for(kind: str) -> type:
    """Resolve an entity kind name ("idea", "grant") to its status enumeration."""
    key = (kind or "").strip().lower()
    status_type = ENTITY_KINDS.get(key)
    if status_type is None:
        raise InvalidInput(f"unknown entity kind {kind!r} (expected one of: {', '.join(ENTITY_KINDS)})")
    return status_type


def parse_status(kind: str | type, label: str) -> Status:
    """Parse a state label for the given entity kind."""
    status_type = status_type_for(kind) if isinstance(kind, str) else kind
    if isinstance(label, status_type):
        return label
    try:
        return status_type(label)
    except ValueError:
        raise InvalidInput(f"unknown {status_type.__name__} label {label!r}") from None


def validate_transition(current: Status, target: Status) -> None:
    """
    Check one step for any built-in kind.

    This is the hook domain records call before changing their recorded status.
    States of different kinds never form a legal step.
    """
    if not isinstance(current, _LifecycleStatus) or type(current) is not type(target):
        raise InvalidStateTransition(
            f"cannot move between {type(current).__name__} and {type(target).__name__}"
        )
    current.validate_transition(target)


def _action_name(source: Status, target: Status) -> str:
    def snake(label: str) -> str:
        return re.sub(r"(?<!^)(?=[A-Z])", "_", label).lower()

    return f"{snake(source.value)}_to_{snake(target.value)}"


def table_definition(status_type: type):
    """Render a fixed table as a declarative definition.

    States keep declaration order, the first variant becomes the initial
    state, and rows with no successors are declared as terminal states.
    """
    from .definition.schema import (
        FsmDefaults,
        FsmDefinition,
        FsmInvariant,
        FsmTransition,
        FsmTransitionMetadata,
    )

    table = TRANSITION_TABLES.get(status_type)
    if table is None:
        raise InvalidInput(f"no transition table for {status_type!r}")

    states = [s.value for s in status_type]
    transitions = [
        FsmTransition(
            from_state=source.value,
            to_state=target.value,
            action=_action_name(source, target),
            metadata=FsmTransitionMetadata(description=f"{status_type.__name__} {source.value} -> {target.value}"),
        )
        for source in status_type
        for target in table[source]
    ]
    terminal = [s.value for s in status_type if not table[s]]
    invariants = []
    if terminal:
        invariants.append(
            FsmInvariant(kind="terminal_states", states=terminal, description="No outgoing transitions")
        )

    return FsmDefinition(
        states=states,
        transitions=transitions,
        defaults=FsmDefaults(initial_state=states[0]),
        invariants=invariants,
    )
