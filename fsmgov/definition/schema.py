from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..errors import InvalidInput


def _require(data: dict[str, Any], key: str, where: str) -> Any:
    if key not in data:
        raise InvalidInput(f"{where}: missing required field {key!r}")
    return data[key]


def _as_str(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise InvalidInput(f"{where}: expected a string, got {type(value).__name__}")
    return value


def _as_optional_str(value: Any, where: str) -> str | None:
    if value is None:
        return None
    return _as_str(value, where)


def _as_list(value: Any, where: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidInput(f"{where}: expected a list, got {type(value).__name__}")
    return value


def _as_dict(value: Any, where: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise InvalidInput(f"{where}: expected an object, got {type(value).__name__}")
    return value


def _str_list(value: Any, where: str) -> list[str]:
    return [_as_str(item, f"{where}[{i}]") for i, item in enumerate(_as_list(value, where))]


@dataclass(frozen=True)
class FsmTransitionMetadata:
    """Descriptive data attached to a transition. Not interpreted by validation."""

    description: str | None = None
    roles: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.description is not None:
            out["description"] = self.description
        if self.roles:
            out["roles"] = list(self.roles)
        return out

    @classmethod
    def from_dict(cls, data: Any, where: str = "metadata") -> "FsmTransitionMetadata":
        data = _as_dict(data, where)
        return cls(
            description=_as_optional_str(data.get("description"), f"{where}.description"),
            roles=_str_list(data.get("roles"), f"{where}.roles"),
        )


@dataclass(frozen=True)
class FsmTransition:
    from_state: str
    to_state: str
    action: str
    guard: str | None = None
    metadata: FsmTransitionMetadata | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"from": self.from_state, "to": self.to_state, "action": self.action}
        if self.guard is not None:
            out["guard"] = self.guard
        if self.metadata is not None:
            out["metadata"] = self.metadata.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Any, where: str = "transition") -> "FsmTransition":
        data = _as_dict(data, where)
        metadata = data.get("metadata")
        return cls(
            from_state=_as_str(_require(data, "from", where), f"{where}.from"),
            to_state=_as_str(_require(data, "to", where), f"{where}.to"),
            action=_as_str(_require(data, "action", where), f"{where}.action"),
            guard=_as_optional_str(data.get("guard"), f"{where}.guard"),
            metadata=(
                FsmTransitionMetadata.from_dict(metadata, f"{where}.metadata") if metadata is not None else None
            ),
        )


@dataclass(frozen=True)
class FsmTransitionRef:
    """A (from, to) pair named by an invariant."""

    from_state: str
    to_state: str

    def as_pair(self) -> tuple[str, str]:
        return (self.from_state, self.to_state)

    def to_dict(self) -> dict[str, Any]:
        return {"from": self.from_state, "to": self.to_state}

    @classmethod
    def from_dict(cls, data: Any, where: str = "transition ref") -> "FsmTransitionRef":
        data = _as_dict(data, where)
        return cls(
            from_state=_as_str(_require(data, "from", where), f"{where}.from"),
            to_state=_as_str(_require(data, "to", where), f"{where}.to"),
        )


@dataclass(frozen=True)
class FsmDefaults:
    initial_state: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.initial_state is None:
            return {}
        return {"initialState": self.initial_state}

    @classmethod
    def from_dict(cls, data: Any, where: str = "defaults") -> "FsmDefaults":
        data = _as_dict(data, where)
        return cls(initial_state=_as_optional_str(data.get("initialState"), f"{where}.initialState"))


@dataclass(frozen=True)
class FsmInvariant:
    """A global rule over the transition graph.

    `kind` stays free text here: an unknown kind is a validation failure,
    not a parse failure.
    """

    kind: str
    states: list[str] = field(default_factory=list)
    transitions: list[FsmTransitionRef] = field(default_factory=list)
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"kind": self.kind}
        if self.states:
            out["states"] = list(self.states)
        if self.transitions:
            out["transitions"] = [t.to_dict() for t in self.transitions]
        if self.description is not None:
            out["description"] = self.description
        return out

    @classmethod
    def from_dict(cls, data: Any, where: str = "invariant") -> "FsmInvariant":
        data = _as_dict(data, where)
        return cls(
            kind=_as_str(_require(data, "kind", where), f"{where}.kind"),
            states=_str_list(data.get("states"), f"{where}.states"),
            transitions=[
                FsmTransitionRef.from_dict(raw, f"{where}.transitions[{i}]")
                for i, raw in enumerate(_as_list(data.get("transitions"), f"{where}.transitions"))
            ],
            description=_as_optional_str(data.get("description"), f"{where}.description"),
        )


@dataclass(frozen=True)
class FsmDefinition:
    """A self-described finite state machine.

    Built from external data, then validated. It carries no behavior beyond
    validation and serialization.
    """

    states: list[str]
    transitions: list[FsmTransition]
    defaults: FsmDefaults | None = None
    invariants: list[FsmInvariant] = field(default_factory=list)

    @property
    def initial_state(self) -> str | None:
        return self.defaults.initial_state if self.defaults is not None else None

    def validate(self) -> None:
        from .engine import validate

        validate(self)

    def validate_structure(self) -> None:
        from .engine import validate_structure

        validate_structure(self)

    def validate_invariants(self) -> None:
        from .engine import validate_invariants

        validate_invariants(self)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "states": list(self.states),
            "transitions": [t.to_dict() for t in self.transitions],
        }
        if self.defaults is not None:
            out["defaults"] = self.defaults.to_dict()
        if self.invariants:
            out["invariants"] = [inv.to_dict() for inv in self.invariants]
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "FsmDefinition":
        data = _as_dict(data, "definition")
        defaults = data.get("defaults")
        return cls(
            states=_str_list(_require(data, "states", "definition"), "states"),
            transitions=[
                FsmTransition.from_dict(raw, f"transitions[{i}]")
                for i, raw in enumerate(_as_list(_require(data, "transitions", "definition"), "transitions"))
            ],
            defaults=FsmDefaults.from_dict(defaults) if defaults is not None else None,
            invariants=[
                FsmInvariant.from_dict(raw, f"invariants[{i}]")
                for i, raw in enumerate(_as_list(data.get("invariants"), "invariants"))
            ],
        )
