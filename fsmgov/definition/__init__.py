"""Declarative FSM definitions (machines as data, checks as code)."""

from .engine import validate, validate_invariants, validate_strict, validate_structure
from .invariants import INVARIANT_KINDS
from .load import load_definition, parse_definition
from .schema import (
    FsmDefaults,
    FsmDefinition,
    FsmInvariant,
    FsmTransition,
    FsmTransitionMetadata,
    FsmTransitionRef,
)

__all__ = [
    "FsmDefaults",
    "FsmDefinition",
    "FsmInvariant",
    "FsmTransition",
    "FsmTransitionMetadata",
    "FsmTransitionRef",
    "INVARIANT_KINDS",
    "load_definition",
    "parse_definition",
    "validate",
    "validate_invariants",
    "validate_strict",
    "validate_structure",
]
