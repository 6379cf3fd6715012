"""Validate command implementation."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape

from ..definition.engine import validate, validate_strict
from ..definition.graph import TransitionGraph
from ..definition.jsonschema_check import MAX_REPORTED_ERRORS, default_schema_path, schema_errors, schema_validator
from ..definition.load import parse_definition, read_document
from ..definition.schema import FsmDefinition
from ..errors import FsmError

logger = logging.getLogger(__name__)


def resolve_schema_path(schema: str | None) -> Path | None:
    """`--schema default` selects the bundled schema."""
    if schema is None:
        return None
    if schema.strip().lower() == "default":
        return default_schema_path()
    return Path(schema)


def _summary(definition: FsmDefinition) -> dict[str, Any]:
    unreachable: list[str] = []
    initial = definition.initial_state
    if initial is not None:
        graph = TransitionGraph.from_transitions(definition.transitions)
        unreachable = graph.unreachable_states(initial, definition.states)
    return {
        "states": len(definition.states),
        "transitions": len(definition.transitions),
        "invariants": len(definition.invariants),
        "initial_state": initial,
        "unreachable": unreachable,
    }


def run_validate(
    path: Path,
    schema_path: Path | None = None,
    strict: bool = False,
    output_json: bool = False,
) -> int:
    """Validate a definition document.

    Args:
        path: Definition file (.json or .toml)
        schema_path: Optional JSON schema checked before parsing
        strict: Also require invariants and an initial state
        output_json: Print a JSON result object instead of human-readable output

    Returns:
        Exit code (0 = valid, 1 = invalid)
    """
    console = Console()
    err_console = Console(stderr=True)

    result: dict[str, Any] = {"path": str(path), "valid": False, "error": None, "error_code": None}
    definition: FsmDefinition | None = None
    stage = "load"

    try:
        document = read_document(path)

        if schema_path is not None:
            stage = "schema"
            errs = schema_errors(document, schema_validator(schema_path))
            if errs:
                result["error"] = "Schema validation failed"
                result["error_code"] = "SchemaError"
                result["schema_errors"] = errs
                if output_json:
                    print(json.dumps(result, indent=2))
                else:
                    err_console.print("Schema validation failed:", style="bold red")
                    for e in errs[:MAX_REPORTED_ERRORS]:
                        err_console.print(f"- {escape(e)}", soft_wrap=True)
                    if len(errs) > MAX_REPORTED_ERRORS:
                        err_console.print(f"... {len(errs) - MAX_REPORTED_ERRORS} more", style="dim")
                return 1

        stage = "parse"
        definition = parse_definition(document)

        stage = "validate"
        validate(definition)

        if strict:
            stage = "strict"
            validate_strict(definition)
    except FsmError as e:
        logger.debug("validation of %s failed at stage %s: %s", path, stage, e.message)
        result["error"] = e.message
        result["error_code"] = e.code
        if definition is not None:
            result.update(_summary(definition))
        if output_json:
            print(json.dumps(result, indent=2))
        else:
            label = {
                "load": "Invalid document",
                "schema": "Schema error",
                "parse": "Invalid definition",
                "validate": "Validation failed",
                "strict": "Strict validation failed",
            }[stage]
            err_console.print(f"{label}: {escape(e.message)}", style="bold red", soft_wrap=True)
        return 1

    result["valid"] = True
    result.update(_summary(definition))

    if output_json:
        print(json.dumps(result, indent=2))
        return 0

    console.print("OK: FSM definition is valid.", style="green", soft_wrap=True)
    console.print(
        f"{result['states']} states, {result['transitions']} transitions, {result['invariants']} invariants",
        style="dim",
        soft_wrap=True,
    )
    if result["unreachable"]:
        err_console.print(
            f"[yellow]note:[/] unreachable from {escape(str(result['initial_state']))}: "
            f"{escape(', '.join(result['unreachable']))}",
            soft_wrap=True,
        )
    return 0
