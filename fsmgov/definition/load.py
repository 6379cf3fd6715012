from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ..errors import InvalidInput
from .schema import FsmDefinition

logger = logging.getLogger(__name__)


def read_document(path: Path) -> dict[str, Any]:
    """
    Read a definition document from JSON or TOML.

    TOML documents use the same field names as the JSON wire format.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InvalidInput(f"Failed to read {path}: {e}") from e

    if path.suffix.lower() == ".toml":
        import tomllib

        try:
            data = tomllib.loads(raw)
        except tomllib.TOMLDecodeError as e:
            raise InvalidInput(f"Invalid TOML in {path}: {e}") from e
    else:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidInput(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise InvalidInput(f"{path}: top-level value must be an object")

    logger.debug("read definition document %s (%d top-level keys)", path, len(data))
    return data


def parse_definition(data: Any) -> FsmDefinition:
    """Build a definition from already-parsed data. Does not validate it."""
    return FsmDefinition.from_dict(data)


def load_definition(path: Path) -> FsmDefinition:
    definition = parse_definition(read_document(path))
    logger.debug(
        "loaded %s: %d states, %d transitions, %d invariants",
        path,
        len(definition.states),
        len(definition.transitions),
        len(definition.invariants),
    )
    return definition


def dumps_definition(definition: FsmDefinition, indent: int | None = 2) -> str:
    return json.dumps(definition.to_dict(), indent=indent)
