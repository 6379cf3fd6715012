"""JSON-schema pre-validation of definition documents."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from ..errors import InvalidInput

logger = logging.getLogger(__name__)

MAX_REPORTED_ERRORS = 5


def default_schema_path() -> Path:
    return Path(__file__).resolve().parent.parent / "schemas" / "fsm_definition.schema.json"


def schema_validator(schema_path: Path | None = None) -> Draft202012Validator:
    path = schema_path or default_schema_path()
    try:
        schema = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise InvalidInput(f"Failed to read schema {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise InvalidInput(f"Invalid schema JSON in {path}: {e}") from e

    try:
        Draft202012Validator.check_schema(schema)
    except SchemaError as e:
        raise InvalidInput(f"Schema compile error in {path}: {e}") from e

    logger.debug("compiled schema %s", path)
    return Draft202012Validator(schema)


def schema_errors(document: Any, validator: Draft202012Validator) -> list[str]:
    """Return schema error messages, sorted for stable output."""
    errs: list[str] = []
    for e in sorted(validator.iter_errors(document), key=str):
        loc = "/".join(str(p) for p in e.absolute_path) or "<root>"
        errs.append(f"{loc}: {e.message}")
    return errs

