"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from fsmgov.definition.schema import FsmDefinition, FsmTransition


@pytest.fixture
def repo_root() -> Path:
    return Path(__file__).parent.parent


@pytest.fixture
def examples_dir(repo_root: Path) -> Path:
    """Bundled example definitions."""
    return repo_root / "examples" / "definitions"


@pytest.fixture
def vectors_dir() -> Path:
    """Validation vectors: <name>.json next to <name>.expected (OK or ERR:<code>)."""
    return Path(__file__).parent / "vectors"


@pytest.fixture
def base_definition() -> FsmDefinition:
    """Two states, one transition A -> B, no defaults or invariants."""
    return FsmDefinition(
        states=["A", "B"],
        transitions=[FsmTransition(from_state="A", to_state="B", action="go")],
    )
