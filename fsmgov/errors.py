"""Error kinds raised by fsmgov.

Two kinds originate here:

- InvalidStateTransition: a proposed or recorded step is not reachable in one
  move from the current state (audit chain breaks included).
- InvalidInput: malformed or inconsistent data, including a failed invariant.
"""

from __future__ import annotations


class FsmError(ValueError):
    """Base class for all fsmgov errors."""

    code = "FsmError"
    default_message = "FSM error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidStateTransition(FsmError):
    code = "InvalidStateTransition"
    default_message = "Invalid FSM state transition"


class InvalidInput(FsmError):
    code = "InvalidInput"
    default_message = "Invalid input provided"


ERROR_CODES: dict[str, type[FsmError]] = {
    InvalidStateTransition.code: InvalidStateTransition,
    InvalidInput.code: InvalidInput,
}
