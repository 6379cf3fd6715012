"""fsmgov - transition validation for governed entities.

Fixed lifecycle tables for ideas and grants, a validator for declarative
state machine definitions, and an audit trail checked against the tables.
"""

from .audit_log import AuditEntry, AuditTrail
from .definition import FsmDefinition, validate, validate_strict
from .errors import FsmError, InvalidInput, InvalidStateTransition
from .lifecycle import GrantStatus, IdeaStatus, validate_transition

__version__ = "0.1.0"

__all__ = [
    "AuditEntry",
    "AuditTrail",
    "FsmDefinition",
    "FsmError",
    "GrantStatus",
    "IdeaStatus",
    "InvalidInput",
    "InvalidStateTransition",
    "validate",
    "validate_strict",
    "validate_transition",
]
